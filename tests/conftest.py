"""Shared test fixtures — sample diffs, a fake backend, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from gitstate.git.adapter import NoSuchObject
from gitstate.git.models import StatusRow


@pytest.fixture
def sample_diff_mode_only() -> str:
    """A diff with only a file mode change."""
    return textwrap.dedent("""\
        diff --git a/x b/x
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_new_file() -> str:
    """A newly added three-line file."""
    return textwrap.dedent("""\
        diff --git a/newly_added.txt b/newly_added.txt
        new file mode 100644
        index 0000000..86e041d
        --- /dev/null
        +++ b/newly_added.txt
        @@ -0,0 +1,3 @@
        +foo
        +bar
        +baz
    """)


@pytest.fixture
def sample_diff_deleted_file() -> str:
    """A deleted three-line file."""
    return textwrap.dedent("""\
        diff --git a/removed.txt b/removed.txt
        deleted file mode 100644
        index 86e041d..0000000
        --- a/removed.txt
        +++ /dev/null
        @@ -1,3 +0,0 @@
        -foo
        -bar
        -baz
    """)


@pytest.fixture
def sample_diff_modified() -> str:
    """A modification touching a line without a trailing newline."""
    return textwrap.dedent("""\
        diff --git a/modified.txt b/modified.txt
        index a907ec3..86e041d 100644
        --- a/modified.txt
        +++ b/modified.txt
        @@ -1,2 +1,3 @@
         foo
        -bar
        \\ No newline at end of file
        +bar
        +baz
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    """A renamed file with a one-line edit."""
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 97%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1,0 +2,1 @@
        +# New line added after rename
    """)


@pytest.fixture
def sample_diff_multi(sample_diff_mode_only, sample_diff_new_file, sample_diff_modified) -> str:
    """Three sections back to back: mode-only, new file, modification."""
    return sample_diff_mode_only + sample_diff_new_file + sample_diff_modified


class FakeBackend:
    """In-memory backend: canned listings, diffs, and objects."""

    def __init__(
        self,
        *,
        index: Optional[List[StatusRow]] = None,
        untracked: Optional[List[StatusRow]] = None,
        ignored: Optional[List[StatusRow]] = None,
        working_diff: Optional[List[StatusRow]] = None,
        staged_diff: Optional[List[StatusRow]] = None,
        diffs: Optional[Dict[Tuple[bool, Optional[str]], str]] = None,
        objects: Optional[Dict[str, bytes]] = None,
        files: Optional[Dict[str, bytes]] = None,
    ) -> None:
        self.index = index or []
        self.untracked = untracked or []
        self.ignored = ignored or []
        self.working_diff = working_diff or []
        self.staged_diff = staged_diff or []
        self.diffs = diffs or {}
        self.objects = objects or {}
        self.files = files or {}
        self.diff_calls: List[Tuple[bool, Optional[str]]] = []
        self.diff_bases: List[Optional[str]] = []
        self.base_revs: List[str] = []

    def run_diff(
        self, staged: bool, path: Optional[str] = None, base_rev: Optional[str] = None
    ) -> str:
        self.diff_calls.append((staged, path))
        self.diff_bases.append(base_rev)
        return self.diffs.get((staged, path), "")

    def list_index_entries(self) -> List[StatusRow]:
        return list(self.index)

    def list_untracked(self) -> List[StatusRow]:
        return list(self.untracked)

    def list_ignored(self) -> List[StatusRow]:
        return list(self.ignored)

    def list_working_diff(self) -> List[StatusRow]:
        return list(self.working_diff)

    def list_staged_diff(self, base_rev: str) -> List[StatusRow]:
        self.base_revs.append(base_rev)
        return list(self.staged_diff)

    def read_object(self, object_id: str) -> bytes:
        try:
            return self.objects[object_id]
        except KeyError:
            raise NoSuchObject(f"no blob {object_id}") from None

    def read_working_file(self, path: str) -> Optional[bytes]:
        return self.files.get(path)


@pytest.fixture
def fake_backend_cls():
    return FakeBackend


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    _git(tmp_path, "config", "user.email", "test@test.com")
    _git(tmp_path, "config", "user.name", "Test")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    # Initial commit
    readme = tmp_path / "README.md"
    readme.write_text("# Test\n")
    _git(tmp_path, "add", ".")
    _git(tmp_path, "commit", "-m", "init")
    return tmp_path


@pytest.fixture
def git():
    """Run git in a repository: ``git(repo, "add", "f.txt")``."""
    return _git
