"""Git subprocess wrapper — diffs, plumbing listings, object reads."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from gitstate.git.models import StatusRow

logger = logging.getLogger(__name__)

# Fixed header grammar regardless of the user's diff config.
_DIFF_FLAGS = ("--no-color", "--no-ext-diff", "--src-prefix=a/", "--dst-prefix=b/")


def _literal(path: str) -> str:
    """Pathspec matching *path* exactly, glob characters included."""
    return f":(literal){path}"


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


class NoSuchObject(GitError):
    """Raised when an object id does not resolve to a blob."""


class IndexFileMissing(GitError):
    """Raised when git cannot read the index file."""


def _exec(
    args: List[str],
    cwd: Path,
    binary: str = "git",
    timeout: int = 30,
    text: bool = True,
) -> subprocess.CompletedProcess:
    command = [binary, "-c", "core.quotepath=off", *args]
    logger.debug("running %s in %s", " ".join(command), cwd)
    try:
        if text:
            return subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                encoding="utf-8",
                errors="replace",
            )
        return subprocess.run(command, cwd=cwd, capture_output=True, timeout=timeout)
    except FileNotFoundError:
        raise GitError(f"{binary} is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")


def _run_git(args: list[str], cwd: Path, binary: str = "git", timeout: int = 30) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    result = _exec(args, cwd, binary=binary, timeout=timeout)

    if result.returncode != 0:
        stderr = result.stderr.strip()
        # A non-zero exit without a fatal message (e.g. diff --exit-code) is not an error
        if not stderr or "fatal" not in stderr.lower():
            return result.stdout
        if "index file" in stderr.lower():
            raise IndexFileMissing(f"git error: {stderr}")
        raise GitError(f"git error: {stderr}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None, binary: str = "git") -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd, binary=binary)
    return Path(out.strip())


# ── plumbing output parsers ──────────────────────────────────────────────────
#
# Listings are read with ``-z``: records end in NUL and paths are verbatim,
# never C-quoted.

# Raw-diff letters folded into the ones the status layer knows. A typechange
# (file <-> symlink) is a modification; an unmerged path is reported as
# modified until the conflict is resolved.
_RAW_STATUS_ALIASES = {"T": "M", "U": "M"}


def _records(output: str) -> List[str]:
    return [record for record in output.split("\0") if record]


def parse_ls_files(output: str) -> List[StatusRow]:
    """Parse ``git ls-files --stage -z`` records: ``<mode> <id> <stage>\\t<path>``."""
    rows: List[StatusRow] = []
    for record in _records(output):
        info, sep, path = record.partition("\t")
        fields = info.split()
        if not sep or len(fields) != 3:
            raise ValueError(f"unexpected ls-files record: {record!r}")
        mode, object_id, stage = fields
        rows.append(StatusRow(path=path, mode_index=mode, id_index=object_id, stage=stage))
    return rows


def parse_path_list(output: str) -> List[StatusRow]:
    """Parse NUL-separated paths (``git ls-files --others -z``)."""
    return [StatusRow(path=record) for record in _records(output)]


def parse_raw_diff(output: str) -> List[StatusRow]:
    """Parse ``git diff-files -z`` / ``git diff-index -z`` output.

    Each change is two records: ``:<src mode> <dst mode> <src id> <dst id>
    <status>`` followed by the path. The source side is the repository, the
    destination side the index.
    """
    rows: List[StatusRow] = []
    records = output.split("\0")
    idx = 0
    while idx < len(records):
        info = records[idx]
        if not info:
            idx += 1
            continue
        fields = info.split()
        if len(fields) != 5 or not fields[0].startswith(":"):
            raise ValueError(f"unexpected raw diff record: {info!r}")
        if idx + 1 >= len(records) or not records[idx + 1]:
            raise ValueError(f"raw diff record without a path: {info!r}")
        path = records[idx + 1]
        idx += 2

        mode_src, mode_dst, id_src, id_dst, status = fields
        rows.append(
            StatusRow(
                path=path,
                mode_repo=mode_src[1:],
                mode_index=mode_dst,
                id_repo=id_src,
                id_index=id_dst,
                status=_RAW_STATUS_ALIASES.get(status, status),
            )
        )
    return rows


# ── repository backend ───────────────────────────────────────────────────────


class GitRepository:
    """Status and diff backend that shells out to the git binary."""

    def __init__(self, repo_root: Path, *, binary: str = "git", timeout: int = 30) -> None:
        self.repo_root = Path(repo_root)
        self.binary = binary
        self.timeout = timeout

    def _git(self, *args: str) -> str:
        return _run_git(list(args), cwd=self.repo_root, binary=self.binary, timeout=self.timeout)

    # ---- diffs ----

    def run_diff(
        self, staged: bool, path: Optional[str] = None, base_rev: Optional[str] = None
    ) -> str:
        """Unified diff of the index against the working tree, or with
        *staged* of *base_rev* (default HEAD) against the index.

        *base_rev* only applies to staged diffs.
        """
        args = ["diff", *_DIFF_FLAGS]
        if staged:
            args.append("--cached")
            if base_rev is not None:
                args.append(base_rev)
        args.append("--")
        if path is not None:
            args.append(_literal(path))
        return self._git(*args)

    def diff_revisions(self, a: str, b: Optional[str] = None, *paths: str) -> str:
        """Unified diff between two revisions, optionally limited to *paths*."""
        args = ["diff", *_DIFF_FLAGS, a]
        if b is not None:
            args.append(b)
        args.append("--")
        args += [_literal(p) for p in paths]
        return self._git(*args)

    # ---- listings ----

    def list_index_entries(self) -> List[StatusRow]:
        return parse_ls_files(self._git("ls-files", "--stage", "-z"))

    def list_untracked(self) -> List[StatusRow]:
        return parse_path_list(self._git("ls-files", "--others", "-z"))

    def list_ignored(self) -> List[StatusRow]:
        return parse_path_list(
            self._git("ls-files", "--others", "--ignored", "--exclude-standard", "-z")
        )

    def list_working_diff(self) -> List[StatusRow]:
        return parse_raw_diff(self._git("diff-files", "-z"))

    def list_staged_diff(self, base_rev: str = "HEAD") -> List[StatusRow]:
        return parse_raw_diff(self._git("diff-index", "--cached", "-z", base_rev))

    # ---- content ----

    def read_object(self, object_id: str) -> bytes:
        result = _exec(
            ["cat-file", "blob", object_id],
            cwd=self.repo_root,
            binary=self.binary,
            timeout=self.timeout,
            text=False,
        )
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise NoSuchObject(f"no blob {object_id}: {stderr}")
        return result.stdout

    def read_working_file(self, path: str) -> Optional[bytes]:
        file_path = self.repo_root / path
        if not file_path.is_file():
            return None
        return file_path.read_bytes()
