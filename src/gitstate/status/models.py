"""Working-tree status models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from gitstate.git.diff_parser import DiffParser
from gitstate.git.models import DiffRecord, StatusRow, normalize_id


class ChangeKind(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    UNTRACKED = "untracked"


STATUS_LETTERS = {
    "A": ChangeKind.ADDED,
    "D": ChangeKind.DELETED,
    "M": ChangeKind.MODIFIED,
    "U": ChangeKind.UNTRACKED,
}


class ContentSource(str, Enum):
    WORKING_FILE = "file"
    STAGED_BLOB = "index"
    REPO_BLOB = "repo"


class Backend(Protocol):
    """What the status layer needs from a repository."""

    def run_diff(
        self, staged: bool, path: Optional[str] = None, base_rev: Optional[str] = None
    ) -> str: ...

    def list_index_entries(self) -> List[StatusRow]: ...

    def list_untracked(self) -> List[StatusRow]: ...

    def list_ignored(self) -> List[StatusRow]: ...

    def list_working_diff(self) -> List[StatusRow]: ...

    def list_staged_diff(self, base_rev: str) -> List[StatusRow]: ...

    def read_object(self, object_id: str) -> bytes: ...

    def read_working_file(self, path: str) -> Optional[bytes]: ...


class _DiffCell:
    """Holds a lazily computed diff; filled at most once."""

    __slots__ = ("loaded", "value")

    def __init__(self) -> None:
        self.loaded = False
        self.value: Optional[DiffRecord] = None


@dataclass(frozen=True)
class StatusEntry:
    """The recorded state of one path, staged or unstaged."""

    path: str
    kind: ChangeKind
    staged: bool
    mode_index: Optional[str] = None
    mode_repo: Optional[str] = None
    id_index: Optional[str] = None
    id_repo: Optional[str] = None
    stage: Optional[str] = None
    base_rev: Optional[str] = field(default=None, repr=False, compare=False)
    backend: Optional[Backend] = field(default=None, repr=False, compare=False)
    _diff_cell: _DiffCell = field(
        default_factory=_DiffCell, init=False, repr=False, compare=False
    )

    @classmethod
    def from_row(
        cls,
        row: StatusRow,
        backend: Optional[Backend] = None,
        base_rev: Optional[str] = None,
    ) -> "StatusEntry":
        """Finalize a merged listing row. The row must carry a status.

        *base_rev* is the revision the staged listing was taken against;
        staged diffs are computed against it.
        """
        try:
            kind = STATUS_LETTERS[row.status]  # type: ignore[index]
        except KeyError:
            raise ValueError(f"unknown status {row.status!r} for {row.path}") from None
        return cls(
            path=row.path,
            kind=kind,
            staged=bool(row.staged),
            mode_index=row.mode_index,
            mode_repo=row.mode_repo,
            id_index=normalize_id(row.id_index),
            id_repo=normalize_id(row.id_repo),
            stage=row.stage,
            base_rev=base_rev,
            backend=backend,
        )

    # ---- state queries ----

    @property
    def added(self) -> bool:
        return self.kind == ChangeKind.ADDED

    @property
    def deleted(self) -> bool:
        return self.kind == ChangeKind.DELETED

    @property
    def modified(self) -> bool:
        return self.kind == ChangeKind.MODIFIED

    @property
    def untracked(self) -> bool:
        return self.kind == ChangeKind.UNTRACKED

    @property
    def changed(self) -> bool:
        """Always true: clean paths never become entries."""
        return self.kind is not None

    @property
    def changes_staged(self) -> bool:
        return self.changed and self.staged

    @property
    def changes_unstaged(self) -> bool:
        return self.changed and not self.staged

    # ---- content ----

    def content(self, source: Optional[ContentSource] = None) -> Optional[bytes]:
        """Return the path's bytes as seen from *source*.

        Defaults to the working file for unstaged changes and to the
        staged blob otherwise. Missing content is None; a missing object
        raises whatever the backend raises.
        """
        if source is None:
            source = (
                ContentSource.WORKING_FILE
                if self.changes_unstaged
                else ContentSource.STAGED_BLOB
            )
        backend = self._require_backend()

        if source == ContentSource.WORKING_FILE:
            return backend.read_working_file(self.path)
        if source == ContentSource.STAGED_BLOB:
            return backend.read_object(self.id_index) if self.id_index else None
        if source == ContentSource.REPO_BLOB:
            return backend.read_object(self.id_repo) if self.id_repo else None
        raise ValueError(f"unknown content source: {source!r}")

    def diff(self) -> Optional[DiffRecord]:
        """Return this entry's diff, parsed once and cached.

        Staged entries diff the base revision (HEAD unless the entry
        records another) against the index, unstaged ones the index
        against the working tree. Untracked paths have none.
        """
        if self.untracked:
            return None
        cell = self._diff_cell
        if not cell.loaded:
            staged = self.changes_staged
            text = self._require_backend().run_diff(
                staged=staged,
                path=self.path,
                base_rev=self.base_rev if staged else None,
            )
            records = DiffParser(text).parse()
            cell.value = records[0] if records else None
            cell.loaded = True
        return cell.value

    def _require_backend(self) -> Backend:
        if self.backend is None:
            raise RuntimeError(f"status entry for {self.path} has no backend attached")
        return self.backend
