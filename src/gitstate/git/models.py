"""Data models for diff parsing and plumbing listings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

_NULL_ID_RE = re.compile(r"^0*$")


def is_null_id(object_id: Optional[str]) -> bool:
    """Return True for a missing id or git's all-zero placeholder."""
    return object_id is None or bool(_NULL_ID_RE.match(object_id))


def normalize_id(object_id: Optional[str]) -> Optional[str]:
    """Translate the all-zero placeholder id to None."""
    return None if is_null_id(object_id) else object_id


@dataclass(frozen=True)
class StatusRow:
    """One raw listing row for a path; absent fields are None."""

    path: str
    mode_index: Optional[str] = None
    mode_repo: Optional[str] = None
    id_index: Optional[str] = None
    id_repo: Optional[str] = None
    status: Optional[str] = None  # single status letter
    stage: Optional[str] = None  # merge stage from ls-files --stage
    staged: Optional[bool] = None


@dataclass(frozen=True)
class DiffRecord:
    """One file section of a unified multi-file diff."""

    a_path: str
    b_path: str
    a_id: Optional[str] = None
    b_id: Optional[str] = None
    a_mode: Optional[str] = None
    b_mode: Optional[str] = None
    is_new: bool = False
    is_deleted: bool = False
    body: Optional[str] = None  # None for mode-only changes

    @property
    def is_renamed(self) -> bool:
        return self.a_path != self.b_path

    @property
    def is_mode_change(self) -> bool:
        return (
            self.a_mode is not None
            and self.b_mode is not None
            and self.a_mode != self.b_mode
        )

    @property
    def path(self) -> str:
        """The path a reader would name the change by."""
        return self.a_path if self.is_deleted else self.b_path

    @property
    def stats(self) -> Tuple[int, int]:
        """(insertions, deletions) counted from the body."""
        from gitstate.git.stats import count_changes

        return count_changes(self.body)
