"""Insertion / deletion counting for parsed diffs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from gitstate.git.models import DiffRecord


def count_changes(body: Optional[str]) -> Tuple[int, int]:
    """Return ``(insertions, deletions)`` for a single-file diff body.

    A well-formed body carries exactly one ``---`` and one ``+++`` file
    header, which are discounted. A body of ``None`` (mode-only change)
    counts as ``(0, 0)``; bodies without file headers (binary changes)
    never go below zero.
    """
    if body is None:
        return 0, 0

    insertions = 0
    deletions = 0
    for line in body.split("\n"):
        if line.startswith("+"):
            insertions += 1
        elif line.startswith("-"):
            deletions += 1
    return max(insertions - 1, 0), max(deletions - 1, 0)


@dataclass
class DiffStats:
    """Totals across a set of diff records (``git diff --shortstat``)."""

    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0

    def add(self, record: DiffRecord) -> None:
        ins, dels = count_changes(record.body)
        self.files_changed += 1
        self.insertions += ins
        self.deletions += dels

    def __str__(self) -> str:
        files = "file" if self.files_changed == 1 else "files"
        return (
            f"{self.files_changed} {files} changed, "
            f"{self.insertions} insertions(+), {self.deletions} deletions(-)"
        )


def summarize(records: Iterable[DiffRecord]) -> DiffStats:
    """Aggregate insertion / deletion counts over *records*."""
    stats = DiffStats()
    for record in records:
        stats.add(record)
    return stats
