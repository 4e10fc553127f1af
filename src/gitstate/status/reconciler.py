"""Status reconciliation — merges path listings into one state per path.

Four listings describe the working copy from different angles:

* ``index``:        every tracked path with its staged mode and id
* ``untracked``:    paths on disk that git does not track (minus ``ignored``)
* ``working_diff``: index vs. working tree (``git diff-files``)
* ``staged_diff``:  base revision vs. index (``git diff-index --cached <base>``)

They are merged in exactly that order. A path normally ends with a single
entry; it ends with two when a staged change and an independent unstaged
change coexist (e.g. a file staged and then edited again).
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from gitstate.git.models import is_null_id
from gitstate.status.models import Backend, StatusEntry, StatusRow

logger = logging.getLogger(__name__)

PathStatus = Union[StatusEntry, Tuple[StatusEntry, StatusEntry]]

MERGE_ORDER: Tuple[str, ...] = ("index", "untracked", "working_diff", "staged_diff")


@dataclass
class StatusListings:
    """The raw rows reconciliation consumes. Absent sources are empty lists."""

    index: Sequence[StatusRow] = field(default_factory=list)
    untracked: Sequence[StatusRow] = field(default_factory=list)
    ignored: Sequence[StatusRow] = field(default_factory=list)
    working_diff: Sequence[StatusRow] = field(default_factory=list)
    staged_diff: Sequence[StatusRow] = field(default_factory=list)
    base_rev: Optional[str] = None  # revision staged_diff was taken against

    @classmethod
    def from_backend(cls, backend: Backend, base_rev: str = "HEAD") -> "StatusListings":
        return cls(
            index=backend.list_index_entries(),
            untracked=backend.list_untracked(),
            ignored=backend.list_ignored(),
            working_diff=backend.list_working_diff(),
            staged_diff=backend.list_staged_diff(base_rev),
            base_rev=base_rev,
        )


def _overlay(incoming: StatusRow, last: StatusRow) -> StatusRow:
    """Merge two rows; fields already recorded on *last* win."""
    values = {}
    for f in dataclasses.fields(StatusRow):
        earlier = getattr(last, f.name)
        values[f.name] = earlier if earlier is not None else getattr(incoming, f.name)
    return StatusRow(**values)


class _Merger:
    """Per-path row lists, filled one listing at a time."""

    def __init__(self) -> None:
        self.rows: Dict[str, List[StatusRow]] = {}

    def last(self, path: str) -> Optional[StatusRow]:
        rows = self.rows.get(path)
        return rows[-1] if rows else None

    def add(self, row: StatusRow) -> None:
        rows = self.rows.get(row.path)
        if not rows:
            self.rows[row.path] = [row]
            return

        last = rows[-1]
        if last.status == "D":
            # Already known deleted; later rows for the path are stale.
            return
        if last.status is None or row.staged is None:
            rows[-1] = _overlay(row, last)
        else:
            rows.append(row)


def _by_path(rows: Sequence[StatusRow]) -> Iterator[StatusRow]:
    """One row per path: the last one listed, at the first one's position."""
    keyed: Dict[str, StatusRow] = {}
    for row in rows:
        keyed[row.path] = row
    return iter(keyed.values())


def _prepare(listings: StatusListings, source: str, merger: _Merger) -> Iterator[StatusRow]:
    """Yield the rows of one listing as they should be merged."""
    if source == "index":
        yield from _by_path(listings.index)
    elif source == "untracked":
        ignored = {row.path for row in listings.ignored}
        for row in _by_path(listings.untracked):
            if row.path not in ignored:
                yield dataclasses.replace(row, status="U", staged=False)
    elif source == "working_diff":
        for row in _by_path(listings.working_diff):
            yield dataclasses.replace(row, staged=False)
    elif source == "staged_diff":
        for row in _by_path(listings.staged_diff):
            previous = merger.last(row.path)
            previous_repo = previous.id_repo if previous is not None else None
            if (
                not is_null_id(row.id_index)
                or row.status == "D"
                or previous_repo != row.id_repo
            ):
                yield dataclasses.replace(row, staged=True)
            else:
                yield dataclasses.replace(row, staged=None)
    else:
        raise ValueError(f"unknown listing: {source!r}")


def reconcile(
    listings: StatusListings,
    backend: Optional[Backend] = None,
    order: Sequence[str] = MERGE_ORDER,
) -> Dict[str, PathStatus]:
    """Merge *listings* into ``{path: entry}`` or ``{path: (entry, entry)}``.

    Paths without a recorded change (clean tracked files) are left out.
    The input rows are not modified.
    """
    merger = _Merger()
    for source in order:
        for row in _prepare(listings, source, merger):
            merger.add(row)

    result: Dict[str, PathStatus] = {}
    for path, rows in merger.rows.items():
        entries = [
            StatusEntry.from_row(r, backend, listings.base_rev)
            for r in rows
            if r.status is not None
        ]
        if len(entries) == 1:
            result[path] = entries[0]
        elif len(entries) == 2:
            result[path] = (entries[0], entries[1])
        elif entries:
            raise ValueError(f"{path} reconciled to {len(entries)} entries")

    logger.debug("reconciled %d paths, %d with changes", len(merger.rows), len(result))
    return result


class Status:
    """Consolidated working-tree status of a repository.

    Usage::

        status = Status.from_backend(GitRepository(repo_root))
        for entry in status.staged_changes:
            ...
        status["README.md"]  # entry, or (unstaged, staged) pair
    """

    def __init__(self, paths: Dict[str, PathStatus]) -> None:
        self._paths = paths
        self._entries: List[StatusEntry] = []
        for value in paths.values():
            self._entries.extend(value if isinstance(value, tuple) else (value,))

    @classmethod
    def from_backend(cls, backend: Backend, base_rev: str = "HEAD") -> "Status":
        listings = StatusListings.from_backend(backend, base_rev)
        return cls(reconcile(listings, backend))

    # ---- mapping access ----

    def __getitem__(self, path: str) -> PathStatus:
        return self._paths[path]

    def get(self, path: str) -> Optional[PathStatus]:
        return self._paths.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[StatusEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def paths(self) -> Dict[str, PathStatus]:
        return dict(self._paths)

    def entries(self, path: str) -> Tuple[StatusEntry, ...]:
        """All entries for *path* (empty when it has no recorded change)."""
        value = self._paths.get(path)
        if value is None:
            return ()
        return value if isinstance(value, tuple) else (value,)

    # ---- filtered views ----

    @property
    def added(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.added]

    @property
    def deleted(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.deleted]

    @property
    def modified(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.modified]

    @property
    def untracked(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.untracked]

    @property
    def staged_changes(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.changes_staged]

    @property
    def unstaged_changes(self) -> List[StatusEntry]:
        return [e for e in self._entries if e.changes_unstaged]
