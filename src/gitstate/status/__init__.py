"""Working-tree status — models and reconciliation."""

from gitstate.status.models import (
    Backend,
    ChangeKind,
    ContentSource,
    StatusEntry,
    StatusRow,
)
from gitstate.status.reconciler import (
    MERGE_ORDER,
    PathStatus,
    Status,
    StatusListings,
    reconcile,
)

__all__ = [
    "MERGE_ORDER",
    "Backend",
    "ChangeKind",
    "ContentSource",
    "PathStatus",
    "Status",
    "StatusEntry",
    "StatusListings",
    "StatusRow",
    "reconcile",
]
