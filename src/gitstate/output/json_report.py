"""JSON reporter for scripts and CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from gitstate.git.models import DiffRecord
from gitstate.git.stats import count_changes, summarize
from gitstate.status.models import StatusEntry
from gitstate.status.reconciler import Status


def entry_to_dict(entry: StatusEntry) -> Dict[str, Any]:
    return {
        "path": entry.path,
        "state": entry.kind.value,
        "staged": entry.changes_staged,
        "mode_index": entry.mode_index,
        "mode_repo": entry.mode_repo,
        "id_index": entry.id_index,
        "id_repo": entry.id_repo,
    }


def status_to_dict(status: Status) -> Dict[str, Any]:
    """Convert a Status to a JSON-serialisable dict."""
    return {
        "version": "1.0",
        "entries": [entry_to_dict(e) for e in status],
        "summary": {
            "added": len(status.added),
            "deleted": len(status.deleted),
            "modified": len(status.modified),
            "untracked": len(status.untracked),
            "staged": len(status.staged_changes),
            "unstaged": len(status.unstaged_changes),
        },
    }


def record_to_dict(record: DiffRecord) -> Dict[str, Any]:
    insertions, deletions = count_changes(record.body)
    return {
        "a_path": record.a_path,
        "b_path": record.b_path,
        "a_id": record.a_id,
        "b_id": record.b_id,
        "a_mode": record.a_mode,
        "b_mode": record.b_mode,
        "new_file": record.is_new,
        "deleted_file": record.is_deleted,
        "insertions": insertions,
        "deletions": deletions,
        **({"diff": record.body} if record.body is not None else {}),
    }


def diff_to_dict(records: Iterable[DiffRecord]) -> Dict[str, Any]:
    """Convert parsed diff records to a JSON-serialisable dict."""
    records = list(records)
    files: List[Dict[str, Any]] = [record_to_dict(r) for r in records]
    stats = summarize(records)
    return {
        "version": "1.0",
        "files": files,
        "summary": {
            "files_changed": stats.files_changed,
            "insertions": stats.insertions,
            "deletions": stats.deletions,
        },
    }


def render_status(status: Status) -> str:
    """Return formatted JSON string."""
    return json.dumps(status_to_dict(status), indent=2)


def render_diff(records: Iterable[DiffRecord]) -> str:
    return json.dumps(diff_to_dict(records), indent=2)
