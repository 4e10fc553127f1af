"""Git interface layer — adapter, diff parsing, models."""

from gitstate.git.adapter import (
    GitError,
    GitRepository,
    IndexFileMissing,
    NoSuchObject,
    get_repo_root,
)
from gitstate.git.diff_parser import DiffParser, MalformedDiff, parse_diff, unquote_path
from gitstate.git.models import DiffRecord, StatusRow, is_null_id, normalize_id
from gitstate.git.stats import DiffStats, count_changes, summarize

__all__ = [
    "DiffParser",
    "DiffRecord",
    "DiffStats",
    "GitError",
    "GitRepository",
    "IndexFileMissing",
    "MalformedDiff",
    "NoSuchObject",
    "StatusRow",
    "count_changes",
    "get_repo_root",
    "is_null_id",
    "normalize_id",
    "parse_diff",
    "summarize",
    "unquote_path",
]
