"""Repository synchronization.

Classes:
    RepositorySynchronizer: Serves or recomputes repository snapshots.
    SyncResult: Snapshot plus whether it came from the cache.
    StatusSplit: Staged, unstaged and partially staged partition.

Functions:
    classify_status_code: Map a git status code to a FileStatus.
    split_status_files: Partition status entries.
    parse_remotes: Parse `git remote -v` output.
    aggregate_divergence: Keep only diverged branches.
"""

from reposync.sync._classify import (
    CONFLICT_CODES,
    StatusSplit,
    classify_status_code,
    split_status_files,
)
from reposync.sync._remotes import parse_remotes
from reposync.sync._synchronizer import (
    DEFAULT_MAX_COMMITS,
    DEFAULT_MAX_CONCURRENCY,
    RepositorySynchronizer,
    SyncResult,
    aggregate_divergence,
)

__all__ = [
    "CONFLICT_CODES",
    "DEFAULT_MAX_COMMITS",
    "DEFAULT_MAX_CONCURRENCY",
    "RepositorySynchronizer",
    "StatusSplit",
    "SyncResult",
    "aggregate_divergence",
    "classify_status_code",
    "parse_remotes",
    "split_status_files",
]
