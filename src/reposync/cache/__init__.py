"""Disk-backed, staleness-aware snapshot cache.

Classes:
    SnapshotCache: Per-repository snapshot records with a 7-day bound.
    RecordStore: Generic versioned JSON record directory.

Models:
    Snapshot, FileEntry, CacheRecord, ClearResult.

Functions:
    cache_key: Derive the record key for a repository identity.
    canonical_identity: Canonical string form of a repository path.
"""

from reposync.cache._keys import canonical_identity, cache_key, hash_identity, safe_name
from reposync.cache._models import CacheRecord, ClearResult, FileEntry, Snapshot
from reposync.cache._snapshot import DEFAULT_MAX_AGE_MS, SnapshotCache
from reposync.cache._store import RECORD_VERSION, RecordStore

__all__ = [
    "DEFAULT_MAX_AGE_MS",
    "RECORD_VERSION",
    "CacheRecord",
    "ClearResult",
    "FileEntry",
    "RecordStore",
    "Snapshot",
    "SnapshotCache",
    "cache_key",
    "canonical_identity",
    "hash_identity",
    "safe_name",
]
