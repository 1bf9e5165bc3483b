"""Persistent snapshot cache for repository state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, final

from pydantic import ValidationError

from reposync.cache._models import Snapshot
from reposync.cache._store import RECORD_VERSION, RecordStore
from reposync.utils import create_null_logger, now_ms

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from reposync.adapter import CommitInfo
    from reposync.cache._models import CacheRecord, ClearResult

DEFAULT_MAX_AGE_MS: Final = 7 * 24 * 60 * 60 * 1000


@final
class SnapshotCache:
    """Keyed, versioned, time-bounded store of repository snapshots.

    Shared by every repository in the process; each identity owns exactly
    one record. Concurrent saves for one identity are last-writer-wins.

    Example:
        >>> cache = SnapshotCache(Path("~/.reposync/repo-cache").expanduser())
        >>> cache.save("/src/project", snapshot)
        >>> cache.load("/src/project") == snapshot
        True
    """

    __slots__ = ("_logger", "_store")

    def __init__(
        self,
        directory: Path,
        *,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        version: int = RECORD_VERSION,
        clock: Callable[[], int] = now_ms,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            directory: Cache directory, created on first save.
            max_age_ms: Records older than this are misses.
            version: Snapshot record version.
            clock: Returns the current time as epoch milliseconds.
            logger: Logger for misses and failures.
        """
        self._logger = logger if logger is not None else create_null_logger()
        self._store = RecordStore(
            directory,
            version=version,
            max_age_ms=max_age_ms,
            clock=clock,
            logger=self._logger,
        )

    @property
    def directory(self) -> Path:
        return self._store.directory

    def path_for(self, identity: str) -> Path:
        """Cache file path for an identity."""
        return self._store.path_for(identity)

    def _load_valid(self, identity: str) -> tuple[CacheRecord, Snapshot] | None:
        record = self._store.load_record(identity)
        if record is None:
            return None
        try:
            snapshot = Snapshot.model_validate(record.data)
        except ValidationError as e:
            self._logger.warning(
                "cache_miss",
                key=identity,
                reason="invalid_snapshot",
                errors=e.error_count(),
            )
            return None
        return record, snapshot

    def load(self, identity: str) -> Snapshot | None:
        """Load the cached snapshot for an identity.

        Returns:
            The snapshot, or None when it is missing, corrupt, stale, from
            another version, or written for another identity.

        Raises:
            OSError: If the cache file exists but cannot be read.
        """
        loaded = self._load_valid(identity)
        if loaded is None:
            return None
        self._logger.debug("cache_hit", key=identity, timestamp=loaded[0].timestamp)
        return loaded[1]

    def cached_at(self, identity: str) -> int | None:
        """Write time of the valid record for an identity, None on a miss."""
        loaded = self._load_valid(identity)
        return loaded[0].timestamp if loaded is not None else None

    def save(
        self,
        identity: str,
        snapshot: Snapshot,
        *,
        timestamp: int | None = None,
    ) -> bool:
        """Persist a snapshot, replacing any previous one.

        Write failures are logged; the in-memory snapshot stays authoritative.

        Returns:
            True if the snapshot was written.
        """
        try:
            _ = self._store.save(identity, snapshot.to_record_data(), timestamp=timestamp)
        except OSError as e:
            self._logger.warning("cache_save_failed", key=identity, error=str(e))
            return False
        return True

    def clear(self, identity: str) -> bool:
        """Remove the record for one identity.

        Returns:
            True if a record was removed.
        """
        return self._store.clear(identity)

    def clear_all(self) -> ClearResult:
        """Remove every snapshot record."""
        return self._store.clear_all()

    # =========================================================================
    # Branch commit sub-cache
    # =========================================================================

    def branch_commits(self, identity: str) -> dict[str, tuple[CommitInfo, ...]]:
        """Cached commit lists by branch for an identity, empty on a miss."""
        snapshot = self.load(identity)
        return dict(snapshot.branch_commits) if snapshot is not None else {}

    def _supersede(
        self,
        identity: str,
        edit: Callable[[dict[str, tuple[CommitInfo, ...]]], None],
    ) -> bool:
        loaded = self._load_valid(identity)
        if loaded is None:
            return False
        record, snapshot = loaded

        commits = dict(snapshot.branch_commits)
        edit(commits)
        # the original timestamp keeps commit edits from refreshing status data
        return self.save(
            identity,
            snapshot.model_copy(update={"branch_commits": commits}),
            timestamp=record.timestamp,
        )

    def update_branch_commits(
        self,
        identity: str,
        branch: str,
        commits: Sequence[CommitInfo],
    ) -> bool:
        """Store one branch's commit list in the cached snapshot.

        Returns:
            True if persisted; False when no valid snapshot is cached.
        """

        def edit(current: dict[str, tuple[CommitInfo, ...]]) -> None:
            current[branch] = tuple(commits)

        return self._supersede(identity, edit)

    def remove_branch_commits(self, identity: str, branch: str | None = None) -> bool:
        """Drop one branch's commit list, or every list when branch is None.

        Returns:
            True if persisted; False when no valid snapshot is cached.
        """

        def edit(current: dict[str, tuple[CommitInfo, ...]]) -> None:
            if branch is None:
                current.clear()
            else:
                _ = current.pop(branch, None)

        return self._supersede(identity, edit)
