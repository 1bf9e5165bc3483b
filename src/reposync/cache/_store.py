"""Versioned record store.

Each key maps to one JSON file holding a CacheRecord envelope. A record is
only returned when its version matches, its embedded key matches the request
and, when the store has a maximum age, it is not older than that age. Every
other condition is a miss, logged and never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, final

from pydantic import ValidationError

from reposync.cache._keys import cache_key
from reposync.cache._models import CacheRecord, ClearResult
from reposync.utils import create_null_logger, load_json_file, now_ms, write_json_atomic

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

RECORD_VERSION: Final = 1


@final
class RecordStore:
    """Directory of keyed, versioned, optionally time-bounded JSON records.

    Attributes:
        directory: Directory holding one <key>.json file per record.
        version: Record version written and accepted by this store.
        max_age_ms: Maximum record age, or None for records that never expire.
    """

    __slots__ = ("_clock", "_logger", "directory", "max_age_ms", "version")

    def __init__(
        self,
        directory: Path,
        *,
        version: int = RECORD_VERSION,
        max_age_ms: int | None = None,
        clock: Callable[[], int] = now_ms,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            directory: Record directory, created on first write.
            version: Expected record version.
            max_age_ms: Staleness bound in milliseconds.
            clock: Returns the current time as epoch milliseconds.
            logger: Logger for misses and failures.
        """
        self.directory = directory
        self.version = version
        self.max_age_ms = max_age_ms
        self._clock = clock
        self._logger = logger if logger is not None else create_null_logger()

    def path_for(self, key: str) -> Path:
        """File path of the record for key."""
        return self.directory / f"{cache_key(key)}.json"

    def is_stale(self, record: CacheRecord) -> bool:
        """Whether the record is older than the store's maximum age."""
        if self.max_age_ms is None:
            return False
        return self._clock() - record.timestamp > self.max_age_ms

    def load_record(self, key: str) -> CacheRecord | None:
        """Load and validate the record envelope for key.

        Args:
            key: Record key (a repository identity or a settings name).

        Returns:
            The record, or None on any kind of miss.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        path = self.path_for(key)
        try:
            raw = load_json_file(path)
        except FileNotFoundError:
            self._logger.debug("cache_miss", key=key, reason="missing")
            return None

        if raw is None:
            self._logger.warning("cache_miss", key=key, reason="corrupt", path=str(path))
            return None

        try:
            record = CacheRecord.model_validate(raw)
        except ValidationError as e:
            self._logger.warning(
                "cache_miss",
                key=key,
                reason="invalid_envelope",
                path=str(path),
                errors=e.error_count(),
            )
            return None

        if record.version != self.version:
            self._logger.debug(
                "cache_miss",
                key=key,
                reason="version_mismatch",
                found=record.version,
                expected=self.version,
            )
            return None

        if record.repo_path != key:
            self._logger.warning(
                "cache_miss", key=key, reason="foreign_record", found=record.repo_path
            )
            return None

        if self.is_stale(record):
            self._logger.debug(
                "cache_miss", key=key, reason="stale", timestamp=record.timestamp
            )
            return None

        return record

    def load(self, key: str) -> object | None:
        """Load the value stored for key, None on any kind of miss."""
        record = self.load_record(key)
        return record.data if record is not None else None

    def save(self, key: str, data: object, *, timestamp: int | None = None) -> CacheRecord:
        """Write a record, replacing any existing one atomically.

        Args:
            key: Record key.
            data: JSON-compatible value.
            timestamp: Record time; defaults to now.

        Returns:
            The record that was written.

        Raises:
            OSError: If the record cannot be written.
        """
        record = CacheRecord(
            repo_path=key,
            timestamp=timestamp if timestamp is not None else self._clock(),
            version=self.version,
            data=data,
        )
        write_json_atomic(self.path_for(key), record.model_dump(mode="json", by_alias=True))
        self._logger.debug("cache_saved", key=key, timestamp=record.timestamp)
        return record

    def clear(self, key: str) -> bool:
        """Delete the record for key.

        Returns:
            True if a file was removed.

        Raises:
            OSError: If the file exists but cannot be removed.
        """
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        self._logger.info("cache_cleared", key=key)
        return True

    def clear_all(self) -> ClearResult:
        """Delete every record in the directory.

        A file that cannot be removed is logged and skipped; the rest are
        still removed.
        """
        if not self.directory.is_dir():
            return ClearResult()

        removed: list[Path] = []
        failed: list[Path] = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                self._logger.warning("cache_clear_failed", path=str(path), error=str(e))
                failed.append(path)
            else:
                removed.append(path)

        # temp files left behind by interrupted atomic writes
        for leftover in sorted(self.directory.glob(".*.tmp")):
            try:
                leftover.unlink(missing_ok=True)
            except OSError as e:
                self._logger.warning("cache_clear_failed", path=str(leftover), error=str(e))
                failed.append(leftover)

        self._logger.info(
            "cache_cleared_all",
            directory=str(self.directory),
            removed=len(removed),
            failed=len(failed),
        )
        return ClearResult(removed=tuple(removed), failed=tuple(failed))
