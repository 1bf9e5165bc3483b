"""Persisted application settings and recent repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, final

from pydantic import ValidationError

from reposync.exceptions import SettingsError
from reposync.settings._models import (
    SETTINGS_KEY,
    AppSettings,
    is_valid_settings_record,
)
from reposync.settings._patterns import matches_any_pattern
from reposync.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from structlog.typing import FilteringBoundLogger

    from reposync.cache import RecordStore

RECENT_REPOS_KEY: Final = "recent-repos"
MAX_RECENT_REPOS: Final = 10


def _field_names() -> dict[str, str]:
    """Map both snake_case and camelCase setting names to field names."""
    names: dict[str, str] = {}
    for name, info in AppSettings.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


@final
class SettingsManager:
    """Loads, validates and persists AppSettings.

    A stored record that fails validation is replaced by the defaults, and
    the defaults are written back. A valid record is merged over the defaults
    so settings added later get their default value.
    """

    __slots__ = ("_logger", "_settings", "_store")

    def __init__(
        self,
        store: RecordStore,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Record store for settings records; should not expire.
            logger: Logger for load and save events.
        """
        self._store = store
        self._logger = logger if logger is not None else create_null_logger()
        self._settings: AppSettings | None = None

    @staticmethod
    def defaults() -> AppSettings:
        """The default settings."""
        return AppSettings()

    def load(self) -> AppSettings:
        """Load settings from the store, falling back to defaults."""
        raw = self._store.load(SETTINGS_KEY)
        if raw is not None and is_valid_settings_record(raw):
            try:
                self._settings = AppSettings.model_validate(
                    {**self.defaults().to_record_data(), **dict(raw)}  # pyright: ignore[reportArgumentType]
                )
            except ValidationError as e:
                self._logger.warning("settings_invalid", errors=e.error_count())
            else:
                return self._settings

        if raw is not None:
            self._logger.warning("settings_reset", reason="invalid_record")
        self._settings = self.defaults()
        try:
            self._save()
        except OSError as e:
            self._logger.error("settings_save_failed", error=str(e))
        return self._settings

    def _save(self) -> None:
        if self._settings is None:
            return
        _ = self._store.save(SETTINGS_KEY, self._settings.to_record_data())
        self._logger.debug("settings_saved")

    def get(self) -> AppSettings:
        """Current settings, loading them on first use."""
        if self._settings is None:
            return self.load()
        return self._settings

    def get_setting(self, key: str) -> Any:  # noqa: ANN401
        """Look up one setting by snake_case or camelCase name.

        Raises:
            SettingsError: If the key is unknown.
        """
        field = self._resolve_key(key)
        return getattr(self.get(), field)

    def _resolve_key(self, key: str) -> str:
        field = _field_names().get(key)
        if field is None:
            msg = f"Unknown setting: {key}"
            raise SettingsError(msg, key=key)
        return field

    def update_settings(self, updates: Mapping[str, Any]) -> AppSettings:
        """Apply several updates at once and persist the result.

        Args:
            updates: Setting values keyed by snake_case or camelCase name.

        Returns:
            The updated settings.

        Raises:
            SettingsError: If a key is unknown or a value has the wrong type.
                Nothing is persisted in that case.
            OSError: If the settings record cannot be written.
        """
        current = self.get().model_dump()
        for key, value in updates.items():
            current[self._resolve_key(key)] = value
        try:
            updated = AppSettings.model_validate(current, strict=True)
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else None
            msg = f"Invalid value for {field}: {first['msg']}"
            raise SettingsError(msg, key=field) from e

        self._settings = updated
        self._save()
        self._logger.info("settings_updated", keys=sorted(updates))
        return updated

    def update_setting(self, key: str, value: Any) -> AppSettings:  # noqa: ANN401
        """Update one setting and persist the result."""
        return self.update_settings({key: value})

    def reset(self) -> AppSettings:
        """Restore and persist the default settings."""
        self._settings = self.defaults()
        self._save()
        self._logger.info("settings_reset", reason="requested")
        return self._settings

    def should_block_commit(self, branch: str) -> bool:
        """Whether commits to branch are blocked by a protection pattern."""
        return matches_any_pattern(branch, self.get().block_commit_branches)


@final
class RecentRepositories:
    """Most-recently-opened repository list, newest first."""

    __slots__ = ("_logger", "_max_entries", "_store")

    def __init__(
        self,
        store: RecordStore,
        *,
        max_entries: int = MAX_RECENT_REPOS,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._store = store
        self._max_entries = max_entries
        self._logger = logger if logger is not None else create_null_logger()

    def entries(self) -> list[str]:
        """Stored paths, newest first; empty when the record is unusable."""
        raw = self._store.load(RECENT_REPOS_KEY)
        if not isinstance(raw, list):
            return []
        return [path for path in raw if isinstance(path, str)][: self._max_entries]

    def add(self, path: str) -> list[str]:
        """Move path to the front and persist the list."""
        recent = [path, *(p for p in self.entries() if p != path)][: self._max_entries]
        _ = self._store.save(RECENT_REPOS_KEY, recent)
        return recent

    def clear(self) -> None:
        """Forget every recent repository."""
        _ = self._store.clear(RECENT_REPOS_KEY)
        self._logger.info("recent_repositories_cleared")
