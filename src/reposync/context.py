# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""Application context.

The AppContext owns the process-wide collaborators (configuration, logger,
command tracker, snapshot cache, settings) and is built once at process
start. Components receive it explicitly; the context variable below only
serves entry points that cannot thread it through.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from reposync.adapter import select_backend
from reposync.cache import RecordStore, SnapshotCache
from reposync.config import Config, safe_load_config
from reposync.enums import GitBackend
from reposync.exceptions import ConfigurationError
from reposync.settings import RecentRepositories, SettingsManager
from reposync.tracking import CommandTracker
from reposync.utils import (
    create_app_logger,
    get_cache_dir,
    get_config_file,
    get_default_data_dir,
    get_settings_dir,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_current_context: contextvars.ContextVar[AppContext | None] = contextvars.ContextVar(
    "reposync_context", default=None
)


@dataclass(frozen=True, slots=True)
class AppContext:
    """Process-wide collaborators.

    Attributes:
        config: Loaded configuration.
        data_dir: User-data root.
        backend: Git backend selected for this process.
        logger: Application logger.
        tracker: Command tracker shared by every adapter.
        cache: Repository snapshot cache.
        settings: Application settings manager.
        recent: Recently opened repositories.
        config_error: Error message if config loading failed.
    """

    config: Config = field(repr=False)
    data_dir: Path
    backend: GitBackend
    logger: FilteringBoundLogger = field(repr=False)
    tracker: CommandTracker = field(repr=False)
    cache: SnapshotCache = field(repr=False)
    settings: SettingsManager = field(repr=False)
    recent: RecentRepositories = field(repr=False)
    config_error: str | None = None

    @classmethod
    def create(
        cls,
        *,
        data_dir: Path | None = None,
        config: Config | None = None,
        backend: str | None = None,
        logger: FilteringBoundLogger | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Build a context.

        Args:
            data_dir: User-data root; defaults to REPOSYNC_DATA_DIR or
                ~/.reposync.
            config: Configuration; loaded from <data_dir>/config.toml and
                the environment when None.
            backend: Backend name from the command line; overrides the
                configured backend.
            logger: Logger; built from the logging configuration when None.
            cli_overrides: Nested overrides from command-line flags, applied
                when the configuration is loaded here.

        Returns:
            A ready context.

        Raises:
            ConfigurationError: If the user-data directory cannot be created.
        """
        root = (data_dir if data_dir is not None else get_default_data_dir()).expanduser()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"User data directory is not usable: {root}: {e}"
            raise ConfigurationError(msg) from e

        config_error: str | None = None
        if config is None:
            config, config_error = safe_load_config(
                config_file=get_config_file(root), cli_overrides=cli_overrides
            )

        if logger is None:
            logger = create_app_logger(
                root,
                level=config.logging.level.value,
                log_format=config.logging.format.value,  # type: ignore[arg-type]
                log_file=config.logging.file,
                max_bytes=config.logging.max_bytes,
                backup_count=config.logging.backup_count,
            )

        settings_store = RecordStore(get_settings_dir(root), logger=logger)
        selected = select_backend(backend or config.git.backend, logger=logger)
        logger.info("context_created", data_dir=str(root), backend=selected.value)

        return cls(
            config=config,
            data_dir=root,
            backend=selected,
            logger=logger,
            tracker=CommandTracker(logger=logger),
            cache=SnapshotCache(
                get_cache_dir(root),
                max_age_ms=config.cache.max_age_ms,
                logger=logger,
            ),
            settings=SettingsManager(settings_store, logger=logger),
            recent=RecentRepositories(settings_store, logger=logger),
            config_error=config_error,
        )


def initialize(context: AppContext) -> AppContext:
    """Install the process context.

    Raises:
        ConfigurationError: If a context is already installed.
    """
    if _current_context.get() is not None:
        msg = "Application context is already initialized"
        raise ConfigurationError(msg)
    _ = _current_context.set(context)
    return context


def get_context() -> AppContext:
    """Return the installed context.

    Raises:
        ConfigurationError: If no context has been installed.
    """
    context = _current_context.get()
    if context is None:
        msg = "Application context accessed before initialization"
        raise ConfigurationError(msg)
    return context


def reset_context() -> None:
    """Remove the installed context, closing the tracker's subscribers."""
    context = _current_context.get()
    if context is not None:
        context.tracker.close()
    _ = _current_context.set(None)
