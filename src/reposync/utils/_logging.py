"""structlog loggers for reposync.

The loggers built here write to files under the data directory and never
touch the global structlog configuration, so several contexts (tests, an
embedding application) can each hold their own.
"""

import logging
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

from ._paths import get_log_file

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

DEBUG_ENV_VAR = "REPOSYNC_DEBUG"


def _resolve_level(level: str) -> int:
    """Numeric level for a name like ``"warning"``; REPOSYNC_DEBUG forces DEBUG."""
    if getenv(DEBUG_ENV_VAR):
        return logging.DEBUG
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _rotating_sink(log_path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Logger:
    # a private, non-propagating stdlib logger owns the rotating handler
    sink = logging.getLogger(f"reposync.{log_path.stem}.{id(log_path)}")
    sink.handlers.clear()
    sink.propagate = False
    sink.setLevel(level)

    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    sink.addHandler(handler)
    return sink


def _renderers(log_format: LogFormatType) -> list[structlog.typing.Processor]:
    chain: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "text":
        chain.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        chain += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return chain


def _file_logger(
    log_path: Path,
    *,
    level: int,
    log_format: LogFormatType,
    max_bytes: int | None,
    backup_count: int | None,
) -> "FilteringBoundLogger":  # noqa: UP037
    log_path.parent.mkdir(parents=True, exist_ok=True)

    sink: logging.Logger | structlog.WriteLogger
    if max_bytes is None or backup_count is None:
        sink = structlog.WriteLoggerFactory(file=log_path.open("a"))()
    else:
        sink = _rotating_sink(log_path, level, max_bytes, backup_count)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            sink,
            processors=_renderers(log_format),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
        ),
    )


def create_app_logger(
    data_dir: Path,
    *,
    level: str = "info",
    log_format: LogFormatType = "json",
    log_file: str = "",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Build the logger an `AppContext` hands to every component.

    Events go to `log_file`, or to ``<data_dir>/logs/reposync.log`` when it
    is empty. Setting REPOSYNC_DEBUG overrides `level` with DEBUG.

    Args:
        data_dir: The user-data root directory.
        level: Threshold name (debug, info, warning, error).
        log_format: ``"json"`` for one object per line, ``"text"`` for
            plain key=value lines.
        log_file: Explicit log file path.
        max_bytes: Rotate once the file reaches this size. Rotation needs
            both this and `backup_count`.
        backup_count: Rotated files to keep.
    """
    target = Path(log_file) if log_file else get_log_file(data_dir)
    return _file_logger(
        target,
        level=_resolve_level(level),
        log_format=log_format,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )


def create_null_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Logger that drops everything, for components built without one."""
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )
