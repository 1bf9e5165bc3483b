"""reposync CLI commands."""
# pyright: reportUnusedCallResult=false

from __future__ import annotations

from typing import TYPE_CHECKING

from ._cache import app as cache_app
from ._misc import backends, recent
from ._repo import clone, init, log, stashes, status
from ._settings import app as settings_app
from ._shared import (
    ExitCode,
    exit_with_error,
    format_json,
    get_console,
    get_error_console,
    run_with_service,
)

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "ExitCode",
    "cache_app",
    "exit_with_error",
    "format_json",
    "get_console",
    "get_error_console",
    "register_commands",
    "run_with_service",
    "settings_app",
]


def register_commands(app: App) -> None:
    app.command(status, name="status")
    app.command(log, name="log")
    app.command(stashes, name="stashes")
    app.command(init, name="init")
    app.command(clone, name="clone")
    app.command(backends, name="backends")
    app.command(recent, name="recent")
    app.command(cache_app)
    app.command(settings_app)
