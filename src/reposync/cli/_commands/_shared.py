"""Plumbing shared by the reposync commands.

Commands print through fresh rich consoles, report failures with
`exit_with_error`, and reach the repository service through
`run_with_service`, which turns library exceptions into an `ExitCode`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Never

import anyio

from reposync.context import get_context
from reposync.exceptions import (
    AdapterError,
    CloneTargetExistsError,
    ConfigurationError,
    RefreshError,
    SettingsError,
)
from reposync.service import RepositoryService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from rich.console import Console

__all__ = [
    "ExitCode",
    "exit_with_error",
    "format_json",
    "get_console",
    "get_error_console",
    "run_with_service",
]


class ExitCode(IntEnum):
    """Process exit status of a reposync command."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def format_json(data: object, *, indent: bool = True) -> str:
    """Render a JSON-compatible value as text for the console."""
    from reposync.utils import dump_json

    return dump_json(data, indent=indent).decode("utf-8")


def get_console() -> Console:
    """Console for regular command output on stdout."""
    from rich.console import Console

    return Console(highlight=False)


def get_error_console() -> Console:
    """Console for diagnostics on stderr."""
    from rich.console import Console

    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Report `message` as an error and terminate with `code`.

    Args:
        message: Text shown after the ``Error:`` prefix.
        code: Exit status, INTERNAL_ERROR unless the caller knows better.
        console: Where to print; a fresh stderr console by default.

    Raises:
        SystemExit: Unconditionally.
    """
    out = console if console is not None else get_error_console()
    out.print(f"[red]Error:[/red] {message}", markup=True, highlight=False)
    raise SystemExit(code)


def run_with_service[T](operation: Callable[[RepositoryService], Awaitable[T]]) -> T:
    """Run an async operation against a service built on the current context.

    The service is closed when the operation finishes. Library errors are
    reported on stderr and mapped to exit codes.

    Args:
        operation: Coroutine function receiving the service.

    Returns:
        The operation's result.

    Raises:
        SystemExit: If the operation failed.
    """
    try:
        context = get_context()
    except ConfigurationError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR)

    async def runner() -> T:
        async with RepositoryService(context) as service:
            return await operation(service)

    try:
        return anyio.run(runner)
    except CloneTargetExistsError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR)
    except SettingsError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR)
    except RefreshError as e:
        exit_with_error(f"{e.step} failed: {e.diagnostic.strip()}", ExitCode.IO_ERROR)
    except AdapterError as e:
        exit_with_error(e.diagnostic.strip() or str(e), ExitCode.IO_ERROR)
