# pyright: reportUnusedCallResult=false
# ruff: noqa: D415, FBT002
"""Backend and recent repository commands."""

from typing import Annotated

from cyclopts import Parameter

from reposync.adapter import BACKEND_ALIASES, available_backends
from reposync.context import get_context
from reposync.exceptions import ConfigurationError

from ._shared import ExitCode, exit_with_error, get_console

__all__ = ["backends", "recent"]


def backends() -> None:
    """List the git backends and mark the selected one"""
    try:
        selected = get_context().backend.value
    except ConfigurationError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR)
    console = get_console()
    for name in available_backends():
        aliases = sorted(a for a, b in BACKEND_ALIASES.items() if b.value == name and a != name)
        marker = "*" if name == selected else " "
        suffix = f" [dim](aliases: {', '.join(aliases)})[/dim]" if aliases else ""
        console.print(f"{marker} {name}{suffix}")


def recent(
    *,
    clear: Annotated[bool, Parameter(name="--clear", help="Forget every entry")] = False,
) -> None:
    """List recently opened repositories"""
    try:
        context = get_context()
    except ConfigurationError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR)
    console = get_console()
    if clear:
        context.recent.clear()
        console.print("[green]Recent repositories cleared[/green]")
        return
    entries = context.recent.entries()
    if not entries:
        console.print("[dim]No recent repositories[/dim]")
        return
    for entry in entries:
        console.print(entry, markup=False)
