# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: D415, FBT002, TC003  # Path needed at runtime for cyclopts parameter parsing
"""Cache commands for inspecting and clearing snapshot records."""

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

from reposync.cache import canonical_identity
from reposync.context import get_context
from reposync.exceptions import ConfigurationError
from reposync.service import RepositoryService
from reposync.utils import humanize_ms

from ._shared import ExitCode, exit_with_error, get_console

app = App(name="cache", help="Inspect and clear the snapshot cache", help_on_error=True)

__all__ = ["app"]


def _service() -> RepositoryService:
    try:
        return RepositoryService(get_context())
    except ConfigurationError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR)


@app.command(name="info")
def _info(path: Annotated[Path, Parameter(help="Repository path")] = Path()) -> None:
    """Show where a repository's snapshot is cached and how old it is"""
    cache = _service().context.cache
    identity = canonical_identity(path)
    console = get_console()
    console.print(f"[bold]{identity}[/bold]")
    console.print(f"  file: {cache.path_for(identity)}", markup=False)
    try:
        written = cache.cached_at(identity)
    except OSError as e:
        exit_with_error(f"Failed to read cache record: {e}", ExitCode.IO_ERROR)
    if written is None:
        console.print("  [dim]no valid snapshot cached[/dim]")
    else:
        console.print(f"  cached {humanize_ms(written)}")


@app.command(name="clear")
def _clear(
    path: Annotated[Path | None, Parameter(help="Repository whose record to remove")] = None,
    *,
    all_: Annotated[bool, Parameter(name="--all", help="Remove every record")] = False,
) -> None:
    """Remove cached snapshots"""
    if path is None and not all_:
        exit_with_error("Pass a repository path or --all", ExitCode.VALIDATION_ERROR)

    try:
        result = _service().clear_cache(None if all_ else path)
    except OSError as e:
        exit_with_error(f"Failed to remove cache record: {e}", ExitCode.IO_ERROR)
    console = get_console()
    for failed in result.failed:
        console.print(f"[red]Could not remove {failed}[/red]")
    console.print(f"Removed {len(result.removed)} record(s)")
    if not result.ok:
        raise SystemExit(ExitCode.IO_ERROR)
