# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: D415
"""Settings commands for viewing and changing application settings."""

from typing import Annotated, Any

from cyclopts import App, Parameter

from reposync.config import parse_string_value
from reposync.context import get_context
from reposync.exceptions import ConfigurationError, SettingsError
from reposync.service import RepositoryService
from reposync.settings import AppSettings

from ._shared import ExitCode, exit_with_error, format_json, get_console

app = App(name="settings", help="View and change application settings", help_on_error=True)

__all__ = ["app"]


def _service() -> RepositoryService:
    try:
        return RepositoryService(get_context())
    except ConfigurationError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR)


def _print_settings(settings: AppSettings, *, json: bool) -> None:
    console = get_console()
    data: dict[str, Any] = settings.to_record_data()
    if json:
        console.print(format_json(data), markup=False)
        return
    width = max(len(key) for key in data)
    for key, value in data.items():
        console.print(f"[bold]{key:<{width}}[/bold]  {value}", markup=True)


@app.command(name="show")
def _show(
    key: Annotated[str | None, Parameter(help="Show only this setting")] = None,
    *,
    json: Annotated[bool, Parameter(name="--json", help="Print as JSON")] = False,
) -> None:
    """Show the current settings"""
    service = _service()
    if key is None:
        _print_settings(service.get_settings(), json=json)
        return
    try:
        value = service.context.settings.get_setting(key)
    except SettingsError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND)
    get_console().print(format_json(value, indent=False) if json else str(value), markup=False)


@app.command(name="set")
def _set(
    key: Annotated[str, Parameter(help="Setting name (camelCase or snake_case)")],
    value: Annotated[str, Parameter(help="New value; parsed as bool, number or JSON")],
) -> None:
    """Change one setting"""
    service = _service()
    try:
        settings = service.update_setting(key, parse_string_value(value))
    except SettingsError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR)
    except OSError as e:
        exit_with_error(f"Failed to save settings: {e}", ExitCode.IO_ERROR)
    _print_settings(settings, json=False)


@app.command(name="reset")
def _reset() -> None:
    """Restore the default settings"""
    try:
        _ = _service().reset_settings()
    except OSError as e:
        exit_with_error(f"Failed to save settings: {e}", ExitCode.IO_ERROR)
    get_console().print("[green]Settings restored to defaults[/green]")


@app.command(name="check-branch")
def _check_branch(branch: Annotated[str, Parameter(help="Branch name")]) -> None:
    """Report whether commits are blocked on a branch

    Exits with VALIDATION_ERROR when the branch matches a blocked pattern.
    """
    if _service().should_block_commit(branch):
        exit_with_error(f"Commits are blocked on {branch}", ExitCode.VALIDATION_ERROR)
    get_console().print(f"Commits are allowed on {branch}", markup=False)
