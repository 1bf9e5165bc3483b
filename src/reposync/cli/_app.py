"""The command-line interface for reposync."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated, Any

from cyclopts import App, Parameter
from rich.console import Console

from reposync.context import AppContext, initialize, reset_context
from reposync.exceptions import ConfigurationError

from ._commands import ExitCode, exit_with_error, register_commands

_HELP = "Keep a desktop view of git repositories in sync."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="reposync",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        git_backend: Annotated[
            str | None,
            Parameter(name="--git-backend", help="Git backend: cli or dulwich"),
        ] = None,
        data_dir: Annotated[
            Path | None,
            Parameter(name="--data-dir", help="User data directory (default: ~/.reposync)"),
        ] = None,
        verbose: Annotated[bool, Parameter(help="Log debug events")] = False,
    ) -> None:
        """Launch reposync with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            git_backend: Backend name; overrides the configured backend.
            data_dir: User data directory.
            verbose: Lower the log threshold to debug.
        """
        cli_overrides: dict[str, Any] | None = None
        if verbose:
            cli_overrides = {"logging": {"level": "debug"}}

        try:
            context = AppContext.create(
                data_dir=data_dir,
                backend=git_backend,
                cli_overrides=cli_overrides,
            )
        except ConfigurationError as e:
            exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)

        initialize(context)
        try:
            app(tokens)
        finally:
            reset_context()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `reposync` CLI."""
    app = create_app()
    app.meta()
