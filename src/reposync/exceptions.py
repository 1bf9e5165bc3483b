"""reposync exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ReposyncError(Exception):
    """Base exception for reposync errors."""


# =============================================================================
# Adapter Exceptions
# =============================================================================


class AdapterError(ReposyncError):
    """Raised when the git execution backend reports a failure.

    The diagnostic text is the backend's own output (stderr for the
    subprocess backend, the exception message for the library backend)
    and is surfaced to callers verbatim.

    Attributes:
        command: Human-readable description of the failed command.
        diagnostic: Diagnostic text reported by the backend.
        exit_code: Process exit code, or None when not applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        diagnostic: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        """Initialize with error message and backend context.

        Args:
            message: Human-readable error message.
            command: Description of the command that failed.
            diagnostic: Diagnostic text from the backend.
            exit_code: Exit code of the git process, if any.
        """
        super().__init__(message)
        self.command: str | None = command
        self.diagnostic: str = diagnostic if diagnostic is not None else message
        self.exit_code: int | None = exit_code


class RefreshError(AdapterError):
    """Raised when a repository refresh fails.

    Attributes:
        identity: Repository identity that failed to refresh.
        step: Name of the synchronization step that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        identity: str,
        step: str,
        cause: AdapterError,
    ) -> None:
        """Initialize from the adapter failure that aborted the refresh.

        Args:
            message: Human-readable error message.
            identity: Repository identity being refreshed.
            step: Synchronization step that failed.
            cause: The underlying adapter error.
        """
        super().__init__(
            message,
            command=cause.command,
            diagnostic=cause.diagnostic,
            exit_code=cause.exit_code,
        )
        self.identity: str = identity
        self.step: str = step


class CloneTargetExistsError(ReposyncError):
    """Raised when a clone target directory already exists.

    Attributes:
        path: The existing target directory.
    """

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialize with error message and target path."""
        super().__init__(message)
        self.path: Path = path


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(ReposyncError):
    """Raised when application state is used before it is initialized.

    Also raised when the context is initialized twice or the user-data
    directory cannot be prepared.
    """


class ConfigLoadError(ConfigurationError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class SettingsError(ReposyncError, ValueError):
    """Raised when a settings update is rejected.

    Attributes:
        key: The settings key that was rejected.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialize with error message and offending key."""
        super().__init__(message)
        self.key: str | None = key
