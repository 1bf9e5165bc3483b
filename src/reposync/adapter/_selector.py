"""Backend selection.

Maps a backend identifier to an adapter class. The identifier is resolved
once per process (by the application context); adapters are then created per
repository identity and never shared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from reposync.adapter._cli import CliGitAdapter
from reposync.adapter._dulwich import DulwichGitAdapter
from reposync.enums import GitBackend
from reposync.utils import create_null_logger

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from reposync.adapter._base import BaseGitAdapter
    from reposync.tracking import CommandTracker

DEFAULT_BACKEND: Final = GitBackend.CLI

BACKEND_ALIASES: Final[dict[str, GitBackend]] = {
    "cli": GitBackend.CLI,
    "git": GitBackend.CLI,
    "subprocess": GitBackend.CLI,
    "dulwich": GitBackend.DULWICH,
    "native": GitBackend.DULWICH,
    "library": GitBackend.DULWICH,
}

_ADAPTER_CLASSES: Final[dict[GitBackend, type[BaseGitAdapter]]] = {
    GitBackend.CLI: CliGitAdapter,
    GitBackend.DULWICH: DulwichGitAdapter,
}


def available_backends() -> tuple[str, ...]:
    """Canonical names of the registered backends."""
    return tuple(backend.value for backend in _ADAPTER_CLASSES)


def select_backend(
    name: str | None,
    *,
    logger: FilteringBoundLogger | None = None,
) -> GitBackend:
    """Resolve a backend identifier.

    Args:
        name: Backend name or alias, case-insensitive. None or empty selects
            the default.
        logger: Receives a warning when the name is not recognized.

    Returns:
        The selected backend; the default when the name is unknown.
    """
    if not name:
        return DEFAULT_BACKEND
    backend = BACKEND_ALIASES.get(name.strip().lower())
    if backend is None:
        log = logger if logger is not None else create_null_logger()
        log.warning(
            "unknown_git_backend",
            requested=name,
            fallback=DEFAULT_BACKEND.value,
            available=list(BACKEND_ALIASES),
        )
        return DEFAULT_BACKEND
    return backend


def adapter_class(backend: GitBackend) -> type[BaseGitAdapter]:
    """Look up the adapter class for a backend."""
    return _ADAPTER_CLASSES[backend]


def build_adapter(
    identity: str | Path,
    backend: GitBackend,
    *,
    tracker: CommandTracker | None = None,
    logger: FilteringBoundLogger | None = None,
    executable: str = "git",
    timeout: float = 60.0,
) -> BaseGitAdapter:
    """Construct an adapter without opening it.

    Used for operations whose identity is not a repository yet (clone, init).
    """
    if backend == GitBackend.CLI:
        return CliGitAdapter(
            identity,
            executable=executable,
            timeout=timeout,
            tracker=tracker,
            logger=logger,
        )
    return adapter_class(backend)(identity, tracker=tracker, logger=logger)


async def create_adapter(
    identity: str | Path,
    backend: GitBackend,
    *,
    tracker: CommandTracker | None = None,
    logger: FilteringBoundLogger | None = None,
    executable: str = "git",
    timeout: float = 60.0,
) -> BaseGitAdapter:
    """Construct and open a fresh adapter for one repository identity.

    Args:
        identity: Repository path.
        backend: Backend to construct.
        tracker: Command tracker shared by the process.
        logger: Logger for adapter diagnostics.
        executable: git executable, subprocess backend only.
        timeout: Per-process timeout in seconds, subprocess backend only.

    Returns:
        An opened adapter.

    Raises:
        AdapterError: If the identity is not a usable repository.
    """
    adapter = build_adapter(
        identity,
        backend,
        tracker=tracker,
        logger=logger,
        executable=executable,
        timeout=timeout,
    )
    await adapter.open()
    return adapter
