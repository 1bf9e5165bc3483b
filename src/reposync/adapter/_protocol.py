"""Git adapter protocol for type-safe dependency injection.

Both CliGitAdapter and DulwichGitAdapter satisfy this protocol, as does
FakeGitAdapter used in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from reposync.adapter._models import (
        AheadBehind,
        BranchSummary,
        CommitInfo,
        GitStatus,
        StashList,
    )
    from reposync.enums import GitBackend


@runtime_checkable
class GitAdapter(Protocol):
    """Uniform capability surface over a git execution technology.

    An adapter is bound to one repository identity. Every operation suspends
    the caller until the underlying technology completes and raises
    AdapterError carrying the technology's diagnostic text on failure.

    Example:
        >>> async def current_branch(adapter: GitAdapter) -> str:
        ...     status = await adapter.status()
        ...     return status.current
    """

    @property
    def identity(self) -> str:
        """Canonical path of the repository this adapter is bound to."""
        ...

    @property
    def backend(self) -> GitBackend:
        """The execution technology this adapter uses."""
        ...

    @property
    def is_open(self) -> bool:
        """Whether open() has completed and close() has not been called."""
        ...

    async def open(self) -> None:
        """Prepare the adapter for use.

        Raises:
            AdapterError: If the identity is not a usable repository.
        """
        ...

    async def close(self) -> None:
        """Release resources held by the adapter."""
        ...

    async def status(self) -> GitStatus:
        """Report the current branch and one entry per changed path."""
        ...

    async def branch_local(self) -> BranchSummary:
        """List local branch names sorted by name."""
        ...

    async def get_ahead_behind(self, branch: str, upstream: str) -> AheadBehind:
        """Count commits on each side of branch...upstream.

        Args:
            branch: Local branch name.
            upstream: Upstream ref, for example origin/main.

        Returns:
            The divergence, 0/0 when the upstream ref does not exist.
        """
        ...

    async def stash_list(self) -> StashList:
        """List stashes, newest first."""
        ...

    async def get_origin_url(self) -> str:
        """URL of the origin remote, or an empty string when there is none."""
        ...

    async def raw(self, argv: Sequence[str]) -> str:
        """Run a git command given as argument list and return its output."""
        ...

    async def log(self, branch: str, max_count: int) -> list[CommitInfo]:
        """List up to max_count commits reachable from branch, newest first."""
        ...

    async def clone(self, url: str, parent_dir: Path, name: str) -> None:
        """Clone url into parent_dir/name."""
        ...

    async def init(self) -> None:
        """Create an empty repository at the identity path."""
        ...
