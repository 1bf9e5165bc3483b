"""Base git adapter.

Uses the Template Method pattern: public operations wrap every backend call
in a tracked command and normalize results, while subclasses implement the
underscore-prefixed hooks against their execution technology.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Self

from reposync.exceptions import AdapterError
from reposync.tracking import CommandTracker
from reposync.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from reposync.adapter._models import (
        AheadBehind,
        BranchSummary,
        CommitInfo,
        GitStatus,
        StashList,
    )
    from reposync.enums import GitBackend


class BaseGitAdapter(ABC):
    """Abstract base class for git adapters.

    An adapter is constructed for exactly one repository identity and is
    never shared across identities.

    Attributes:
        identity: Canonical repository path as a string.
    """

    backend_name: GitBackend

    def __init__(
        self,
        identity: str | Path,
        *,
        tracker: CommandTracker | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            identity: Repository path; stored in canonical form.
            tracker: Command tracker that receives one event pair per call.
            logger: Logger for backend diagnostics.
        """
        self._identity = str(Path(identity).expanduser().resolve())
        self._tracker = tracker if tracker is not None else CommandTracker()
        self._logger = logger if logger is not None else create_null_logger()
        self._open = False

    # =========================================================================
    # Abstract Methods (Template Method hooks)
    # =========================================================================

    @abstractmethod
    async def _open_repo(self) -> None:
        """Verify the identity is a repository the backend can use."""

    @abstractmethod
    async def _status(self) -> GitStatus: ...

    @abstractmethod
    async def _branch_local(self) -> BranchSummary: ...

    @abstractmethod
    async def _ahead_behind(self, branch: str, upstream: str) -> AheadBehind: ...

    @abstractmethod
    async def _stash_list(self) -> StashList: ...

    @abstractmethod
    async def _origin_url(self) -> str: ...

    @abstractmethod
    async def _raw(self, argv: Sequence[str]) -> str: ...

    @abstractmethod
    async def _log(self, branch: str, max_count: int) -> list[CommitInfo]: ...

    @abstractmethod
    async def _clone(self, url: str, target: Path) -> None: ...

    @abstractmethod
    async def _init(self) -> None: ...

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def open(self) -> None:
        """Prepare the adapter for use.

        Raises:
            AdapterError: If the identity is not a usable repository.
        """
        if self._open:
            return
        await self._open_repo()
        self._open = True
        self._logger.debug(
            "adapter_opened", identity=self._identity, backend=self.backend_name
        )

    async def close(self) -> None:
        """Mark the adapter closed. Subclasses release their own resources."""
        self._open = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def backend(self) -> GitBackend:
        return self.backend_name

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def tracker(self) -> CommandTracker:
        return self._tracker

    # =========================================================================
    # Operations
    # =========================================================================

    @asynccontextmanager
    async def _tracked(self, description: str) -> AsyncIterator[None]:
        async with self._tracker.track(description):
            try:
                yield
            except AdapterError as e:
                self._logger.warning(
                    "git_command_failed",
                    identity=self._identity,
                    command=description,
                    diagnostic=e.diagnostic,
                    exit_code=e.exit_code,
                )
                raise

    def _require_open(self, operation: str) -> None:
        if not self._open:
            msg = f"Adapter for {self._identity} is not open"
            raise AdapterError(msg, command=operation)

    async def status(self) -> GitStatus:
        self._require_open("git status")
        async with self._tracked("git status"):
            return await self._status()

    async def branch_local(self) -> BranchSummary:
        self._require_open("git branch")
        async with self._tracked("git branch"):
            return await self._branch_local()

    async def get_ahead_behind(self, branch: str, upstream: str) -> AheadBehind:
        description = f"git rev-list --left-right --count {branch}...{upstream}"
        self._require_open(description)
        async with self._tracked(description):
            return await self._ahead_behind(branch, upstream)

    async def stash_list(self) -> StashList:
        self._require_open("git stash list")
        async with self._tracked("git stash list"):
            return await self._stash_list()

    async def get_origin_url(self) -> str:
        self._require_open("git remote get-url origin")
        async with self._tracked("git remote get-url origin"):
            return await self._origin_url()

    async def raw(self, argv: Sequence[str]) -> str:
        description = " ".join(["git", *argv])
        self._require_open(description)
        async with self._tracked(description):
            return await self._raw(argv)

    async def log(self, branch: str, max_count: int) -> list[CommitInfo]:
        description = f"git log -n {max_count} {branch}"
        self._require_open(description)
        async with self._tracked(description):
            return await self._log(branch, max_count)

    async def clone(self, url: str, parent_dir: Path, name: str) -> None:
        """Clone url into parent_dir/name.

        Does not require the adapter to be open: the identity is not yet a
        repository.
        """
        async with self._tracked(f"git clone {url} {name}"):
            await self._clone(url, Path(parent_dir) / name)

    async def init(self) -> None:
        """Create an empty repository at the identity path and open it."""
        async with self._tracked("git init"):
            await self._init()
        await self.open()
