"""Repository service.

The request surface a user interface talks to: open and refresh
repositories, manage the cache and settings, and observe running commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Self, final

import anyio

from reposync.adapter import build_adapter, create_adapter
from reposync.cache import ClearResult, canonical_identity
from reposync.exceptions import CloneTargetExistsError
from reposync.sync import RepositorySynchronizer

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from anyio.streams.memory import MemoryObjectReceiveStream

    from reposync.adapter import BaseGitAdapter, CommitInfo
    from reposync.cache import Snapshot
    from reposync.context import AppContext
    from reposync.settings import AppSettings
    from reposync.sync import SyncResult
    from reposync.tracking import CommandEvent


@final
class RepositoryService:
    """Async API over the synchronization core.

    Keeps one synchronizer, with its own adapter, per open repository.

    Example:
        >>> async with RepositoryService(AppContext.create()) as service:
        ...     result = await service.open_repository("~/src/project")
        ...     print(result.snapshot.current_branch)
    """

    __slots__ = ("_context", "_opening", "_sessions")

    def __init__(self, context: AppContext) -> None:
        """Initialize the service.

        Args:
            context: Process-wide collaborators.
        """
        self._context = context
        self._sessions: dict[str, RepositorySynchronizer] = {}
        self._opening: dict[str, anyio.Lock] = {}

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close every open repository."""
        for identity in list(self._sessions):
            _ = await self.close_repository(identity)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def context(self) -> AppContext:
        return self._context

    @property
    def git_backend(self) -> str:
        """Name of the backend selected for this process."""
        return self._context.backend.value

    @property
    def open_repositories(self) -> tuple[str, ...]:
        return tuple(self._sessions)

    # =========================================================================
    # Repositories
    # =========================================================================

    def _build_adapter(self, identity: str) -> BaseGitAdapter:
        git = self._context.config.git
        return build_adapter(
            identity,
            self._context.backend,
            tracker=self._context.tracker,
            logger=self._context.logger,
            executable=git.executable,
            timeout=git.timeout,
        )

    async def _session(self, path: str | Path) -> RepositorySynchronizer:
        identity = canonical_identity(path)
        session = self._sessions.get(identity)
        if session is not None:
            return session

        # one adapter per identity even when opens race
        lock = self._opening.setdefault(identity, anyio.Lock())
        async with lock:
            session = self._sessions.get(identity)
            if session is not None:
                return session

            git = self._context.config.git
            adapter = await create_adapter(
                identity,
                self._context.backend,
                tracker=self._context.tracker,
                logger=self._context.logger,
                executable=git.executable,
                timeout=git.timeout,
            )
            session = RepositorySynchronizer(
                adapter,
                identity,
                self._context.cache,
                max_concurrency=git.max_concurrency,
                logger=self._context.logger,
            )
            self._sessions[identity] = session
        return session

    async def open_repository(self, path: str | Path) -> SyncResult:
        """Open a repository and serve its snapshot.

        The repository moves to the front of the recent list.

        Raises:
            AdapterError: If the path is not a usable repository or the
                refresh failed.
        """
        session = await self._session(path)
        try:
            result = await session.refresh()
        except Exception:
            _ = await self.close_repository(session.identity)
            raise
        try:
            _ = self._context.recent.add(session.identity)
        except OSError as e:
            self._context.logger.warning(
                "recent_repositories_save_failed", identity=session.identity, error=str(e)
            )
        return result

    async def refresh(self, path: str | Path, *, force: bool = False) -> SyncResult:
        """Refresh a repository, opening it first when needed."""
        session = await self._session(path)
        return await session.refresh(force=force)

    async def close_repository(self, path: str | Path) -> bool:
        """Close a repository's adapter and forget its session.

        Returns:
            True if the repository was open.
        """
        session = self._sessions.pop(canonical_identity(path), None)
        if session is None:
            return False
        await session.adapter.close()
        return True

    async def refresh_stashes(self, path: str | Path) -> Snapshot:
        """Re-read only the stash list of a repository."""
        session = await self._session(path)
        return await session.refresh_stashes()

    async def load_branch_commits(
        self,
        path: str | Path,
        branch: str,
        *,
        max_count: int | None = None,
        use_cache: bool = True,
    ) -> tuple[CommitInfo, ...]:
        """Serve a branch's commit list.

        Args:
            path: Repository path.
            branch: Branch name.
            max_count: Commits to load; defaults to the maxCommits setting.
            use_cache: Serve a previously loaded list when there is one.
        """
        session = await self._session(path)
        count = max_count if max_count is not None else self._context.settings.get().max_commits
        return await session.load_branch_commits(branch, count, use_cache=use_cache)

    async def forget_branch_commits(self, path: str | Path, branch: str | None = None) -> None:
        """Drop cached commit lists for one branch, or all branches."""
        session = await self._session(path)
        session.forget_branch_commits(branch)

    async def init_repository(self, path: str | Path) -> SyncResult:
        """Create an empty repository and open it."""
        identity = canonical_identity(path)
        adapter = self._build_adapter(identity)
        await adapter.init()
        await adapter.close()
        self._context.logger.info("repository_initialized", identity=identity)
        return await self.open_repository(identity)

    async def clone_repository(self, url: str, parent: str | Path, name: str) -> SyncResult:
        """Clone url into parent/name and open the clone.

        Raises:
            CloneTargetExistsError: If parent/name already exists.
            AdapterError: If the clone failed.
        """
        target = Path(canonical_identity(Path(parent) / name))
        if target.exists():
            msg = f"Directory {target} already exists"
            raise CloneTargetExistsError(msg, path=target)

        adapter = self._build_adapter(str(target))
        await adapter.clone(url, target.parent, target.name)
        self._context.logger.info("repository_cloned", url=url, identity=str(target))
        return await self.open_repository(target)

    # =========================================================================
    # Cache
    # =========================================================================

    def clear_cache(self, path: str | Path | None = None) -> ClearResult:
        """Remove one repository's cache record, or all of them.

        Open repositories covered by the clear also drop their in-memory
        snapshot and commit lists, so nothing cleared is written back.
        """
        cache = self._context.cache
        if path is None:
            for session in self._sessions.values():
                session.invalidate()
            return cache.clear_all()
        identity = canonical_identity(path)
        session = self._sessions.get(identity)
        if session is not None:
            session.invalidate()
        file = cache.path_for(identity)
        return ClearResult(removed=(file,)) if cache.clear(identity) else ClearResult()

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self) -> AppSettings:
        return self._context.settings.get()

    def update_setting(self, key: str, value: Any) -> AppSettings:  # noqa: ANN401
        return self._context.settings.update_setting(key, value)

    def update_settings(self, updates: Mapping[str, Any]) -> AppSettings:
        return self._context.settings.update_settings(updates)

    def reset_settings(self) -> AppSettings:
        return self._context.settings.reset()

    def should_block_commit(self, branch: str) -> bool:
        return self._context.settings.should_block_commit(branch)

    # =========================================================================
    # Commands and recent repositories
    # =========================================================================

    def subscribe_commands(self) -> MemoryObjectReceiveStream[CommandEvent]:
        """Subscribe to STARTED/FINISHED events of every git command."""
        return self._context.tracker.subscribe()

    def recent_repositories(self) -> list[str]:
        """Recently opened repositories, newest first."""
        return self._context.recent.entries()

    def clear_recent_repositories(self) -> None:
        self._context.recent.clear()
