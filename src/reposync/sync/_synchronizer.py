"""Repository synchronizer.

Serves a valid cached snapshot or recomputes one through tracked adapter
calls, then writes it through the snapshot cache.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, final

import anyio

from reposync.cache import Snapshot
from reposync.exceptions import AdapterError, RefreshError
from reposync.sync._classify import split_status_files
from reposync.sync._remotes import parse_remotes
from reposync.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from reposync.adapter import AheadBehind, CommitInfo, GitAdapter, RemoteInfo
    from reposync.cache import SnapshotCache

DEFAULT_MAX_CONCURRENCY: Final = 8
DEFAULT_MAX_COMMITS: Final = 100


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of a refresh.

    Attributes:
        snapshot: The snapshot now in effect.
        from_cache: True when the snapshot was served from the cache.
    """

    snapshot: Snapshot
    from_cache: bool


def aggregate_divergence(results: Mapping[str, AheadBehind]) -> dict[str, AheadBehind]:
    """Keep only branches that are ahead of or behind their upstream."""
    return {branch: counts for branch, counts in results.items() if counts.diverged}


@final
class RepositorySynchronizer:
    """Keeps one repository's snapshot in step with the repository.

    Example:
        >>> sync = RepositorySynchronizer(adapter, adapter.identity, cache)
        >>> result = await sync.refresh()
        >>> result.snapshot.current_branch
        'main'
    """

    __slots__ = (
        "_adapter",
        "_branch_commits",
        "_cache",
        "_identity",
        "_logger",
        "_max_concurrency",
        "_snapshot",
    )

    def __init__(
        self,
        adapter: GitAdapter,
        identity: str,
        cache: SnapshotCache,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            adapter: Opened adapter bound to identity.
            identity: Canonical repository path.
            cache: Shared snapshot cache.
            max_concurrency: Maximum concurrent ahead/behind queries.
            logger: Logger for refresh lifecycle events.
        """
        if max_concurrency < 1:
            msg = f"max_concurrency must be at least 1, got {max_concurrency}"
            raise ValueError(msg)
        self._adapter = adapter
        self._identity = identity
        self._cache = cache
        self._max_concurrency = max_concurrency
        self._logger = logger if logger is not None else create_null_logger()
        self._snapshot: Snapshot | None = None
        self._branch_commits: dict[str, tuple[CommitInfo, ...]] = {}

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def adapter(self) -> GitAdapter:
        return self._adapter

    @property
    def snapshot(self) -> Snapshot | None:
        """The snapshot most recently served or computed."""
        return self._snapshot

    @property
    def branch_commits(self) -> dict[str, tuple[CommitInfo, ...]]:
        """In-memory branch commit lists."""
        return dict(self._branch_commits)

    # =========================================================================
    # Refresh
    # =========================================================================

    async def _step[T](self, step: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except AdapterError as e:
            raise self._refresh_error(step, e) from e

    def _refresh_error(self, step: str, error: AdapterError) -> RefreshError:
        self._logger.error(
            "refresh_failed",
            identity=self._identity,
            step=step,
            diagnostic=error.diagnostic,
        )
        msg = f"Refresh of {self._identity} failed at {step}: {error}"
        return RefreshError(msg, identity=self._identity, step=step, cause=error)

    async def _list_remotes(self) -> list[RemoteInfo]:
        try:
            output = await self._adapter.raw(["remote", "-v"])
        except AdapterError as e:
            self._logger.warning(
                "remote_list_failed", identity=self._identity, diagnostic=e.diagnostic
            )
            return []
        return parse_remotes(output)

    async def _collect_divergence(self, branches: Sequence[str]) -> dict[str, AheadBehind]:
        """Query every branch concurrently and wait for all of them.

        Raises:
            RefreshError: If any query failed, after all queries finished.
        """
        results: dict[str, AheadBehind] = {}
        failures: list[tuple[str, AdapterError]] = []
        limiter = anyio.CapacityLimiter(self._max_concurrency)

        async def query(branch: str) -> None:
            async with limiter:
                try:
                    results[branch] = await self._adapter.get_ahead_behind(
                        branch, f"origin/{branch}"
                    )
                except AdapterError as e:
                    failures.append((branch, e))

        async with anyio.create_task_group() as tg:
            for branch in branches:
                tg.start_soon(query, branch)

        if failures:
            for branch, error in failures[1:]:
                self._logger.warning(
                    "divergence_failed", branch=branch, diagnostic=error.diagnostic
                )
            branch, error = failures[0]
            raise self._refresh_error(f"get_ahead_behind({branch})", error)
        return results

    def _merged_commits(self) -> dict[str, tuple[CommitInfo, ...]]:
        return {**self._cache.branch_commits(self._identity), **self._branch_commits}

    async def refresh(self, *, force: bool = False) -> SyncResult:
        """Serve the cached snapshot or recompute it.

        Args:
            force: Skip the cache and always recompute.

        Returns:
            The snapshot in effect and whether it came from the cache.

        Raises:
            RefreshError: If an adapter call failed; nothing is cached.
        """
        if not force:
            cached = self._cache.load(self._identity)
            if cached is not None:
                self._branch_commits = dict(cached.branch_commits)
                self._snapshot = cached
                self._logger.info("refresh_completed", identity=self._identity, from_cache=True)
                return SyncResult(snapshot=cached, from_cache=True)

        started = anyio.current_time()
        self._logger.debug("refresh_started", identity=self._identity, force=force)

        status = await self._step("status", self._adapter.status)
        origin_url = await self._step("get_origin_url", self._adapter.get_origin_url)
        branches = await self._step("branch_local", self._adapter.branch_local)
        remotes = await self._list_remotes()
        divergence = await self._collect_divergence(branches.all)
        stashes = await self._step("stash_list", self._adapter.stash_list)

        split = split_status_files(status.files)
        commits = self._merged_commits()
        snapshot = Snapshot(
            current_branch=status.current,
            origin_url=origin_url,
            unstaged_files=split.unstaged,
            staged_files=split.staged,
            partially_staged=split.partially_staged,
            modified_count=split.modified_count,
            branches=branches.all,
            remotes=tuple(remotes),
            branch_status=aggregate_divergence(divergence),
            stashes=stashes.all,
            branch_commits=commits,
        )
        _ = self._cache.save(self._identity, snapshot)
        self._branch_commits = commits
        self._snapshot = snapshot

        self._logger.info(
            "refresh_completed",
            identity=self._identity,
            from_cache=False,
            duration_ms=round((anyio.current_time() - started) * 1000, 3),
            modified_count=snapshot.modified_count,
            branches=len(snapshot.branches),
        )
        return SyncResult(snapshot=snapshot, from_cache=False)

    def invalidate(self) -> None:
        """Drop the in-memory snapshot and commit lists after a cache clear.

        The next refresh recomputes everything and starts with no commit lists.
        """
        self._snapshot = None
        self._branch_commits.clear()

    async def refresh_stashes(self) -> Snapshot:
        """Re-read only the stash list and supersede the current snapshot.

        Performs a full refresh when no snapshot is loaded yet. The cached
        record keeps its original timestamp; with no valid record cached the
        new stash list stays in memory until the next refresh.

        Raises:
            RefreshError: If the stash list cannot be read.
        """
        if self._snapshot is None:
            return (await self.refresh()).snapshot

        stashes = await self._step("stash_list", self._adapter.stash_list)
        snapshot = self._snapshot.model_copy(update={"stashes": stashes.all})
        self._snapshot = snapshot
        written = self._cache.cached_at(self._identity)
        if written is None:
            self._logger.debug("stashes_deferred", identity=self._identity)
        else:
            _ = self._cache.save(self._identity, snapshot, timestamp=written)
        return snapshot

    # =========================================================================
    # Branch commits
    # =========================================================================

    def _replace_commits(self) -> None:
        if self._snapshot is not None:
            self._snapshot = self._snapshot.model_copy(
                update={"branch_commits": dict(self._branch_commits)}
            )

    async def load_branch_commits(
        self,
        branch: str,
        max_count: int = DEFAULT_MAX_COMMITS,
        *,
        use_cache: bool = True,
    ) -> tuple[CommitInfo, ...]:
        """Serve a branch's commit list from the sub-cache or fetch it.

        Args:
            branch: Branch name.
            max_count: Maximum number of commits to fetch.
            use_cache: Serve a previously loaded list when there is one.

        Returns:
            Commits newest first.

        Raises:
            AdapterError: If the log cannot be read.
        """
        if use_cache:
            cached = self._branch_commits.get(branch)
            if cached is not None:
                return cached

        commits = tuple(await self._adapter.log(branch, max_count))
        self._branch_commits[branch] = commits
        self._replace_commits()
        if not self._cache.update_branch_commits(self._identity, branch, commits):
            self._logger.debug("branch_commits_deferred", identity=self._identity, branch=branch)
        return commits

    def forget_branch_commits(self, branch: str | None = None) -> None:
        """Drop one branch's commit list, or all of them when branch is None."""
        if branch is None:
            self._branch_commits.clear()
        else:
            _ = self._branch_commits.pop(branch, None)
        self._replace_commits()
        _ = self._cache.remove_branch_commits(self._identity, branch)
