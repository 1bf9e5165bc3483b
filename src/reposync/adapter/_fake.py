# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake git adapter for testing.

This module provides a FakeGitAdapter that implements GitAdapter without
touching the filesystem or running git.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import anyio

from reposync.adapter._models import (
    AheadBehind,
    BranchSummary,
    CommitInfo,
    GitStatus,
    StashInfo,
    StashList,
    StatusFile,
)
from reposync.enums import GitBackend
from reposync.exceptions import AdapterError
from reposync.tracking import CommandTracker


@dataclass(slots=True)
class FakeGitAdapter:
    """In-memory git adapter.

    The fake exposes its state as plain fields so tests can arrange a
    scenario directly:
    - files/current describe the status result
    - divergence maps branch name to AheadBehind
    - failures maps an operation name to the AdapterError it should raise
    - calls records every operation in dispatch order

    Example:
        >>> adapter = FakeGitAdapter(branches=["main", "feature"])
        >>> adapter.divergence["feature"] = AheadBehind(ahead=2, behind=0)
        >>> adapter.failures["stash_list"] = AdapterError("boom")
    """

    identity: str = "/fake/repo"
    backend: GitBackend = GitBackend.CLI
    current: str = "main"
    files: list[StatusFile] = field(default_factory=list)
    branches: list[str] = field(default_factory=lambda: ["main"])
    divergence: dict[str, AheadBehind] = field(default_factory=dict)
    stashes: list[StashInfo] = field(default_factory=list)
    origin_url: str = ""
    remote_output: str = ""
    commits: dict[str, list[CommitInfo]] = field(default_factory=dict)
    failures: dict[str, AdapterError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    delay: float = 0.0
    tracker: CommandTracker = field(default_factory=CommandTracker)
    is_open: bool = False
    in_flight: int = 0
    max_in_flight: int = 0

    async def _call(self, operation: str, description: str) -> None:
        self.calls.append(operation)
        async with self.tracker.track(description):
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await anyio.sleep(self.delay)
                failure = self.failures.get(operation)
                if failure is not None:
                    raise failure
            finally:
                self.in_flight -= 1

    # =========================================================================
    # GitAdapter Methods
    # =========================================================================

    async def open(self) -> None:
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False

    async def status(self) -> GitStatus:
        await self._call("status", "git status")
        return GitStatus(current=self.current, files=tuple(self.files))

    async def branch_local(self) -> BranchSummary:
        await self._call("branch_local", "git branch")
        return BranchSummary(all=tuple(sorted(self.branches)))

    async def get_ahead_behind(self, branch: str, upstream: str) -> AheadBehind:
        await self._call("get_ahead_behind", f"git rev-list {branch}...{upstream}")
        failure = self.failures.get(f"get_ahead_behind:{branch}")
        if failure is not None:
            raise failure
        return self.divergence.get(branch, AheadBehind())

    async def stash_list(self) -> StashList:
        await self._call("stash_list", "git stash list")
        return StashList(all=tuple(self.stashes))

    async def get_origin_url(self) -> str:
        await self._call("get_origin_url", "git remote get-url origin")
        return self.origin_url

    async def raw(self, argv: Sequence[str]) -> str:
        await self._call("raw", " ".join(["git", *argv]))
        return self.remote_output

    async def log(self, branch: str, max_count: int) -> list[CommitInfo]:
        await self._call("log", f"git log -n {max_count} {branch}")
        return list(self.commits.get(branch, []))[:max_count]

    async def clone(self, url: str, parent_dir: Path, name: str) -> None:
        await self._call("clone", f"git clone {url} {name}")

    async def init(self) -> None:
        await self._call("init", "git init")
        self.is_open = True
