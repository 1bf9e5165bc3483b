"""Shared test fixtures for reposync tests."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from dulwich import porcelain
from dulwich.repo import Repo
from rich.console import Console

from reposync.adapter import CommitInfo, StatusFile
from reposync.cache import SnapshotCache
from reposync.tracking import CommandTracker

AUTHOR = b"Test User <test@example.com>"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@dataclass(slots=True)
class FakeClock:
    """Settable epoch-millisecond clock."""

    now: int = 1_700_000_000_000

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path: Path, clock: FakeClock) -> SnapshotCache:
    return SnapshotCache(tmp_path / "repo-cache", clock=clock)


@pytest.fixture
def tracker() -> CommandTracker:
    return CommandTracker()


# ---------------------------------------------------------------------------
# Helper functions for building adapter results
# ---------------------------------------------------------------------------


def status_file(code: str, path: str) -> StatusFile:
    """Build a StatusFile from a two-letter porcelain code."""
    return StatusFile(path=path, index=code[0], working_dir=code[1])


def make_commit(sha: str, message: str = "Commit") -> CommitInfo:
    return CommitInfo(
        hash=sha,
        date="2024-01-01T00:00:00+00:00",
        author_name="Test User",
        author_email="test@example.com",
        message=message,
    )


# ---------------------------------------------------------------------------
# Real repositories
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GitRepo:
    """A dulwich-created repository with helpers for arranging history."""

    path: Path
    commits: list[bytes] = field(default_factory=list)

    def write(self, name: str, content: str) -> Path:
        file = self.path / name
        file.parent.mkdir(parents=True, exist_ok=True)
        _ = file.write_text(content)
        return file

    def stage(self, *names: str) -> None:
        porcelain.add(str(self.path), paths=[str(self.path / name) for name in names])

    def commit(self, name: str, content: str, message: str = "Update") -> bytes:
        _ = self.write(name, content)
        self.stage(name)
        sha = porcelain.commit(
            str(self.path),
            message=message.encode(),
            author=AUTHOR,
            committer=AUTHOR,
        )
        self.commits.append(sha)
        return sha

    def set_ref(self, name: str, sha: bytes) -> None:
        with Repo(str(self.path)) as repo:
            repo.refs[name.encode()] = sha

    def head(self) -> bytes:
        with Repo(str(self.path)) as repo:
            return repo.head()


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """Repository on branch main with one commit of README.md."""
    path = tmp_path / "repo"
    path.mkdir()
    Repo.init(str(path)).close()
    with Repo(str(path)) as repo:
        repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")
    repo_helper = GitRepo(path=path)
    _ = repo_helper.commit("README.md", "hello\n", "Initial commit")
    return repo_helper


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )

