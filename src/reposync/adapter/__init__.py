"""Git backend adapters.

This package provides interchangeable adapters over git execution
technologies and the selector that chooses one per process.

Classes:
    GitAdapter: Runtime-checkable protocol every adapter satisfies.
    BaseGitAdapter: Abstract base with command tracking.
    CliGitAdapter: Adapter that runs the git executable.
    DulwichGitAdapter: Adapter built on the dulwich library.
    FakeGitAdapter: In-memory adapter for tests.

Models:
    StatusFile, GitStatus, BranchSummary, AheadBehind, StashInfo, StashList,
    CommitInfo, RemoteInfo.

Example:
    >>> from reposync.adapter import create_adapter, select_backend
    >>> adapter = await create_adapter("/path/to/repo", select_backend("dulwich"))
    >>> status = await adapter.status()
"""

from reposync.adapter._base import BaseGitAdapter
from reposync.adapter._cli import CliGitAdapter
from reposync.adapter._dulwich import DulwichGitAdapter
from reposync.adapter._fake import FakeGitAdapter
from reposync.adapter._models import (
    RECORD_MODEL_CONFIG,
    AheadBehind,
    BranchSummary,
    CommitInfo,
    GitStatus,
    RemoteInfo,
    StashInfo,
    StashList,
    StatusFile,
)
from reposync.adapter._protocol import GitAdapter
from reposync.adapter._selector import (
    BACKEND_ALIASES,
    DEFAULT_BACKEND,
    available_backends,
    build_adapter,
    create_adapter,
    select_backend,
)

__all__ = [
    "BACKEND_ALIASES",
    "DEFAULT_BACKEND",
    "RECORD_MODEL_CONFIG",
    "AheadBehind",
    "BaseGitAdapter",
    "BranchSummary",
    "CliGitAdapter",
    "CommitInfo",
    "DulwichGitAdapter",
    "FakeGitAdapter",
    "GitAdapter",
    "GitStatus",
    "RemoteInfo",
    "StashInfo",
    "StashList",
    "StatusFile",
    "available_backends",
    "build_adapter",
    "create_adapter",
    "select_backend",
]
