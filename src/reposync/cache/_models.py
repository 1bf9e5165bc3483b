"""Snapshot cache models."""

from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - Used in runtime dataclass fields
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from reposync.adapter import (
    RECORD_MODEL_CONFIG,
    AheadBehind,
    CommitInfo,
    RemoteInfo,
    StashInfo,
)
from reposync.enums import FileStatus


class FileEntry(BaseModel):
    """A changed path with its normalized status."""

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    path: str
    status: FileStatus


class Snapshot(BaseModel):
    """Derived state of one repository at one point in time.

    Snapshots are never mutated; updates produce a new instance through
    model_copy.

    Attributes:
        current_branch: Current branch, empty when HEAD is detached.
        origin_url: URL of the origin remote, empty when there is none.
        unstaged_files: Paths with a working-tree change.
        staged_files: Paths with only an index change.
        partially_staged: Paths reported as unstaged that also carry an
            index change.
        modified_count: Number of distinct changed paths.
        branches: Local branch names.
        remotes: Configured remotes.
        branch_status: Divergence per branch, diverged branches only.
        stashes: Stash entries, newest first.
        branch_commits: Lazily loaded commit lists keyed by branch name.
    """

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    current_branch: str = ""
    origin_url: str = ""
    unstaged_files: tuple[FileEntry, ...] = ()
    staged_files: tuple[FileEntry, ...] = ()
    partially_staged: tuple[str, ...] = ()
    modified_count: int = 0
    branches: tuple[str, ...] = ()
    remotes: tuple[RemoteInfo, ...] = ()
    branch_status: dict[str, AheadBehind] = {}
    stashes: tuple[StashInfo, ...] = ()
    branch_commits: dict[str, tuple[CommitInfo, ...]] = {}

    def to_record_data(self) -> dict[str, Any]:
        """Serialize with camelCase keys for the on-disk record."""
        return self.model_dump(mode="json", by_alias=True)


class CacheRecord(BaseModel):
    """On-disk envelope around a persisted value.

    Attributes:
        repo_path: Identity the record was written for.
        timestamp: Write time as epoch milliseconds.
        version: Record format version.
        data: The persisted value.
    """

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    repo_path: str
    timestamp: int
    version: int
    data: Any = None


@dataclass(frozen=True, slots=True)
class ClearResult:
    """Outcome of clearing a record store.

    Attributes:
        removed: Files that were deleted.
        failed: Files that could not be deleted.
    """

    removed: tuple[Path, ...] = field(default=())
    failed: tuple[Path, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return not self.failed
