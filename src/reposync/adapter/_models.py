"""Git adapter models.

Result types returned by GitAdapter implementations. Types that end up in
persisted snapshots are frozen pydantic models serialized with camelCase keys;
transient results are frozen dataclasses.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Final

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

RECORD_MODEL_CONFIG: Final = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


@dataclass(frozen=True, slots=True)
class StatusFile:
    """One path reported by a status call.

    Attributes:
        path: Repository-relative path using forward slashes.
        index: Index (staged) column of the porcelain-v1 XY code.
        working_dir: Working-tree column of the porcelain-v1 XY code.
    """

    path: str
    index: str
    working_dir: str

    @property
    def code(self) -> str:
        """The two-letter XY code."""
        return f"{self.index}{self.working_dir}"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree status.

    Attributes:
        current: Short name of the current branch, empty when HEAD is detached.
        files: One entry per changed path.
    """

    current: str
    files: tuple[StatusFile, ...] = ()


@dataclass(frozen=True, slots=True)
class BranchSummary:
    """Local branch names, sorted."""

    all: tuple[str, ...] = ()


class AheadBehind(BaseModel):
    """Commit divergence between a branch and its upstream.

    Attributes:
        ahead: Commits reachable from the branch but not the upstream.
        behind: Commits reachable from the upstream but not the branch.
    """

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    ahead: int = 0
    behind: int = 0

    @property
    def diverged(self) -> bool:
        """Whether either count is nonzero."""
        return self.ahead > 0 or self.behind > 0


class StashInfo(BaseModel):
    """A single stash entry.

    Attributes:
        index: Position in the stash list, 0 is newest.
        ref: Stash reference (stash@{n}).
        hash: Commit SHA of the stash.
        message: Reflog message.
    """

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    index: int
    ref: str
    hash: str
    message: str


@dataclass(frozen=True, slots=True)
class StashList:
    """Stash entries, newest first."""

    all: tuple[StashInfo, ...] = field(default=())


class CommitInfo(BaseModel):
    """Information about a single commit.

    Attributes:
        hash: Full commit SHA hex string.
        date: ISO-8601 author date.
        author_name: Author name.
        author_email: Author email.
        message: Subject line.
        body: Message body after the subject, may be empty.
    """

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    hash: str
    date: str
    author_name: str
    author_email: str
    message: str
    body: str = ""


class RemoteInfo(BaseModel):
    """A configured remote."""

    model_config: ClassVar[ConfigDict] = RECORD_MODEL_CONFIG

    name: str
    url: str
