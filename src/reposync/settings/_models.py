"""Application settings model."""

from typing import Any, ClassVar, Final, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SETTINGS_KEY: Final = "app-settings"

type DiffViewMode = Literal["side-by-side", "line-by-line"]
type Theme = Literal["dark", "light"]


class AppSettings(BaseModel):
    """User-facing application settings.

    Persisted with camelCase keys under the "app-settings" record.

    Attributes:
        local_file_refresh_time: Seconds between working tree polls.
        block_commit_branches: Branch patterns on which commits are blocked.
        diff_view_mode: Diff layout.
        push_all_tags: Push tags along with branches.
        max_commits: Commits loaded per branch history page.
        external_editor: Command used to open files.
        theme: Color theme.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    local_file_refresh_time: float = 5
    block_commit_branches: list[str] = ["trunk", "*/staging"]
    diff_view_mode: DiffViewMode = "line-by-line"
    push_all_tags: bool = False
    max_commits: int = 100
    external_editor: str = "code"
    theme: Theme = "dark"

    def to_record_data(self) -> dict[str, Any]:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_valid_settings_record(data: object) -> bool:
    """Check a raw settings record.

    The two required keys must be present with the right types; optional
    keys may be absent but must have the right type when present.
    """
    if not isinstance(data, dict):
        return False
    refresh = data.get("localFileRefreshTime")
    patterns = data.get("blockCommitBranches")
    if not _is_number(refresh):
        return False
    if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
        return False

    optional_checks = {
        "diffViewMode": lambda v: v in ("side-by-side", "line-by-line"),
        "pushAllTags": lambda v: isinstance(v, bool),
        "maxCommits": _is_number,
        "externalEditor": lambda v: isinstance(v, str),
        "theme": lambda v: v in ("dark", "light"),
    }
    return all(
        key not in data or check(data[key]) for key, check in optional_checks.items()
    )
