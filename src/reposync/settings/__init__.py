"""Application settings.

Classes:
    SettingsManager: Validated, persisted AppSettings.
    RecentRepositories: Most-recently-opened repository list.
    AppSettings: Settings model.

Functions:
    matches_branch_pattern: Match a branch against a protection pattern.
"""

from reposync.settings._manager import (
    MAX_RECENT_REPOS,
    RECENT_REPOS_KEY,
    RecentRepositories,
    SettingsManager,
)
from reposync.settings._models import SETTINGS_KEY, AppSettings, is_valid_settings_record
from reposync.settings._patterns import matches_any_pattern, matches_branch_pattern

__all__ = [
    "MAX_RECENT_REPOS",
    "RECENT_REPOS_KEY",
    "SETTINGS_KEY",
    "AppSettings",
    "RecentRepositories",
    "SettingsManager",
    "is_valid_settings_record",
    "matches_any_pattern",
    "matches_branch_pattern",
]
