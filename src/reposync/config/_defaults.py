"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can feed deep_merge directly; the merge
functions copy, so the module-level value is never mutated.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
        "max_bytes": None,
        "backup_count": None,
    },
    "git": {
        "backend": "cli",
        "executable": "git",
        "timeout": 60.0,
        "max_concurrency": 8,
    },
    "cache": {
        "max_age_days": 7,
    },
}
