"""Shared utilities for reposync."""

from ._json import dump_json, load_json, load_json_file, write_json_atomic
from ._logging import LogFormatType, create_app_logger, create_null_logger
from ._paths import (
    get_cache_dir,
    get_config_file,
    get_default_data_dir,
    get_log_dir,
    get_log_file,
    get_settings_dir,
)
from ._time import humanize_ms, now_ms

__all__ = [
    "LogFormatType",
    "create_app_logger",
    "create_null_logger",
    "dump_json",
    "get_cache_dir",
    "get_config_file",
    "get_default_data_dir",
    "get_log_dir",
    "get_log_file",
    "get_settings_dir",
    "humanize_ms",
    "load_json",
    "load_json_file",
    "now_ms",
    "write_json_atomic",
]
