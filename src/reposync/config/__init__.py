"""Layered process configuration.

Sources, lowest precedence first: built-in defaults, <data-dir>/config.toml,
REPOSYNC_SECTION__KEY environment variables, command-line flags.

Example:
    >>> from reposync.config import Config
    >>> config = Config.from_dict({"git": {"backend": "dulwich"}})
    >>> config.git.backend
    'dulwich'
"""

from reposync.config._defaults import DEFAULT_CONFIG
from reposync.config._load import safe_load_config
from reposync.config._loader import (
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from reposync.config._models import (
    CacheConfig,
    Config,
    ConfigSource,
    ConfigSourceName,
    GitConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    "DEFAULT_CONFIG",
    "CacheConfig",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "GitConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
