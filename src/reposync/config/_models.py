# ruff: noqa: TC003  # Path needed at runtime for dataclass and model fields
"""Configuration models.

Config is built by merging, lowest precedence first: built-in defaults, the
user's config.toml, REPOSYNC_SECTION__KEY environment variables, and
command-line overrides.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reposync.config._defaults import DEFAULT_CONFIG
from reposync.config._loader import deep_merge, parse_env_vars, read_toml_file
from reposync.exceptions import ConfigLoadError

_MS_PER_DAY = 24 * 60 * 60 * 1000


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names, highest precedence first."""

    CLI = "cli"
    ENV = "env"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source that contributed to a Config.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        exists: Whether the source exists or has values.
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]  # pyright: ignore[reportExplicitAny]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Log file path; empty uses <data-dir>/logs/reposync.log.
        max_bytes: Rotate the log file at this size.
        backup_count: Rotated files to keep.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""
    max_bytes: int | None = Field(default=None, gt=0)
    backup_count: int | None = Field(default=None, ge=0)


class GitConfig(BaseModel):
    """Git backend configuration section.

    Attributes:
        backend: Backend name or alias.
        executable: git executable used by the subprocess backend.
        timeout: Seconds before a git process is abandoned.
        max_concurrency: Concurrent ahead/behind queries per refresh.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    backend: str = "cli"
    executable: str = "git"
    timeout: float = Field(default=60.0, gt=0)
    max_concurrency: int = Field(default=8, ge=1)


class CacheConfig(BaseModel):
    """Snapshot cache configuration section."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    max_age_days: float = Field(default=7, gt=0)

    @property
    def max_age_ms(self) -> int:
        return int(self.max_age_days * _MS_PER_DAY)


class Config(BaseModel):
    """Immutable, typed process configuration.

    Use the factory methods rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    git: GitConfig = GitConfig()
    cache: CacheConfig = CacheConfig()
    sources: tuple[ConfigSource, ...] = ()

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],  # pyright: ignore[reportExplicitAny]
        *,
        sources: tuple[ConfigSource, ...] = (),
    ) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigLoadError: If a value fails validation.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            return cls.model_validate({**merged, "sources": sources})
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            msg = f"Invalid configuration value for {location}: {first['msg']}"
            raise ConfigLoadError(msg) from e

    @classmethod
    def load(
        cls,
        *,
        config_file: Path | None = None,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
    ) -> Self:
        """Load configuration from every source.

        Args:
            config_file: User config.toml; skipped when None or missing.
            include_env: Apply REPOSYNC_SECTION__KEY environment variables.
            cli_overrides: Nested overrides from command-line flags.

        Returns:
            The merged configuration.

        Raises:
            ConfigLoadError: If config.toml cannot be parsed or a value is
                invalid.
        """
        sources: list[ConfigSource] = []
        data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

        if config_file is not None:
            exists = config_file.is_file()
            values = read_toml_file(config_file) if exists else {}
            sources.append(ConfigSource(ConfigSourceName.USER, config_file, exists, values))
            data = deep_merge(data, values)

        if include_env:
            env_values = parse_env_vars()
            sources.append(
                ConfigSource(ConfigSourceName.ENV, None, bool(env_values), env_values)
            )
            data = deep_merge(data, env_values)

        if cli_overrides:
            sources.append(
                ConfigSource(ConfigSourceName.CLI, None, True, dict(cli_overrides))
            )
            data = deep_merge(data, cli_overrides)

        # highest precedence first
        default = ConfigSource(ConfigSourceName.DEFAULT, None, True, DEFAULT_CONFIG)
        return cls.from_dict(data, sources=(*reversed(sources), default))
