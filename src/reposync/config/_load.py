import os
import sys
from typing import TYPE_CHECKING, Any

from reposync.exceptions import ConfigurationError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def safe_load_config(
    *,
    config_file: "Path | None" = None,  # noqa: UP037
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Handles errors based on the REPOSYNC_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and return the default config
    - If "1": fail fast with sys.exit(1)

    Args:
        config_file: Path to the user config.toml.
        cli_overrides: Nested overrides from command-line flags.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure (non-strict mode), returns the default Config with the
        error message.
    """
    strict_mode = os.environ.get("REPOSYNC_STRICT_CONFIG", "0") == "1"

    try:
        config = Config.load(config_file=config_file, cli_overrides=cli_overrides)
    except (ConfigurationError, OSError) as e:
        error_msg = str(e)
        if strict_mode:
            print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
            sys.exit(1)
        print(f"Warning: Failed to load config: {error_msg}", file=sys.stderr)  # noqa: T201
        return Config.from_dict({}), error_msg
    else:
        return config, None
