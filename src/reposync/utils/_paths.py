import os
from pathlib import Path

_DATA_DIR_ENV = "REPOSYNC_DATA_DIR"


def get_default_data_dir() -> Path:
    """Get the user-data root directory.

    Uses REPOSYNC_DATA_DIR when set, otherwise ~/.reposync.
    """
    override = os.environ.get(_DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".reposync"


def get_cache_dir(data_dir: Path) -> Path:
    """Get the path to the repository snapshot cache directory."""
    return data_dir / "repo-cache"


def get_settings_dir(data_dir: Path) -> Path:
    """Get the path to the settings record directory."""
    return data_dir / "settings"


def get_log_dir(data_dir: Path) -> Path:
    """Get the path to the logs/ directory inside the user-data root."""
    return data_dir / "logs"


def get_log_file(data_dir: Path) -> Path:
    """Get the path to the reposync log file.

    Returns:
        Path to the log file (<data_dir>/logs/reposync.log).
    """
    return get_log_dir(data_dir) / "reposync.log"


def get_config_file(data_dir: Path) -> Path:
    """Get the path to the user configuration file (<data_dir>/config.toml)."""
    return data_dir / "config.toml"
