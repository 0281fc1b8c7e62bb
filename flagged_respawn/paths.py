import os
from pathlib import Path

CONFIG_ENV = "FLAGGED_RESPAWN_CONFIG"


def config_dir() -> Path:
    return Path.home() / ".flagged-respawn"


def config_file() -> Path:
    """Return config file path, honoring FLAGGED_RESPAWN_CONFIG."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return config_dir() / "config.yaml"
