"""Configuration: defaults, config.yaml, and FLAGGED_RESPAWN_* overrides.

Precedence: Environment Variables > Config File > Defaults.
"""

import os
from dataclasses import dataclass, field, fields
from functools import lru_cache

import yaml

from . import paths
from .errors import ConfigError

ENV_PREFIX = "FLAGGED_RESPAWN_"
FORBID_RESPAWNING_FLAG = "--no-respawning"


@dataclass(frozen=True)
class RespawnConfig:
    forbid_flag: str = FORBID_RESPAWNING_FLAG
    drain_timeout: float = 10.0
    flags: list[str] = field(default_factory=list)
    provider: str | None = None


def clear_cache():
    load_config.cache_clear()


def _read_file() -> dict:
    path = paths.config_file()
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def _coerce(default, value: str):
    if isinstance(default, bool):
        return value.lower() in ("true", "1", "t", "y", "yes")
    if isinstance(default, float):
        try:
            return float(value)
        except ValueError:
            return default
    if isinstance(default, list):
        return [item for item in value.replace(",", " ").split() if item]
    return value


def _apply_env(values: dict) -> dict:
    defaults = RespawnConfig()
    for f in fields(RespawnConfig):
        raw = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None:
            continue
        values[f.name] = _coerce(getattr(defaults, f.name), raw)
    return values


@lru_cache(maxsize=1)
def load_config() -> RespawnConfig:
    """Load config.yaml plus environment overrides, or defaults if neither exist."""
    known = {f.name for f in fields(RespawnConfig)}
    values = {key: value for key, value in _read_file().items() if key in known}

    if "flags" in values:
        flags = values["flags"]
        if isinstance(flags, str):
            flags = [flags]
        if not isinstance(flags, list) or not all(isinstance(flag, str) for flag in flags):
            raise ConfigError("Config 'flags' must be a list of strings")
        values["flags"] = list(flags)
    if "drain_timeout" in values:
        try:
            values["drain_timeout"] = float(values["drain_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Config 'drain_timeout' must be a number: {e}") from e

    return RespawnConfig(**_apply_env(values))
