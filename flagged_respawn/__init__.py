"""Relaunch a program when launcher flags were given after the script."""

from .bridge import ChildHandle, ProcessBridge, SelfHandle, TerminationResult, terminate_like
from .config import FORBID_RESPAWNING_FLAG
from .decision import Decision, Outcome, decide
from .errors import (
    ConfigError,
    ConfigurationError,
    ProviderError,
    RelayError,
    RespawnError,
    SpawnError,
)
from .lib.flags import matches
from .lib.forced import ForcedFlags
from .lib.remover import remove
from .lib.reorder import reorder
from .respawn import RespawnedProcess, RespawnResult, execute, flagged_respawn, needed

__all__ = [
    "ChildHandle",
    "ConfigError",
    "ConfigurationError",
    "Decision",
    "FORBID_RESPAWNING_FLAG",
    "ForcedFlags",
    "Outcome",
    "ProcessBridge",
    "ProviderError",
    "RelayError",
    "RespawnError",
    "RespawnResult",
    "RespawnedProcess",
    "SelfHandle",
    "SpawnError",
    "TerminationResult",
    "decide",
    "execute",
    "flagged_respawn",
    "matches",
    "needed",
    "remove",
    "reorder",
    "terminate_like",
]
