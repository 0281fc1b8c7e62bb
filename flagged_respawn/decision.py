"""Respawn decision: does the argument vector need a relaunch to put flags first?"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from . import config
from .errors import ConfigurationError
from .lib.forced import ForcedFlags
from .lib.remover import remove
from .lib.reorder import reorder

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    NOT_NEEDED = "not_needed"
    NEEDED = "needed"


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    argv: list[str]
    clean_argv: list[str]
    launch_argv: list[str] | None = None
    forced: ForcedFlags = field(default_factory=ForcedFlags.none)
    forbidden: bool = False

    @property
    def needed(self) -> bool:
        return self.outcome is Outcome.NEEDED


def require_flags(flags) -> list[str]:
    if not flags:
        raise ConfigurationError("You must specify flags to respawn with.")
    if isinstance(flags, str):
        return [flags]
    return list(flags)


def require_argv(argv) -> list[str]:
    argv = list(argv) if argv is not None else []
    if not argv:
        raise ConfigurationError("You must specify an argv to respawn with.")
    return argv


def inject_forced(forced: ForcedFlags, canonical: Sequence[str]) -> list[str]:
    """Place forced flags right after the executable, skipping ones already present."""
    missing = [flag for flag in forced.flags if flag not in canonical[1:]]
    return [canonical[0], *missing, *canonical[1:]]


def decide(
    flags: Sequence[str],
    argv: Sequence[str] | None,
    forced=None,
    forbid: bool = False,
    forbid_flag: str | None = None,
) -> Decision:
    """Decide whether argv must be relaunched in canonical order.

    Priority: forbid token (or forbid=True) > forced flags > argv already canonical.
    """
    flags = require_flags(flags)
    argv = require_argv(argv)
    forbid_flag = forbid_flag or config.load_config().forbid_flag
    forced = ForcedFlags.parse(forced)

    clean_argv = remove([*flags, forbid_flag, *forced.names], argv)

    if forbid or forbid_flag in argv:
        logger.debug(f"Respawn forbidden for {argv}")
        return Decision(
            outcome=Outcome.NOT_NEEDED,
            argv=argv,
            clean_argv=clean_argv,
            forced=forced,
            forbidden=True,
        )

    if forced:
        canonical = inject_forced(forced, reorder([*flags, *forced.names], argv))
        logger.debug(f"Respawn forced with {list(forced.flags)}: {canonical}")
        return Decision(
            outcome=Outcome.NEEDED,
            argv=argv,
            clean_argv=clean_argv,
            launch_argv=canonical,
            forced=forced,
        )

    canonical = reorder(flags, argv)
    if canonical == argv:
        return Decision(outcome=Outcome.NOT_NEEDED, argv=argv, clean_argv=clean_argv)

    logger.debug(f"Respawn needed: {argv} -> {canonical}")
    return Decision(
        outcome=Outcome.NEEDED,
        argv=argv,
        clean_argv=clean_argv,
        launch_argv=canonical,
    )
