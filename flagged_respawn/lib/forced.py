"""Forced flags: extra launcher flags that always trigger a respawn."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .flags import flag_name, is_flag

logger = logging.getLogger(__name__)


class ForcedKind(str, Enum):
    NONE = "none"
    SINGLE = "single"
    MANY = "many"


@dataclass(frozen=True)
class ForcedFlags:
    kind: ForcedKind = ForcedKind.NONE
    flags: tuple[str, ...] = ()

    @classmethod
    def none(cls) -> "ForcedFlags":
        return cls()

    @classmethod
    def parse(cls, value) -> "ForcedFlags":
        """Accept one flag string or a sequence of them; anything else means no forcing.

        A flag may carry an inline value (`--stack-size=2048`); it is launched verbatim.
        """
        if value is None:
            return cls.none()
        if isinstance(value, ForcedFlags):
            return value
        if isinstance(value, str):
            if is_flag(value):
                return cls(ForcedKind.SINGLE, (value,))
            logger.warning(f"Ignoring forced flag {value!r}: not a flag")
            return cls.none()
        if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
            items = tuple(value)
            if all(isinstance(item, str) and is_flag(item) for item in items):
                if not items:
                    return cls.none()
                return cls(ForcedKind.MANY, items)
            logger.warning(f"Ignoring forced flags {value!r}: every item must be a flag")
            return cls.none()
        logger.warning(f"Ignoring forced flags of type {type(value).__name__}")
        return cls.none()

    @property
    def names(self) -> list[str]:
        return [flag_name(flag) for flag in self.flags]

    def __bool__(self) -> bool:
        return bool(self.flags)
