"""Recognized-flag matching, tolerant of `-`/`_` separator differences."""

from collections.abc import Iterable


def is_flag(token: str) -> bool:
    """True for option-shaped tokens: `-x`, `--name`, `--name=value`."""
    if not isinstance(token, str) or not token.startswith("-"):
        return False
    return flag_name(token) not in ("-", "--")


def flag_name(token: str) -> str:
    """Strip an inline value: `--stack-size=2048` -> `--stack-size`."""
    return token.split("=", 1)[0]


def normalize(name: str) -> str:
    return name.replace("_", "-")


def matches(token: str, flags: Iterable[str]) -> bool:
    if not is_flag(token):
        return False
    name = normalize(flag_name(token))
    return any(name == normalize(flag_name(flag)) for flag in flags if isinstance(flag, str))
