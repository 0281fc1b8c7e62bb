from collections.abc import Sequence

from .reorder import split


def remove(flags: Sequence[str], argv: Sequence[str]) -> list[str]:
    """Drop recognized flags (with inline values), keeping everything else in order."""
    if len(argv) < 2:
        return list(argv)
    _, rest = split(flags, argv)
    return [argv[0], *rest]
