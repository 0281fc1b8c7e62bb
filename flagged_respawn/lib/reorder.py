from collections.abc import Sequence

from .flags import matches


def split(flags: Sequence[str], argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Partition argv[1:] into (special, rest), keeping order within each group."""
    special = []
    rest = []
    for arg in argv[1:]:
        if matches(arg, flags):
            special.append(arg)
        else:
            rest.append(arg)
    return special, rest


def reorder(flags: Sequence[str], argv: Sequence[str]) -> list[str]:
    """Move recognized flags (with inline values) right after the executable.

    reorder(["--harmony"], ["node", "file.js", "--flag", "--harmony", "command"])
    -> ["node", "--harmony", "file.js", "--flag", "command"]
    """
    if len(argv) < 2:
        return list(argv)
    special, rest = split(flags, argv)
    return [argv[0], *special, *rest]
