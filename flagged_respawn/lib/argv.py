import sys


def live_argv() -> list[str]:
    """Full invocation vector of the running interpreter.

    sys.orig_argv keeps interpreter options (`python -B app.py`) that sys.argv drops.
    """
    orig = getattr(sys, "orig_argv", None)
    if orig:
        return list(orig)
    return [sys.executable, *sys.argv]
