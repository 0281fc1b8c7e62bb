"""Report command failures as one stderr line and exit status 1."""

import logging
from functools import wraps

import typer

from flagged_respawn.errors import RespawnError

logger = logging.getLogger(__name__)

REPORTED = (RespawnError, ValueError, KeyError, TypeError, OSError)


def describe(error: BaseException) -> str:
    """Respawn errors keep their class name; everything else gets a category."""
    if isinstance(error, RespawnError):
        return f"{type(error).__name__}: {error}"
    if isinstance(error, OSError):
        return f"File error: {error}"
    return f"Invalid input: {error}"


def error_feedback(f):
    """Turn reported errors raised by a command into a message instead of a traceback.

    Exits raised on purpose (typer.Exit, SystemExit from a forwarded child
    status) pass through untouched. The traceback is still logged at debug level
    for --verbose.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (SystemExit, typer.Exit):
            raise
        except REPORTED as e:
            logger.debug(f"{f.__name__} failed", exc_info=True)
            typer.echo(describe(e), err=True)
            raise typer.Exit(1) from e

    return wrapper
