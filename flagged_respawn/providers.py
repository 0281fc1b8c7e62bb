"""Recognized-flag providers: where the list of special flags comes from."""

import logging
import re
import subprocess
from collections.abc import Callable
from functools import lru_cache

from . import config
from .errors import ProviderError
from .lib.flags import normalize

logger = logging.getLogger(__name__)

V8_OPTION = re.compile(r"^ {2}(--[\w-]+)", re.MULTILINE)


def parse_v8_options(output: str) -> list[str]:
    """Extract option names from `node --v8-options`, in order, without duplicates."""
    flags = []
    seen = set()
    for match in V8_OPTION.finditer(output):
        flag = normalize(match.group(1))
        if flag in seen:
            continue
        seen.add(flag)
        flags.append(flag)
    return flags


@lru_cache(maxsize=8)
def _v8_flags(node: str) -> tuple[str, ...]:
    try:
        result = subprocess.run(
            [node, "--v8-options"],
            capture_output=True,
            text=True,
            timeout=30,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProviderError(f"Cannot list V8 options with {node}: {e}") from e
    if result.returncode != 0:
        raise ProviderError(
            f"{node} --v8-options exited with {result.returncode}: {result.stderr.strip()}"
        )
    flags = parse_v8_options(result.stdout)
    logger.debug(f"Found {len(flags)} V8 options via {node}")
    return tuple(flags)


def v8_flags(node: str = "node") -> list[str]:
    return list(_v8_flags(node))


def configured_flags() -> list[str]:
    return list(config.load_config().flags)


PROVIDERS: dict[str, Callable[[], list[str]]] = {
    "v8": v8_flags,
    "config": configured_flags,
}


def get_provider(name: str) -> Callable[[], list[str]]:
    provider = PROVIDERS.get(name)
    if provider is None:
        raise ProviderError(f"Unknown flag provider: {name} (choose from {', '.join(PROVIDERS)})")
    return provider
