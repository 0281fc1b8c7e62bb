"""Child process bridge: spawn, relay stdout/stderr, reproduce the child's termination.

Lifecycle of a spawned child, tracked on its handle:

    relaying     output pumps copy child stdout/stderr to the parent streams
    drained      child exited and both pumps finished; result recorded
    terminating  parent is exiting (or signaling itself) like the child did
"""

import asyncio
import contextlib
import logging
import os
import signal
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, NoReturn

from . import config
from .errors import ConfigurationError, RelayError, SpawnError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BridgeState(str, Enum):
    RELAYING = "relaying"
    DRAINED = "drained"
    TERMINATING = "terminating"


@dataclass(frozen=True)
class TerminationResult:
    exit_code: int | None = None
    signal: str | None = None

    @classmethod
    def from_returncode(cls, returncode: int) -> "TerminationResult":
        """asyncio reports death by signal N as returncode -N."""
        if returncode < 0:
            try:
                return cls(signal=signal.Signals(-returncode).name)
            except ValueError:
                return cls(exit_code=128 - returncode)
        return cls(exit_code=returncode)

    @property
    def signum(self) -> int | None:
        if self.signal is None:
            return None
        return signal.Signals[self.signal].value


def to_signum(sig: int | str) -> int:
    """Accept 15, signal.SIGTERM, "SIGTERM" or "TERM"."""
    if isinstance(sig, str):
        name = sig.upper()
        if not name.startswith("SIG"):
            name = f"SIG{name}"
        try:
            return signal.Signals[name].value
        except KeyError as e:
            raise ValueError(f"Unknown signal: {sig}") from e
    return int(sig)


def flush_parent_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        with contextlib.suppress(OSError, ValueError):
            stream.flush()


def binary_stream(stream) -> BinaryIO:
    return getattr(stream, "buffer", stream)


def terminate_like(result: TerminationResult, hard: bool = False) -> NoReturn:
    """Exit with the child's code, or kill this process with the child's signal.

    hard=True leaves through os._exit, for callers running during interpreter
    shutdown where SystemExit no longer sets the exit status.
    """
    flush_parent_streams()
    code = result.exit_code if result.exit_code is not None else 0
    signum = result.signum
    if signum is not None:
        logger.debug(f"Child killed by {result.signal}, forwarding to pid {os.getpid()}")
        signal.signal(signum, signal.SIG_DFL)
        os.kill(os.getpid(), signum)
        # Default action of this signal does not terminate (e.g. SIGCHLD).
        code = 128 + signum
    if hard:
        os._exit(code)
    raise SystemExit(code)


class SelfHandle:
    """The current process, standing in for a child when no respawn happened."""

    ready = True
    result = None
    state = None

    def __init__(self):
        self.pid = os.getpid()

    def send_signal(self, sig: int | str) -> None:
        os.kill(self.pid, to_signum(sig))

    def kill(self, sig: int | str = signal.SIGTERM) -> None:
        self.send_signal(sig)

    def __repr__(self) -> str:
        return f"SelfHandle(pid={self.pid})"


class ChildHandle:
    """A respawned child. Returned as soon as the process exists."""

    ready = False

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        argv: Sequence[str],
        stdout: BinaryIO,
        stderr: BinaryIO,
        drain_timeout: float | None = None,
    ):
        self.process = process
        self.pid = process.pid
        self.argv = list(argv)
        self.state = BridgeState.RELAYING
        self.result: TerminationResult | None = None
        self.relay_errors: list[RelayError] = []
        self._drain_timeout = drain_timeout
        self._callbacks: list[Callable[[TerminationResult], None]] = []
        self._relays = {
            asyncio.create_task(self._relay(process.stdout, stdout, "stdout")),
            asyncio.create_task(self._relay(process.stderr, stderr, "stderr")),
        }
        self._watcher = asyncio.create_task(self._watch())

    def send_signal(self, sig: int | str) -> None:
        if self.result is not None:
            logger.debug(f"Child {self.pid} already terminated, not sending {sig}")
            return
        self.process.send_signal(to_signum(sig))

    def kill(self, sig: int | str = signal.SIGTERM) -> None:
        self.send_signal(sig)

    def add_done_callback(self, fn: Callable[[TerminationResult], None]) -> None:
        """Call fn once with the termination result; immediately if already drained."""
        if self.result is not None:
            fn(self.result)
            return
        self._callbacks.append(fn)

    async def wait(self) -> TerminationResult:
        """Wait for exit and for all relayed output to be written."""
        return await self._watcher

    def finish(self, hard: bool = False) -> NoReturn:
        """Terminate this process like the drained child did."""
        if self.result is None:
            raise RuntimeError(f"Child {self.pid} has not terminated yet")
        self.state = BridgeState.TERMINATING
        terminate_like(self.result, hard=hard)

    async def _relay(self, reader: asyncio.StreamReader, sink: BinaryIO, label: str) -> None:
        broken = False
        while True:
            chunk = await reader.read(CHUNK_SIZE)
            if not chunk:
                break
            if broken:
                continue
            try:
                flush_parent_streams()
                sink.write(chunk)
                sink.flush()
            except (OSError, ValueError) as e:
                # Keep reading so the child never blocks on a full pipe.
                broken = True
                error = RelayError(f"Relaying {label} of pid {self.pid} failed: {e}")
                self.relay_errors.append(error)
                logger.warning(str(error))

    async def _watch(self) -> TerminationResult:
        returncode = await self.process.wait()
        _, pending = await asyncio.wait(self._relays, timeout=self._drain_timeout)
        for task in pending:
            logger.warning(f"Output of pid {self.pid} still open after exit, closing relay")
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self.result = TerminationResult.from_returncode(returncode)
        self.state = BridgeState.DRAINED
        logger.debug(f"Child {self.pid} terminated: {self.result}")

        callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            try:
                fn(self.result)
            except Exception:
                logger.exception(f"Done callback {fn!r} of pid {self.pid} failed")
        return self.result

    def __repr__(self) -> str:
        return f"ChildHandle(pid={self.pid}, state={self.state.value})"


class ProcessBridge:
    """Spawns one child per call and bridges its output and termination to this process."""

    def __init__(
        self,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
        drain_timeout: float | None = None,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self.drain_timeout = (
            drain_timeout if drain_timeout is not None else config.load_config().drain_timeout
        )

    async def spawn(self, argv: Sequence[str]) -> ChildHandle:
        argv = list(argv)
        if not argv:
            raise ConfigurationError("Cannot spawn an empty argument vector.")

        flush_parent_streams()
        logger.debug(f"Spawning {argv}")
        try:
            process = await asyncio.create_subprocess_exec(
                argv[0],
                *argv[1:],
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnError(f"Failed to spawn {argv[0]}: {e}") from e

        return ChildHandle(
            process,
            argv,
            stdout=self.stdout if self.stdout is not None else binary_stream(sys.stdout),
            stderr=self.stderr if self.stderr is not None else binary_stream(sys.stderr),
            drain_timeout=self.drain_timeout,
        )

    async def run(self, argv: Sequence[str]) -> TerminationResult:
        """Spawn and wait until the child terminated and its output drained."""
        child = await self.spawn(argv)
        return await child.wait()
