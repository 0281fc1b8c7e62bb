"""Entry points: check, execute, or decide-and-run a flagged respawn."""

import asyncio
import atexit
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import NoReturn

from . import config
from .bridge import ChildHandle, ProcessBridge, SelfHandle, TerminationResult, to_signum
from .decision import decide, require_argv, require_flags
from .lib.argv import live_argv
from .lib.reorder import reorder

logger = logging.getLogger(__name__)


def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
    asyncio.set_event_loop(loop)
    loop.run_forever()


class RespawnedProcess:
    """Synchronous handle on a respawned child.

    The child's event loop runs on a daemon thread from spawn onward, so output
    is relayed and done callbacks fire while the caller does other work. Done
    callbacks run on that thread. Unless finish() or close() is called first,
    interpreter exit waits for the child and then exits the way it did.
    """

    ready = False

    def __init__(self, loop: asyncio.AbstractEventLoop, thread: threading.Thread, child: ChildHandle):
        self._loop = loop
        self._thread = thread
        self._closed = False
        self._done = threading.Event()
        self.child = child
        self.pid = child.pid
        self.argv = child.argv
        loop.call_soon_threadsafe(child.add_done_callback, lambda result: self._done.set())
        atexit.register(self._exit_like_child)

    @property
    def state(self):
        return self.child.state

    @property
    def result(self) -> TerminationResult | None:
        return self.child.result

    def send_signal(self, sig: int | str) -> None:
        signum = to_signum(sig)
        if self._loop.is_closed():
            logger.debug(f"Child {self.pid} already closed, not sending {sig}")
            return
        self._loop.call_soon_threadsafe(self.child.send_signal, signum)

    def kill(self, sig: int | str = "SIGTERM") -> None:
        self.send_signal(sig)

    def add_done_callback(self, fn: Callable[[TerminationResult], None]) -> None:
        if self._loop.is_closed():
            fn(self.child.result)
            return
        self._loop.call_soon_threadsafe(self.child.add_done_callback, fn)

    def wait(self, timeout: float | None = None) -> TerminationResult | None:
        """Block until the child exited and its output drained. None on timeout."""
        self._done.wait(timeout)
        return self.child.result

    def close(self) -> None:
        """Stop the relay thread. A child still running is killed first."""
        if self._closed:
            return
        self._closed = True
        atexit.unregister(self._exit_like_child)
        if self.child.result is None:
            logger.warning(f"Closing handle of running child {self.pid}, killing it")
            self._loop.call_soon_threadsafe(self.child.process.kill)
            self._done.wait()
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def finish(self) -> NoReturn:
        """Block until the child is done, then exit the way it did."""
        self.wait()
        self.close()
        self.child.finish()

    def _exit_like_child(self) -> None:
        self.wait()
        self.close()
        self.child.finish(hard=True)

    def __repr__(self) -> str:
        return f"RespawnedProcess(pid={self.pid}, state={self.state.value})"


@dataclass
class RespawnResult:
    ready: bool
    child: SelfHandle | RespawnedProcess
    args: list[str]


def spawn(argv: Sequence[str], bridge: ProcessBridge | None = None) -> RespawnedProcess:
    bridge = bridge or ProcessBridge()
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=_run_loop, args=(loop,), name="flagged-respawn-relay", daemon=True)
    thread.start()
    try:
        child = asyncio.run_coroutine_threadsafe(bridge.spawn(argv), loop).result()
    except BaseException:
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()
        raise
    return RespawnedProcess(loop, thread, child)


def needed(flags: Sequence[str], argv: Sequence[str] | None = None) -> bool:
    """True when recognized flags sit after the program and a respawn would move them."""
    flags = require_flags(flags)
    argv = list(argv) if argv is not None else live_argv()
    return argv != reorder(flags, argv)


def execute(
    flags: Sequence[str],
    argv: Sequence[str] | None = None,
    bridge: ProcessBridge | None = None,
) -> RespawnedProcess:
    """Respawn argv in canonical order, unconditionally."""
    flags = require_flags(flags)
    argv = require_argv(argv if argv is not None else live_argv())
    return spawn(reorder(flags, argv), bridge)


def flagged_respawn(
    flags: Sequence[str],
    argv: Sequence[str],
    forced=None,
    forbid: bool = False,
    execute: Callable[[bool, SelfHandle | RespawnedProcess, list[str]], None] | None = None,
    wait: bool = True,
    bridge: ProcessBridge | None = None,
) -> RespawnResult:
    """Decide and, when needed, relaunch with recognized flags first.

    execute(ready, child, args) is called once: ready=True with a SelfHandle when
    this process can carry on, ready=False with the respawned child otherwise.
    args is argv without recognized, forced, or forbid flags. With wait=True a
    respawning parent blocks until the child is done and then exits like it.
    """
    forbid_flag = config.load_config().forbid_flag
    decision = decide(flags, argv, forced=forced, forbid=forbid, forbid_flag=forbid_flag)

    if not decision.needed:
        handle = SelfHandle()
        logger.debug(f"No respawn needed, continuing in pid {handle.pid}")
        result = RespawnResult(ready=True, child=handle, args=decision.clean_argv)
    else:
        # The child sees the forbid flag and takes the ready branch.
        child = spawn([*decision.launch_argv, forbid_flag], bridge)
        result = RespawnResult(ready=False, child=child, args=decision.clean_argv)

    if execute is not None:
        try:
            execute(result.ready, result.child, result.args)
        except BaseException:
            if not result.ready:
                result.child.close()
            raise

    if not result.ready and wait:
        result.child.finish()
    return result
