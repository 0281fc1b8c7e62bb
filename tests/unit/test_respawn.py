import io
import os
import signal
import sys
import threading

import pytest

import flagged_respawn
from flagged_respawn.bridge import ProcessBridge, SelfHandle
from flagged_respawn.errors import ConfigurationError


@pytest.fixture
def bridge():
    return ProcessBridge(stdout=io.BytesIO(), stderr=io.BytesIO(), drain_timeout=5)


def test_needed_requires_flags():
    with pytest.raises(ConfigurationError):
        flagged_respawn.needed(None)


def test_needed_false_without_special_flags():
    assert not flagged_respawn.needed(["--harmony"], ["node", "app.js", "x"])


def test_needed_true_with_misplaced_flag():
    assert flagged_respawn.needed(["--harmony"], ["node", "app.js", "--harmony"])


def test_needed_defaults_to_live_argv(monkeypatch):
    monkeypatch.setattr(sys, "orig_argv", ["python", "app.py", "-X"])
    assert flagged_respawn.needed(["-X"])
    assert not flagged_respawn.needed(["--harmony"])


def test_execute_requires_flags():
    with pytest.raises(ConfigurationError):
        flagged_respawn.execute(None, ["node", "app.js"])


def test_execute_spawns_reordered_vector(bridge):
    argv = [sys.executable, "-c", "import sys; print(sys.argv[1:])", "-B"]
    child = flagged_respawn.execute(["-B"], argv, bridge=bridge)
    assert child.argv == [sys.executable, "-B", "-c", "import sys; print(sys.argv[1:])"]
    assert not child.ready
    result = child.wait()
    child.close()
    assert result.exit_code == 0


def test_finish_exits_like_child(bridge):
    child = flagged_respawn.execute(["-B"], [sys.executable, "-c", "raise SystemExit(100)"], bridge=bridge)
    with pytest.raises(SystemExit) as exc:
        child.finish()
    assert exc.value.code == 100


def test_flagged_respawn_requires_argv():
    with pytest.raises(ConfigurationError):
        flagged_respawn.flagged_respawn(["--harmony"], None)


def test_flagged_respawn_ready_runs_in_process():
    calls = []
    result = flagged_respawn.flagged_respawn(
        ["--harmony"],
        ["node", "--harmony", "app.js", "x"],
        execute=lambda ready, child, args: calls.append((ready, child, args)),
    )
    assert result.ready
    assert isinstance(result.child, SelfHandle)
    assert result.child.pid == os.getpid()
    assert result.args == ["node", "app.js", "x"]
    assert calls == [(True, result.child, ["node", "app.js", "x"])]


def test_flagged_respawn_forbid_beats_force():
    result = flagged_respawn.flagged_respawn(
        ["--harmony"], ["node", "app.js", "--no-respawning"], forced=["--trace-deprecation"], forbid=True
    )
    assert result.ready
    assert result.args == ["node", "app.js"]


def test_flagged_respawn_spawns_with_forbid_flag(bridge):
    code = "import sys; print(sys.argv[1:])"
    argv = [sys.executable, "-c", code, "-B"]
    calls = []
    result = flagged_respawn.flagged_respawn(
        ["-B"],
        argv,
        execute=lambda ready, child, args: calls.append(ready),
        wait=False,
        bridge=bridge,
    )
    assert calls == [False]
    assert not result.ready
    assert result.child.argv == [sys.executable, "-B", "-c", code, "--no-respawning"]
    assert result.args == [sys.executable, "-c", code]
    assert result.child.wait().exit_code == 0
    result.child.close()
    assert bridge.stdout.getvalue() == b"['--no-respawning']\n"


def test_flagged_respawn_waits_and_exits(bridge):
    argv = [sys.executable, "-c", "raise SystemExit(4)"]
    with pytest.raises(SystemExit) as exc:
        flagged_respawn.flagged_respawn(["-B"], argv, forced="-B", bridge=bridge)
    assert exc.value.code == 4


def test_output_relayed_without_blocking_caller(bridge):
    done = threading.Event()
    child = flagged_respawn.execute(["-B"], [sys.executable, "-c", "print('hi')"], bridge=bridge)
    child.add_done_callback(lambda result: done.set())
    assert done.wait(30)
    assert bridge.stdout.getvalue() == b"hi\n"
    assert child.result.exit_code == 0
    child.close()


def test_wait_timeout_returns_none_while_running(bridge):
    child = flagged_respawn.execute(["-B"], [sys.executable, "-c", "import time; time.sleep(30)"], bridge=bridge)
    assert child.wait(timeout=0.1) is None
    child.close()
    assert child.result is not None


@pytest.mark.skipif(not hasattr(signal, "SIGKILL"), reason="POSIX signals only")
def test_close_kills_running_child(bridge):
    child = flagged_respawn.execute(["-B"], [sys.executable, "-c", "import time; time.sleep(30)"], bridge=bridge)
    child.close()
    assert child.result.signal == "SIGKILL"
    child.close()


def test_failing_execute_callback_closes_child(bridge):
    seen = []

    def callback(ready, child, args):
        seen.append(child)
        raise RuntimeError("app failed to start")

    with pytest.raises(RuntimeError, match="app failed"):
        flagged_respawn.flagged_respawn(
            ["-B"],
            [sys.executable, "-c", "import time; time.sleep(30)", "-B"],
            execute=callback,
            bridge=bridge,
        )
    assert seen[0].result is not None
