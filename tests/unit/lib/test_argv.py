import sys

from flagged_respawn.lib.argv import live_argv


def test_live_argv_uses_orig_argv(monkeypatch):
    monkeypatch.setattr(sys, "orig_argv", ["python", "-B", "app.py", "x"])
    assert live_argv() == ["python", "-B", "app.py", "x"]


def test_live_argv_is_a_copy(monkeypatch):
    orig = ["python", "app.py"]
    monkeypatch.setattr(sys, "orig_argv", orig)
    live_argv().append("x")
    assert orig == ["python", "app.py"]


def test_live_argv_falls_back_to_executable(monkeypatch):
    monkeypatch.setattr(sys, "orig_argv", [])
    monkeypatch.setattr(sys, "argv", ["app.py", "x"])
    assert live_argv() == [sys.executable, "app.py", "x"]
