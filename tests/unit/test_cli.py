from __future__ import annotations

import argparse

import pytest

from conftest import FakeClient, FakeDesktop, call_chunk, text_chunk
from surf_backend.app import main as cli
from surf_backend.llm.google_streamer import GoogleComputerStreamer


def test_parse_resolution():
    assert cli.parse_resolution("1280x800") == (1280, 800)
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_resolution("wide")
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_resolution("0x800")


def test_load_task_from_yaml(tmp_path):
    path = tmp_path / "task.yaml"
    path.write_text("goal: Open Firefox\nmax_actions: 5\n")
    task = cli.load_task(str(path))
    assert task.goal == "Open Firefox"
    assert task.max_actions == 5
    assert cli.load_task(str(path), max_actions=2).max_actions == 2


def test_load_task_exits_on_bad_files(tmp_path):
    with pytest.raises(SystemExit):
        cli.load_task(str(tmp_path / "missing.yaml"))

    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(SystemExit):
        cli.load_task(str(path))


def test_main_requires_goal():
    with pytest.raises(SystemExit):
        cli.main([])


@pytest.fixture
def fake_run(monkeypatch):
    desktop = FakeDesktop()
    turns = []

    monkeypatch.setattr(cli, "create_desktop", lambda backend, resolution: desktop)

    def build(desktop_, scaler, model=None, max_actions=None):
        return GoogleComputerStreamer(
            desktop_, scaler, model=model, client=FakeClient(turns), max_actions=max_actions
        )

    monkeypatch.setattr(cli, "GoogleComputerStreamer", build)
    return desktop, turns


def test_main_runs_goal_and_closes_desktop(fake_run, capsys):
    desktop, turns = fake_run
    turns.extend([
        [text_chunk("Opening the terminal."), call_chunk(action_type="keypress", keys=["Control", "Alt", "t"])],
        [text_chunk("Terminal is open.")],
    ])

    assert cli.main(["open a terminal", "--backend", "local"]) == 0

    out = capsys.readouterr().out
    assert "Opening the terminal." in out
    assert "ACTION" in out
    assert "status: completed" in out
    assert desktop.calls == [("press", "Control+Alt+t")]
    assert desktop.closed


def test_main_sse_output(fake_run, capsys):
    _, turns = fake_run
    turns.append([text_chunk("hi")])

    assert cli.main(["say hi", "--backend", "local", "--sse"]) == 0
    out = capsys.readouterr().out
    assert 'data: {"type": "reasoning", "content": "hi"}' in out
    assert 'data: {"type": "done"}' in out


def test_main_reports_failure(fake_run, capsys):
    desktop, turns = fake_run
    turns.append([RuntimeError("model unavailable")])

    assert cli.main(["anything", "--backend", "local"]) == 1
    assert "TASK FAILED: model unavailable" in capsys.readouterr().out
    assert desktop.closed


def test_main_reports_desktop_startup_failure(monkeypatch, capsys):
    def unreachable(backend, resolution):
        raise ConnectionError("E2B unreachable")

    monkeypatch.setattr(cli, "create_desktop", unreachable)

    assert cli.main(["anything"]) == 1
    assert "Fatal error: E2B unreachable" in capsys.readouterr().out
