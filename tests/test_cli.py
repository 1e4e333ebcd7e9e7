import os
import subprocess
import sys
from pathlib import Path

import pytest

from tttcore.cli import format_snapshot, main, run_play
from tttcore.controller import new_game
from tttcore.game_basics import GameMode, Mark


SRC = Path(__file__).resolve().parents[1] / "src"


def _run_cli(args: list[str], cwd: Path, stdin: str = "") -> subprocess.CompletedProcess:
    exe = [sys.executable, "-m", "tttcore.cli"]
    env = {k: v for k, v in os.environ.items() if not k.startswith("TTT_")}
    env["PYTHONPATH"] = os.pathsep.join(p for p in [str(SRC), env.get("PYTHONPATH", "")] if p)
    return subprocess.run(exe + args, cwd=cwd, capture_output=True, text=True, input=stdin, env=env)


def test_cli_status_move_selfplay(tmp_path: Path):
    r = _run_cli(["status", "--board", "XOXXOO..."], cwd=tmp_path)
    assert r.returncode == 0
    assert "status=ongoing" in r.stdout + r.stderr
    r = _run_cli(["status", "--board", "121122..."], cwd=tmp_path)
    assert r.returncode == 0
    r = _run_cli(["status", "--board", "1211221.."], cwd=tmp_path)
    s = r.stdout + r.stderr
    assert "winner=X" in s and "line=[0, 3, 6]" in s
    r = _run_cli(["move", "--board", "110220000", "--ai", "O"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "move=5" in s and "policy=minimax" in s
    r = _run_cli(["--seed", "3", "move", "--board", "100000000"], cwd=tmp_path)
    assert r.returncode == 0
    assert "move=4" in r.stdout + r.stderr
    r = _run_cli(["--seed", "1", "selfplay", "--games", "5"], cwd=tmp_path)
    assert r.returncode == 0
    assert "opponent_wins=0" in r.stdout + r.stderr


@pytest.mark.parametrize("bad", ["abc", "012345678", "0123456789", "12345678x"])
def test_cli_error_invalid_boards(tmp_path: Path, bad: str):
    r = _run_cli(["status", "--board", bad], cwd=tmp_path)
    assert r.returncode != 0
    r = _run_cli(["move", "--board", bad], cwd=tmp_path)
    assert r.returncode != 0


def test_cli_move_on_finished_board_fails(tmp_path: Path):
    r = _run_cli(["move", "--board", "111220000"], cwd=tmp_path)
    assert r.returncode == 2


def test_cli_play_reads_stdin(tmp_path: Path):
    r = _run_cli(["play", "--mode", "pvai", "--human", "X", "--ai-delay", "0"], cwd=tmp_path, stdin="0\nq\n")
    assert r.returncode == 0
    assert "[X]" not in r.stdout
    assert "Turn: X" in r.stdout
    assert " O " in r.stdout


def test_main_rejects_bad_environment(monkeypatch):
    monkeypatch.setenv("TTT_MODE", "online")
    assert main(["status", "--board", "000000000"]) == 2


@pytest.mark.parametrize("flag", ["--version", "--info"])
def test_early_exits_ignore_bad_environment(monkeypatch, capsys, flag):
    monkeypatch.setenv("TTT_MODE", "online")
    assert main([flag]) == 0
    assert capsys.readouterr().out.strip()


def test_move_searches_once(monkeypatch):
    monkeypatch.delenv("TTT_MODE", raising=False)
    import tttcore.cli as cli_mod

    calls = []
    real_search = cli_mod.search

    def counting_search(*args, **kwargs):
        calls.append(args)
        return real_search(*args, **kwargs)

    monkeypatch.setattr(cli_mod, "search", counting_search)
    assert main(["move", "--board", "110220000", "--ai", "O"]) == 0
    assert len(calls) == 1


def test_move_on_finished_board_returns_error():
    assert main(["move", "--board", "111220000"]) == 2


def test_run_play_pvp_to_win():
    out = []
    ctrl = new_game(GameMode.PLAYER_VS_PLAYER, auto_ai=False)
    run_play(ctrl, ["0", "3", "1", "4", "2", "5", "q", "8"], write=out.append)
    assert out[-1] == "Move 5 not allowed"
    assert "X wins!" in out[-2]
    assert out[-2].startswith("[X]|[X]|[X]")
    # 'q' stops the loop before the trailing move
    assert ctrl.board[8] == 0


def test_run_play_resolves_ai_first_move_and_mode_toggle():
    out = []
    ctrl = new_game(GameMode.PLAYER_VS_AI, Mark.O, seed=0, auto_ai=False)
    run_play(ctrl, ["4", "zz", "m"], write=out.append)
    assert out[0] == "AI is thinking..."
    assert "Turn: O" in out[1]
    assert out[2] == "Move 4 not allowed"
    assert out[3] == "Unknown command: zz"
    assert ctrl.mode is GameMode.PLAYER_VS_PLAYER
    assert "mode=pvp" in out[-1]


def test_format_snapshot_labels_ai_mode():
    snap = new_game(GameMode.PLAYER_VS_AI, Mark.X).snapshot()
    text = format_snapshot(snap)
    assert "mode=pvai you=X ai=O" in text
    assert "Turn: X" in text
