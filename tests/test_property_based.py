from typing import List

import pytest
try:
    from hypothesis import given, settings, strategies as st  # type: ignore
    HAS_HYP = True
except ModuleNotFoundError:  # pragma: no cover - test infra
    HAS_HYP = False
    import pytest as _pytest  # type: ignore
    _pytest.skip("Hypothesis not installed", allow_module_level=True)

from tttcore.controller import GameStatus, new_game
from tttcore.game_basics import WIN_PATTERNS, GameMode, Mark, detect_winner, is_draw


@given(st.lists(st.integers(min_value=0, max_value=2), min_size=9, max_size=9))
def test_winner_iff_some_line_is_filled(board: List[int]):
    res = detect_winner(board)
    filled = [pat for pat in WIN_PATTERNS if board[pat[0]] != 0 and all(board[i] == board[pat[0]] for i in pat)]
    if filled:
        assert res.winner is not None
        assert res.line == filled[0]
        assert all(board[i] == res.winner for i in res.line)
    else:
        assert res.winner is None and res.line is None
        assert is_draw(board) == (0 not in board)


@given(st.lists(st.integers(min_value=-2, max_value=11), max_size=30))
def test_controller_invariants_under_arbitrary_input(moves: List[int]):
    ctrl = new_game(GameMode.PLAYER_VS_PLAYER)
    for mv in moves:
        before = ctrl.snapshot()
        accepted = ctrl.apply_move(mv)
        after = ctrl.snapshot()
        if not accepted:
            assert after == before
        else:
            assert after.board[mv] == before.active_mark
            assert before.status is GameStatus.ONGOING
        x, o = after.board.count(Mark.X), after.board.count(Mark.O)
        assert x - o in (0, 1)
        if after.status is GameStatus.ONGOING:
            assert after.active_mark is (Mark.X if x == o else Mark.O)


@settings(deadline=None, max_examples=60)
@given(
    st.sampled_from([Mark.X, Mark.O]),
    st.integers(min_value=0, max_value=2**16),
    st.lists(st.integers(min_value=0, max_value=8), max_size=40),
)
def test_ai_never_loses_through_controller(human: Mark, seed: int, moves: List[int]):
    ctrl = new_game(GameMode.PLAYER_VS_AI, human, seed=seed)
    for mv in moves:
        ctrl.apply_move(mv)
        x, o = ctrl.board.count(Mark.X), ctrl.board.count(Mark.O)
        assert x - o in (0, 1)
    assert ctrl.snapshot().winner is not human


@settings(deadline=None, max_examples=60)
@given(
    st.sampled_from(list(GameMode)),
    st.sampled_from([Mark.X, Mark.O]),
    st.lists(st.integers(min_value=0, max_value=8), max_size=12),
)
def test_restart_always_returns_to_initial_state(mode: GameMode, human: Mark, moves: List[int]):
    ctrl = new_game(mode, human, seed=0)
    for mv in moves:
        ctrl.apply_move(mv)
    ctrl.restart()
    snap = ctrl.snapshot()
    assert snap.board == (0,) * 9
    assert snap.active_mark is Mark.X
    assert snap.status is GameStatus.ONGOING
    assert snap.mode is mode
    assert snap.is_ai_turn_pending is (mode is GameMode.PLAYER_VS_AI and human is Mark.O)
