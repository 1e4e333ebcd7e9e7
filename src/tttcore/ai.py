"""
AI move selection: opening heuristic plus exact minimax.
Teaching notes:
- While many cells are empty (e >= 7) the AI plays an opening heuristic:
  center, else a random corner, else a random side. This varies the first
  moves without giving anything away.
- Below that the AI runs exhaustive minimax from its own perspective:
  +1 win, 0 draw, -1 loss. Results are memoized per (board, marks).
- Tie-break policy among equal scores:
  - wins and draws: prefer shorter distance (plies) to termination;
  - losses: prefer longer distance (delay the loss);
  - then the lowest cell index.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Tuple

import numpy as np

from .errors import NoLegalMove
from .game_basics import (
    EMPTY,
    Mark,
    apply_move,
    available_moves,
    detect_winner,
    validate_board,
)

logger = logging.getLogger(__name__)

OPENING_THRESHOLD = 7
CENTER = 4
CORNERS = (0, 2, 6, 8)
SIDES = (1, 3, 5, 7)


@dataclass(frozen=True)
class SearchResult:
    move: int
    score: int
    plies: int


def opening_move(board: Sequence[int], rng: Optional[np.random.Generator] = None) -> int:
    b = validate_board(board)
    if rng is None:
        rng = np.random.default_rng()
    if b[CENTER] == EMPTY:
        return CENTER
    corners = [i for i in CORNERS if b[i] == EMPTY]
    if corners:
        return int(rng.choice(corners))
    sides = [i for i in SIDES if b[i] == EMPTY]
    if sides:
        return int(rng.choice(sides))
    moves = available_moves(b)
    if not moves:
        raise NoLegalMove("Board is full")
    return moves[0]


def _better(score: int, plies: int, best_score: int, best_plies: int, maximizing: bool) -> bool:
    if not maximizing:
        # the opponent's view of the same numbers
        score, best_score = -score, -best_score
    if score != best_score:
        return score > best_score
    if score == -1:
        return plies > best_plies
    return plies < best_plies


@lru_cache(maxsize=None)
def _solve(board_t: Tuple[int, ...], ai_mark: int, to_move: int) -> Tuple[int, int, Optional[int]]:
    winner = detect_winner(board_t).winner
    if winner is not None:
        return (1 if winner == ai_mark else -1), 0, None
    moves = available_moves(board_t)
    if not moves:
        return 0, 0, None
    maximizing = to_move == ai_mark
    best_score, best_plies, best_move = 0, 0, None
    for mv in moves:
        child = apply_move(board_t, mv, to_move)
        score, plies, _ = _solve(tuple(int(v) for v in child), ai_mark, 3 - to_move)
        plies += 1
        if best_move is None or _better(score, plies, best_score, best_plies, maximizing):
            best_score, best_plies, best_move = score, plies, mv
    return best_score, best_plies, best_move


def search(board: Sequence[int], ai_mark: Mark, opponent_mark: Optional[Mark] = None) -> SearchResult:
    """Full-depth minimax from the AI's perspective, the AI being the side to move."""
    b = validate_board(board)
    ai_mark = Mark(ai_mark)
    _check_marks(ai_mark, opponent_mark)
    if detect_winner(b).winner is not None or EMPTY not in b:
        raise NoLegalMove("Board is already terminal")
    score, plies, move = _solve(tuple(int(v) for v in b), int(ai_mark), int(ai_mark))
    if move is None:
        raise NoLegalMove("No move left to search")
    return SearchResult(move=move, score=score, plies=plies)


def select_move(
    board: Sequence[int],
    ai_mark: Mark,
    opponent_mark: Optional[Mark] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    b = validate_board(board)
    ai_mark = Mark(ai_mark)
    _check_marks(ai_mark, opponent_mark)
    moves = available_moves(b)
    if not moves or detect_winner(b).winner is not None:
        raise NoLegalMove("AI asked to move on a full or finished board")
    if len(moves) >= OPENING_THRESHOLD:
        mv = opening_move(b, rng)
        logger.debug("ai=%s opening move=%d empty=%d", ai_mark.label, mv, len(moves))
        return mv
    res = search(b, ai_mark, opponent_mark)
    logger.debug("ai=%s minimax move=%d score=%d plies=%d", ai_mark.label, res.move, res.score, res.plies)
    return res.move


def _check_marks(ai_mark: Mark, opponent_mark: Optional[Mark]) -> None:
    if opponent_mark is not None and Mark(opponent_mark) == ai_mark:
        raise ValueError("AI and opponent cannot share a mark")


class MoveSelector:
    """Holds the random source used by the opening heuristic."""

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def select(self, board: Sequence[int], ai_mark: Mark, opponent_mark: Optional[Mark] = None) -> int:
        return select_move(board, ai_mark, opponent_mark, rng=self.rng)
