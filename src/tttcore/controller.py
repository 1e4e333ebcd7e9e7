"""
Game controller: the single owner of the board and the turn flag.
Teaching notes:
- One controller covers both modes; GameMode only changes who may move.
- Status (ongoing / won / drawn) is derived from the board, never stored.
- Rejected input never raises: the snapshot simply stays the same.
- Restart never moves for the AI. When the AI plays X the fresh game is left
  pending; the AI opens on play_ai_move(), or just before the next human move
  when auto_ai is on.
- AI moves go through a request/resolve pair. A request remembers the board and
  the game generation it was taken from; if either changed by the time it is
  resolved (restart, mode switch, another move) the result is dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .ai import MoveSelector
from .errors import IllegalMove
from .game_basics import (
    BOARD_SIZE,
    EMPTY,
    GameMode,
    Mark,
    detect_winner,
    is_draw,
)

logger = logging.getLogger(__name__)


class GameStatus(Enum):
    ONGOING = "ongoing"
    WON = "won"
    DRAWN = "drawn"


@dataclass(frozen=True)
class TurnState:
    status: GameStatus
    winner: Optional[Mark] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not GameStatus.ONGOING


@dataclass(frozen=True)
class Snapshot:
    board: Tuple[int, ...]
    active_mark: Mark
    status: GameStatus
    winner: Optional[Mark]
    winning_line: Optional[Tuple[int, int, int]]
    is_ai_turn_pending: bool
    mode: GameMode
    human_mark: Mark
    ai_mark: Mark
    label: str
    generation: int


@dataclass(frozen=True)
class AIMoveRequest:
    board: Tuple[int, ...]
    ai_mark: Mark
    generation: int


class GameController:
    def __init__(
        self,
        mode: GameMode = GameMode.PLAYER_VS_PLAYER,
        human_mark: Mark = Mark.X,
        selector: Optional[MoveSelector] = None,
        auto_ai: bool = True,
    ):
        self.mode = GameMode.parse(mode)
        self.human_mark = Mark.parse(human_mark)
        self.ai_mark = self.human_mark.opponent()
        self.selector = selector if selector is not None else MoveSelector()
        self.auto_ai = auto_ai
        self._board: List[int] = [EMPTY] * BOARD_SIZE
        self._active_mark = Mark.X
        self._generation = 0
        self._resolving = False

    @property
    def board(self) -> Tuple[int, ...]:
        return tuple(self._board)

    @property
    def active_mark(self) -> Mark:
        return self._active_mark

    @property
    def generation(self) -> int:
        return self._generation

    # -- queries -----------------------------------------------------------

    def current_status(self) -> TurnState:
        winner, line = detect_winner(self._board)
        if winner is not None:
            return TurnState(GameStatus.WON, winner, line)
        if is_draw(self._board, winner):
            return TurnState(GameStatus.DRAWN)
        return TurnState(GameStatus.ONGOING)

    def status_label(self) -> str:
        state = self.current_status()
        if state.status is GameStatus.WON:
            return f"{state.winner.label} wins!"
        if state.status is GameStatus.DRAWN:
            return "It's a draw!"
        return f"Turn: {self._active_mark.label}"

    @property
    def is_ai_turn_pending(self) -> bool:
        return (
            self.mode is GameMode.PLAYER_VS_AI
            and self._active_mark == self.ai_mark
            and not self.current_status().is_terminal
        )

    def snapshot(self) -> Snapshot:
        state = self.current_status()
        return Snapshot(
            board=tuple(self._board),
            active_mark=self._active_mark,
            status=state.status,
            winner=state.winner,
            winning_line=state.line,
            is_ai_turn_pending=self.is_ai_turn_pending,
            mode=self.mode,
            human_mark=self.human_mark,
            ai_mark=self.ai_mark,
            label=self.status_label(),
            generation=self._generation,
        )

    # -- commands ----------------------------------------------------------

    def apply_move(self, index: int) -> bool:
        """Place the active mark at ``index``. Returns False (and leaves the human side unchanged) if the move is rejected."""
        # a pending AI turn (fresh game with the AI on X) is played first
        self._maybe_auto_ai()
        try:
            self._check_move(index, by_ai=False)
        except IllegalMove as e:
            logger.debug("Ignored move %r: %s", index, e.message)
            return False
        self._place(index)
        self._maybe_auto_ai()
        return True

    def restart(self) -> None:
        self._board = [EMPTY] * BOARD_SIZE
        self._active_mark = Mark.X
        self._generation += 1
        logger.debug("Restarted game (generation=%d, mode=%s)", self._generation, self.mode.value)

    def set_mode(self, mode: GameMode) -> None:
        self.mode = GameMode.parse(mode)
        self.restart()

    def request_ai_move(self) -> Optional[AIMoveRequest]:
        if not self.is_ai_turn_pending:
            return None
        return AIMoveRequest(board=tuple(self._board), ai_mark=self.ai_mark, generation=self._generation)

    def resolve_ai_move(self, request: Optional[AIMoveRequest]) -> Optional[int]:
        """Run the selector for ``request`` and apply its move, unless the request is stale."""
        if request is None:
            return None
        if self._resolving:
            logger.debug("Ignored re-entrant AI resolve")
            return None
        if not self._matches(request):
            logger.debug("Discarded stale AI request (generation=%d)", request.generation)
            return None
        self._resolving = True
        try:
            move = self.selector.select(request.board, request.ai_mark, request.ai_mark.opponent())
        finally:
            self._resolving = False
        # the selector may have re-entered the controller
        if not self._matches(request):
            logger.debug("Discarded stale AI result %d (generation=%d)", move, request.generation)
            return None
        try:
            self._check_move(move, by_ai=True)
        except IllegalMove as e:
            logger.debug("Ignored AI move %r: %s", move, e.message)
            return None
        self._place(move)
        return move

    def play_ai_move(self) -> Optional[int]:
        return self.resolve_ai_move(self.request_ai_move())

    # -- internals ---------------------------------------------------------

    def _matches(self, request: AIMoveRequest) -> bool:
        return (
            request.generation == self._generation
            and request.board == tuple(self._board)
            and self.is_ai_turn_pending
        )

    def _check_move(self, index: int, by_ai: bool) -> None:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise IllegalMove(f"Move index must be an int, got {type(index).__name__}", index)
        if not 0 <= index < BOARD_SIZE:
            raise IllegalMove(f"Cell {index} is off the board", index)
        if self.current_status().is_terminal:
            raise IllegalMove("Game is already over", index)
        if self._board[index] != EMPTY:
            raise IllegalMove(f"Cell {index} is already occupied", index)
        if self.mode is GameMode.PLAYER_VS_AI:
            expected = self.ai_mark if by_ai else self.human_mark
            if self._active_mark != expected:
                raise IllegalMove(f"Not {'the AI' if by_ai else 'your'} turn", index)

    def _place(self, index: int) -> None:
        mark = self._active_mark
        self._board[int(index)] = mark
        self._active_mark = mark.opponent()
        state = self.current_status()
        logger.debug("%s -> %d (%s)", mark.label, index, state.status.value)
        if state.status is GameStatus.WON:
            logger.debug("%s wins on line %s", state.winner.label, list(state.line))
        elif state.status is GameStatus.DRAWN:
            logger.debug("Game drawn")

    def _maybe_auto_ai(self) -> None:
        if self.auto_ai and self.is_ai_turn_pending:
            self.play_ai_move()


def new_game(
    mode: GameMode = GameMode.PLAYER_VS_PLAYER,
    human_mark: Mark = Mark.X,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    auto_ai: bool = True,
) -> GameController:
    return GameController(
        mode=mode,
        human_mark=human_mark,
        selector=MoveSelector(rng=rng, seed=seed),
        auto_ai=auto_ai,
    )
