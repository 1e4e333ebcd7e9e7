"""tttcore package.

Tic-tac-toe game core: rules engine, game controller and AI move selection,
plus a terminal front-end.

Convenience imports are exposed for common workflows.
"""

from .ai import MoveSelector, SearchResult, search, select_move
from .controller import GameController, GameStatus, Snapshot, TurnState, new_game
from .errors import IllegalMove, InvalidBoard, NoLegalMove, TicTacToeError
from .game_basics import GameMode, Mark, available_moves, detect_winner, is_draw

__all__ = [
    "Mark",
    "GameMode",
    "detect_winner",
    "is_draw",
    "available_moves",
    "select_move",
    "search",
    "SearchResult",
    "MoveSelector",
    "GameController",
    "GameStatus",
    "TurnState",
    "Snapshot",
    "new_game",
    "TicTacToeError",
    "InvalidBoard",
    "IllegalMove",
    "NoLegalMove",
]
