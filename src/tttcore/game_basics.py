"""
Game basics: board representation, serialization, rules, winner/draw checks, validity.
Teaching notes:
- State is a sequence of 9 cells: 0=empty, 1=X, 2=O. X always starts.
- A "ply" is a half-move (one player's turn).
- Valid states have counts either equal (X to move) or X has one more (O to move).
- Every function here is pure; boards are never mutated.
"""
from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .errors import InvalidBoard

EMPTY = 0
BOARD_SIZE = 9


class Mark(IntEnum):
    X = 1
    O = 2

    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value) -> "Mark":
        if isinstance(value, Mark):
            return value
        text = str(value).strip().upper()
        if text in ("X", "1"):
            return cls.X
        if text in ("O", "2"):
            return cls.O
        raise ValueError(f"Unknown mark: {value!r}")


class GameMode(Enum):
    PLAYER_VS_PLAYER = "pvp"
    PLAYER_VS_AI = "pvai"

    @classmethod
    def parse(cls, value) -> "GameMode":
        if isinstance(value, GameMode):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown game mode: {value!r}")


# Rows, then columns, then diagonals. Order fixes which line is reported.
WIN_PATTERNS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

_DIGITS = {"0": EMPTY, "1": Mark.X, "2": Mark.O}
_GLYPHS = {".": EMPTY, "-": EMPTY, "_": EMPTY, "X": Mark.X, "O": Mark.O}


class WinResult(NamedTuple):
    winner: Optional[Mark]
    line: Optional[Tuple[int, int, int]]


def validate_board(board: Sequence[int]) -> Tuple[int, ...]:
    try:
        cells = tuple(board)
    except TypeError:
        raise InvalidBoard(f"Board must be a sequence, got {type(board).__name__}") from None
    if len(cells) != BOARD_SIZE:
        raise InvalidBoard(f"Board must have {BOARD_SIZE} cells, got {len(cells)}")
    for i, v in enumerate(cells):
        if v not in (EMPTY, Mark.X, Mark.O):
            raise InvalidBoard(f"Cell {i} holds {v!r}; expected 0, 1 or 2")
    return cells


def detect_winner(board: Sequence[int]) -> WinResult:
    b = validate_board(board)
    for line in WIN_PATTERNS:
        a, c, d = line
        v = b[a]
        if v != EMPTY and v == b[c] and v == b[d]:
            return WinResult(Mark(v), line)
    return WinResult(None, None)


def is_draw(board: Sequence[int], winner: Optional[Mark] = None) -> bool:
    b = validate_board(board)
    if winner is None:
        winner = detect_winner(b).winner
    return winner is None and EMPTY not in b


def available_moves(board: Sequence[int]) -> List[int]:
    b = validate_board(board)
    return [i for i, v in enumerate(b) if v == EMPTY]


def is_terminal(board: Sequence[int]) -> bool:
    winner = detect_winner(board).winner
    return winner is not None or is_draw(board, winner)


def piece_counts(board: Sequence[int]) -> Tuple[int, int]:
    b = validate_board(board)
    return b.count(Mark.X), b.count(Mark.O)


def current_mark(board: Sequence[int]) -> Mark:
    x, o = piece_counts(board)
    return Mark.X if x == o else Mark.O


def is_valid_state(board: Sequence[int]) -> bool:
    b = validate_board(board)
    x_count, o_count = piece_counts(b)
    if not (x_count == o_count or x_count == o_count + 1):
        return False

    def count_wins(p: int) -> int:
        return sum(1 for pat in WIN_PATTERNS if all(b[i] == p for i in pat))

    x_wins, o_wins = count_wins(Mark.X), count_wins(Mark.O)
    if x_wins and o_wins:
        return False
    if x_wins and x_count != o_count + 1:
        return False
    if o_wins and x_count != o_count:
        return False
    return True


def serialize_board(board: Sequence[int]) -> str:
    return ''.join(str(int(cell)) for cell in validate_board(board))


def parse_board(text: str) -> Tuple[int, ...]:
    raw = (text or "").strip().upper()
    if len(raw) != BOARD_SIZE:
        raise InvalidBoard(f"Board string must have {BOARD_SIZE} characters, got {len(raw)}")
    cells = []
    for ch in raw:
        if ch in _DIGITS:
            cells.append(_DIGITS[ch])
        elif ch in _GLYPHS:
            cells.append(_GLYPHS[ch])
        else:
            raise InvalidBoard(f"Unexpected board character {ch!r}; use 0/1/2 or X/O/.")
    return tuple(cells)


def render_board(board: Sequence[int], winning_line: Optional[Sequence[int]] = None) -> str:
    """Text grid, 3 rows of 3. Empty cells show their index; winning cells are bracketed."""
    b = validate_board(board)
    highlight = set(winning_line or ())
    rows = []
    for row in range(3):
        cells = []
        for col in range(3):
            idx = row * 3 + col
            glyph = Mark(b[idx]).label if b[idx] != EMPTY else str(idx)
            cells.append(f"[{glyph}]" if idx in highlight else f" {glyph} ")
        rows.append("|".join(cells))
    return "\n---+---+---\n".join(rows)


def apply_move(board: Sequence[int], idx: int, mark: int) -> Tuple[int, ...]:
    """Return a new board with ``mark`` placed at ``idx``; the input is left untouched."""
    lst = list(validate_board(board))
    lst[idx] = Mark(mark)
    return tuple(lst)
