"""
Error kinds for the game core.

All custom exceptions inherit from TicTacToeError so a caller can catch the
whole family at once.

- InvalidBoard: malformed board handed to the rules engine (programmer error).
- IllegalMove: occupied cell, finished game or wrong turn. The controller
  recovers from it locally; it never reaches the UI.
- NoLegalMove: the AI was asked to move on a full or finished board.
- ConfigError: unusable configuration value.
"""
from typing import Optional

__all__ = [
    "TicTacToeError",
    "InvalidBoard",
    "IllegalMove",
    "NoLegalMove",
    "ConfigError",
]


class TicTacToeError(Exception):
    """Base exception for the game core.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
    """
    code: str = "TTT_ERROR"

    def __init__(self, message: str = "", code: Optional[str] = None):
        self.message = message or self.__class__.__name__
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidBoard(TicTacToeError, ValueError):
    code = "INVALID_BOARD"


class IllegalMove(TicTacToeError):
    code = "ILLEGAL_MOVE"

    def __init__(self, message: str = "", index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class NoLegalMove(TicTacToeError, RuntimeError):
    code = "NO_LEGAL_MOVE"


class ConfigError(TicTacToeError, ValueError):
    code = "CONFIG_ERROR"
