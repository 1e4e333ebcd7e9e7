"""Runtime configuration for the game and its terminal front-end.

Environment-first; command-line flags override what is loaded here.

- TTT_MODE: ``pvp`` or ``pvai`` (default ``pvai``)
- TTT_HUMAN_MARK: ``X`` or ``O`` (default ``X``)
- TTT_SEED: integer seed for the AI's random source (default: unseeded)
- TTT_AI_DELAY: seconds the front-end waits before playing the AI move (default 0.5)
- TTT_VERBOSE: ``1``/``true`` enables debug logging
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError
from .game_basics import GameMode, Mark

DEFAULT_AI_DELAY = 0.5

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass
class GameConfig:
    mode: GameMode = GameMode.PLAYER_VS_AI
    human_mark: Mark = Mark.X
    seed: Optional[int] = None
    ai_delay: float = DEFAULT_AI_DELAY
    verbose: bool = False

    @property
    def ai_mark(self) -> Mark:
        return self.human_mark.opponent()


def _parse_bool(name: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_config(environ: Optional[Mapping[str, str]] = None) -> GameConfig:
    env = os.environ if environ is None else environ
    cfg = GameConfig()
    raw = env.get("TTT_MODE")
    if raw:
        try:
            cfg.mode = GameMode.parse(raw)
        except ValueError as e:
            raise ConfigError(f"TTT_MODE: {e}") from None
    raw = env.get("TTT_HUMAN_MARK")
    if raw:
        try:
            cfg.human_mark = Mark.parse(raw)
        except ValueError as e:
            raise ConfigError(f"TTT_HUMAN_MARK: {e}") from None
    raw = env.get("TTT_SEED")
    if raw:
        try:
            cfg.seed = int(raw)
        except ValueError:
            raise ConfigError(f"TTT_SEED must be an integer, got {raw!r}") from None
    raw = env.get("TTT_AI_DELAY")
    if raw:
        try:
            cfg.ai_delay = float(raw)
        except ValueError:
            raise ConfigError(f"TTT_AI_DELAY must be a number, got {raw!r}") from None
        if cfg.ai_delay < 0:
            raise ConfigError(f"TTT_AI_DELAY must be >= 0, got {raw!r}")
    raw = env.get("TTT_VERBOSE")
    if raw is not None:
        cfg.verbose = _parse_bool("TTT_VERBOSE", raw)
    return cfg
