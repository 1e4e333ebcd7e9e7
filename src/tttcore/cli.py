from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, Iterable, Optional, Tuple

import numpy as np

from .ai import OPENING_THRESHOLD, search, select_move
from .config import GameConfig, load_config
from .controller import GameController, Snapshot, new_game
from .errors import ConfigError, InvalidBoard, NoLegalMove
from .game_basics import (
    GameMode,
    Mark,
    available_moves,
    current_mark,
    detect_winner,
    is_draw,
    is_valid_state,
    parse_board,
    render_board,
)
from .trajectories import OPPONENTS, generate_games, summarize


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt", description="Tic-tac-toe game core CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for the AI's random source")

    p_play = sub.add_parser("play", help="Play in the terminal (cells 0-8, r=restart, m=switch mode, q=quit)")
    p_play.add_argument("--mode", choices=[m.value for m in GameMode], default=None,
                        help="pvp or pvai (default: TTT_MODE or pvai)")
    p_play.add_argument("--human", choices=["X", "O"], default=None,
                        help="Mark played by the human in pvai mode (default: TTT_HUMAN_MARK or X)")
    p_play.add_argument("--ai-delay", type=float, default=None,
                        help="Seconds to wait before the AI moves (default: TTT_AI_DELAY or 0.5)")

    p_st = sub.add_parser("status", help="Report winner/draw/side to move for a board (9 chars: 0/1/2 or X/O/.)")
    p_st.add_argument("--board", required=True, help="Board string, e.g. 120120000 or XO.XO....")

    p_mv = sub.add_parser("move", help="Ask the AI for its move on a board")
    p_mv.add_argument("--board", required=True, help="Board string, e.g. 110220000")
    p_mv.add_argument("--ai", choices=["X", "O"], default=None,
                      help="Mark the AI plays (default: side to move)")

    p_sp = sub.add_parser("selfplay", help="Simulate games against the AI and print a summary")
    p_sp.add_argument("--games", type=int, default=100, help="Number of games (default: 100)")
    p_sp.add_argument("--opponent", choices=list(OPPONENTS), default="random")
    p_sp.add_argument("--ai-mark", choices=["X", "O"], default="O")
    p_sp.add_argument("--epsilon", type=float, default=0.1,
                      help="Random-move probability for the epsilon opponent")

    return p


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def format_snapshot(snap: Snapshot) -> str:
    lines = [render_board(snap.board, snap.winning_line), snap.label]
    if snap.mode is GameMode.PLAYER_VS_AI:
        lines.append(f"mode=pvai you={snap.human_mark.label} ai={snap.ai_mark.label}")
    else:
        lines.append("mode=pvp")
    return "\n".join(lines)


def _drain_ai(ctrl: GameController, delay: float, write: Callable[[str], None]) -> None:
    request = ctrl.request_ai_move()
    if request is None:
        return
    write("AI is thinking...")
    if delay > 0:
        time.sleep(delay)
    ctrl.resolve_ai_move(request)


def run_play(
    ctrl: GameController,
    lines: Iterable[str],
    delay: float = 0.0,
    write: Callable[[str], None] = print,
) -> int:
    """Terminal front-end loop. Reads one command per line until EOF or 'q'."""
    _drain_ai(ctrl, delay, write)
    write(format_snapshot(ctrl.snapshot()))
    for raw in lines:
        cmd = raw.strip().lower()
        if not cmd:
            continue
        if cmd in ("q", "quit", "exit"):
            break
        if cmd in ("r", "restart"):
            ctrl.restart()
        elif cmd in ("m", "mode"):
            other = (GameMode.PLAYER_VS_PLAYER if ctrl.mode is GameMode.PLAYER_VS_AI
                     else GameMode.PLAYER_VS_AI)
            ctrl.set_mode(other)
        elif cmd.isdigit():
            if not ctrl.apply_move(int(cmd)):
                write(f"Move {cmd} not allowed")
                continue
        else:
            write(f"Unknown command: {cmd}")
            continue
        _drain_ai(ctrl, delay, write)
        write(format_snapshot(ctrl.snapshot()))
    return 0


def _config_from_args(ns: argparse.Namespace) -> GameConfig:
    cfg = load_config()
    if ns.seed is not None:
        cfg.seed = ns.seed
    if ns.verbose:
        cfg.verbose = True
    if getattr(ns, "mode", None):
        cfg.mode = GameMode.parse(ns.mode)
    if getattr(ns, "human", None):
        cfg.human_mark = Mark.parse(ns.human)
    if getattr(ns, "ai_delay", None) is not None:
        if ns.ai_delay < 0:
            raise ConfigError(f"--ai-delay must be >= 0, got {ns.ai_delay}")
        cfg.ai_delay = ns.ai_delay
    return cfg


def _read_board(raw: str) -> Optional[Tuple[int, ...]]:
    try:
        b = parse_board(raw)
    except InvalidBoard as e:
        logging.error("Invalid board string: %s", e.message)
        return None
    if not is_valid_state(b):
        logging.error("Board is not a valid reachable state.")
        return None
    return b


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)

    # Early exits
    if getattr(ns, "version", False):
        try:
            from importlib.metadata import version as _ver

            print(_ver("tttcore"))
        except Exception:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    try:
        cfg = _config_from_args(ns)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
        logging.error("%s", e.message)
        return 2
    logging.basicConfig(level=logging.DEBUG if cfg.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.cmd == "play":
        ctrl = new_game(cfg.mode, cfg.human_mark, seed=cfg.seed, auto_ai=False)
        return run_play(ctrl, sys.stdin, delay=cfg.ai_delay)

    if ns.cmd == "status":
        b = _read_board(ns.board)
        if b is None:
            return 2
        winner, line = detect_winner(b)
        if winner is not None:
            logging.info("status=won winner=%s line=%s", winner.label, list(line))
        elif is_draw(b, winner):
            logging.info("status=drawn")
        else:
            logging.info("status=ongoing to_move=%s moves=%s", current_mark(b).label, available_moves(b))
        return 0

    if ns.cmd == "move":
        b = _read_board(ns.board)
        if b is None:
            return 2
        ai = Mark.parse(ns.ai) if ns.ai else current_mark(b)
        try:
            if len(available_moves(b)) >= OPENING_THRESHOLD:
                mv = select_move(b, ai, ai.opponent(), rng=np.random.default_rng(cfg.seed))
                logging.info("ai=%s move=%d policy=opening", ai.label, mv)
            else:
                res = search(b, ai, ai.opponent())
                logging.info("ai=%s move=%d policy=minimax score=%d plies=%d",
                             ai.label, res.move, res.score, res.plies)
        except NoLegalMove as e:
            logging.error("%s", e.message)
            return 2
        return 0

    if ns.cmd == "selfplay":
        if ns.games < 1:
            logging.error("--games must be at least 1")
            return 2
        if not 0.0 <= ns.epsilon <= 1.0:
            logging.error("Epsilon out of range [0,1]: %s", ns.epsilon)
            return 2
        seed = cfg.seed if cfg.seed is not None else 42
        games = generate_games(ns.games, ns.opponent, Mark.parse(ns.ai_mark), seed=seed, epsilon=ns.epsilon)
        s = summarize(games)
        logging.info(
            "games=%d ai_wins=%d opponent_wins=%d draws=%d",
            s['games'], s['ai_wins'], s['opponent_wins'], s['draws'],
        )
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
