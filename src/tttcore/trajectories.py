"""
Simulated games against the AI, driven through the real controller.
Teaching notes:
- The AI side is resolved with the same request/resolve path a UI uses.
- The other side follows a simple policy: 'random' (uniform over legal moves),
  'ai' (a second selector), or 'epsilon' (random with probability epsilon,
  otherwise the selector's move).
- Everything is reproducible from one seed.
"""
from typing import Dict, List, Optional

import numpy as np

from .ai import MoveSelector
from .controller import GameController, GameStatus
from .game_basics import GameMode, Mark, available_moves, serialize_board

OPPONENTS = ('random', 'ai', 'epsilon')


def play_game(
    opponent: str = 'random',
    ai_mark: Mark = Mark.O,
    rng: Optional[np.random.Generator] = None,
    epsilon: float = 0.1,
) -> Dict:
    if opponent not in OPPONENTS:
        raise ValueError(f"Unknown opponent policy: {opponent!r}")
    if rng is None:
        rng = np.random.default_rng()
    ai_mark = Mark.parse(ai_mark)
    ctrl = GameController(
        mode=GameMode.PLAYER_VS_AI,
        human_mark=ai_mark.opponent(),
        selector=MoveSelector(rng=rng),
        auto_ai=False,
    )
    mirror = MoveSelector(rng=rng)
    moves: List[Dict] = []
    while ctrl.current_status().status is GameStatus.ONGOING:
        if ctrl.is_ai_turn_pending:
            mv = ctrl.play_ai_move()
            moves.append({'mark': ai_mark.label, 'index': mv, 'by': 'ai'})
            continue
        legal = available_moves(ctrl.board)
        if opponent == 'random':
            mv = int(rng.choice(legal))
        elif opponent == 'ai':
            mv = mirror.select(ctrl.board, ctrl.human_mark)
        else:
            if rng.random() < epsilon:
                mv = int(rng.choice(legal))
            else:
                mv = mirror.select(ctrl.board, ctrl.human_mark)
        ctrl.apply_move(mv)
        moves.append({'mark': ctrl.human_mark.label, 'index': mv, 'by': opponent})
    state = ctrl.current_status()
    return {
        'ai_mark': ai_mark.label,
        'opponent': opponent,
        'moves': moves,
        'winner': state.winner.label if state.winner is not None else None,
        'line': list(state.line) if state.line is not None else None,
        'board': serialize_board(ctrl.board),
    }


def generate_games(
    n: int = 100,
    opponent: str = 'random',
    ai_mark: Mark = Mark.O,
    seed: int = 42,
    epsilon: float = 0.1,
) -> List[Dict]:
    rng = np.random.default_rng(seed)
    return [play_game(opponent, ai_mark, rng, epsilon) for _ in range(n)]


def summarize(games: List[Dict]) -> Dict[str, int]:
    out = {'games': len(games), 'ai_wins': 0, 'opponent_wins': 0, 'draws': 0}
    for g in games:
        if g['winner'] is None:
            out['draws'] += 1
        elif g['winner'] == g['ai_mark']:
            out['ai_wins'] += 1
        else:
            out['opponent_wins'] += 1
    return out
