"""
Game loop: authoritative board, alternating turns, terminal detection, and
machine policies for automated play.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from .game_basics import POISON, BoardSize, BoardState, Position, chomp
from .solver import candidate_moves, winning_move

POLICIES = ('optimal', 'random', 'epsilon')


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    MOVER_LOSES_ON_POISON = "mover_loses_on_poison"
    # advisory only; play continues
    OPPONENT_HAS_NO_WINNING_MOVE = "opponent_has_no_winning_move"


@dataclass
class Game:
    """One game of Chomp between players 0 and 1; player 0 moves first.

    The board is replaced, never mutated, by each move. Moves are validated by
    the chomp rule itself, so an illegal square leaves the game untouched.
    """
    size: BoardSize
    state: Optional[BoardState] = None
    to_move: int = 0
    history: List[Position] = field(default_factory=list)
    loser: Optional[int] = None

    def __post_init__(self) -> None:
        if self.state is None:
            self.state = BoardState.full(self.size)

    @property
    def status(self) -> GameStatus:
        if self.state.is_empty:
            return GameStatus.MOVER_LOSES_ON_POISON
        return GameStatus.IN_PROGRESS

    @property
    def is_over(self) -> bool:
        return self.status is not GameStatus.IN_PROGRESS

    @property
    def winner(self) -> Optional[int]:
        return None if self.loser is None else 1 - self.loser

    def apply(self, pos: Position) -> GameStatus:
        if self.is_over:
            raise RuntimeError("Game is already over")
        self.state = chomp(self.state, pos)
        self.history.append(pos)
        if self.state.is_empty:
            self.loser = self.to_move
        self.to_move = 1 - self.to_move
        return self.status

    def opponent_has_forced_win(self) -> bool:
        """Advisory: whether the player now to move can force a win."""
        return winning_move(self.state) is not None

    def assess(self) -> GameStatus:
        """Status plus the solver verdict for the player now to move.

        Runs the full search, so callers bound the board size first.
        """
        if self.is_over:
            return self.status
        if not self.opponent_has_forced_win():
            return GameStatus.OPPONENT_HAS_NO_WINNING_MOVE
        return GameStatus.IN_PROGRESS


def fallback_move(state: BoardState) -> Position:
    """Move played when no winning move exists: the smallest bite available."""
    moves = candidate_moves(state)
    return moves[-1] if moves else POISON


def choose_move(
    state: BoardState,
    policy: str = 'optimal',
    rng: Optional[np.random.Generator] = None,
    epsilon: float = 0.1,
) -> Position:
    if policy not in POLICIES:
        raise ValueError(f"Unknown policy: {policy}")
    if rng is None:
        rng = np.random.default_rng()
    moves = candidate_moves(state)
    if not moves:
        return POISON
    if policy == 'random' or (policy == 'epsilon' and rng.random() < epsilon):
        return moves[int(rng.integers(len(moves)))]
    mv = winning_move(state)
    return mv if mv is not None else fallback_move(state)


def play_out(
    size: BoardSize,
    policies: Sequence[str] = ('optimal', 'optimal'),
    epsilon: float = 0.1,
    seed: int = 42,
) -> Dict:
    """Play a full game from the full board with one policy per player."""
    rng = np.random.default_rng(seed)
    game = Game(size)
    moves: List[Dict] = []
    while not game.is_over:
        p = game.to_move
        mv = choose_move(game.state, policies[p], rng=rng, epsilon=epsilon)
        moves.append({
            'player': p,
            'move': mv.to_algebraic(size.alphabet),
            'squares_before': len(game.state),
        })
        game.apply(mv)
    return {
        'moves': moves,
        'loser': game.loser,
        'winner': game.winner,
        'plies': len(moves),
    }
