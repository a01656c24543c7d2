"""chomp package.

Board rules, an exhaustive solver, a terminal game loop, and dataset export
for the game of Chomp.

Convenience imports are exposed for common workflows.
"""

from .datasets import ExportArgs, run_export
from .game import Game, GameStatus, play_out
from .game_basics import (
    POISON,
    BoardSize,
    BoardState,
    ChompError,
    EmptyBoard,
    InvalidMove,
    OutOfRange,
    Position,
    apply,
    chomp,
    new_board,
)
from .solver import solve, solve_all_reachable, solve_state, winning_move, winning_moves

__all__ = [
    "POISON",
    "BoardSize",
    "BoardState",
    "ChompError",
    "EmptyBoard",
    "InvalidMove",
    "OutOfRange",
    "Position",
    "apply",
    "chomp",
    "new_board",
    "solve",
    "winning_move",
    "winning_moves",
    "solve_state",
    "solve_all_reachable",
    "Game",
    "GameStatus",
    "play_out",
    "run_export",
    "ExportArgs",
]
