"""
Exact game-theoretic solver by backward induction, from the side-to-move perspective.

Search policy:
- Candidates are every alive square except the poison, ascending column then
  ascending row. The first candidate that leaves the opponent without a
  winning move is returned.
- No memoization and no pruning: the search is exponential in the number of
  alive squares, so callers must cap board size before solving.
"""
from collections import deque
from typing import Dict, List, Optional

from .game_basics import POISON, BoardSize, BoardState, Position, chomp, serialize_state


def candidate_moves(state: BoardState) -> List[Position]:
    return [p for p in state if p != POISON]


def is_terminal(state: BoardState) -> bool:
    return state.is_empty or state.poison_only


def winning_move(state: BoardState) -> Optional[Position]:
    """Return a move that leaves the opponent in a P-position, or None.

    None means every move hands the opponent a winning position, or only the
    poison square (or nothing) is left.
    """
    for pos in candidate_moves(state):
        if winning_move(chomp(state, pos)) is None:
            return pos
    return None


def solve(state: BoardState) -> Optional[Position]:
    return winning_move(state)


def winning_moves(state: BoardState) -> List[Position]:
    """All moves leaving the opponent without a winning reply, in canonical order."""
    return [p for p in candidate_moves(state) if winning_move(chomp(state, p)) is None]


def is_winning(state: BoardState) -> bool:
    return winning_move(state) is not None


def solve_state(state: BoardState) -> Dict:
    moves = winning_moves(state)
    return {
        'value': +1 if moves else -1,
        'outcome': 'N' if moves else 'P',
        'winning_move': moves[0] if moves else None,
        'winning_moves': tuple(moves),
        'num_moves': len(candidate_moves(state)),
        'terminal': is_terminal(state),
    }


def reachable_states(size: BoardSize) -> List[BoardState]:
    """Breadth-first enumeration of every state reachable from the full board.

    Moves onto the poison square are followed too, so the empty board is part
    of the result.
    """
    start = BoardState.full(size)
    q = deque([start])
    seen = {start.squares}
    order = []
    while q:
        s = q.popleft()
        order.append(s)
        for pos in s:
            child = chomp(s, pos)
            if child.squares not in seen:
                seen.add(child.squares)
                q.append(child)
    return order


def solve_all_reachable(size: BoardSize) -> Dict[str, Dict]:
    """Enumerate and solve all states reachable from the full board."""
    solved = {}
    for s in reachable_states(size):
        solved[serialize_state(s)] = solve_state(s)
    return solved
