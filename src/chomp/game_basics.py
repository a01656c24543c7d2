"""
Game basics: board representation, the chomp rule, serialization, validity.
Teaching notes:
- A board is the set of squares still alive. Columns are letters (a, b, ...),
  rows are numbers starting at 1. The poison square is a1.
- A move picks an alive square and removes it together with every square to
  its right and below it (higher row numbers).
- States are immutable values; every move builds a new one, so search
  branches never share mutations.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterator, List

import numpy as np

DEFAULT_ALPHABET = "abcdefghij"


class ChompError(ValueError):
    """Base class for board and move errors."""


class InvalidMove(ChompError):
    """The chosen square is not alive on the board."""


class OutOfRange(ChompError):
    """Board dimensions or a square lie outside the configured bounds."""


class EmptyBoard(ChompError):
    """An extent query was made against a board with no alive squares."""


@dataclass(frozen=True, order=True)
class Position:
    column: int
    row: int

    def to_algebraic(self, alphabet: str = DEFAULT_ALPHABET) -> str:
        if 0 <= self.column < len(alphabet):
            return f"{alphabet[self.column]}{self.row}"
        return f"({self.column}, {self.row})"


POISON = Position(0, 1)


@dataclass(frozen=True)
class BoardSize:
    rows: int
    columns: int
    alphabet: str = DEFAULT_ALPHABET

    def __post_init__(self) -> None:
        if len(set(self.alphabet)) != len(self.alphabet) or not self.alphabet:
            raise OutOfRange(f"Column alphabet must be non-empty and unique: {self.alphabet!r}")
        if self.rows < 1:
            raise OutOfRange(f"Rows must be positive, got {self.rows}")
        if self.columns < 1:
            raise OutOfRange(f"Columns must be positive, got {self.columns}")
        if self.columns > len(self.alphabet):
            raise OutOfRange(
                f"Columns must be at most {len(self.alphabet)} (alphabet {self.alphabet!r}), got {self.columns}"
            )

    @property
    def num_squares(self) -> int:
        return self.rows * self.columns

    def contains(self, pos: Position) -> bool:
        return 0 <= pos.column < self.columns and 1 <= pos.row <= self.rows

    def __str__(self) -> str:
        return f"{self.rows}x{self.columns}"


@dataclass(frozen=True)
class BoardState:
    """Alive squares of a board of a given size.

    Iteration yields squares in canonical order: ascending column, then
    ascending row. Equality is structural over size and squares.
    """
    size: BoardSize
    squares: FrozenSet[Position] = field(default_factory=frozenset)

    @classmethod
    def full(cls, size: BoardSize) -> BoardState:
        return cls(size, frozenset(
            Position(c, r) for c in range(size.columns) for r in range(1, size.rows + 1)
        ))

    @classmethod
    def from_positions(cls, size: BoardSize, positions) -> BoardState:
        squares = frozenset(positions)
        for pos in squares:
            if not size.contains(pos):
                raise OutOfRange(f"Square {pos.to_algebraic(size.alphabet)} is outside a {size} board")
        return cls(size, squares)

    def __contains__(self, pos: object) -> bool:
        return pos in self.squares

    def __len__(self) -> int:
        return len(self.squares)

    def __iter__(self) -> Iterator[Position]:
        return iter(sorted(self.squares))

    @property
    def is_empty(self) -> bool:
        return not self.squares

    @property
    def poison_only(self) -> bool:
        return self.squares == {POISON}

    def _require_squares(self) -> FrozenSet[Position]:
        if not self.squares:
            raise EmptyBoard("Board has no alive squares")
        return self.squares

    def min_row(self) -> int:
        return min(p.row for p in self._require_squares())

    def max_row(self) -> int:
        return max(p.row for p in self._require_squares())

    def min_column(self) -> int:
        return min(p.column for p in self._require_squares())

    def max_column(self) -> int:
        return max(p.column for p in self._require_squares())

    def column_heights(self) -> List[int]:
        """Alive square count per column, left to right."""
        heights = [0] * self.size.columns
        for p in self.squares:
            heights[p.column] += 1
        return heights

    def is_staircase(self) -> bool:
        """True if the alive squares are closed to the left and upwards."""
        for p in self.squares:
            if p.column > 0 and Position(p.column - 1, p.row) not in self.squares:
                return False
            if p.row > 1 and Position(p.column, p.row - 1) not in self.squares:
                return False
        return True

    def to_matrix(self) -> np.ndarray:
        """Boolean matrix of shape (rows, columns); entry [r-1, c] is True when alive."""
        m = np.zeros((self.size.rows, self.size.columns), dtype=bool)
        for p in self.squares:
            m[p.row - 1, p.column] = True
        return m


def new_board(rows: int, columns: int, alphabet: str = DEFAULT_ALPHABET) -> BoardState:
    return BoardState.full(BoardSize(rows, columns, alphabet))


def chomp(state: BoardState, pos: Position) -> BoardState:
    """Remove `pos` and everything right of it and at or below its row.

    The lower bound is the largest row alive anywhere on the board, so rows
    that have been emptied no longer take part.
    """
    if pos not in state.squares:
        raise InvalidMove(f"Square {pos.to_algebraic(state.size.alphabet)} is not on the board")
    end_row = max(p.row for p in state.squares)
    cols = {p.column for p in state.squares if p.column >= pos.column}
    remaining = frozenset(
        p for p in state.squares
        if not (p.column in cols and pos.row <= p.row <= end_row)
    )
    return BoardState(state.size, remaining)


def apply(state: BoardState, pos: Position) -> BoardState:
    return chomp(state, pos)


def parse_position(text: str, alphabet: str = DEFAULT_ALPHABET) -> Position:
    """Parse `b2`, `b 2` or `chomp b 2` into a Position (column letter, row number)."""
    raw = text.strip()
    if raw.lower().startswith("chomp"):
        raw = raw[len("chomp"):]
    raw = raw.replace(" ", "")
    if len(raw) < 2 or not raw[1:].isdigit():
        raise InvalidMove(f"Cannot read a square from {text.strip()!r}; use e.g. 'chomp b 2'")
    letter = raw[0] if raw[0] in alphabet else raw[0].lower()
    if letter not in alphabet:
        raise InvalidMove(f"Unknown column {raw[0]!r}; columns are {alphabet!r}")
    return Position(alphabet.index(letter), int(raw[1:]))


def serialize_state(state: BoardState) -> str:
    if state.is_empty:
        return "-"
    return " ".join(p.to_algebraic(state.size.alphabet) for p in state)


def deserialize_state(text: str, size: BoardSize) -> BoardState:
    raw = text.strip()
    if raw == "-":
        return BoardState(size, frozenset())
    tokens = raw.replace(",", " ").split()
    if not tokens:
        raise InvalidMove("Board string is empty; use '-' for an empty board")
    return BoardState.from_positions(size, (parse_position(t, size.alphabet) for t in tokens))


def size_for_squares(text: str, alphabet: str = DEFAULT_ALPHABET) -> BoardSize:
    """Smallest board that holds every square named in `text` (1x1 for `-`)."""
    raw = text.strip()
    if raw == "-":
        return BoardSize(1, 1, alphabet)
    tokens = raw.replace(",", " ").split()
    if not tokens:
        raise InvalidMove("Board string is empty")
    positions = [parse_position(t, alphabet) for t in tokens]
    return BoardSize(
        rows=max(p.row for p in positions),
        columns=max(p.column for p in positions) + 1,
        alphabet=alphabet,
    )
