"""Text rendering of a board for terminals and logs."""
from .game_basics import POISON, BoardState

TITLE = """
+===========+
|           |
|+-+-+-+-+-+|
||C|h|o|m|p||
|+-+-+-+-+-+|
|           |
+===========+
"""

ALIVE = '#'
EATEN = '.'
POISON_MARK = 'P'


def format_board(state: BoardState) -> str:
    """Grid with column letters on top and row 1 first; the poison square is `P`."""
    m = state.to_matrix()
    rows, cols = m.shape
    width = len(str(rows))
    lines = [" " * (width + 1) + " ".join(state.size.alphabet[:cols])]
    for r in range(rows):
        cells = []
        for c in range(cols):
            if not m[r, c]:
                cells.append(EATEN)
            elif (c, r + 1) == (POISON.column, POISON.row):
                cells.append(POISON_MARK)
            else:
                cells.append(ALIVE)
        lines.append(f"{r + 1:>{width}} " + " ".join(cells))
    return "\n".join(lines)
