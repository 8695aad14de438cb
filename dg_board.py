"""
dg_board.py

This module defines the 3x3 board used by the board game. Cells are indexed
0..8 row by row:

    0 | 1 | 2
    3 | 4 | 5
    6 | 7 | 8

The player always plays X and moves first; the computer plays O. Turn
alternation guarantees at most one winning line exists when the board is
evaluated, so no check for multiple winners is made.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

BOARD_SIZE = 9

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

class Mark(Enum):
    PLAYER = "X"
    OPPONENT = "O"

    @property
    def other(self) -> "Mark":
        return Mark.OPPONENT if self is Mark.PLAYER else Mark.PLAYER

Cells = Sequence[Optional[Mark]]

def line_owner(cells: Cells) -> Optional[Mark]:
    """Returns the mark holding a full line in `cells`, if any."""
    for a, b, c in WINNING_LINES:
        if cells[a] is not None and cells[a] is cells[b] is cells[c]:
            return cells[a]
    return None

class Board:
    """A mutable 3x3 grid of marks."""
    def __init__(self, cells: Optional[Cells] = None):
        """
        Args:
            cells (Optional[Cells]): Nine initial cells. If None, the board
                starts empty.
        """
        if cells is None:
            cells = [None] * BOARD_SIZE
        if len(cells) != BOARD_SIZE:
            raise ValueError(f"A board has {BOARD_SIZE} cells, got {len(cells)}.")
        self._cells: List[Optional[Mark]] = list(cells)

    @classmethod
    def from_string(cls, layout: str) -> "Board":
        """
        Builds a board from a 9-character layout such as "X.O.X...O", where
        '.' (or '-', or a space) marks an empty cell. Newlines and '|' are
        ignored so a drawn grid can be pasted in.
        """
        symbols = [ch for ch in layout if ch not in "\n|"]
        cells = []
        for ch in symbols:
            if ch.upper() in ("X", "O"):
                cells.append(Mark(ch.upper()))
            elif ch in ".- ":
                cells.append(None)
            else:
                raise ValueError(f"Unexpected board symbol {ch!r}.")
        return cls(cells)

    @property
    def cells(self) -> Tuple[Optional[Mark], ...]:
        return tuple(self._cells)

    def __getitem__(self, index: int) -> Optional[Mark]:
        return self._cells[index]

    def is_free(self, index: int) -> bool:
        """True if `index` is on the board and nobody has marked it."""
        return 0 <= index < BOARD_SIZE and self._cells[index] is None

    def place(self, index: int, mark: Mark):
        """Marks a free cell. Raises ValueError for an invalid or taken cell."""
        if not 0 <= index < BOARD_SIZE:
            raise ValueError(f"Cell {index} is off the board.")
        if self._cells[index] is not None:
            raise ValueError(f"Cell {index} is already taken by {self._cells[index].value}.")
        self._cells[index] = mark

    def empty_cells(self) -> List[int]:
        return [i for i, cell in enumerate(self._cells) if cell is None]

    def is_full(self) -> bool:
        return all(cell is not None for cell in self._cells)

    def winner(self) -> Optional[Mark]:
        return line_owner(self._cells)

    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        """Returns the completed line, for hosts that want to highlight it."""
        for line in WINNING_LINES:
            a, b, c = line
            if self._cells[a] is not None and self._cells[a] is self._cells[b] is self._cells[c]:
                return line
        return None

    def copy(self) -> "Board":
        return Board(self._cells)

    def __eq__(self, other) -> bool:
        return isinstance(other, Board) and self._cells == other._cells

    def __str__(self) -> str:
        rows = []
        for start in range(0, BOARD_SIZE, 3):
            row = self._cells[start:start + 3]
            rows.append(" | ".join(cell.value if cell else str(start + i + 1) for i, cell in enumerate(row)))
        return "\n---------\n".join(rows)

    def __repr__(self) -> str:
        return "Board('" + "".join(cell.value if cell else "." for cell in self._cells) + "')"
