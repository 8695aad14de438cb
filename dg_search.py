"""
dg_search.py

Game-tree search for the board opponent. The search is an exhaustive minimax
over the whole remaining tree:

    - a line for the maximising mark scores  10 - depth (win sooner)
    - a line for the other mark scores      depth - 10 (lose later)
    - a full board with no line scores       0

Scores are a pure function of the position and the search depth, so they are
cached; a 3x3 board needs only a few thousand entries. Only the decision
whether to *use* the best move is random, see GameTreeSearch.
"""

import logging
import random
from functools import lru_cache
from typing import Optional, Tuple

from dg_board import BOARD_SIZE, Board, Mark, line_owner

log = logging.getLogger(__name__)

WIN_SCORE = 10

Position = Tuple[Optional[Mark], ...]


@lru_cache(maxsize=None)
def _score(cells: Position, to_move: Mark, maximizer: Mark, depth: int) -> int:
    owner = line_owner(cells)
    if owner is maximizer:
        return WIN_SCORE - depth
    if owner is not None:
        return depth - WIN_SCORE
    free = [i for i in range(BOARD_SIZE) if cells[i] is None]
    if not free:
        return 0

    scores = []
    for index in free:
        child = cells[:index] + (to_move,) + cells[index + 1:]
        scores.append(_score(child, to_move.other, maximizer, depth + 1))
    return max(scores) if to_move is maximizer else min(scores)


def minimax(board: Board, to_move: Mark, maximizer: Mark = Mark.OPPONENT, depth: int = 0) -> int:
    """
    Scores a position with both sides playing perfectly.

    Args:
        board (Board): The position to evaluate.
        to_move (Mark): The mark whose turn it is.
        maximizer (Mark): The mark the score is computed for.
        depth (int): Plies already played below the root of the search.

    Returns:
        int: Positive if `maximizer` wins, negative if it loses, 0 for a draw.
    """
    return _score(board.cells, to_move, maximizer, depth)


def best_move(board: Board, mark: Mark = Mark.OPPONENT) -> int:
    """
    Returns the cell with the highest minimax score for `mark`. Ties go to
    the lowest cell index.
    """
    free = board.empty_cells()
    if not free:
        raise ValueError("Cannot search a full board.")

    cells = board.cells
    best_index, best_value = free[0], None
    for index in free:
        child = cells[:index] + (mark,) + cells[index + 1:]
        value = _score(child, mark.other, mark, 0)
        if best_value is None or value > best_value:
            best_index, best_value = index, value
    log.debug("Best move for %s on %r: cell %d (score %d)", mark.value, board, best_index, best_value)
    return best_index


class GameTreeSearch:
    """
    Picks the board opponent's move. With probability `optimal_chance` the
    move is the searched best move, otherwise a uniformly random free cell.
    """
    def __init__(self, optimal_chance: float, rng: Optional[random.Random] = None,
                 mark: Mark = Mark.OPPONENT):
        self.optimal_chance = optimal_chance
        self.mark = mark
        self._rng = rng or random.Random()

    def choose_move(self, board: Board) -> int:
        free = board.empty_cells()
        if not free:
            raise ValueError("No move left on a full board.")
        if self._rng.random() < self.optimal_chance:
            return best_move(board, self.mark)
        move = self._rng.choice(free)
        log.debug("Playing random cell %d", move)
        return move
