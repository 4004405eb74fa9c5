"""Utility helpers for the engine: scoring, levelling and ASCII frames."""

from __future__ import annotations

from typing import List, Optional

from .board import Board, PIECE_VALUES
from .tetromino import ActivePiece


# Base points for clearing 1-4 rows at once.
LINE_SCORES = {1: 100, 2: 300, 3: 500, 4: 800}


def score_for(cleared: int, level: int) -> int:
    """Return the points for clearing ``cleared`` rows at ``level``.

    More than four rows cannot be cleared by a single tetromino, but the value
    is still defined as ``cleared * 1000`` per level.
    """

    if cleared <= 0:
        return 0
    base = LINE_SCORES.get(cleared, cleared * 1000)
    return base * level


def level_for_lines(lines: int, lines_per_level: int = 10) -> int:
    """Return the level reached after clearing ``lines`` rows (starts at 1)."""

    return lines // lines_per_level + 1


def gravity_interval_ms(
    level: int,
    *,
    initial: float = 1000.0,
    step: float = 100.0,
    floor: float = 100.0,
) -> float:
    """Return the fall interval in milliseconds for ``level``.

    The interval shrinks linearly with the level and never drops below
    ``floor``.
    """

    return max(floor, initial - (level - 1) * step)


def render_grid(board: Board, active: Optional[ActivePiece] = None) -> List[List[int]]:
    """Return a copy of the board grid with the active piece overlaid.

    This is a convenience for front-ends that want a single 2D array to draw
    without mutating the underlying board state (i.e. without locking the
    piece). Cells occupied by the active piece receive the mapped integer
    value for the piece's shape.
    """

    grid = [[int(v) for v in row] for row in board.grid]
    if active is not None:
        for r, c in active.cells():
            if 0 <= r < board.height and 0 <= c < board.width:
                grid[r][c] = PIECE_VALUES[active.shape]
    return grid


def format_grid(grid: List[List[int]]) -> str:
    """Render ``grid`` as text, ``#`` for filled and ``.`` for empty cells."""

    return "\n".join("".join("#" if cell else "." for cell in row) for row in grid)
