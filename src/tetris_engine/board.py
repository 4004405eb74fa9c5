"""Board representation for the playfield."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray

from .tetromino import Matrix, TetrominoType


# Dimensions of the standard board.
WIDTH = 10
HEIGHT = 20

Grid = NDArray[np.uint8]

# Mapping from ``TetrominoType`` to the integer stored in the grid.  The
# specific numeric values are not important as long as ``0`` represents an empty
# cell.
PIECE_VALUES = {t: i + 1 for i, t in enumerate(TetrominoType)}
VALUE_PIECES = {v: t for t, v in PIECE_VALUES.items()}


def create_empty_grid(height: int = HEIGHT, width: int = WIDTH) -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((height, width), dtype=np.uint8)


class Board:
    """Grid of locked cells.

    Row ``0`` is the top of the playfield.  The dimensions are fixed for the
    lifetime of the board; :meth:`compact` always leaves exactly ``height``
    rows behind.
    """

    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Board dimensions must be positive")
        self.width = width
        self.height = height
        self.grid: Grid = create_empty_grid(height, width)

    def get_cell(self, row: int, col: int) -> int:
        """Safely return the value at ``(row, col)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if 0 <= row < self.height and 0 <= col < self.width:
            return int(self.grid[row, col])
        raise IndexError("Cell out of bounds")

    def set_cell(self, row: int, col: int, value: int) -> None:
        """Safely set the value at ``(row, col)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if 0 <= row < self.height and 0 <= col < self.width:
            self.grid[row, col] = np.uint8(value)
        else:
            raise IndexError("Cell out of bounds")

    def _project(self, matrix: Matrix, x: int, y: int) -> tuple[np.ndarray, np.ndarray]:
        rows, cols = np.nonzero(np.asarray(matrix))
        return rows.astype(np.int64) + y, cols.astype(np.int64) + x

    def collide(self, matrix: Matrix, x: int, y: int) -> bool:
        """Return ``True`` if ``matrix`` placed at column ``x``, row ``y`` collides.

        A collision is any occupied cell left of column ``0``, right of the last
        column, at or below row ``height`` or on top of a locked cell.  Cells
        above the board (negative rows) only take part in the horizontal bound
        check, which lets pieces spawn partly outside the visible area.
        """

        rows, cols = self._project(matrix, x, y)
        if rows.size == 0:
            return False
        if np.any(cols < 0) or np.any(cols >= self.width) or np.any(rows >= self.height):
            return True
        visible = rows >= 0
        return bool(np.any(self.grid[rows[visible], cols[visible]] != 0))

    def merge(self, matrix: Matrix, x: int, y: int, shape: TetrominoType) -> None:
        """Write ``shape`` into every board cell covered by ``matrix``.

        Cells falling outside the board are dropped.
        """

        rows, cols = self._project(matrix, x, y)
        inside = (rows >= 0) & (rows < self.height) & (cols >= 0) & (cols < self.width)
        self.grid[rows[inside], cols[inside]] = np.uint8(PIECE_VALUES[shape])

    def detect_full_rows(self) -> List[int]:
        """Return the indices of completely filled rows in ascending order."""

        full_rows = np.all(self.grid != 0, axis=1)
        return [int(i) for i in np.flatnonzero(full_rows)]

    def compact(self, rows: Iterable[int]) -> int:
        """Remove ``rows`` and refill the top with empty rows.

        Indices outside the board and duplicates are ignored.  Returns the
        number of rows removed; the board height is unchanged.
        """

        targets = sorted({r for r in rows if 0 <= r < self.height}, reverse=True)
        if not targets:
            return 0
        remaining = np.delete(self.grid, targets, axis=0)
        new_rows = np.zeros((len(targets), self.width), dtype=self.grid.dtype)
        self.grid = np.vstack((new_rows, remaining))
        return len(targets)

    def cells(self) -> List[List[Optional[TetrominoType]]]:
        """Return a copy of the grid with piece kinds instead of integers."""

        return [[VALUE_PIECES.get(int(v)) for v in row] for row in self.grid]
