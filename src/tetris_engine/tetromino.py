"""Tetromino definitions and matrix helpers.

Every piece is described by a small 0/1 occupancy matrix.  The base shapes are
not square, so they are padded with :func:`normalize` when a piece enters play;
from then on the active matrix is always square and :func:`rotate` is always
well defined.  All helpers return new arrays and never modify their input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

Matrix = NDArray[np.uint8]


class TetrominoType(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    J = "J"
    L = "L"
    O = "O"
    S = "S"
    T = "T"
    Z = "Z"


# Colour tag for each piece kind.  Renderers are free to ignore these.
COLORS: Dict[TetrominoType, str] = {
    TetrominoType.I: "#00f0f0",
    TetrominoType.J: "#0000f0",
    TetrominoType.L: "#f0a000",
    TetrominoType.O: "#f0f000",
    TetrominoType.S: "#00f000",
    TetrominoType.T: "#a000f0",
    TetrominoType.Z: "#f00000",
}

# Spawn orientation of each piece, top row first.
_BASE_SHAPES: Dict[TetrominoType, Tuple[Tuple[int, ...], ...]] = {
    TetrominoType.I: ((1, 1, 1, 1),),
    TetrominoType.J: ((1, 0, 0), (1, 1, 1)),
    TetrominoType.L: ((0, 0, 1), (1, 1, 1)),
    TetrominoType.O: ((1, 1), (1, 1)),
    TetrominoType.S: ((0, 1, 1), (1, 1, 0)),
    TetrominoType.T: ((0, 1, 0), (1, 1, 1)),
    TetrominoType.Z: ((1, 1, 0), (0, 1, 1)),
}


def as_matrix(rows: Sequence[Sequence[int]]) -> Matrix:
    """Return ``rows`` as a fresh two dimensional ``uint8`` array."""

    matrix = np.array(rows, dtype=np.uint8)
    if matrix.ndim != 2:
        raise ValueError("Piece matrix must be two dimensional")
    return matrix


def base_shape(shape: TetrominoType) -> Matrix:
    """Return a copy of the spawn orientation for ``shape``."""

    return as_matrix(_BASE_SHAPES[shape])


def rotate(matrix: Matrix) -> Matrix:
    """Return ``matrix`` rotated 90 degrees clockwise.

    For an ``N x N`` input the result satisfies
    ``result[x][N - 1 - y] == matrix[y][x]``.

    Raises:
        ValueError: If ``matrix`` is not square.  Pad it with
            :func:`normalize` first.
    """

    matrix = np.asarray(matrix, dtype=np.uint8)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError("Only square matrices can be rotated")
    return np.rot90(matrix, k=-1).copy()


def rotate_ccw(matrix: Matrix) -> Matrix:
    """Return ``matrix`` rotated 90 degrees counter-clockwise.

    Implemented as three clockwise turns so both directions share a single
    primitive.
    """

    return rotate(rotate(rotate(matrix)))


def normalize(matrix: Matrix) -> Matrix:
    """Pad an ``H x W`` matrix to ``N x N`` where ``N = max(H, W)``.

    The original content keeps its place in the top-left corner; the padding is
    empty.  Square input comes back unchanged in content.
    """

    matrix = np.asarray(matrix, dtype=np.uint8)
    height, width = matrix.shape
    size = max(height, width)
    result = np.zeros((size, size), dtype=np.uint8)
    result[:height, :width] = matrix
    return result


@dataclass(frozen=True)
class ActivePiece:
    """Falling piece: its kind, square matrix and board offset.

    ``x`` is the column and ``y`` the row of the matrix origin (top-left
    cell).  ``y`` may be negative while the piece is partly above the board.
    Instances are immutable; movement and rotation produce new pieces.
    """

    shape: TetrominoType
    matrix: Matrix = field(compare=False)
    x: int = 0
    y: int = 0

    @classmethod
    def spawn(
        cls, shape: TetrominoType, board_width: int, spawn_row: int = 0
    ) -> "ActivePiece":
        """Create ``shape`` horizontally centred at ``spawn_row``."""

        matrix = normalize(base_shape(shape))
        x = (board_width - matrix.shape[1]) // 2
        return cls(shape=shape, matrix=matrix, x=x, y=spawn_row)

    @property
    def size(self) -> int:
        return int(self.matrix.shape[0])

    def moved(self, dx: int, dy: int) -> "ActivePiece":
        """Return a copy translated by ``dx`` columns and ``dy`` rows."""

        return ActivePiece(self.shape, self.matrix, self.x + dx, self.y + dy)

    def with_matrix(self, matrix: Matrix, x: int) -> "ActivePiece":
        """Return a copy using ``matrix`` placed at column ``x``."""

        return ActivePiece(self.shape, matrix, x, self.y)

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Yield the absolute ``(row, col)`` of every occupied cell."""

        rows, cols = np.nonzero(self.matrix)
        for dr, dc in zip(rows.tolist(), cols.tolist()):
            yield self.y + dr, self.x + dc

    def rows(self) -> Tuple[Tuple[int, ...], ...]:
        """Return the matrix as nested tuples for read-only consumers."""

        return tuple(tuple(int(v) for v in row) for row in self.matrix)
