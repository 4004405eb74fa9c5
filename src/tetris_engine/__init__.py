"""Rules engine for a falling-block puzzle game."""

from .board import Board
from .config import EngineConfig
from .game_state import Command, GameEvent, GameState, PieceView, Snapshot, StepResult
from .piece_queue import PieceQueue
from .tetromino import (
    COLORS,
    ActivePiece,
    TetrominoType,
    base_shape,
    normalize,
    rotate,
    rotate_ccw,
)
from .utils import gravity_interval_ms, level_for_lines, render_grid, score_for

__all__ = [
    "Board",
    "EngineConfig",
    "Command",
    "GameEvent",
    "GameState",
    "PieceView",
    "Snapshot",
    "StepResult",
    "PieceQueue",
    "COLORS",
    "ActivePiece",
    "TetrominoType",
    "base_shape",
    "normalize",
    "rotate",
    "rotate_ccw",
    "gravity_interval_ms",
    "level_for_lines",
    "render_grid",
    "score_for",
]
