"""Construction-time tuning for a game session."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .board import HEIGHT, WIDTH

RANDOMIZERS = ("uniform", "bag")


@dataclass(frozen=True)
class EngineConfig:
    """Rules and timing constants for :class:`~tetris_engine.game_state.GameState`.

    Times are expressed in the caller's time unit; the defaults assume
    milliseconds.
    """

    width: int = WIDTH
    height: int = HEIGHT
    clear_delay_ms: float = 350.0
    initial_drop_interval_ms: float = 1000.0
    drop_interval_step_ms: float = 100.0
    min_drop_interval_ms: float = 100.0
    lines_per_level: int = 10
    queue_depth: int = 5
    preview_depth: int = 3
    kick_offsets: Tuple[int, ...] = (0, -1, 1, -2, 2)
    spawn_row: int = 0
    randomizer: str = "uniform"
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` if the configuration cannot be played."""

        if self.width < 4 or self.height < 4:
            raise ValueError("Board must be at least 4x4 to fit every piece")
        if self.spawn_row > self.height - 2:
            raise ValueError("spawn_row leaves no room for a two-row piece")
        if self.queue_depth < 3:
            raise ValueError("queue_depth must be at least 3")
        if not 0 <= self.preview_depth <= self.queue_depth:
            raise ValueError("preview_depth must be between 0 and queue_depth")
        if self.clear_delay_ms < 0:
            raise ValueError("clear_delay_ms must not be negative")
        if self.min_drop_interval_ms < 0 or self.drop_interval_step_ms < 0:
            raise ValueError("Drop interval tuning must not be negative")
        if self.initial_drop_interval_ms < self.min_drop_interval_ms:
            raise ValueError("initial_drop_interval_ms is below the floor")
        if self.lines_per_level <= 0:
            raise ValueError("lines_per_level must be positive")
        if not self.kick_offsets:
            raise ValueError("kick_offsets must not be empty")
        if self.randomizer not in RANDOMIZERS:
            raise ValueError(f"Unknown randomizer: {self.randomizer}")

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with ``changes`` applied (and validated)."""

        return replace(self, **changes)
