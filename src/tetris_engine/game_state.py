"""High level game session.

:class:`GameState` owns the board, the active piece, the piece queue, the hold
slot and the score counters, and applies one command at a time.  A session
moves through these phases::

    spawning -> falling -> locking -> [clearing] -> spawning

A spawn that collides straight away ends the game: the session resets itself
and spawns the first piece of a new game in the same call.

The engine has no clock.  Callers pass the current time to :meth:`tick`,
:meth:`finish_clearing` and :meth:`update`, or use :meth:`gravity_due` and
:meth:`clear_due` to decide when to issue those commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union
import logging
import random

from .board import Board
from .config import EngineConfig
from .piece_queue import PieceQueue
from .tetromino import ActivePiece, Matrix, TetrominoType, rotate, rotate_ccw
from .utils import gravity_interval_ms, level_for_lines, score_for


LOGGER = logging.getLogger(__name__)


class Command(str, Enum):
    """Discrete inputs accepted by :meth:`GameState.dispatch`."""

    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    SOFT_DROP = "soft_drop"
    HARD_DROP = "hard_drop"
    HOLD = "hold"
    TICK = "tick"
    FINISH_CLEARING = "finish_clearing"


class GameEvent(str, Enum):
    """Notifications emitted while applying commands."""

    LOCK = "lock"
    CLEAR = "clear"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class PieceView:
    shape: TetrominoType
    matrix: Tuple[Tuple[int, ...], ...]
    x: int
    y: int


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of everything a front-end needs to draw a frame."""

    board: Tuple[Tuple[Optional[TetrominoType], ...], ...]
    active: Optional[PieceView]
    ghost_row: Optional[int]
    preview: Tuple[TetrominoType, ...]
    held: Optional[TetrominoType]
    hold_available: bool
    score: int
    lines: int
    level: int
    drop_interval: float
    clearing_rows: Tuple[int, ...]
    clear_progress: float
    game_over: bool


@dataclass(frozen=True)
class StepResult:
    """Outcome of :meth:`GameState.dispatch`."""

    applied: bool
    events: Tuple[GameEvent, ...]
    snapshot: Snapshot


class GameState:
    """Mutable state for one game session.

    Every command returns ``True`` when it changed the session and ``False``
    when it was ignored (blocked move, hold already used, no active piece,
    clearing in progress and so on).  Ignored commands never modify state.

    A new session has no active piece: call :meth:`reset_game` to spawn the
    first one.  Until then every command, :meth:`update` included, is ignored.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._rng = rng if rng is not None else random.Random(self.config.seed)
        self.queue = PieceQueue(
            self.config.queue_depth,
            rng=self._rng,
            randomizer=self.config.randomizer,
        )
        self._now = 0.0
        self._events: List[GameEvent] = []
        self._start_new_game()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def _start_new_game(self) -> None:
        cfg = self.config
        self.board = Board(cfg.width, cfg.height)
        self.active: Optional[ActivePiece] = None
        self.held: Optional[TetrominoType] = None
        self.hold_available = True
        self.score = 0
        self.lines = 0
        self.level = 1
        self.pieces = 0
        self.drop_interval = self._interval_for(self.level)
        self.clearing_rows: List[int] = []
        self.clear_started_at: Optional[float] = None
        self.last_drop_at = self._now
        self.queue.refill()

    def reset_game(self, now: Optional[float] = None) -> None:
        """Reset the entire game state and spawn the first piece."""

        self._observe(now)
        self._start_new_game()
        self._spawn()

    def _game_over(self) -> None:
        LOGGER.info(
            "Game over. Score: %d, lines: %d, level: %d. Resetting.",
            self.score,
            self.lines,
            self.level,
        )
        self._events.append(GameEvent.GAME_OVER)
        self._start_new_game()
        self._spawn(reset_on_collision=False)

    def _spawn(self, *, reset_on_collision: bool = True) -> bool:
        """Make the head of the queue the active piece.

        Returns ``False`` when the new piece collided.  The game is then reset,
        unless ``reset_on_collision`` is false, in which case the session is
        left without an active piece.
        """

        shape = self.queue.next()
        piece = ActivePiece.spawn(shape, self.board.width, self.config.spawn_row)
        self.hold_available = True
        if self.board.collide(piece.matrix, piece.x, piece.y):
            self.active = None
            if reset_on_collision:
                self._game_over()
            else:
                LOGGER.warning("%s does not fit at the spawn position of an empty board", shape.value)
            return False
        self.active = piece
        return True

    # ------------------------------------------------------------------
    # Properties and timing helpers
    # ------------------------------------------------------------------
    @property
    def clearing(self) -> bool:
        return self.clear_started_at is not None

    def _observe(self, now: Optional[float]) -> None:
        if now is not None:
            self._now = float(now)

    def _interval_for(self, level: int) -> float:
        cfg = self.config
        return gravity_interval_ms(
            level,
            initial=cfg.initial_drop_interval_ms,
            step=cfg.drop_interval_step_ms,
            floor=cfg.min_drop_interval_ms,
        )

    def gravity_due(self, now: float) -> bool:
        """Return ``True`` once more than one drop interval has elapsed."""

        if self.clearing or self.active is None:
            return False
        return now - self.last_drop_at > self.drop_interval

    def clear_due(self, now: float) -> bool:
        """Return ``True`` once the clearing phase may be finished."""

        if self.clear_started_at is None:
            return False
        return now - self.clear_started_at >= self.config.clear_delay_ms

    def clear_progress(self, now: Optional[float] = None) -> float:
        """Return how far the clearing phase has run, from ``0.0`` to ``1.0``."""

        if self.clear_started_at is None:
            return 0.0
        if self.config.clear_delay_ms <= 0:
            return 1.0
        current = self._now if now is None else now
        elapsed = current - self.clear_started_at
        return min(1.0, max(0.0, elapsed / self.config.clear_delay_ms))

    # ------------------------------------------------------------------
    # Player commands
    # ------------------------------------------------------------------
    def _shift(self, dx: int, dy: int) -> bool:
        if self.active is None:
            return False
        moved = self.active.moved(dx, dy)
        if self.board.collide(moved.matrix, moved.x, moved.y):
            return False
        self.active = moved
        return True

    def move_left(self) -> bool:
        return self._shift(-1, 0)

    def move_right(self) -> bool:
        return self._shift(1, 0)

    def soft_drop(self) -> bool:
        """Move down one row, scoring a point.  A blocked drop does not lock."""

        if not self._shift(0, 1):
            return False
        self.score += 1
        return True

    def hard_drop(self, now: Optional[float] = None) -> bool:
        """Drop to the resting row, scoring two points per row, and lock."""

        if self.active is None:
            return False
        self._observe(now)
        rows = 0
        while self._shift(0, 1):
            rows += 1
        self.score += 2 * rows
        self.last_drop_at = self._now
        self._lock()
        return True

    def _rotate_to(self, matrix: Matrix) -> bool:
        piece = self.active
        if piece is None:
            return False
        for offset in self.config.kick_offsets:
            x = piece.x + offset
            if not self.board.collide(matrix, x, piece.y):
                self.active = piece.with_matrix(matrix, x)
                return True
        return False

    def rotate_cw(self) -> bool:
        """Rotate clockwise, trying each kick offset in order at the same row."""

        if self.active is None:
            return False
        return self._rotate_to(rotate(self.active.matrix))

    def rotate_ccw(self) -> bool:
        """Rotate counter-clockwise using the same kick offsets."""

        if self.active is None:
            return False
        return self._rotate_to(rotate_ccw(self.active.matrix))

    def hold(self) -> bool:
        """Swap the active piece with the held one.

        The swap may only happen once per spawned piece; further calls are
        ignored until another piece spawns.  With an empty slot the active kind
        is stored and the next queued piece spawns.  Otherwise the held kind
        comes back in its spawn orientation at the top of the board; if that
        position is blocked the hold is refused.
        """

        if self.active is None or not self.hold_available:
            return False

        current = self.active.shape
        if self.held is None:
            self.held = current
            self.active = None
            if not self._spawn():
                # The spawn ended the game; the fresh game may hold again.
                return True
        else:
            restored = ActivePiece.spawn(self.held, self.board.width, self.config.spawn_row)
            if self.board.collide(restored.matrix, restored.x, restored.y):
                return False
            self.held = current
            self.active = restored

        self.hold_available = False
        return True

    # ------------------------------------------------------------------
    # Gravity, locking and clearing
    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> bool:
        """Apply one gravity step, locking the piece if it cannot fall."""

        self._observe(now)
        if self.clearing or self.active is None:
            return False
        self.last_drop_at = self._now
        if not self._shift(0, 1):
            self._lock()
        return True

    def _lock(self) -> None:
        piece = self.active
        assert piece is not None
        self.board.merge(piece.matrix, piece.x, piece.y, piece.shape)
        self.active = None
        self.pieces += 1
        self._events.append(GameEvent.LOCK)
        LOGGER.debug("Locked %s at column %d, row %d", piece.shape.value, piece.x, piece.y)

        rows = self.board.detect_full_rows()
        if rows:
            self.clearing_rows = rows
            self.clear_started_at = self._now
            self._events.append(GameEvent.CLEAR)
            LOGGER.debug("Clearing rows %s", rows)
        else:
            self._spawn()

    def finish_clearing(self, now: Optional[float] = None) -> bool:
        """Remove the pending rows once the clear delay has elapsed.

        Points are awarded at the level in effect before the clear; the level
        and drop interval are then recomputed and the next piece spawns.
        """

        self._observe(now)
        if not self.clear_due(self._now):
            return False

        cleared = self.board.compact(self.clearing_rows)
        if cleared:
            points = score_for(cleared, self.level)
            self.score += points
            self.lines += cleared
            self.level = level_for_lines(self.lines, self.config.lines_per_level)
            self.drop_interval = self._interval_for(self.level)
            LOGGER.info(
                "Cleared %d row(s) for %d points. Score: %d, level: %d",
                cleared,
                points,
                self.score,
                self.level,
            )
        self.clearing_rows = []
        self.clear_started_at = None
        self.last_drop_at = self._now
        self._spawn()
        return True

    def update(self, now: float) -> bool:
        """Advance the clock: finish a due clear or apply a due gravity step."""

        if self.clearing:
            return self.finish_clearing(now)
        if self.gravity_due(now):
            return self.tick(now)
        self._observe(now)
        return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def ghost_row(self) -> Optional[int]:
        """Return the lowest row the active piece can reach, if any."""

        piece = self.active
        if piece is None:
            return None
        y = piece.y
        while not self.board.collide(piece.matrix, piece.x, y + 1):
            y += 1
        return y

    def preview(self, depth: Optional[int] = None) -> List[TetrominoType]:
        """Return the next ``depth`` kinds (default ``config.preview_depth``)."""

        if depth is None:
            depth = self.config.preview_depth
        return self.queue.peek(depth)

    def drain_events(self) -> Tuple[GameEvent, ...]:
        """Return and forget the notifications emitted since the last call."""

        events = tuple(self._events)
        self._events.clear()
        return events

    def snapshot(self, now: Optional[float] = None) -> Snapshot:
        piece = self.active
        view = None
        if piece is not None:
            view = PieceView(piece.shape, piece.rows(), piece.x, piece.y)
        return Snapshot(
            board=tuple(tuple(row) for row in self.board.cells()),
            active=view,
            ghost_row=self.ghost_row(),
            preview=tuple(self.preview()),
            held=self.held,
            hold_available=self.hold_available,
            score=self.score,
            lines=self.lines,
            level=self.level,
            drop_interval=self.drop_interval,
            clearing_rows=tuple(self.clearing_rows),
            clear_progress=self.clear_progress(now),
            game_over=GameEvent.GAME_OVER in self._events,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(
        self, command: Union[Command, str], now: Optional[float] = None
    ) -> StepResult:
        """Apply ``command`` and return the result with a fresh snapshot.

        Raises:
            ValueError: If ``command`` is not a known :class:`Command`.
        """

        command = Command(command)
        self._observe(now)
        handlers = {
            Command.MOVE_LEFT: self.move_left,
            Command.MOVE_RIGHT: self.move_right,
            Command.ROTATE_CW: self.rotate_cw,
            Command.ROTATE_CCW: self.rotate_ccw,
            Command.SOFT_DROP: self.soft_drop,
            Command.HARD_DROP: self.hard_drop,
            Command.HOLD: self.hold,
            Command.TICK: self.tick,
            Command.FINISH_CLEARING: self.finish_clearing,
        }
        applied = handlers[command]()
        if not applied:
            LOGGER.debug("Ignored %s", command.value)
        snapshot = self.snapshot()
        return StepResult(applied=applied, events=self.drain_events(), snapshot=snapshot)
