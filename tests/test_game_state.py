from __future__ import annotations

import numpy as np
import pytest

from tetris_engine.board import PIECE_VALUES
from tetris_engine.game_state import Command, GameEvent, GameState
from tetris_engine.tetromino import (
    ActivePiece,
    TetrominoType,
    base_shape,
    normalize,
    rotate,
    rotate_ccw,
)

from helpers import SequenceRng


def _started(kind: TetrominoType = TetrominoType.O) -> GameState:
    state = GameState(rng=SequenceRng([kind]))
    state.reset_game(now=0)
    return state


def _vertical_i(x: int, y: int) -> ActivePiece:
    # Three clockwise turns leave the I piece in the first matrix column.
    return ActivePiece(TetrominoType.I, rotate_ccw(normalize(base_shape(TetrominoType.I))), x, y)


def _horizontal_i(x: int, y: int) -> ActivePiece:
    return ActivePiece(TetrominoType.I, normalize(base_shape(TetrominoType.I)), x, y)


def test_commands_are_ignored_before_first_spawn():
    state = GameState(rng=SequenceRng([TetrominoType.O]))
    assert state.active is None
    assert not state.move_left()
    assert not state.rotate_cw()
    assert not state.hard_drop()
    assert not state.hold()
    assert not state.tick(100)
    assert not state.gravity_due(5000)
    assert not state.update(5000)
    assert state.score == 0


def test_reset_spawns_centred_piece():
    state = _started()
    assert state.active is not None
    assert (state.active.x, state.active.y) == (4, 0)
    assert state.hold_available
    assert (state.score, state.lines, state.level) == (0, 0, 1)
    assert state.drop_interval == 1000
    assert state.drain_events() == ()


def test_hard_drop_lands_o_piece_at_bottom():
    state = _started()
    assert state.ghost_row() == 18

    assert state.hard_drop(now=10)

    value = PIECE_VALUES[TetrominoType.O]
    for row in (18, 19):
        for col in (4, 5):
            assert state.board.get_cell(row, col) == value
    assert int(np.count_nonzero(state.board.grid)) == 4
    assert state.score == 2 * 18
    assert GameEvent.LOCK in state.drain_events()
    # The next piece spawned straight away.
    assert state.active is not None
    assert (state.active.x, state.active.y) == (4, 0)
    assert state.pieces == 1


def test_move_stops_at_walls():
    state = _started()
    for _ in range(4):
        assert state.move_left()
    assert state.active.x == 0
    assert not state.move_left()
    assert state.active.x == 0
    for _ in range(8):
        assert state.move_right()
    assert state.active.x == 8
    assert not state.move_right()
    assert state.score == 0


def test_soft_drop_scores_and_never_locks():
    state = _started()
    assert state.soft_drop()
    assert state.active.y == 1
    assert state.score == 1

    state.active = state.active.moved(0, 17)
    resting = state.active
    assert not state.soft_drop()
    assert state.active is resting
    assert state.score == 1
    assert state.drain_events() == ()
    assert not state.board.grid.any()


def test_tick_falls_then_locks_and_spawns():
    state = _started()
    assert state.tick(1000)
    assert state.active.y == 1
    assert state.last_drop_at == 1000

    state.active = state.active.moved(0, 17)
    assert state.tick(2000)
    assert GameEvent.LOCK in state.drain_events()
    assert state.board.get_cell(19, 4) == PIECE_VALUES[TetrominoType.O]
    assert state.active.y == 0
    assert state.score == 0


def test_rotation_in_open_space_keeps_position():
    state = _started(TetrominoType.T)
    state.active = state.active.moved(0, 5)
    before = state.active
    assert state.rotate_cw()
    assert (state.active.x, state.active.y) == (before.x, before.y)
    assert np.array_equal(state.active.matrix, rotate(before.matrix))
    assert state.rotate_ccw()
    assert np.array_equal(state.active.matrix, before.matrix)


@pytest.mark.parametrize(
    "blocked_cols, expected_x",
    [
        ((6,), 2),  # offset -1
        ((6, 5), 4),  # offset +1
        ((6, 5, 7), 1),  # offset -2
        ((6, 5, 7, 4), 5),  # offset +2
    ],
)
def test_rotation_kicks_follow_offset_order(blocked_cols, expected_x):
    state = _started()
    state.active = _horizontal_i(3, 5)
    for col in blocked_cols:
        state.board.set_cell(7, col, 1)

    assert state.rotate_cw()

    assert state.active.x == expected_x
    assert state.active.y == 5
    # Clockwise turn of a horizontal I fills matrix column 3.
    assert sorted(c for _, c in state.active.cells()) == [expected_x + 3] * 4


def test_rotation_rejected_when_every_kick_collides():
    state = _started()
    state.active = _horizontal_i(3, 5)
    for col in (4, 5, 6, 7, 8):
        state.board.set_cell(7, col, 1)
    before = state.active

    assert not state.rotate_cw()
    assert state.active is before


def test_rotation_against_right_wall():
    state = _started()
    # Vertical I in the last column: every kick leaves the board.
    state.active = _vertical_i(9, 5)
    before = state.active
    assert not state.rotate_cw()
    assert state.active is before

    # One column further in, the -2 kick fits.
    state.active = _vertical_i(8, 5)
    assert state.rotate_cw()
    assert state.active.x == 6
    assert sorted(state.active.cells()) == [(5, 6), (5, 7), (5, 8), (5, 9)]


def test_ghost_row_tracks_obstacles():
    state = _started()
    state.board.set_cell(12, 5, 1)
    assert state.ghost_row() == 10
    state.active = state.active.moved(-2, 0)
    assert state.ghost_row() == 18


def test_gravity_due_and_update():
    state = _started()
    assert not state.gravity_due(1000)
    assert state.gravity_due(1001)
    assert not state.update(500)
    assert state.active.y == 0
    assert state.update(1001)
    assert state.active.y == 1
    assert state.last_drop_at == 1001
    assert not state.gravity_due(1500)


def test_dispatch_returns_snapshot_and_events():
    state = _started()
    result = state.dispatch(Command.HARD_DROP, now=50)
    assert result.applied
    assert result.events == (GameEvent.LOCK,)
    snap = result.snapshot
    assert snap.board[19][4] is TetrominoType.O
    assert snap.active is not None and snap.active.shape is TetrominoType.O
    assert snap.active.matrix == ((1, 1), (1, 1))
    assert snap.ghost_row == 16
    assert len(snap.preview) == 3
    assert snap.score == 36
    assert snap.game_over is False
    assert state.drain_events() == ()


def test_dispatch_accepts_strings_and_rejects_unknown():
    state = _started()
    result = state.dispatch("move_left")
    assert result.applied
    assert state.active.x == 3
    with pytest.raises(ValueError):
        state.dispatch("teleport")


def test_snapshot_is_independent_of_state():
    state = _started()
    snap = state.snapshot()
    state.hard_drop()
    assert snap.board[19][4] is None
    assert snap.score == 0
