"""Gymnasium-compatible wrapper around the command-level engine.

Each action is one player command:

  0 move left, 1 move right, 2 rotate clockwise, 3 rotate counter-clockwise,
  4 soft drop, 5 hard drop, 6 hold, 7 gravity tick

Observation is a flat vector suitable for SB3 MlpPolicy. It includes:
  - board mask (width*height)
  - active piece one-hot (7)
  - held piece one-hot (7)
  - preview one-hots (preview_depth*7)

The environment runs on a simulated clock.  Whenever a lock starts a clearing
phase the clock is advanced past the clear delay and the clear is finished in
the same step, so the agent never observes a board without an active piece.
The reward is the score gained during the step.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .config import EngineConfig
from .game_state import Command, GameEvent, GameState
from .tetromino import TetrominoType
from .utils import format_grid, render_grid


ACTIONS = (
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
    Command.ROTATE_CW,
    Command.ROTATE_CCW,
    Command.SOFT_DROP,
    Command.HARD_DROP,
    Command.HOLD,
    Command.TICK,
)

_KINDS = list(TetrominoType)


class TetrisCommandEnv(gym.Env):
    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 60,
    }

    def __init__(
        self,
        *,
        config: Optional[EngineConfig] = None,
        step_ms: float = 50.0,
        max_steps: Optional[int] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.config = config or EngineConfig()
        self.step_ms = step_ms
        self.render_mode = render_mode
        self._state = GameState(self.config)
        self._now = 0.0
        self.action_space = spaces.Discrete(len(ACTIONS))
        cells = self.config.width * self.config.height
        self._obs_size = cells + 7 + 7 + 7 * self.config.preview_depth
        self.observation_space = spaces.Box(
            low=0.0, high=1.0, shape=(self._obs_size,), dtype=np.float32
        )
        self._steps = 0
        self._max_steps = max_steps

    @property
    def state(self) -> GameState:
        return self._state

    # ----------------------- Env API -----------------------
    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        super().reset(seed=seed)
        if seed is not None:
            self._state = GameState(self.config.with_overrides(seed=seed))
        self._now = 0.0
        self._steps = 0
        self._state.reset_game(now=self._now)
        return self._observation(), self._info(())

    def step(self, action: int):
        command = ACTIONS[int(action)]
        self._now += self.step_ms
        score_before = self._state.score
        result = self._state.dispatch(command, now=self._now)
        events = list(result.events)
        if self._state.clearing:
            self._now += self.config.clear_delay_ms
            events.extend(self._state.dispatch(Command.FINISH_CLEARING, now=self._now).events)
        self._steps += 1
        terminated = GameEvent.GAME_OVER in events
        # A game over resets the score, so never report a negative reward.
        reward = 0.0 if terminated else float(self._state.score - score_before)
        truncated = self._max_steps is not None and self._steps >= self._max_steps
        return self._observation(), reward, terminated, truncated, self._info(events)

    def render(self):
        return format_grid(render_grid(self._state.board, self._state.active))

    def close(self):
        return None

    # -------------------- Helpers -------------------------
    def _observation(self) -> np.ndarray:
        state = self._state
        board = (state.board.grid != 0).astype(np.float32).reshape(-1)
        active_oh = self._one_hot(state.active.shape if state.active else None)
        held_oh = self._one_hot(state.held)
        preview = [self._one_hot(kind) for kind in state.preview()]
        while len(preview) < self.config.preview_depth:
            preview.append(self._one_hot(None))
        return np.concatenate([board, active_oh, held_oh, *preview], dtype=np.float32)

    @staticmethod
    def _one_hot(kind: Optional[TetrominoType]) -> np.ndarray:
        out = np.zeros((7,), dtype=np.float32)
        if kind is not None:
            out[_KINDS.index(kind)] = 1.0
        return out

    def _info(self, events) -> Dict:
        return {
            "score": self._state.score,
            "lines": self._state.lines,
            "level": self._state.level,
            "events": tuple(e.value for e in events),
        }
