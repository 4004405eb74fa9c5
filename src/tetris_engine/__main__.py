"""Headless autoplay demo for the engine.

Run with: `python -m tetris_engine`

A random player issues commands against a simulated clock while gravity and
line clears run through :meth:`GameState.update`.  Periodic summaries are
logged and the final frame (board plus active piece) is printed as ASCII,
which makes this a quick smoke test of the whole engine.
"""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import RANDOMIZERS, EngineConfig
from .game_state import Command, GameEvent, GameState
from .utils import format_grid, render_grid


LOGGER = logging.getLogger(__name__)

# Relative weights of the commands the random player picks from.
_PLAYER_WEIGHTS = {
    Command.MOVE_LEFT: 4,
    Command.MOVE_RIGHT: 4,
    Command.ROTATE_CW: 2,
    Command.ROTATE_CCW: 1,
    Command.SOFT_DROP: 2,
    Command.HARD_DROP: 1,
    Command.HOLD: 1,
}


@dataclass
class RunStats:
    steps: int = 0
    locks: int = 0
    clears: int = 0
    game_overs: int = 0
    best_score: int = 0


def run_session(
    state: GameState,
    steps: int,
    *,
    seed: Optional[int] = None,
    step_ms: float = 100.0,
    log_interval: int = 0,
) -> RunStats:
    """Drive ``state`` with random commands for ``steps`` simulated frames."""

    player = random.Random(seed)
    commands = list(_PLAYER_WEIGHTS)
    weights = list(_PLAYER_WEIGHTS.values())
    stats = RunStats()
    now = 0.0
    state.reset_game(now=now)
    for index in range(1, steps + 1):
        now += step_ms
        command = player.choices(commands, weights=weights)[0]
        state.dispatch(command, now=now)
        state.update(now)
        for event in state.drain_events():
            if event is GameEvent.LOCK:
                stats.locks += 1
            elif event is GameEvent.CLEAR:
                stats.clears += 1
            elif event is GameEvent.GAME_OVER:
                stats.game_overs += 1
        stats.steps = index
        stats.best_score = max(stats.best_score, state.score)
        if log_interval > 0 and index % log_interval == 0:
            log_summary(state, stats, index=index)
    return stats


def log_summary(state: GameState, stats: RunStats, *, index: int) -> str:
    message = (
        f"score={state.score}, lines={state.lines}, level={state.level}, "
        f"locks={stats.locks}, clears={stats.clears}, game_overs={stats.game_overs}, "
        f"best={stats.best_score}"
    )
    LOGGER.info("Step %d: %s", index, message)
    return message


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="python -m tetris_engine", description=__doc__)
    parser.add_argument("--steps", type=int, default=2000, help="Number of simulated frames.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for pieces and player.")
    parser.add_argument(
        "--randomizer",
        choices=RANDOMIZERS,
        default="uniform",
        help="Piece draw policy.",
    )
    parser.add_argument(
        "--log-interval",
        type=int,
        default=500,
        help="Log a summary every N frames (0 disables periodic logging).",
    )
    parser.add_argument(
        "--no-frame",
        dest="print_frame",
        action="store_false",
        help="Skip printing the final ASCII frame.",
    )
    parser.set_defaults(print_frame=True)
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")

    config = EngineConfig(seed=args.seed, randomizer=args.randomizer)
    state = GameState(config)
    stats = run_session(state, args.steps, seed=args.seed, log_interval=args.log_interval)
    log_summary(state, stats, index=stats.steps)
    if args.print_frame:
        print(format_grid(render_grid(state.board, state.active)))


if __name__ == "__main__":
    main()
