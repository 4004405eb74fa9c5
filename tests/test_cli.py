import logging

from tetris_engine.__main__ import RunStats, log_summary, main, run_session
from tetris_engine.config import EngineConfig
from tetris_engine.game_state import GameState


def test_run_session_is_reproducible():
    first = GameState(EngineConfig(seed=5))
    second = GameState(EngineConfig(seed=5))
    stats_a = run_session(first, 600, seed=5)
    stats_b = run_session(second, 600, seed=5)
    assert stats_a == stats_b
    assert first.score == second.score
    assert (first.board.grid == second.board.grid).all()
    assert stats_a.steps == 600
    assert stats_a.locks > 0


def test_log_summary_reports_counters(caplog):
    state = GameState()
    state.reset_game()
    stats = RunStats(steps=10, locks=3, clears=1, game_overs=0, best_score=120)
    with caplog.at_level(logging.INFO, logger="tetris_engine.__main__"):
        message = log_summary(state, stats, index=10)
    assert "locks=3" in message
    assert "Step 10" in caplog.text


def test_main_logs_and_prints_frame(caplog, capsys):
    with caplog.at_level(logging.INFO, logger="tetris_engine.__main__"):
        main(["--steps", "200", "--seed", "1", "--log-interval", "100", "--randomizer", "bag"])
    assert "Step 100" in caplog.text
    assert "Step 200" in caplog.text
    frame = capsys.readouterr().out.strip().splitlines()
    assert len(frame) == 20
    assert all(len(line) == 10 for line in frame)


def test_main_without_frame(capsys):
    main(["--steps", "50", "--seed", "2", "--log-interval", "0", "--no-frame"])
    assert capsys.readouterr().out == ""
