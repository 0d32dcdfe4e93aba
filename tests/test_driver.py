"""Tests for paper_snake.driver module."""

from __future__ import annotations

from paper_snake.config import GameConfig
from paper_snake.driver import TickDriver
from paper_snake.engine import SimulationSession
from tests.fakes import FakeClock


def _driver(clock: FakeClock, **kwargs) -> TickDriver:
    session = SimulationSession(GameConfig(GRID_WIDTH=40, GRID_HEIGHT=10))
    return TickDriver(session, interval_ms=100, clock=clock, **kwargs)


class TestTickDriver:
    def test_no_tick_before_interval(self) -> None:
        clock = FakeClock(1000)
        driver = _driver(clock)
        clock.now = 1099
        assert driver.update() == 0
        assert driver.session.state.ticks == 0

    def test_one_tick_per_interval(self) -> None:
        clock = FakeClock()
        driver = _driver(clock)
        clock.now = 100
        assert driver.update() == 1
        clock.now = 150
        assert driver.update() == 0
        clock.now = 200
        assert driver.update() == 1
        assert driver.session.state.ticks == 2

    def test_catches_up_on_slow_frames(self) -> None:
        clock = FakeClock()
        driver = _driver(clock)
        clock.now = 350
        assert driver.update() == 3
        clock.now = 400
        assert driver.update() == 1

    def test_backlog_is_capped(self) -> None:
        clock = FakeClock()
        driver = _driver(clock, max_catchup=4)
        clock.now = 10_000
        assert driver.update() == 4
        clock.now = 10_099
        assert driver.update() == 0
        clock.now = 10_100
        assert driver.update() == 1

    def test_defaults_from_config(self) -> None:
        session = SimulationSession(GameConfig(TICK_INTERVAL_MS=40, MAX_CATCHUP_TICKS=2))
        driver = TickDriver(session, clock=FakeClock())
        assert driver.interval_ms == 40
        assert driver.max_catchup == 2

    def test_stops_at_game_over(self) -> None:
        clock = FakeClock()
        session = SimulationSession(GameConfig(GRID_WIDTH=10, GRID_HEIGHT=10))
        driver = TickDriver(session, interval_ms=100, clock=clock, max_catchup=10)
        clock.now = 1000
        assert driver.update() == 5
        assert session.is_game_over
        assert not driver.running

    def test_stop_halts_ticking(self) -> None:
        clock = FakeClock()
        driver = _driver(clock)
        driver.stop()
        clock.now = 500
        assert driver.update() == 0
        assert driver.session.state.ticks == 0
