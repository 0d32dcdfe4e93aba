"""Tests for paper_snake.engine module."""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from paper_snake.config import AreaMethod, ConfigurationError, GameConfig, GeometryError
from paper_snake.engine import (
    Direction,
    GameStatus,
    SimulationSession,
    StepEvent,
    advance,
    new_game,
    queue_direction,
)
from tests.fakes import FailingUnion


def _drive(session: SimulationSession, moves):
    """Queue each direction (None keeps going) and tick once per entry."""
    results = []
    for move in moves:
        if move is not None:
            session.queue_direction(move)
        results.append(session.tick())
    return results


# Leaves the 5x5 square at (7, 5), loops round (9, 3) and re-enters at (7, 3).
EXCURSION = [
    None, None, None, None,
    Direction.UP, None,
    Direction.LEFT, None,
]


class TestConfig:
    @pytest.mark.parametrize("field", ["GRID_WIDTH", "GRID_HEIGHT", "CELL_SIZE",
                                       "TICK_INTERVAL_MS", "INITIAL_TERRITORY_SIZE"])
    def test_non_positive_values_rejected(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            GameConfig(**{field: 0})

    def test_from_viewport(self) -> None:
        config = GameConfig.from_viewport(805, 599)
        assert (config.GRID_WIDTH, config.GRID_HEIGHT) == (80, 59)
        assert config.grid_cells == 80 * 59

    def test_viewport_smaller_than_a_cell(self) -> None:
        with pytest.raises(ConfigurationError):
            GameConfig.from_viewport(5, 500)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            GameConfig(GRID_HEIGHT=-3)


class TestNewGame:
    def test_initial_state(self, small_config: GameConfig) -> None:
        state = new_game(small_config)
        assert state.position == (5, 5)
        assert state.direction is Direction.RIGHT
        assert state.trail == ()
        assert not state.is_outside
        assert state.status is GameStatus.RUNNING
        assert state.score == pytest.approx(25.0)
        assert state.territory.contains((5, 5))


class TestDirection:
    def test_reverse_is_rejected(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        assert not session.queue_direction(Direction.LEFT)
        assert session.state.next_direction is Direction.RIGHT
        session.tick()
        assert session.state.direction is Direction.RIGHT
        assert session.state.position == (6, 5)

    def test_reversal_checked_against_current_not_queued(self, small_config: GameConfig) -> None:
        state = new_game(small_config)
        state = queue_direction(state, Direction.UP)
        state = queue_direction(state, Direction.LEFT)
        assert state.next_direction is Direction.UP
        state = queue_direction(state, Direction.DOWN)
        assert state.next_direction is Direction.DOWN

    def test_last_write_wins(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        assert session.queue_direction(Direction.UP)
        assert session.queue_direction(Direction.DOWN)
        session.tick()
        assert session.state.position == (5, 6)

    def test_direction_applies_on_next_tick_only(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        session.queue_direction(Direction.UP)
        assert session.state.direction is Direction.RIGHT
        assert session.state.position == (5, 5)

    def test_requeueing_current_direction_is_accepted(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        assert session.queue_direction(Direction.RIGHT)
        assert session.state.next_direction is Direction.RIGHT

    def test_string_directions(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        assert session.queue_direction("up")
        assert session.state.next_direction is Direction.UP

    def test_opposites(self) -> None:
        for direction in Direction:
            assert direction.opposite.opposite is direction
            dx, dy = direction.delta
            odx, ody = direction.opposite.delta
            assert (dx + odx, dy + ody) == (0, 0)


class TestWallCollision:
    def test_running_into_right_wall(self, small_config: GameConfig) -> None:
        scores = []
        session = SimulationSession(small_config, on_game_over=scores.append)
        results = _drive(session, [None] * 4)
        assert session.state.position == (9, 5)
        assert not any(r.game_over for r in results)

        result = session.tick()
        assert result.game_over
        assert result.events == (StepEvent.WALL_COLLISION,)
        assert session.state.position == (9, 5)
        assert scores == [pytest.approx(25.0)]

    def test_game_over_reported_once(self, small_config: GameConfig) -> None:
        scores = []
        session = SimulationSession(small_config, on_game_over=scores.append)
        _drive(session, [None] * 8)
        assert len(scores) == 1

    def test_finished_state_is_frozen(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        _drive(session, [None] * 5)
        final = session.state
        assert not session.queue_direction(Direction.UP)
        result = session.tick()
        assert result.events == ()
        assert session.state is final


class TestTrailCollision:
    def test_hitting_trail_ends_before_merge(self, small_config: GameConfig) -> None:
        state = replace(
            new_game(small_config),
            position=(2, 3),
            trail=((2, 5), (2, 4), (3, 3)),
            is_outside=True,
        )
        result = advance(state, small_config, union=FailingUnion(GeometryError("unused")))
        assert result.game_over
        assert result.events == (StepEvent.TRAIL_COLLISION,)
        assert result.state.territory is state.territory
        assert result.state.position == (2, 3)
        assert result.state.score == pytest.approx(25.0)

    def test_session_reports_trail_collision(self, small_config: GameConfig) -> None:
        scores = []
        session = SimulationSession(small_config, on_game_over=scores.append)
        # Leave at (7, 5) then curl back onto the trail at (8, 5)
        results = _drive(session, [None, None, None, None,
                                   Direction.UP, Direction.LEFT, Direction.DOWN])
        assert results[-2].state.position == (8, 4)
        assert results[-1].events == (StepEvent.TRAIL_COLLISION,)
        assert scores == [pytest.approx(25.0)]


class TestExcursion:
    def test_round_trip_claims_area(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        before = session.state.territory.area()
        results = _drive(session, EXCURSION)

        assert StepEvent.LEFT_TERRITORY in results[2].events
        assert results[2].state.trail == ((7, 5),)
        assert StepEvent.TERRITORY_CLAIMED in results[-1].events

        state = session.state
        assert state.position == (7, 3)
        assert state.trail == ()
        assert not state.is_outside
        assert state.territory.area() > before
        assert state.territory.contains((8, 4))
        assert state.score == pytest.approx(30.0)

    def test_trail_grows_while_outside(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config)
        results = _drive(session, EXCURSION[:6])
        assert results[-1].state.is_outside
        assert results[-1].state.trail == ((7, 5), (8, 5), (9, 5), (9, 4))

    def test_failed_union_keeps_playing(self, small_config: GameConfig) -> None:
        session = SimulationSession(small_config, union=FailingUnion(GeometryError("nope")))
        results = _drive(session, EXCURSION)
        assert StepEvent.MERGE_FALLBACK in results[-1].events
        assert len(session.state.territory) == 2
        assert session.state.territory.contains((8, 4))
        assert not session.is_game_over

    def test_exact_area_scoring(self) -> None:
        config = GameConfig(GRID_WIDTH=10, GRID_HEIGHT=10, AREA_METHOD=AreaMethod.EXACT)
        session = SimulationSession(config)
        _drive(session, EXCURSION)
        assert session.score == pytest.approx(27.0)


class TestAdvance:
    def test_input_state_is_not_mutated(self, small_config: GameConfig) -> None:
        state = new_game(small_config)
        result = advance(state, small_config)
        assert state.position == (5, 5)
        assert state.ticks == 0
        assert result.state.ticks == 1

    def test_score_stays_in_bounds(self) -> None:
        config = GameConfig(GRID_WIDTH=16, GRID_HEIGHT=12)
        rng = random.Random(7)
        for _ in range(25):
            session = SimulationSession(config)
            while not session.is_game_over:
                if rng.random() < 0.3:
                    session.queue_direction(rng.choice(list(Direction)))
                session.tick()
                assert 0.0 <= session.score <= 100.0
                assert session.state.ticks < 10_000


class TestRestart:
    def test_restart_builds_fresh_state(self, small_config: GameConfig) -> None:
        scores = []
        session = SimulationSession(small_config, on_game_over=scores.append)
        _drive(session, [None] * 5)
        fresh = session.restart()
        assert fresh is not session
        assert not fresh.is_game_over
        assert fresh.state.position == (5, 5)
        assert session.is_game_over
        _drive(fresh, [None] * 5)
        assert len(scores) == 2
