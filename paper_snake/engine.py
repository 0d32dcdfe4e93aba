"""
Simulation step engine for Paper Snake.

Game Mechanics:
- The agent moves one cell per tick in its current direction
- Leaving claimed territory starts a trail
- Returning to territory closes the trail into a polygon that merges in
- Hitting a wall or the agent's own trail ends the game

advance() is a pure function from one GameState to the next. The
SimulationSession owns the single live state of a game, feeds it direction
input and fires the game-over callback.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional, Tuple, Union

from paper_snake.config import GameConfig
from paper_snake.geometry import Point, PolygonUnion
from paper_snake.territory import RegionSet
from paper_snake.trail import TrailTracker


logger = logging.getLogger(__name__)


# ============================================================================
# ENUMS
# ============================================================================

class Direction(Enum):
    """Movement direction on the grid. y grows downwards."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class GameStatus(Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"


class StepEvent(Enum):
    """Things that happened during one tick."""
    MOVED = "moved"
    LEFT_TERRITORY = "left_territory"
    TERRITORY_CLAIMED = "territory_claimed"
    MERGE_FALLBACK = "merge_fallback"       # Union failed, polygon appended unmerged
    WALL_COLLISION = "wall_collision"
    TRAIL_COLLISION = "trail_collision"


# ============================================================================
# STATE
# ============================================================================

@dataclass(frozen=True)
class GameState:
    """
    Complete state of one game at a tick boundary.

    Instances are never mutated; every tick produces a new one.
    """

    position: Point
    direction: Direction
    next_direction: Direction
    territory: RegionSet
    trail: Tuple[Point, ...] = ()
    is_outside: bool = False
    status: GameStatus = GameStatus.RUNNING
    score: float = 0.0
    ticks: int = 0

    @property
    def is_game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]


@dataclass(frozen=True)
class StepResult:
    """New state plus the events that produced it."""

    state: GameState
    events: Tuple[StepEvent, ...] = field(default_factory=tuple)

    @property
    def game_over(self) -> bool:
        return self.state.is_game_over


def new_game(config: GameConfig) -> GameState:
    """
    Build the opening state for a session.

    The agent spawns at the grid centre facing right, inside a square
    territory of INITIAL_TERRITORY_SIZE cells per side.
    """
    start = config.start_position
    territory = RegionSet.initial(start, config.INITIAL_TERRITORY_SIZE)
    return GameState(
        position=start,
        direction=Direction.RIGHT,
        next_direction=Direction.RIGHT,
        territory=territory,
        score=territory.score(config.grid_cells, config.AREA_METHOD),
    )


def _coerce_direction(direction: Union[Direction, str]) -> Direction:
    if isinstance(direction, Direction):
        return direction
    return Direction[str(direction).upper()]


def queue_direction(state: GameState, direction: Union[Direction, str]) -> GameState:
    """
    Queue a direction change for the next tick.

    A request to reverse the current direction is ignored, as is any
    request after the game has ended.
    """
    direction = _coerce_direction(direction)
    if state.is_game_over or direction is state.direction.opposite:
        return state
    return replace(state, next_direction=direction)


def in_bounds(point: Point, config: GameConfig) -> bool:
    """Check if coordinates are within grid bounds."""
    x, y = point
    return 0 <= x < config.GRID_WIDTH and 0 <= y < config.GRID_HEIGHT


def _end_game(state: GameState, direction: Direction, event: StepEvent,
              config: GameConfig) -> StepResult:
    final = replace(
        state,
        direction=direction,
        status=GameStatus.GAME_OVER,
        score=state.territory.score(config.grid_cells, config.AREA_METHOD),
        ticks=state.ticks + 1,
    )
    return StepResult(final, (event,))


def advance(state: GameState, config: GameConfig,
            union: Optional[PolygonUnion] = None) -> StepResult:
    """
    Run one simulation tick.

    Args:
        state: State at the start of the tick
        config: Session configuration
        union: Polygon union backend for territory merges

    Returns:
        StepResult with the next state and the tick's events. A finished
        state is returned unchanged with no events.
    """
    if state.is_game_over:
        return StepResult(state)

    direction = state.next_direction
    dx, dy = direction.delta
    candidate = (state.x + dx, state.y + dy)

    # Check wall collision (game over)
    if not in_bounds(candidate, config):
        return _end_game(state, direction, StepEvent.WALL_COLLISION, config)

    # Check if we hit our own trail (game over)
    if candidate in state.trail:
        return _end_game(state, direction, StepEvent.TRAIL_COLLISION, config)

    now_in_territory = state.territory.contains(candidate)
    events = [StepEvent.MOVED]
    if not state.is_outside and not now_in_territory:
        events.append(StepEvent.LEFT_TERRITORY)

    tracker = TrailTracker.from_state(state.trail, state.is_outside)
    polygon = tracker.record_step(state.position, candidate, state.is_outside, now_in_territory)

    territory = state.territory
    if polygon is not None:
        outcome = territory.try_merge(polygon, union)
        territory = outcome.regions
        events.append(StepEvent.TERRITORY_CLAIMED)
        if not outcome.merged:
            events.append(StepEvent.MERGE_FALLBACK)
        tracker.reset()

    next_state = replace(
        state,
        position=candidate,
        direction=direction,
        territory=territory,
        trail=tracker.points,
        is_outside=not now_in_territory,
        score=territory.score(config.grid_cells, config.AREA_METHOD),
        ticks=state.ticks + 1,
    )
    return StepResult(next_state, tuple(events))


# ============================================================================
# SESSION
# ============================================================================

GameOverCallback = Callable[[float], None]


class SimulationSession:
    """
    Owner of one game's state.

    The session is the only thing that replaces its GameState. Restarting
    builds a new session rather than resetting this one.
    """

    def __init__(self, config: Optional[GameConfig] = None,
                 on_game_over: Optional[GameOverCallback] = None,
                 union: Optional[PolygonUnion] = None):
        """
        Initialize a session with a fresh state.

        Args:
            config: Grid and timing settings
            on_game_over: Called once with the final score when the game ends
            union: Polygon union backend, shapely by default
        """
        self.config = config if config is not None else GameConfig()
        self._on_game_over = on_game_over
        self._union = union
        self._state = new_game(self.config)
        self._notified = False
        logger.info("New session on %dx%d grid, start %s",
                    self.config.GRID_WIDTH, self.config.GRID_HEIGHT, self._state.position)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def score(self) -> float:
        return self._state.score

    @property
    def is_game_over(self) -> bool:
        return self._state.is_game_over

    def queue_direction(self, direction: Union[Direction, str]) -> bool:
        """
        Queue the direction for the next tick.

        Returns:
            True if the request was accepted
        """
        before = self._state
        self._state = queue_direction(before, direction)
        return self._state is not before

    def tick(self) -> StepResult:
        """Advance the game by one tick and report what happened."""
        result = advance(self._state, self.config, self._union)
        self._state = result.state

        if StepEvent.TERRITORY_CLAIMED in result.events:
            logger.info("Territory claimed, score now %.1f%%", result.state.score)

        if result.game_over and not self._notified:
            self._notified = True
            logger.info("Game over after %d ticks (%s), final score %.1f%%",
                        result.state.ticks, result.events[0].value, result.state.score)
            if self._on_game_over is not None:
                self._on_game_over(result.state.score)

        return result

    def restart(self) -> "SimulationSession":
        """Return a brand-new session with the same settings."""
        return SimulationSession(self.config, self._on_game_over, self._union)
