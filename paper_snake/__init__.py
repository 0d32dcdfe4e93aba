"""
Paper Snake - grid territory capture

Steer the snake out of your territory, trace a trail and come back to claim
the enclosed area. Hitting a wall or your own trail ends the game.
"""

from paper_snake.config import (
    AreaMethod,
    ConfigurationError,
    GameConfig,
    GeometryError,
    PaperSnakeError,
)
from paper_snake.engine import (
    Direction,
    GameState,
    GameStatus,
    SimulationSession,
    StepEvent,
    StepResult,
    advance,
    new_game,
    queue_direction,
)
from paper_snake.territory import MergeOutcome, RegionSet
from paper_snake.trail import TrailTracker, build_polygon

__all__ = [
    "AreaMethod",
    "ConfigurationError",
    "Direction",
    "GameConfig",
    "GameState",
    "GameStatus",
    "GeometryError",
    "MergeOutcome",
    "PaperSnakeError",
    "RegionSet",
    "SimulationSession",
    "StepEvent",
    "StepResult",
    "TrailTracker",
    "advance",
    "build_polygon",
    "new_game",
    "queue_direction",
]
