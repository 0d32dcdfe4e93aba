"""Shared fixtures for paper_snake tests."""

from __future__ import annotations

import pytest

from paper_snake.config import GameConfig
from paper_snake.territory import RegionSet


@pytest.fixture
def small_config() -> GameConfig:
    return GameConfig(GRID_WIDTH=10, GRID_HEIGHT=10)


@pytest.fixture
def initial_territory() -> RegionSet:
    """5x5 territory centred on (5, 5): cells 3..7 on both axes."""
    return RegionSet.initial((5, 5), 5)

