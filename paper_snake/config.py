"""
Session configuration and error types for Paper Snake.

All tunables live on a frozen GameConfig so a running session can never
observe its grid change underneath it.
"""

from dataclasses import dataclass
from enum import Enum


# ============================================================================
# DEFAULTS
# ============================================================================

CELL_SIZE = 10                  # Pixels per grid cell
TICK_INTERVAL_MS = 100          # Milliseconds per grid move
INITIAL_TERRITORY_SIZE = 5      # 5x5 cells starting territory
FPS = 60
MAX_CATCHUP_TICKS = 5


# ============================================================================
# ERRORS
# ============================================================================

class PaperSnakeError(Exception):
    """Base class for all Paper Snake errors."""


class ConfigurationError(PaperSnakeError, ValueError):
    """Raised when a session is configured with unusable values."""


class GeometryError(PaperSnakeError):
    """Raised by polygon union backends that cannot process their input."""


# ============================================================================
# CONFIGURATION
# ============================================================================

class AreaMethod(Enum):
    """How claimed area is measured for scoring."""
    BOUNDING_BOX = "bounding_box"   # Sum of ring bounding boxes
    EXACT = "exact"                 # Shoelace area, holes subtracted


@dataclass(frozen=True)
class GameConfig:
    """Configuration settings for grid dimensions and timing."""

    # Grid settings
    GRID_WIDTH: int = 80
    GRID_HEIGHT: int = 60
    CELL_SIZE: int = CELL_SIZE

    # Game mechanics
    TICK_INTERVAL_MS: int = TICK_INTERVAL_MS
    # Cells per side of the starting square. The square is centred on a cell,
    # so an even size covers size + 1 cells per side.
    INITIAL_TERRITORY_SIZE: int = INITIAL_TERRITORY_SIZE
    AREA_METHOD: AreaMethod = AreaMethod.BOUNDING_BOX

    # Driver settings
    FPS: int = FPS
    MAX_CATCHUP_TICKS: int = MAX_CATCHUP_TICKS

    def __post_init__(self):
        for name in ("GRID_WIDTH", "GRID_HEIGHT", "CELL_SIZE", "TICK_INTERVAL_MS",
                     "INITIAL_TERRITORY_SIZE", "FPS", "MAX_CATCHUP_TICKS"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")
        if not isinstance(self.AREA_METHOD, AreaMethod):
            raise ConfigurationError(f"AREA_METHOD must be an AreaMethod, got {self.AREA_METHOD!r}")

    @classmethod
    def from_viewport(cls, width_px: int, height_px: int, cell_size: int = CELL_SIZE,
                      **overrides) -> "GameConfig":
        """
        Derive grid dimensions from a viewport size.

        Args:
            width_px: Viewport width in pixels
            height_px: Viewport height in pixels
            cell_size: Pixels per grid cell

        Returns:
            Config whose grid covers as many whole cells as fit the viewport

        Raises:
            ConfigurationError: If the viewport holds no whole cell
        """
        if cell_size <= 0:
            raise ConfigurationError(f"CELL_SIZE must be > 0, got {cell_size}")
        return cls(
            GRID_WIDTH=width_px // cell_size,
            GRID_HEIGHT=height_px // cell_size,
            CELL_SIZE=cell_size,
            **overrides
        )

    @property
    def grid_cells(self) -> int:
        """Total number of cells in the playable grid."""
        return self.GRID_WIDTH * self.GRID_HEIGHT

    @property
    def start_position(self):
        """Grid cell where the agent spawns."""
        return (self.GRID_WIDTH // 2, self.GRID_HEIGHT // 2)

    @property
    def screen_width(self) -> int:
        return self.GRID_WIDTH * self.CELL_SIZE

    @property
    def screen_height(self) -> int:
        return self.GRID_HEIGHT * self.CELL_SIZE
