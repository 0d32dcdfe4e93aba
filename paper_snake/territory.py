"""
Territory model: the set of polygons the agent has claimed.

A RegionSet is immutable. Merging returns a new set, so a state snapshot
handed to a renderer can never change underneath it.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from paper_snake.config import AreaMethod, GeometryError
from paper_snake.geometry import (
    Point,
    Polygon,
    PolygonUnion,
    ShapelyUnion,
    area as measure_area,
    close_ring,
    point_in_region_set,
    square_polygon,
)


logger = logging.getLogger(__name__)

_DEFAULT_UNION = ShapelyUnion()


def _normalise(polygon: Polygon) -> Polygon:
    """Copy a polygon as tuples with every ring explicitly closed."""
    rings = tuple(close_ring(ring) for ring in polygon)
    if not rings or any(len(ring) == 0 for ring in rings):
        raise ValueError("polygon has an empty ring")
    return rings


@dataclass(frozen=True)
class MergeOutcome:
    """Result of merging one polygon into a RegionSet."""

    regions: "RegionSet"
    merged: bool                    # False when the unmerged fallback was used
    error: Optional[str] = None


@dataclass(frozen=True)
class RegionSet:
    """
    Claimed territory as an ordered tuple of polygons.

    After every successful merge no two polygons overlap. When the union
    backend fails, the new polygon is appended as-is; containment stays
    correct even though the set is no longer union-reduced.
    """

    polygons: Tuple[Polygon, ...] = ()

    @classmethod
    def initial(cls, center: Point, size: int) -> "RegionSet":
        """Starting territory: one square centred on the spawn cell."""
        return cls((square_polygon(center, size),))

    def __len__(self) -> int:
        return len(self.polygons)

    def __iter__(self) -> Iterator[Polygon]:
        return iter(self.polygons)

    def contains(self, point: Point) -> bool:
        """Check whether a grid point lies inside claimed territory."""
        return point_in_region_set(point, self.polygons)

    def try_merge(self, polygon: Polygon,
                  union: Optional[PolygonUnion] = None) -> MergeOutcome:
        """
        Merge a newly enclosed polygon into the territory.

        Args:
            polygon: Closed polygon built from a completed trail
            union: Union backend, shapely by default

        Returns:
            MergeOutcome with the new set. Union failures are reported in
            the outcome rather than raised. A polygon whose rings cannot
            be read leaves the territory unchanged.
        """
        try:
            polygon = _normalise(polygon)
        except (TypeError, ValueError, IndexError) as e:
            logger.warning("Discarding malformed polygon %r: %s", polygon, e)
            return MergeOutcome(self, merged=False, error=f"malformed polygon: {e}")

        if not self.polygons:
            return MergeOutcome(RegionSet((polygon,)), merged=True)

        backend = union if union is not None else _DEFAULT_UNION
        try:
            result = backend.union(list(self.polygons) + [polygon])
            merged = tuple(_normalise(p) for p in result or ())
        except GeometryError as e:
            logger.warning("Polygon merge failed, appending unmerged: %s", e)
            return self._append_unmerged(polygon, str(e))
        except Exception as e:
            # Backends other than ShapelyUnion may raise anything
            logger.exception("Union backend %r raised", backend)
            return self._append_unmerged(polygon, f"{type(e).__name__}: {e}")

        if not merged:
            logger.warning("Polygon merge returned nothing, appending unmerged")
            return self._append_unmerged(polygon, "union returned no polygons")

        return MergeOutcome(RegionSet(merged), merged=True)

    def _append_unmerged(self, polygon: Polygon, error: str) -> MergeOutcome:
        return MergeOutcome(RegionSet(self.polygons + (polygon,)), merged=False, error=error)

    def merge_new_region(self, polygon: Polygon,
                         union: Optional[PolygonUnion] = None) -> "RegionSet":
        """Return the union of this territory and the polygon, never raising."""
        return self.try_merge(polygon, union).regions

    def area(self, method: AreaMethod = AreaMethod.BOUNDING_BOX) -> float:
        return measure_area(self.polygons, method)

    def score(self, grid_cells: int,
              method: AreaMethod = AreaMethod.BOUNDING_BOX) -> float:
        """
        Percentage of the grid that is claimed, clamped to [0, 100].

        Args:
            grid_cells: Number of cells in the playable grid
            method: Area measurement to use
        """
        if grid_cells <= 0:
            return 0.0
        pct = self.area(method) / grid_cells * 100
        return min(100.0, max(0.0, pct))
