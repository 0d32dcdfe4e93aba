"""
Geometry primitives for territory polygons.

Polygons are tuples of rings, each ring a tuple of (x, y) points whose first
and last point are equal. The first ring is the outer boundary; any further
rings are holes, which only ever appear as the output of a union.

Containment and area are computed directly on these tuples. Polygon union is
a pluggable capability: anything implementing PolygonUnion can be handed to
the territory model, with ShapelyUnion as the default backend.
"""

import logging
from typing import Iterable, List, Protocol, Sequence, Tuple, Union

from shapely.errors import ShapelyError
from shapely.geometry import GeometryCollection, MultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.ops import unary_union
from shapely.validation import make_valid

from paper_snake.config import AreaMethod, GeometryError

logger = logging.getLogger(__name__)

Number = Union[int, float]
Point = Tuple[Number, Number]
Ring = Tuple[Point, ...]
Polygon = Tuple[Ring, ...]


# ============================================================================
# CONSTRUCTION
# ============================================================================

def close_ring(points: Iterable[Point]) -> Ring:
    """
    Return the points as an explicitly closed ring.

    A copy of the first point is appended when the last point differs from it.
    """
    ring = tuple((p[0], p[1]) for p in points)
    if ring and ring[0] != ring[-1]:
        ring = ring + (ring[0],)
    return ring


def square_polygon(center: Point, size: int) -> Polygon:
    """
    Build the square territory centred on a grid cell.

    The square covers cells [cx - half, cx + half] on both axes, so its
    corner coordinates run from cx - half to cx + half + 1. With
    half = size // 2 an even size gives size + 1 cells per side.

    Args:
        center: (x, y) cell the square is centred on
        size: Side length in cells

    Returns:
        Single-ring closed polygon
    """
    cx, cy = center
    half = size // 2
    return (close_ring([
        (cx - half, cy - half),
        (cx + half + 1, cy - half),
        (cx + half + 1, cy + half + 1),
        (cx - half, cy + half + 1),
    ]),)


# ============================================================================
# CONTAINMENT
# ============================================================================

def point_in_polygon(point: Point, polygon: Sequence[Sequence[Point]]) -> bool:
    """
    Ray-casting parity test across all rings of a polygon.

    Parity is shared between rings, so a point inside both the outer ring and
    a hole counts as outside. Rings with fewer than 3 points are ignored.
    """
    x, y = point
    inside = False

    for ring in polygon:
        if len(ring) < 3:
            continue
        j = len(ring) - 1
        for i in range(len(ring)):
            xi, yi = ring[i]
            xj, yj = ring[j]
            if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
                inside = not inside
            j = i

    return inside


def point_in_region_set(point: Point, polygons: Iterable[Sequence[Sequence[Point]]]) -> bool:
    """True iff the point lies in at least one of the polygons."""
    return any(point_in_polygon(point, polygon) for polygon in polygons)


# ============================================================================
# AREA
# ============================================================================

def _ring_bounding_box_area(ring: Sequence[Point]) -> float:
    xs = [p[0] for p in ring]
    ys = [p[1] for p in ring]
    return (max(xs) - min(xs)) * (max(ys) - min(ys))


def _ring_shoelace_area(ring: Sequence[Point]) -> float:
    total = 0.0
    j = len(ring) - 1
    for i in range(len(ring)):
        total += ring[j][0] * ring[i][1] - ring[i][0] * ring[j][1]
        j = i
    return abs(total) / 2.0


def approximate_area(polygons: Iterable[Sequence[Sequence[Point]]]) -> float:
    """
    Sum of the axis-aligned bounding-box areas of every ring.

    This over-counts concave shapes and counts hole rings as positive area;
    it is the scoring method the game has always used.
    """
    total = 0.0
    for polygon in polygons:
        for ring in polygon:
            if len(ring) > 2:
                total += _ring_bounding_box_area(ring)
    return total


def exact_area(polygons: Iterable[Sequence[Sequence[Point]]]) -> float:
    """Shoelace area of each polygon's outer ring minus its holes."""
    total = 0.0
    for polygon in polygons:
        rings = [ring for ring in polygon if len(ring) > 2]
        if not rings:
            continue
        outer, holes = rings[0], rings[1:]
        total += _ring_shoelace_area(tuple(outer)) - sum(
            _ring_shoelace_area(tuple(hole)) for hole in holes
        )
    return total


def area(polygons: Iterable[Sequence[Sequence[Point]]],
         method: AreaMethod = AreaMethod.BOUNDING_BOX) -> float:
    """Measure claimed area with the given method."""
    if method is AreaMethod.EXACT:
        return exact_area(polygons)
    return approximate_area(polygons)


# ============================================================================
# UNION
# ============================================================================

class PolygonUnion(Protocol):
    """Capability that merges polygons into a union-reduced set."""

    def union(self, polygons: Sequence[Polygon]) -> List[Polygon]:
        """
        Merge polygons into the fewest polygons covering the same area.

        Raises:
            GeometryError: If the input cannot be processed
        """
        ...


def _coerce(value: float) -> Number:
    """Keep integral coordinates as ints so grid vertices stay exact."""
    value = float(value)
    return int(value) if value.is_integer() else value


def _to_shapely(polygon: Polygon) -> List[ShapelyPolygon]:
    """
    Convert one polygon, repairing it if it is invalid.

    A trail that crosses itself gives a self-intersecting ring; make_valid
    splits it into its enclosed pieces. Zero-area input yields no parts.
    """
    shell, holes = polygon[0], polygon[1:]
    geometry = ShapelyPolygon(shell, holes)
    if not geometry.is_valid:
        geometry = make_valid(geometry)
    return _polygonal_parts(geometry)


def _from_shapely(geometry: ShapelyPolygon) -> Polygon:
    rings = [geometry.exterior] + list(geometry.interiors)
    return tuple(
        close_ring((_coerce(x), _coerce(y)) for x, y in ring.coords)
        for ring in rings
    )


def _polygonal_parts(geometry) -> List[ShapelyPolygon]:
    if isinstance(geometry, ShapelyPolygon):
        return [geometry] if not geometry.is_empty else []
    if isinstance(geometry, (MultiPolygon, GeometryCollection)):
        parts = []
        for part in geometry.geoms:
            parts.extend(_polygonal_parts(part))
        return parts
    return []


class ShapelyUnion:
    """Polygon union backed by shapely's unary_union."""

    def union(self, polygons: Sequence[Polygon]) -> List[Polygon]:
        try:
            pieces = []
            for polygon in polygons:
                pieces.extend(_to_shapely(polygon))
            if not pieces:
                raise GeometryError("no input polygon encloses any area")
            merged = unary_union(pieces)
        except (ShapelyError, ValueError, TypeError, IndexError) as e:
            raise GeometryError(f"polygon union failed: {e}") from e

        parts = _polygonal_parts(merged)
        if not parts:
            raise GeometryError(f"polygon union produced no area ({merged.geom_type})")

        logger.debug("Union of %d polygons produced %d", len(polygons), len(parts))
        return [_from_shapely(part) for part in parts]
