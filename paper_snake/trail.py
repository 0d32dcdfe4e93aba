"""
Trail tracking while the agent is outside its territory.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from paper_snake.geometry import Point, Polygon, close_ring


logger = logging.getLogger(__name__)


def build_polygon(trail: Sequence[Point], current_position: Point) -> Optional[Polygon]:
    """
    Turn a completed excursion into a closed polygon.

    The raw trail is taken as the whole boundary of the new area; it is not
    trimmed against the existing territory edge.

    Args:
        trail: Points recorded since the agent left its territory
        current_position: Cell the agent re-entered territory at

    Returns:
        Single-ring polygon, or None when the trail is too short to enclose
        anything
    """
    if len(trail) < 2:
        return None
    return (close_ring(list(trail) + [current_position]),)


class TrailTracker:
    """
    Records the path taken outside territory.

    Transitions per move, given whether the agent was outside before the move
    and whether the new cell is claimed:

        outside -> outside    append the previous cell (no consecutive repeats)
        inside  -> outside    trail restarts at the previous cell
        outside -> inside     close the loop and hand back a polygon
        inside  -> inside     nothing
    """

    __slots__ = ['_points', 'outside']

    def __init__(self):
        self._points = []               # type: List[Point]
        self.outside = False            # Agent currently outside territory

    @classmethod
    def from_state(cls, points: Iterable[Point], outside: bool) -> "TrailTracker":
        """Rebuild a tracker from a state snapshot."""
        tracker = cls()
        tracker._points = [tuple(p) for p in points]
        tracker.outside = outside
        return tracker

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point) -> bool:
        return tuple(point) in self._points

    def reset(self):
        self._points = []
        self.outside = False

    def record_step(self, previous: Point, candidate: Point,
                    was_outside: bool, now_in_territory: bool) -> Optional[Polygon]:
        """
        Update the trail for one move.

        Args:
            previous: Agent position before the move
            candidate: Agent position after the move
            was_outside: Whether the agent was outside before the move
            now_in_territory: Whether the candidate cell is claimed

        Returns:
            The closing polygon when this move completes an excursion,
            otherwise None
        """
        previous = tuple(previous)
        candidate = tuple(candidate)

        if not was_outside and not now_in_territory:
            self._points = [previous]
            self.outside = True
            logger.debug("Left territory at %s", previous)
            return None

        if was_outside and not now_in_territory:
            if not self._points or self._points[-1] != previous:
                self._points.append(previous)
            return None

        if was_outside and now_in_territory:
            self._points.append(previous)
            self._points.append(candidate)
            polygon = build_polygon(self._points, candidate)
            logger.debug("Returned to territory at %s with %d trail points",
                          candidate, len(self._points))
            self.reset()
            return polygon

        return None
