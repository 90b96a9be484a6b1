"""
Turn a finished session into a persistable, renderable Route.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Sequence

from loco.utils.log import get_logger
from loco.utils.validate import ActivityLogEntry, Route, RoutePoint, RouteSegment, SessionStats

logger = get_logger(__name__)

# A route needs at least this many valid points; a single point is kept as a
# degenerate one-point trace.
MIN_ROUTE_POINTS = 1

# (upper speed bound in m/s, colour) for the renderer's continuous scale
SPEED_COLORS = (
    (1.0, "#00e1ff"),   # very slow
    (2.5, "#00ff85"),   # walking
    (4.0, "#ffe700"),   # jogging
    (7.0, "#ff6f00"),   # fast
)
MAX_SPEED_COLOR = "#ff0033"  # very fast / vehicle


def speed_to_color(speed: float) -> str:
    """
    Colour of a route segment travelled at `speed` m/s.
    """
    for bound, color in SPEED_COLORS:
        if speed < bound:
            return color
    return MAX_SPEED_COLOR


def has_valid_location(entry: ActivityLogEntry) -> bool:
    """
    True if the entry carries a usable coordinate.

    (0, 0) is the sentinel some position sources emit before the first fix.
    """
    if entry.location is None:
        return False
    c = entry.location.coordinate
    if not (math.isfinite(c.lat) and math.isfinite(c.lon)):
        return False
    return not (c.lat == 0.0 and c.lon == 0.0)


def route_name(start_time: int) -> str:
    """Human-readable, locale-independent name derived from the start time."""
    start = datetime.fromtimestamp(start_time / 1000, tz=timezone.utc)
    return f"Route {start:%Y-%m-%d %H:%M:%S}"


class RouteBuilder:
    """
    Stateless transform from (activity log, final stats) to a Route.
    """
    def __init__(self, min_points: int = MIN_ROUTE_POINTS) -> None:
        self.min_points = max(1, min_points)

    def points(self, log: Iterable[ActivityLogEntry]) -> list[RoutePoint]:
        """
        Project entries with a valid location to route points, ordered by time.
        """
        pts = [
            RoutePoint(
                ts=e.ts,
                lat=e.location.coordinate.lat,
                lon=e.location.coordinate.lon,
                speed=e.speed or 0.0,
            )
            for e in log
            if has_valid_location(e)
        ]
        return sorted(pts, key=lambda p: p.ts)

    def build(self, log: Sequence[ActivityLogEntry], stats: SessionStats) -> Optional[Route]:
        """
        Build the Route of a finished session.

        Returns
        -------
        Optional[Route]
            None when the log is empty or holds fewer valid points than
            `min_points`; the caller treats that as "nothing to save".
        """
        if not log:
            logger.info("Empty activity log, no route built")
            return None

        pts = self.points(log)
        if len(pts) < self.min_points:
            logger.info("No valid coordinates in %d log entries, no route built", len(log))
            return None

        return Route(
            id=f"route-{stats.start_time}",
            name=route_name(stats.start_time),
            created_at=stats.start_time,
            stats=stats,
            points=pts,
        )


def segments(route: Route) -> Iterator[RouteSegment]:
    """
    Consecutive point pairs of a route, each with the speed used to colour it.
    """
    for p1, p2 in zip(route.points, route.points[1:]):
        speed = p2.speed or p1.speed or 0.0
        yield RouteSegment(start=p1, end=p2, speed=speed, color=speed_to_color(speed))
