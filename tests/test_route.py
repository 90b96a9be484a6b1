import pytest

from loco.analysis.route import (
    MAX_SPEED_COLOR,
    RouteBuilder,
    route_name,
    segments,
    speed_to_color,
)
from loco.analysis.types import ActivityLabel as L
from loco.utils.validate import SessionStats

from conftest import entry, location

STATS = SessionStats(
    start_time=1_700_000_000_000,
    end_time=1_700_000_060_000,
    duration=60.0,
    total_distance=120.0,
    steps=40,
    calories=2.0,
    average_speed=2.0,
)


def test_empty_log_builds_nothing():
    assert RouteBuilder().build([], STATS) is None


def test_log_without_valid_coordinates_builds_nothing():
    log = [
        entry(L.UNKNOWN, id=1, ts=1),
        entry(L.IDLE, id=2, ts=2, loc=location(0.0, 0.0, ts=2)),
        entry(L.IDLE, id=3, ts=3),
    ]
    assert RouteBuilder().build(log, STATS) is None


def test_single_valid_point_builds_degenerate_route():
    log = [
        entry(L.UNKNOWN, id=1, ts=1),
        entry(L.WALKING, id=2, ts=2, loc=location(45.0, 7.0, ts=2), speed=1.4),
        entry(L.UNKNOWN, id=3, ts=3),
    ]
    route = RouteBuilder().build(log, STATS)
    assert route is not None
    assert len(route.points) == 1
    assert route.points[0].speed == 1.4
    assert list(segments(route)) == []


def test_min_points_can_reject_single_point():
    log = [entry(L.WALKING, loc=location(45.0, 7.0))]
    assert RouteBuilder(min_points=2).build(log, STATS) is None


def test_route_metadata_and_stats():
    log = [
        entry(L.WALKING, id=1, ts=10, loc=location(45.0, 7.0, ts=10), speed=1.2),
        entry(L.WALKING, id=2, ts=20, loc=location(45.0001, 7.0, ts=20), speed=None),
    ]
    route = RouteBuilder().build(log, STATS)
    assert route.id == "route-1700000000000"
    assert route.name == "Route 2023-11-14 22:13:20"
    assert route.created_at == STATS.start_time
    assert route.stats == STATS
    assert [p.speed for p in route.points] == [1.2, 0.0]


def test_points_are_ordered_and_filtered():
    log = [
        entry(L.WALKING, id=1, ts=30, loc=location(45.0002, 7.0, ts=30), speed=1.0),
        entry(L.WALKING, id=2, ts=10, loc=location(45.0, 7.0, ts=10), speed=1.0),
        entry(L.UNKNOWN, id=3, ts=20),
        # a point on the equator or the prime meridian is still valid
        entry(L.WALKING, id=4, ts=40, loc=location(0.0, 0.0009, ts=40), speed=2.0),
    ]
    route = RouteBuilder().build(log, STATS)
    assert [p.ts for p in route.points] == [10, 30, 40]


def test_route_names_sort_like_start_times():
    assert route_name(1_700_000_000_000) < route_name(1_700_000_001_000)


def test_segments_use_end_speed_then_start_speed():
    log = [
        entry(L.WALKING, id=1, ts=1, loc=location(45.0, 7.0, ts=1), speed=1.5),
        entry(L.RUNNING, id=2, ts=2, loc=location(45.0001, 7.0, ts=2), speed=3.0),
        entry(L.RUNNING, id=3, ts=3, loc=location(45.0002, 7.0, ts=3), speed=None),
    ]
    route = RouteBuilder().build(log, STATS)
    segs = list(segments(route))
    assert [s.speed for s in segs] == [3.0, 3.0]
    assert segs[0].start.ts == 1 and segs[0].end.ts == 2
    assert segs[0].color == speed_to_color(3.0)


@pytest.mark.parametrize(
    "speed,color",
    [
        (0.0, "#00e1ff"),
        (1.0, "#00ff85"),
        (2.4, "#00ff85"),
        (3.9, "#ffe700"),
        (6.9, "#ff6f00"),
        (7.0, MAX_SPEED_COLOR),
        (30.0, MAX_SPEED_COLOR),
    ],
)
def test_speed_to_color(speed, color):
    assert speed_to_color(speed) == color
