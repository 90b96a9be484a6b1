import math

import pytest
from pydantic import ValidationError

from loco.utils.geo import EARTH_RADIUS_M, distance, haversine, validate_coordinate
from loco.utils.validate import Coordinate


POINTS = [
    (0.0, 0.0),
    (0.0, 0.0009),
    (45.0, 7.0),
    (-33.8688, 151.2093),
    (90.0, 180.0),
    (-90.0, -180.0),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_haversine_symmetric_and_non_negative(a, b):
    d = haversine(a, b)
    assert d >= 0
    assert math.isfinite(d)
    assert d == haversine(b, a)


@pytest.mark.parametrize("a", POINTS)
def test_haversine_zero_for_same_point(a):
    assert haversine(a, a) == 0


def test_haversine_hundred_metres_at_equator():
    assert haversine((0.0, 0.0), (0.0, 0.0009)) == pytest.approx(100.0, abs=0.5)


def test_haversine_antipodes_half_circumference():
    assert haversine((0.0, 0.0), (0.0, 180.0)) == pytest.approx(math.pi * EARTH_RADIUS_M)


def test_distance_on_coordinates():
    a = Coordinate(lat=45.0, lon=7.0)
    b = Coordinate(lat=45.0009, lon=7.0)
    assert distance(a, b) == pytest.approx(100.07, abs=0.05)


@pytest.mark.parametrize("lat,lon", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0), (math.nan, 0.0)])
def test_validate_coordinate_rejects_out_of_range(lat, lon):
    with pytest.raises(ValueError):
        validate_coordinate(lat, lon)


@pytest.mark.parametrize("lat,lon", [(91.0, 0.0), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)])
def test_coordinate_record_rejects_invalid(lat, lon):
    with pytest.raises(ValidationError):
        Coordinate(lat=lat, lon=lon)


def test_validate_coordinate_accepts_bounds():
    validate_coordinate(90.0, -180.0)
    validate_coordinate(-90.0, 180.0)


def test_coordinate_record_reports_failing_axis():
    with pytest.raises(ValidationError, match="longitude 200.0 outside"):
        Coordinate(lat=10.0, lon=200.0)
