# loco/utils/geo.py

"""
Geospatial utility functions.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from loco.utils.validate import Coordinate

EARTH_RADIUS_M = 6371000.0


def validate_coordinate(lat: float, lon: float) -> None:
    """
    Reject a latitude/longitude pair that is not a usable position.

    Raises
    ------
    ValueError
        If either value is non-finite or out of range.
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"non-finite coordinate ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude {lat} outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"longitude {lon} outside [-180, 180]")


def haversine(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Compute the great-circle distance between two points on the Earth.

    Parameters
    ----------
    a
        (latitude, longitude) of point A, in decimal degrees.
    b
        (latitude, longitude) of point B, in decimal degrees.

    Returns
    -------
    float
        Distance between A and B in metres.
    """
    lat1, lon1 = a
    lat2, lon2 = b
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    h = math.sin(d_phi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(d_lam/2)**2
    # rounding can push h a hair outside [0, 1] for antipodal points
    h = min(max(h, 0.0), 1.0)
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance(a: "Coordinate", b: "Coordinate") -> float:
    """
    Great-circle distance in metres between two validated coordinates.
    """
    return haversine((a.lat, a.lon), (b.lat, b.lon))
