"""
Pydantic schemas for sensor samples and everything the tracker persists.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from loco.analysis.types import ActivityLabel
from loco.utils.geo import validate_coordinate


class Coordinate(BaseModel):
    """
    Latitude/longitude pair in decimal degrees.
    """
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

    @model_validator(mode="after")
    def _check_range(self) -> "Coordinate":
        validate_coordinate(self.lat, self.lon)
        return self


class LocationSample(BaseModel):
    """
    One position fix from the position source.

    `speed` is derived by the tracker from the previous fix; it is None for
    the first fix of a session or when the time delta is not positive.
    """
    model_config = ConfigDict(frozen=True)

    ts: int
    coordinate: Coordinate
    accuracy: Optional[float] = Field(default=None, ge=0.0)
    speed: Optional[float] = None


class AccelerationSample(BaseModel):
    """
    One tri-axial accelerometer reading (m/s²).
    """
    model_config = ConfigDict(frozen=True)

    ts: int
    x: float
    y: float
    z: float
    magnitude: float = Field(default=0.0, ge=0.0)


class ActivityLogEntry(BaseModel):
    """
    Immutable record of one classified accelerometer tick.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    ts: int
    location: Optional[LocationSample]
    acceleration: AccelerationSample
    activity: ActivityLabel
    confidence: float = Field(ge=0.0, le=1.0)
    speed: Optional[float] = None


class SessionStats(BaseModel):
    """
    Statistics of one session. `end_time` stays 0 while the session is active.
    """
    model_config = ConfigDict(frozen=True)

    start_time: int = 0
    end_time: int = 0
    duration: float = 0.0
    total_distance: float = 0.0
    steps: int = 0
    calories: float = 0.0
    average_speed: float = 0.0


class RoutePoint(BaseModel):
    """
    One renderable point of a saved route.
    """
    model_config = ConfigDict(frozen=True)

    ts: int
    lat: float
    lon: float
    speed: float = 0.0


class Route(BaseModel):
    """
    Persisted trace of one finished session: metadata, stats and points.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    created_at: int
    stats: SessionStats
    points: list[RoutePoint]


class Totals(BaseModel):
    """
    Cumulative figures over every saved session.
    """
    sessions: int = 0
    distance: float = 0.0
    duration: float = 0.0
    calories: float = 0.0
    steps: int = 0


class RouteSegment(BaseModel):
    """
    Pair of consecutive route points with the speed used to colour it.
    """
    start: RoutePoint
    end: RoutePoint
    speed: float
    color: str
