from __future__ import annotations

from typing import Optional

import pytest

from loco.analysis.types import ActivityLabel
from loco.utils.validate import (
    AccelerationSample,
    ActivityLogEntry,
    Coordinate,
    LocationSample,
)


class FakeClock:
    """Millisecond clock the test moves by hand."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def advance(self, ms: int) -> None:
        self.now += ms

    def __call__(self) -> int:
        return self.now


def location(lat: float, lon: float, ts: int = 0, speed: Optional[float] = None) -> LocationSample:
    return LocationSample(ts=ts, coordinate=Coordinate(lat=lat, lon=lon), speed=speed)


def entry(
    label: ActivityLabel,
    id: int = 1,
    ts: int = 0,
    loc: Optional[LocationSample] = None,
    speed: Optional[float] = None,
    confidence: float = 0.5,
) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=id,
        ts=ts,
        location=loc,
        acceleration=AccelerationSample(ts=ts, x=0.0, y=0.0, z=1.0, magnitude=1.0),
        activity=label,
        confidence=confidence,
        speed=speed,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_700_000_000_000)
