"""
Sensor collaborators feeding the tracker.

A source is push-based: the tracker subscribes a callback and keeps the
returned unsubscribe function. Concrete device bindings implement the two
abstract classes; PushPositionSource / PushMotionSource deliver samples handed
to them in-process, which is what replays and tests use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from loco.utils.log import get_logger
from loco.utils.validate import AccelerationSample, LocationSample

logger = get_logger(__name__)

S = TypeVar("S")
Unsubscribe = Callable[[], None]


class SensorSource(ABC, Generic[S]):
    """
    A producer of samples at its own, externally controlled cadence.
    """

    @abstractmethod
    def request_permission(self) -> bool:
        """Ask for access to the sensor; True when granted."""

    @abstractmethod
    def subscribe(self, callback: Callable[[S], None]) -> Unsubscribe:
        """Start delivering samples to `callback`; return a function that stops it."""


class PositionSource(SensorSource[LocationSample]):
    """
    Position fixes, nominally at most one per `interval_ms` and only after
    moving `min_displacement_m`.
    """
    interval_ms: int = 1000
    min_displacement_m: float = 1.0

    def configure(self, interval_ms: int, min_displacement_m: float) -> None:
        self.interval_ms = interval_ms
        self.min_displacement_m = min_displacement_m


class MotionSource(SensorSource[AccelerationSample]):
    """
    Accelerometer readings at a fixed interval.
    """
    interval_ms: int = 1000

    def set_update_interval(self, interval_ms: int) -> None:
        self.interval_ms = interval_ms


class _PushMixin(Generic[S]):
    """
    In-process delivery: every pushed sample goes to the live subscribers.
    """

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self._subscribers: list[Callable[[S], None]] = []

    def request_permission(self) -> bool:
        return self.granted

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[S], None]) -> Unsubscribe:
        self._subscribers.append(callback)
        done = False

        def unsubscribe() -> None:
            nonlocal done
            if done:
                return
            done = True
            self._subscribers.remove(callback)

        return unsubscribe

    def push(self, sample: S) -> None:
        for callback in list(self._subscribers):
            callback(sample)


class PushPositionSource(_PushMixin[LocationSample], PositionSource):
    """Position source fed by `push()`."""


class PushMotionSource(_PushMixin[AccelerationSample], MotionSource):
    """Motion source fed by `push()`."""
