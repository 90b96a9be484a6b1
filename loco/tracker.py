"""
Merge point between the two sensor sources and the session pipeline.

Location updates only refresh the last known location and apply the geodesic
delta to the aggregator. Every accelerometer tick is classified with the
speed of the last known location, even when that fix is several ticks old:
the tracker never waits for a fresh fix, so activity can lag a position
change by up to one fix interval.

All callbacks run under one lock, so sources may deliver from their own
threads; each sample is processed to completion before the next.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from loco.analysis.classifier import MotionClassifier, acceleration_magnitude
from loco.analysis.config import SessionConfig, TrackerConfig
from loco.analysis.route import RouteBuilder
from loco.analysis.session import Clock, FinishedSession, SessionAggregator, wall_clock_ms
from loco.analysis.types import ActivityLabel, Classification
from loco.errors import StorageError
from loco.sources import MotionSource, PositionSource, Unsubscribe
from loco.storage.dao import DAO
from loco.utils.geo import distance
from loco.utils.log import get_logger
from loco.utils.validate import (
    AccelerationSample,
    ActivityLogEntry,
    LocationSample,
    Route,
    SessionStats,
    Totals,
)

logger = get_logger(__name__)


@dataclass
class SessionResult:
    """
    Outcome of stopping a session.

    `saved` is False when no DAO is attached or the save failed; a failed
    save stays in `pending` and is retried by the next stop() or retry_save().
    """
    session: FinishedSession
    route: Optional[Route]
    totals: Optional[Totals] = None
    saved: bool = False

    @property
    def stats(self) -> SessionStats:
        return self.session.stats


class ActivityTracker:
    """
    Stateful pipeline: samples in, classified log and session stats out.
    """
    def __init__(
        self,
        position: PositionSource,
        motion: MotionSource,
        dao: Optional[DAO] = None,
        classifier: Optional[MotionClassifier] = None,
        builder: Optional[RouteBuilder] = None,
        cfg: Optional[TrackerConfig] = None,
        session_cfg: Optional[SessionConfig] = None,
        clock: Clock = wall_clock_ms,
    ) -> None:
        self.position = position
        self.motion = motion
        self.dao = dao
        self.classifier = classifier or MotionClassifier()
        self.builder = builder or RouteBuilder()
        self.cfg = cfg or TrackerConfig()
        self.clock = clock
        self.aggregator = SessionAggregator(session_cfg, clock=clock)

        self.has_permission = False
        self.last_location: Optional[LocationSample] = None
        self.last_acceleration: Optional[AccelerationSample] = None
        self.current = Classification(ActivityLabel.UNKNOWN, 0.0)
        self.pending: list[SessionResult] = []

        self._lock = threading.RLock()
        self._seq = 0
        self._unsub_position: Optional[Unsubscribe] = None
        self._unsub_motion: Optional[Unsubscribe] = None

    @property
    def active(self) -> bool:
        return self.aggregator.active

    def request_permissions(self) -> bool:
        """
        Ask both sources for access; the tracker can start only if both agree.
        """
        location_ok = self.position.request_permission()
        motion_ok = self.motion.request_permission()
        self.has_permission = location_ok and motion_ok
        if not self.has_permission:
            logger.warning(
                "Sensor permissions not granted (location=%s, motion=%s)", location_ok, motion_ok
            )
        return self.has_permission

    def start(self) -> bool:
        """
        Start a session and subscribe to both sources.

        Returns
        -------
        bool
            False (and nothing changes) when permissions are missing or a
            session is already running.
        """
        with self._lock:
            if not self.has_permission:
                logger.warning("Cannot start: location and motion permissions are required")
                return False
            if self.active:
                logger.warning("Cannot start: a session is already active")
                return False

            self.last_location = None
            self.last_acceleration = None
            self.current = Classification(ActivityLabel.UNKNOWN, 0.0)
            self._seq = 0
            self.aggregator.start()

            self.position.configure(self.cfg.location_interval_ms, self.cfg.min_displacement_m)
            self.motion.set_update_interval(self.cfg.accel_interval_ms)
            self._unsub_position = self.position.subscribe(self.on_location)
            self._unsub_motion = self.motion.subscribe(self.on_acceleration)
            return True

    def on_location(self, sample: LocationSample) -> None:
        """
        Replace the last known location and apply the distance travelled.

        Speed is derived from the previous fix as distance / elapsed time;
        any speed reported by the source is ignored.
        """
        with self._lock:
            if not self.active:
                return
            prev = self.last_location
            speed: Optional[float] = None
            if prev is not None:
                delta = distance(prev.coordinate, sample.coordinate)
                dt = (sample.ts - prev.ts) / 1000
                if dt > 0:
                    speed = delta / dt
                self.aggregator.add_distance(delta)
            self.last_location = sample.model_copy(update={"speed": speed})

    def on_acceleration(self, sample: AccelerationSample) -> None:
        """
        Classify one accelerometer tick, log it and feed the aggregator.
        """
        with self._lock:
            if not self.active:
                return
            magnitude = acceleration_magnitude(sample.x, sample.y, sample.z)
            accel = sample.model_copy(update={"magnitude": magnitude})
            self.last_acceleration = accel

            location = self.last_location
            speed = location.speed if location is not None else None
            self.current = self.classifier.classify(speed, magnitude)

            self._seq += 1
            entry = ActivityLogEntry(
                id=self._seq,
                ts=self.clock(),
                location=location,
                acceleration=accel,
                activity=self.current.label,
                confidence=self.current.confidence,
                speed=speed,
            )
            self.aggregator.ingest(entry)

    def snapshot(self) -> SessionStats:
        with self._lock:
            return self.aggregator.snapshot()

    def _unsubscribe(self) -> None:
        if self._unsub_position is not None:
            self._unsub_position()
            self._unsub_position = None
        if self._unsub_motion is not None:
            self._unsub_motion()
            self._unsub_motion = None

    def stop(self) -> Optional[SessionResult]:
        """
        Unsubscribe both sources, freeze the session, build and save its route.

        Sessions whose save failed earlier are saved first, in the order they
        finished. Stopping an idle tracker only retries those saves and
        returns None.
        """
        with self._lock:
            if not self.active:
                self._flush()
                return None

            self._unsubscribe()
            finished = self.aggregator.stop()
            route = self.builder.build(finished.log, finished.stats)
            if route is None:
                logger.info("Nothing to save as a route")
            result = SessionResult(session=finished, route=route)
            self.pending.append(result)
            self._flush()
            return result

    def retry_save(self) -> Optional[Totals]:
        """
        Try again to persist the sessions whose save failed.

        Returns
        -------
        Optional[Totals]
            Totals after the last session saved by this call, or None when
            nothing was saved.
        """
        with self._lock:
            return self._flush()

    def _flush(self) -> Optional[Totals]:
        if self.dao is None:
            self.pending.clear()
            return None
        totals = None
        while self.pending:
            result = self.pending[0]
            try:
                result.totals = self.dao.save_session(result.stats, result.session.log, result.route)
            except StorageError as e:
                logger.error(
                    "Saving session failed, %d session(s) left to retry: %s", len(self.pending), e
                )
                break
            result.saved = True
            totals = result.totals
            self.pending.pop(0)
        return totals
