"""
Incremental session statistics.

A SessionAggregator is a two-state machine (IDLE / ACTIVE). While ACTIVE it
consumes classified log entries and distance deltas and keeps the running
totals of one session; stop() freezes them into an immutable snapshot.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from loco.analysis.config import SessionConfig
from loco.analysis.types import ActivityLabel, SessionState
from loco.errors import SessionStateError
from loco.utils.log import get_logger
from loco.utils.validate import ActivityLogEntry, SessionStats

logger = get_logger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class FinishedSession:
    """
    Frozen result of one session: final stats plus the full activity log.
    """
    stats: SessionStats
    log: tuple[ActivityLogEntry, ...]


class SessionAggregator:
    """
    Stateful accumulator for the statistics of one active session.
    """
    def __init__(self, cfg: Optional[SessionConfig] = None, clock: Clock = wall_clock_ms) -> None:
        self.cfg = cfg or SessionConfig()
        self.clock = clock
        self.state = SessionState.IDLE
        self.last_session: Optional[FinishedSession] = None
        self._reset(0)

    def _reset(self, start_time: int) -> None:
        self._start_time = start_time
        self._duration = 0.0
        self._distance = 0.0
        self._steps = 0
        self._calories = 0.0
        self._log: list[ActivityLogEntry] = []

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def log(self) -> tuple[ActivityLogEntry, ...]:
        return tuple(self._log)

    def _require_active(self, op: str) -> None:
        if not self.active:
            raise SessionStateError(f"{op}() requires an active session")

    def start(self) -> None:
        """
        Begin a new session: zero every statistic and clear the log.
        """
        if self.active:
            raise SessionStateError("session already active")
        self._reset(self.clock())
        self.state = SessionState.ACTIVE
        logger.info("Session started at %d", self._start_time)

    def _add_distance(self, delta: float) -> None:
        if not math.isfinite(delta) or delta < 0:
            logger.debug("Ignoring invalid distance delta %r", delta)
            return
        self._distance += delta

    def _refresh_duration(self, now: int) -> None:
        # a clock stepping backwards must not shrink the duration
        self._duration = max(self._duration, (now - self._start_time) / 1000)

    def _average_speed(self) -> float:
        if self._duration <= 0:
            return 0.0
        return self._distance / self._duration

    def add_distance(self, delta: float) -> None:
        """
        Apply a geodesic delta between two consecutive location samples.
        """
        self._require_active("add_distance")
        self._add_distance(delta)
        self._refresh_duration(self.clock())

    def ingest(self, entry: ActivityLogEntry, distance_delta: float = 0.0) -> None:
        """
        Append a classified entry to the log and update the running totals.

        Parameters
        ----------
        entry
            Log entry built for the current accelerometer tick.
        distance_delta
            Distance (m) covered since the previous location sample; 0 when
            no new location arrived. Non-finite values contribute nothing.
        """
        self._require_active("ingest")
        self._log.append(entry)
        self._add_distance(distance_delta)
        self._refresh_duration(self.clock())

        if entry.activity in self.cfg.step_labels:
            self._steps += 1
        if entry.activity is ActivityLabel.RUNNING:
            self._calories += self.cfg.calories_running
        elif entry.activity is ActivityLabel.WALKING:
            self._calories += self.cfg.calories_walking
        self._calories = round(self._calories, self.cfg.calorie_precision)

    def snapshot(self) -> SessionStats:
        """
        Current statistics. While active, duration is read from the clock.
        """
        if self.active:
            self._refresh_duration(self.clock())
        elif self.last_session is not None:
            return self.last_session.stats
        return SessionStats(
            start_time=self._start_time,
            end_time=0,
            duration=self._duration,
            total_distance=self._distance,
            steps=self._steps,
            calories=self._calories,
            average_speed=self._average_speed(),
        )

    def stop(self) -> Optional[FinishedSession]:
        """
        End the session and freeze its statistics.

        Returns
        -------
        Optional[FinishedSession]
            The frozen stats and log, or None when no session is active.
            Stopping an idle aggregator never touches `last_session`.
        """
        if not self.active:
            logger.debug("stop() on idle aggregator ignored")
            return None

        end_time = self.clock()
        self._refresh_duration(end_time)
        stats = SessionStats(
            start_time=self._start_time,
            end_time=end_time,
            duration=self._duration,
            total_distance=self._distance,
            steps=self._steps,
            calories=self._calories,
            average_speed=self._average_speed(),
        )
        self.last_session = FinishedSession(stats=stats, log=tuple(self._log))
        self.state = SessionState.IDLE
        logger.info(
            "Session stopped: %.1f m in %.1f s, %d steps, %.2f kcal, %d log entries",
            stats.total_distance, stats.duration, stats.steps, stats.calories, len(self._log),
        )
        return self.last_session
