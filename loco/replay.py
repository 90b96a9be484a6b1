"""
Drive a tracker session from recorded samples instead of live sensors.
"""

from __future__ import annotations

from typing import Iterable, Optional

from loco.analysis.classifier import MotionClassifier
from loco.analysis.config import ClassifierConfig
from loco.parsers.samples import Sample
from loco.sources import PushMotionSource, PushPositionSource
from loco.storage.dao import DAO
from loco.tracker import ActivityTracker, SessionResult
from loco.utils.log import get_logger
from loco.utils.validate import LocationSample

logger = get_logger(__name__)


class ReplayClock:
    """
    Millisecond clock that only moves when the replay advances it.
    """
    def __init__(self, start: int = 0) -> None:
        self.now = start

    def advance_to(self, ts: int) -> None:
        self.now = max(self.now, ts)

    def __call__(self) -> int:
        return self.now


def replay(
    samples: Iterable[Sample],
    dao: Optional[DAO] = None,
    cfg: Optional[ClassifierConfig] = None,
) -> Optional[SessionResult]:
    """
    Run one full session over time-ordered samples and stop it.

    The session starts at the first sample's timestamp and ends at the last
    one's; each sample is pushed through the matching source.
    """
    samples = list(samples)
    clock = ReplayClock(samples[0].ts if samples else 0)
    position = PushPositionSource()
    motion = PushMotionSource()
    tracker = ActivityTracker(
        position, motion, dao=dao, classifier=MotionClassifier(cfg), clock=clock
    )
    tracker.request_permissions()
    if not tracker.start():
        return None

    n_loc = n_acc = 0
    for sample in samples:
        clock.advance_to(sample.ts)
        if isinstance(sample, LocationSample):
            position.push(sample)
            n_loc += 1
        else:
            motion.push(sample)
            n_acc += 1
    logger.info("Replayed %d location and %d acceleration samples", n_loc, n_acc)
    return tracker.stop()
