# loco/analysis/types.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ActivityLabel(str, Enum):
    """
    Locomotion state inferred for one accelerometer tick.
    """
    IDLE = "idle"
    WALKING = "walking"
    RUNNING = "running"
    VEHICLE = "vehicle"
    UNKNOWN = "unknown"


class SessionState(str, Enum):
    """
    Lifecycle state of a SessionAggregator.
    """
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class Classification:
    """
    Result of one classifier decision.

    Parameters
    ----------
    label : ActivityLabel
        Activity chosen by the decision table.
    confidence : float
        Fixed per-branch scalar in [0, 1]; not a calibrated probability.
    """
    label: ActivityLabel
    confidence: float
