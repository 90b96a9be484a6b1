"""
Classify a (speed, acceleration) pair into a locomotion activity.

The classifier is a fixed decision table evaluated top to bottom; the first
matching band wins:
- unknown or negative speed   -> UNKNOWN
- below the walking speed     -> IDLE
- walking band                -> WALKING if the user is shaking enough, else IDLE
- running band                -> RUNNING if the user is shaking enough, else WALKING
- vehicle band                -> VEHICLE if the ride is smooth, else RUNNING

Confidences are constants attached to each branch, not distances to a
threshold.
"""

from __future__ import annotations

import math
from typing import Optional

from loco.analysis.config import ClassifierConfig
from loco.analysis.types import ActivityLabel, Classification

UNKNOWN = Classification(ActivityLabel.UNKNOWN, 0.0)


def acceleration_magnitude(x: float, y: float, z: float) -> float:
    """
    Euclidean norm of a tri-axial accelerometer reading.
    """
    return math.sqrt(x * x + y * y + z * z)


class MotionClassifier:
    """
    Stateless activity classifier bound to one threshold table.
    """
    def __init__(self, cfg: Optional[ClassifierConfig] = None) -> None:
        self.cfg = cfg or ClassifierConfig.default()

    def classify(self, speed: Optional[float], accel: float) -> Classification:
        """
        Map speed (m/s) and acceleration magnitude (m/s²) to an activity.

        Parameters
        ----------
        speed
            Speed of the last known location, or None if it is not known.
        accel
            Acceleration magnitude of the current tick.

        Returns
        -------
        Classification
            Activity label and the confidence of the matching branch.
        """
        if speed is None or math.isnan(speed) or speed < 0:
            return UNKNOWN

        cfg = self.cfg
        if speed < cfg.walking_speed:
            return Classification(ActivityLabel.IDLE, 0.8)
        if speed < cfg.running_speed:
            if accel > cfg.walking_accel:
                return Classification(ActivityLabel.WALKING, 0.7)
            return Classification(ActivityLabel.IDLE, 0.5)
        if speed < cfg.vehicle_speed:
            if accel > cfg.running_accel:
                return Classification(ActivityLabel.RUNNING, 0.8)
            return Classification(ActivityLabel.WALKING, 0.6)
        if accel < cfg.vehicle_accel:
            return Classification(ActivityLabel.VEHICLE, 0.9)
        return Classification(ActivityLabel.RUNNING, 0.7)
