# loco/analysis/config.py

from dataclasses import dataclass, field
from typing import FrozenSet

from loco.analysis.types import ActivityLabel


@dataclass(frozen=True)
class ClassifierConfig:
    """
    Threshold table for the speed/acceleration activity classifier.

    Attributes
    ----------
    walking_speed
        Speed (m/s) below which the user is considered idle.
    running_speed
        Speed (m/s) separating the walking band from the running band.
    vehicle_speed
        Speed (m/s) at and above which vehicle travel is considered.
    walking_accel
        Acceleration magnitude (m/s²) needed to call slow motion "walking".
    running_accel
        Acceleration magnitude (m/s²) needed to call medium speed "running".
    vehicle_accel
        Acceleration magnitude (m/s²) below which fast motion is "vehicle".
    """
    walking_speed:  float = 1.0
    running_speed:  float = 3.0
    vehicle_speed:  float = 6.5
    walking_accel:  float = 0.5
    running_accel:  float = 1.5
    vehicle_accel:  float = 0.2

    def __post_init__(self) -> None:
        values = (
            self.walking_speed, self.running_speed, self.vehicle_speed,
            self.walking_accel, self.running_accel, self.vehicle_accel,
        )
        if any(v <= 0 for v in values):
            raise ValueError("classifier thresholds must be strictly positive")
        if not self.walking_speed < self.running_speed < self.vehicle_speed:
            raise ValueError("speed thresholds must be strictly increasing")

    @classmethod
    def default(cls):
        """Preset for general use (default thresholds)."""
        return cls()

    @classmethod
    def pedestrian(cls):
        """Preset for slow walkers: lower idle/walking speed boundaries."""
        return cls(
            walking_speed=0.6,
            running_speed=2.5,
            vehicle_speed=6.5,
            walking_accel=0.4,
            running_accel=1.5,
            vehicle_accel=0.2,
        )

    @classmethod
    def cycling(cls):
        """Preset that pushes the vehicle boundary above typical bike speeds."""
        return cls(
            walking_speed=1.0,
            running_speed=3.0,
            vehicle_speed=25_000 / 3600,  # ~25 km/h in m/s
            walking_accel=0.5,
            running_accel=1.5,
            vehicle_accel=0.2,
        )

    @classmethod
    def preset(cls, name: str):
        """Look up a preset by name."""
        presets = {
            "default": cls.default,
            "pedestrian": cls.pedestrian,
            "cycling": cls.cycling,
        }
        try:
            return presets[name]()
        except KeyError:
            raise ValueError(f"unknown classifier preset {name!r}") from None


PRESET_NAMES = ("default", "pedestrian", "cycling")


@dataclass(frozen=True)
class SessionConfig:
    """
    Accounting rules applied by the SessionAggregator.

    Attributes
    ----------
    step_labels
        Labels that count one step per ingested tick.
    calories_walking
        Calories added per WALKING tick.
    calories_running
        Calories added per RUNNING tick.
    calorie_precision
        Decimal places the running calorie total is rounded to.
    """
    step_labels:       FrozenSet[ActivityLabel] = field(
        default_factory=lambda: frozenset({ActivityLabel.WALKING, ActivityLabel.RUNNING})
    )
    calories_walking:  float = 0.05
    calories_running:  float = 0.1
    calorie_precision: int   = 2


@dataclass(frozen=True)
class TrackerConfig:
    """
    Sensor cadence settings handed to the sources when a session starts.

    Attributes
    ----------
    accel_interval_ms
        Requested accelerometer sampling interval.
    location_interval_ms
        Requested minimum interval between position fixes.
    min_displacement_m
        Requested minimum displacement between position fixes.
    """
    accel_interval_ms:    int   = 1000
    location_interval_ms: int   = 1000
    min_displacement_m:   float = 1.0
