"""
Data structures for the smartphone motion sensors feeding the PDR core.

This module defines the shared data types used by the PDR algorithms:
    - Closed enumerations for the categorical labels (motion regime and
      device carrying context)
    - A per-tick raw sensor sample pushed by the sensor loop
    - An immutable snapshot record handed to external recording

Time Base Convention:
    All timestamps are float seconds (monotonic) unless noted otherwise.

Frame Conventions:
    - Acceleration is device-frame linear acceleration with gravity removed
      (what a browser ``devicemotion`` event reports as ``acceleration``).
    - Orientation is the device compass angle in degrees; 0 faces the fixed
      reference direction used by the caller's floor plan rendering.
    - Positions are planar (x, y) on the floor plan plus a pass-through z.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np


class MotionState(str, Enum):
    """Motion regime assigned to each detected step."""

    WALKING = "walking"
    RUNNING = "running"
    STAIRS = "stairs"


class DeviceContext(str, Enum):
    """How the phone is carried; selects step-length calibration."""

    HOLDING = "holding"
    POCKET = "pocket"


STANDARD_PRESSURE_HPA = 1013.25


def _as_vector3(name: str, value: Any) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {arr.shape}")
    return arr


@dataclass(frozen=True)
class SensorSample:
    """
    One raw sensor tick pushed into the PDR core.

    Attributes:
        t: Timestamp in seconds (monotonic).
        accel: Linear acceleration [x, y, z], shape (3,). Units: m/s².
        gyro: Rotation rate [alpha, beta, gamma], shape (3,). Units: deg/s.
              Defaults to zeros when the platform does not report it.
        mag: Magnetometer reading [x, y, z], shape (3,). Units: µT.
             Defaults to zeros.
        pressure: Barometric pressure. Units: hPa. Default: 1013.25.
        orientation_deg: Device compass angle in degrees, or None when no
                         orientation event arrived with this tick (the
                         last known orientation stays in effect).

    Example:
        >>> sample = SensorSample(t=0.5, accel=np.array([0.1, 1.4, 0.3]),
        ...                       orientation_deg=90.0)
    """

    t: float
    accel: np.ndarray
    gyro: np.ndarray = field(default_factory=lambda: np.zeros(3))
    mag: np.ndarray = field(default_factory=lambda: np.zeros(3))
    pressure: float = STANDARD_PRESSURE_HPA
    orientation_deg: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate and coerce vector fields to float arrays of shape (3,)."""
        # frozen=True: coerce through object.__setattr__
        object.__setattr__(self, "accel", _as_vector3("SensorSample.accel", self.accel))
        object.__setattr__(self, "gyro", _as_vector3("SensorSample.gyro", self.gyro))
        object.__setattr__(self, "mag", _as_vector3("SensorSample.mag", self.mag))


@dataclass(frozen=True)
class SensorSnapshot:
    """
    Immutable record of the current raw readings and estimated position.

    Produced by PDRTracker.capture_snapshot() and handed to the external
    recording subsystem. The core attaches no schema beyond these fields.

    Attributes:
        timestamp: Capture time. Units: seconds.
        acceleration: Last raw acceleration, shape (3,).
        gyroscope: Last raw rotation rate, shape (3,).
        magnetometer: Last raw magnetometer reading, shape (3,).
        barometric_pressure: Last pressure reading (hPa).
        position: Estimated position (x, y, z), shape (3,).
    """

    timestamp: float
    acceleration: np.ndarray
    gyroscope: np.ndarray
    magnetometer: np.ndarray
    barometric_pressure: float
    position: np.ndarray

    def __post_init__(self) -> None:
        """Copy arrays so later state mutation cannot leak into the record."""
        for name in ("acceleration", "gyroscope", "magnetometer", "position"):
            arr = _as_vector3(f"SensorSnapshot.{name}", getattr(self, name)).copy()
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        acc, gyr, mag, pos = (
            self.acceleration, self.gyroscope, self.magnetometer, self.position
        )
        return {
            "timestamp": float(self.timestamp),
            "acceleration": {"x": float(acc[0]), "y": float(acc[1]), "z": float(acc[2])},
            "gyroscope": {"alpha": float(gyr[0]), "beta": float(gyr[1]), "gamma": float(gyr[2])},
            "magnetometer": {"x": float(mag[0]), "y": float(mag[1]), "z": float(mag[2])},
            "barometricPressure": float(self.barometric_pressure),
            "position": {"x": float(pos[0]), "y": float(pos[1]), "z": float(pos[2])},
        }
