"""
Motion sensor models for pedestrian dead reckoning.

Modules:
    types: Sensor sample/snapshot records and categorical label enums
    pdr: Step detection, step frequency/length, motion class, heading
    windowing: Rolling variance statistics for motion classification

Example:
    >>> from pdrnav.sensors import classify_motion, compute_heading
    >>> classify_motion(0.2, 1.0)
    <MotionState.WALKING: 'walking'>
    >>> compute_heading(-90.0)
    270.0
"""

from pdrnav.sensors.types import (
    MotionState,
    DeviceContext,
    SensorSample,
    SensorSnapshot,
)

from pdrnav.sensors.pdr import (
    total_accel_magnitude,
    detect_step,
    detect_steps_peak_detector,
    step_frequency,
    classify_motion,
    get_calibration_coeffs,
    estimate_step_length,
    correct_step_length,
    compute_heading,
    correct_heading,
)

from pdrnav.sensors.windowing import MotionWindow

__all__ = [
    # Data types
    "MotionState",
    "DeviceContext",
    "SensorSample",
    "SensorSnapshot",
    # Step detection
    "total_accel_magnitude",
    "detect_step",
    "detect_steps_peak_detector",
    # Step length
    "step_frequency",
    "classify_motion",
    "get_calibration_coeffs",
    "estimate_step_length",
    "correct_step_length",
    # Heading
    "compute_heading",
    "correct_heading",
    # Windowing
    "MotionWindow",
]
