"""
Pedestrian Dead Reckoning (PDR) sensor models.

This module implements the per-step measurement side of step-and-heading
pedestrian navigation:
    - Acceleration magnitude and online step detection with a refractory period
    - Offline peak detection over a recorded acceleration series
    - Step frequency from the inter-step interval
    - Motion regime classification from short-window variances
    - Step length estimation (linear frequency/variance model) and clamping
    - Heading from device orientation, optional blending and bias correction

The displacement fusion itself (particle filter) lives in
pdrnav.estimators.particle_filter.

Heading Convention:
    Compass style, degrees in [0, 360). 0 = +y ("north" on the floor plan),
    90 = +x ("east").

Units:
    Step length in meters before the caller's grid scaling, time in seconds,
    acceleration in m/s² (gravity removed).
"""

import math
import warnings
from typing import TYPE_CHECKING, Dict, Optional, Tuple

import numpy as np
from scipy import signal

from pdrnav.config import PDRConfig
from pdrnav.sensors.types import DeviceContext, MotionState
from pdrnav.utils.angles import wrap_heading_deg

if TYPE_CHECKING:
    from pdrnav.session.state import PDRState


# Motion classifier thresholds (variance of accel magnitude, gyro rate).
WALK_ACCEL_VAR_MAX = 0.5
WALK_GYRO_VAR_MAX = 2.0
RUN_ACCEL_VAR_MIN = 0.5
RUN_GYRO_VAR_MIN = 5.0

# Weights of the device orientation vs. a secondary heading source.
DEVICE_HEADING_WEIGHT = 0.7
SECONDARY_HEADING_WEIGHT = 0.3

# (alpha, beta, gamma) for L = alpha * f_step + beta * var + gamma
CALIBRATION_COEFFS: Dict[Tuple[MotionState, DeviceContext], Tuple[float, float, float]] = {
    (MotionState.WALKING, DeviceContext.HOLDING): (0.8, 0.1, 0.35),
    (MotionState.RUNNING, DeviceContext.POCKET): (1.1, 0.4, 0.5),
}
FALLBACK_COEFFS: Tuple[float, float, float] = (0.7, 0.2, 0.3)


def total_accel_magnitude(accel: np.ndarray) -> float:
    """
    Compute the Euclidean magnitude of a 3-axis acceleration sample.

        a_mag = ||a|| = √(ax² + ay² + az²)

    Args:
        accel: Acceleration sample [x, y, z]. Shape: (3,). Units: m/s².

    Returns:
        Acceleration magnitude (non-negative). Units: m/s².

    Example:
        >>> total_accel_magnitude(np.array([3.0, 4.0, 0.0]))
        5.0
    """
    accel = np.asarray(accel, dtype=float)
    if accel.shape != (3,):
        raise ValueError(f"accel must have shape (3,), got {accel.shape}")

    return float(np.linalg.norm(accel))


def detect_step(
    accel: np.ndarray,
    t: float,
    state: "PDRState",
    config: Optional[PDRConfig] = None,
) -> bool:
    """
    Online step detection: magnitude threshold plus refractory period.

    A step is detected iff
        ||a|| > config.step_threshold  AND  t - state.last_step_time > config.refractory_period

    On detection the step counter is incremented and ``last_step_time`` is
    set to ``t``. Otherwise the state is left untouched.

    Args:
        accel: Acceleration sample [x, y, z]. Shape: (3,). Units: m/s².
        t: Current timestamp. Units: seconds (monotonic).
        state: Session state; reads last_step_time, mutates step_count and
               last_step_time on detection.
        config: PDR configuration. Default: PDRConfig().

    Returns:
        True if a step was detected on this sample.

    Notes:
        - The refractory period suppresses double-triggering on one footfall.
        - No smoothing is applied; this is a coarse peak detector.
        - Non-finite magnitudes or timestamps never trigger a step.

    Example:
        >>> from pdrnav.session.state import create_pdr_state
        >>> state = create_pdr_state()
        >>> detect_step(np.array([0.0, 1.5, 0.0]), 1.0, state)
        True
        >>> detect_step(np.array([0.0, 1.5, 0.0]), 1.1, state)  # within 0.2 s
        False
    """
    if config is None:
        config = PDRConfig()

    a_mag = total_accel_magnitude(accel)
    elapsed = t - state.last_step_time

    if not (math.isfinite(a_mag) and math.isfinite(elapsed)):
        return False

    if a_mag > config.step_threshold and elapsed > config.refractory_period:
        state.step_count += 1
        state.last_step_time = t
        return True
    return False


def detect_steps_peak_detector(
    accel_series: np.ndarray,
    dt: float,
    min_peak_height: float = 1.2,
    min_peak_distance: float = 0.2,
    lowpass_cutoff: Optional[float] = 5.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Detect steps offline using peak detection on a recorded magnitude series.

    Used to cross-check the online detector when replaying recorded walks:
    1. Compute acceleration magnitude per sample
    2. Optionally apply a zero-phase Butterworth low-pass filter
    3. Find peaks above min_peak_height separated by min_peak_distance

    Args:
        accel_series: Acceleration time series (gravity removed).
                      Shape: (N, 3). Units: m/s².
        dt: Time step between samples. Units: seconds.
        min_peak_height: Minimum peak magnitude. Units: m/s².
                         Default matches the online step threshold.
        min_peak_distance: Minimum time between peaks (refractory period).
                           Units: seconds. Default: 0.2 s.
        lowpass_cutoff: Low-pass cutoff frequency in Hz. None disables it.

    Returns:
        Tuple of (step_indices, accel_mag_filtered):
            step_indices: Indices of detected steps, shape (n_steps,).
            accel_mag_filtered: Processed magnitude series, shape (N,).
    """
    accel_series = np.asarray(accel_series, dtype=float)
    if accel_series.ndim != 2 or accel_series.shape[1] != 3:
        raise ValueError(
            f"accel_series must have shape (N, 3), got {accel_series.shape}"
        )
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if min_peak_distance <= 0:
        raise ValueError(f"min_peak_distance must be positive, got {min_peak_distance}")

    accel_mag = np.linalg.norm(accel_series, axis=1)

    # filtfilt default padding needs more than 15 samples for a 4th order filter
    if lowpass_cutoff is not None and len(accel_mag) > 15:
        nyquist = 0.5 / dt
        normalized_cutoff = lowpass_cutoff / nyquist
        if normalized_cutoff < 1.0:
            b, a = signal.butter(4, normalized_cutoff, btype='low')
            accel_mag = signal.filtfilt(b, a, accel_mag)

    min_distance_samples = max(1, int(round(min_peak_distance / dt)))

    peak_indices, _ = signal.find_peaks(
        accel_mag,
        height=min_peak_height,
        distance=min_distance_samples,
    )

    return peak_indices, accel_mag


def step_frequency(delta_t: float, fallback: float = 1.0) -> float:
    """
    Compute step frequency from the inter-step interval.

        f_step = 1 / Δt

    Args:
        delta_t: Time since the previous step. Units: seconds.
        fallback: Frequency returned when Δt is zero, negative or not finite.
                  Default: 1.0 Hz.

    Returns:
        Step frequency. Units: Hz.

    Example:
        >>> step_frequency(0.5)
        2.0
        >>> step_frequency(0.0)
        1.0
    """
    if not math.isfinite(delta_t) or delta_t <= 0:
        return fallback
    return 1.0 / delta_t


def classify_motion(accel_variance: float, gyro_variance: float) -> MotionState:
    """
    Label the motion regime from short-window variance statistics.

    Thresholds (not learned):
        accel_var < 0.5 and gyro_var < 2  -> WALKING
        accel_var > 0.5 and gyro_var > 5  -> RUNNING
        otherwise                         -> STAIRS

    STAIRS is the catch-all for the middle band; no stair-specific
    detection is attempted.
    """
    if accel_variance < WALK_ACCEL_VAR_MAX and gyro_variance < WALK_GYRO_VAR_MAX:
        return MotionState.WALKING
    if accel_variance > RUN_ACCEL_VAR_MIN and gyro_variance > RUN_GYRO_VAR_MIN:
        return MotionState.RUNNING
    return MotionState.STAIRS


def get_calibration_coeffs(
    motion_state: MotionState, device_context: DeviceContext
) -> Tuple[float, float, float]:
    """Return (alpha, beta, gamma) for a motion/context pair, or the fallback."""
    return CALIBRATION_COEFFS.get(
        (MotionState(motion_state), DeviceContext(device_context)), FALLBACK_COEFFS
    )


def estimate_step_length(
    f_step: float,
    accel_variance: float,
    motion_state: MotionState,
    device_context: DeviceContext,
) -> float:
    """
    Estimate step length with a linear frequency/variance model.

        L = α * f_step + β * var(a) + γ

    where (α, β, γ) come from get_calibration_coeffs().

    Args:
        f_step: Step frequency. Units: Hz.
        accel_variance: Variance of the acceleration magnitude over the
                        recent window. Units: (m/s²)².
        motion_state: Current motion regime.
        device_context: How the device is carried.

    Returns:
        Raw (unclamped) step length. Units: meters.

    Example:
        >>> round(estimate_step_length(1.0, 0.3, MotionState.WALKING, DeviceContext.HOLDING), 2)
        1.18
    """
    alpha, beta, gamma = get_calibration_coeffs(motion_state, device_context)
    return alpha * f_step + beta * accel_variance + gamma


def correct_step_length(
    step_len: float,
    motion_state: MotionState,
    config: Optional[PDRConfig] = None,
) -> float:
    """
    Clamp a raw step length to the plausible range of the motion regime.

    WALKING is clamped into config.step_length_walk_range and RUNNING into
    config.step_length_run_range. Any other regime (STAIRS) is returned
    unchanged.
    """
    if config is None:
        config = PDRConfig()

    motion_state = MotionState(motion_state)
    if motion_state is MotionState.WALKING:
        lo, hi = config.step_length_walk_range
    elif motion_state is MotionState.RUNNING:
        lo, hi = config.step_length_run_range
    else:
        return step_len
    return max(lo, min(step_len, hi))


def compute_heading(
    device_orientation: float,
    secondary_heading: Optional[float] = None,
) -> float:
    """
    Derive a compass heading from device orientation.

    The device orientation is used directly. When a secondary heading source
    (e.g. a geolocation course) is present and finite, the two are blended:
        ψ = 0.7 * ψ_device + 0.3 * ψ_secondary

    The result is wrapped into [0, 360).

    Args:
        device_orientation: Device compass angle. Units: degrees.
        secondary_heading: Optional external heading. Units: degrees.

    Returns:
        Heading in degrees, in [0, 360).

    Notes:
        - The blend is a plain weighted sum, not a circular mean, so inputs on
          opposite sides of 0/360 blend toward the middle of the circle.
        - A non-finite device orientation falls back to the secondary source,
          or to 0.0 when neither is usable.
    """
    secondary_ok = secondary_heading is not None and math.isfinite(secondary_heading)

    if not math.isfinite(device_orientation):
        if secondary_ok:
            return wrap_heading_deg(secondary_heading)
        warnings.warn(
            f"Device orientation is not finite ({device_orientation}); "
            "heading defaults to 0.0",
            RuntimeWarning,
        )
        return 0.0

    heading = device_orientation
    if secondary_ok:
        heading = DEVICE_HEADING_WEIGHT * heading + SECONDARY_HEADING_WEIGHT * secondary_heading

    return wrap_heading_deg(heading)


def correct_heading(
    heading_deg: float,
    bias: float,
    config: Optional[PDRConfig] = None,
) -> float:
    """
    Apply heading bias correction.

        ψ' = wrap(ψ + k * b)

    where k = config.heading_correction_gain and b is the heading bias in
    degrees. The result is in [0, 360). A non-finite bias is ignored with a
    RuntimeWarning.
    """
    if config is None:
        config = PDRConfig()
    if not math.isfinite(bias):
        warnings.warn(f"Heading bias is not finite ({bias}); applying no correction", RuntimeWarning)
        bias = 0.0

    return wrap_heading_deg(heading_deg + config.heading_correction_gain * bias)
