"""
Session update cycle for sensor-driven PDR tracking.

PDRTracker is the caller-facing facade of the PDR core. The sensor loop
pushes one SensorSample per tick; on every detected step the tracker runs

    step detection -> step frequency -> motion classification
    -> step length (estimate, clamp, grid scaling)
    -> heading (compute, bias correction)
    -> particle filter

and exposes the estimated position and heading afterwards.

While the session is selecting its start position, updates are skipped
entirely: the position only changes through set_starting_position().

Example:
    >>> tracker = PDRTracker()
    >>> tracker.set_starting_position(2.0, 3.0)
    >>> tracker.start_tracking()
    >>> tracker.process_sample(SensorSample(t=0.5, accel=np.array([0.0, 1.5, 0.0]),
    ...                                     orientation_deg=0.0))
    True
"""

import time
from enum import Enum
from typing import Optional

import numpy as np

from pdrnav.config import PDRConfig
from pdrnav.estimators.particle_filter import ParticleFilter
from pdrnav.sensors.pdr import (
    classify_motion,
    compute_heading,
    correct_heading,
    correct_step_length,
    detect_step,
    estimate_step_length,
    step_frequency,
    total_accel_magnitude,
)
from pdrnav.sensors.types import (
    STANDARD_PRESSURE_HPA,
    DeviceContext,
    SensorSample,
    SensorSnapshot,
)
from pdrnav.sensors.windowing import MotionWindow
from pdrnav.session import state as pdr_state
from pdrnav.session.state import PDRState


class TrackingPhase(str, Enum):
    """Gate for the update cycle."""

    SELECTING_START = "selectingStart"
    TRACKING = "startPointSelected"


class PDRTracker:
    """
    Drive a PDR session from raw sensor samples.

    Attributes:
        config: PDR configuration (immutable).
        state: Session state (position, particles, counters, labels).
        phase: Current tracking phase; SELECTING_START skips all updates.
        orientation_deg: Last known device orientation. Units: degrees.
        secondary_heading: Optional external heading blended into the
                           device heading (None disables blending).
        window: Rolling variance statistics for motion classification.
        filter: Particle filter bound to state.particles.
    """

    def __init__(
        self,
        config: Optional[PDRConfig] = None,
        rng: Optional[np.random.Generator] = None,
        device_context: DeviceContext = DeviceContext.HOLDING,
    ):
        if config is None:
            config = PDRConfig()

        self.config = config
        self.state: PDRState = pdr_state.create_pdr_state(config, device_context)
        self.phase = TrackingPhase.SELECTING_START
        self.window = MotionWindow.from_config(config)
        self.filter = ParticleFilter(self.state.particles, config, rng)

        self.orientation_deg = 0.0
        self.secondary_heading: Optional[float] = None
        self.raw_accel = np.zeros(3)
        self.raw_gyro = np.zeros(3)
        self.raw_mag = np.zeros(3)
        self.pressure = STANDARD_PRESSURE_HPA
        self.last_sample_time = 0.0

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        """Estimated position [x, y, z] (copy)."""
        return self.state.position.copy()

    @property
    def heading(self) -> float:
        """Corrected heading of the most recent step. Units: degrees."""
        return self.state.heading

    @property
    def step_count(self) -> int:
        return self.state.step_count

    @property
    def is_tracking(self) -> bool:
        return self.phase is TrackingPhase.TRACKING

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def set_phase(self, phase: TrackingPhase) -> None:
        self.phase = TrackingPhase(phase)

    def start_tracking(self) -> None:
        """Confirm the start position and begin processing steps."""
        self.phase = TrackingPhase.TRACKING

    def stop_tracking(self) -> None:
        """Return to start-position selection; updates are skipped again."""
        self.phase = TrackingPhase.SELECTING_START

    def set_starting_position(self, x: float, y: float, z: float = 0.0) -> None:
        """Set the position and reinitialize the particle cloud there."""
        pdr_state.set_starting_position(self.state, x, y, z)
        self.filter.sync()

    def reset(self) -> None:
        """Reset the session to its initial condition and start selecting again."""
        pdr_state.reset_pdr_state(self.state)
        self.window.clear()
        self.filter.resample_count = 0
        self.filter.sync()
        self.phase = TrackingPhase.SELECTING_START

    def align_orientation(self, angle_deg: float) -> None:
        """Override the last known device orientation."""
        self.orientation_deg = float(angle_deg)

    def set_heading_bias(self, bias: float) -> float:
        """Set the heading bias (clamped to ±max_heading_bias)."""
        return pdr_state.set_heading_bias(self.state, bias, self.config)

    def set_device_context(self, context: DeviceContext) -> None:
        self.state.device_context = DeviceContext(context)

    # ------------------------------------------------------------------
    # Update cycle
    # ------------------------------------------------------------------

    def update_sensors(self, sample: SensorSample) -> None:
        """Cache the raw readings of one sample and feed the variance window."""
        self.raw_accel = sample.accel.copy()
        self.raw_gyro = sample.gyro.copy()
        self.raw_mag = sample.mag.copy()
        self.pressure = float(sample.pressure)
        self.last_sample_time = float(sample.t)
        if sample.orientation_deg is not None:
            self.orientation_deg = float(sample.orientation_deg)
        self.window.push(sample.accel, sample.gyro)

    def update_position(self, t: Optional[float] = None) -> bool:
        """
        Run the PDR update cycle on the cached readings.

        Args:
            t: Timestamp of the update. Default: time of the last sample.

        Returns:
            True if a step was detected and the filter ran.
        """
        if self.phase is TrackingPhase.SELECTING_START:
            return False

        if t is None:
            t = self.last_sample_time
        state = self.state
        config = self.config

        prev_step_time = state.last_step_time
        had_step = state.step_count > 0

        stepped = detect_step(self.raw_accel, t, state, config)
        if stepped:
            # No previous step: interval unknown, step_frequency falls back to 1 Hz
            interval = t - prev_step_time if had_step else 0.0
            f_step = step_frequency(interval)
            accel_var, gyro_var = self.window.variances()

            motion = classify_motion(accel_var, gyro_var)
            state.motion_state = motion

            step_len = estimate_step_length(f_step, accel_var, motion, state.device_context)
            step_len = correct_step_length(step_len, motion, config)
            step_len *= config.step_scale

            heading = compute_heading(self.orientation_deg, self.secondary_heading)
            heading = correct_heading(heading, state.heading_bias, config)
            state.heading = heading

            state.position[:2] = self.filter.step(step_len, heading)

        state.last_accel_mag = total_accel_magnitude(self.raw_accel)
        return stepped

    def process_sample(self, sample: SensorSample) -> bool:
        """Cache one sample and run the update cycle at its timestamp."""
        self.update_sensors(sample)
        return self.update_position(sample.t)

    def capture_snapshot(self, timestamp: Optional[float] = None) -> SensorSnapshot:
        """
        Capture the current raw readings and estimated position.

        Args:
            timestamp: Snapshot time in seconds. Default: wall-clock time.
        """
        if timestamp is None:
            timestamp = time.time()
        return SensorSnapshot(
            timestamp=timestamp,
            acceleration=self.raw_accel,
            gyroscope=self.raw_gyro,
            magnetometer=self.raw_mag,
            barometric_pressure=self.pressure,
            position=self.state.position,
        )
