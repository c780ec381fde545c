"""
Synthetic smartphone sensor streams for a pedestrian corridor walk.

The forward model mirrors what a browser motion API delivers to the PDR core:
    - accel: linear acceleration with gravity removed, shape (N, 3), m/s².
      Each footfall is a short half-sine pulse of magnitude ``step_peak``
      (replacing the sway noise for those samples).
    - gyro: rotation rate [alpha, beta, gamma] in deg/s; alpha carries the
      turn rate during corners.
    - orientation: device compass angle in degrees (true heading plus noise
      and an optional constant bias).

Trajectory: ``num_legs`` straight legs of ``steps_per_leg`` steps, each
followed by a 90° right turn (compass heading increases). Heading 0 walks
along +y, 90 along +x.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

import numpy as np

from pdrnav.sensors.types import SensorSample
from pdrnav.utils.angles import heading_to_unit_vector, wrap_heading_deg_array


@dataclass(frozen=True)
class WalkDataset:
    """
    Sensor streams and ground truth of a simulated walk.

    Attributes:
        t: Sample timestamps, shape (N,). Units: s.
        accel: Linear acceleration, shape (N, 3). Units: m/s².
        gyro: Rotation rate, shape (N, 3). Units: deg/s.
        orientation: Device compass angle, shape (N,). Units: deg.
        pos_true: True planar position after each sample, shape (N, 2). Units: m.
        heading_true: True heading, shape (N,). Units: deg.
        step_times: Times of the true footfalls, shape (n_steps,). Units: s.
        meta: Generation parameters.
    """

    t: np.ndarray
    accel: np.ndarray
    gyro: np.ndarray
    orientation: np.ndarray
    pos_true: np.ndarray
    heading_true: np.ndarray
    step_times: np.ndarray
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate shape consistency."""
        if self.t.ndim != 1:
            raise ValueError(f"WalkDataset.t must be 1D array, got shape {self.t.shape}")
        n = self.t.shape[0]
        for name, shape in (
            ("accel", (n, 3)),
            ("gyro", (n, 3)),
            ("orientation", (n,)),
            ("pos_true", (n, 2)),
            ("heading_true", (n,)),
        ):
            if getattr(self, name).shape != shape:
                raise ValueError(
                    f"WalkDataset.{name} must have shape {shape}, "
                    f"got {getattr(self, name).shape}"
                )

    def samples(self) -> Iterator[SensorSample]:
        """Iterate over the streams as SensorSample ticks."""
        for k in range(len(self.t)):
            yield SensorSample(
                t=float(self.t[k]),
                accel=self.accel[k],
                gyro=self.gyro[k],
                orientation_deg=float(self.orientation[k]),
            )

    def save(self, path) -> None:
        """Save the streams to a compressed .npz file."""
        np.savez_compressed(
            path,
            t=self.t,
            accel=self.accel,
            gyro=self.gyro,
            orientation=self.orientation,
            pos_true=self.pos_true,
            heading_true=self.heading_true,
            step_times=self.step_times,
        )

    @classmethod
    def load(cls, path, meta: Dict[str, Any] = None) -> "WalkDataset":
        """Load streams saved with save()."""
        with np.load(path) as data:
            return cls(
                t=data["t"],
                accel=data["accel"],
                gyro=data["gyro"],
                orientation=data["orientation"],
                pos_true=data["pos_true"],
                heading_true=data["heading_true"],
                step_times=data["step_times"],
                meta=dict(meta or {}),
            )


def generate_corridor_walk(
    num_legs: int = 4,
    steps_per_leg: int = 20,
    step_length: float = 0.7,
    step_freq: float = 2.0,
    dt: float = 0.02,
    turn_duration: float = 2.0,
    start_heading: float = 0.0,
    step_peak: float = 2.0,
    pulse_duration: float = 0.1,
    accel_noise: float = 0.1,
    gyro_noise: float = 0.3,
    orientation_noise: float = 2.0,
    orientation_bias: float = 0.0,
    seed: int = 42,
) -> WalkDataset:
    """
    Generate a corridor walk with noisy smartphone sensor streams.

    Args:
        num_legs: Number of straight legs (each followed by a 90° turn).
        steps_per_leg: Footfalls per leg.
        step_length: True step length. Units: m.
        step_freq: Step frequency. Units: Hz.
        dt: Sample period. Units: s. Default 0.02 (50 Hz).
        turn_duration: Time spent turning in place between legs. Units: s.
        start_heading: Initial compass heading. Units: deg.
        step_peak: Peak acceleration magnitude of a footfall. Units: m/s².
        pulse_duration: Duration of the footfall pulse. Units: s.
        accel_noise: Acceleration noise std dev per axis. Units: m/s².
        gyro_noise: Rotation-rate noise std dev per axis. Units: deg/s.
        orientation_noise: Orientation noise std dev. Units: deg.
        orientation_bias: Constant orientation error. Units: deg.
        seed: Random seed.

    Returns:
        WalkDataset with streams and ground truth.
    """
    if num_legs < 1 or steps_per_leg < 1:
        raise ValueError("num_legs and steps_per_leg must be >= 1")
    if step_freq <= 0 or dt <= 0:
        raise ValueError("step_freq and dt must be positive")
    if pulse_duration >= 1.0 / step_freq:
        raise ValueError("pulse_duration must be shorter than the step period")

    rng = np.random.default_rng(seed)

    step_period = 1.0 / step_freq
    leg_duration = steps_per_leg * step_period
    total = num_legs * (leg_duration + turn_duration)
    t = np.arange(0.0, total, dt)
    n = len(t)

    accel = rng.normal(0.0, accel_noise, (n, 3))
    gyro = rng.normal(0.0, gyro_noise, (n, 3))
    heading = np.zeros(n)
    pos = np.zeros((n, 2))
    step_times = []

    turn_rate = 90.0 / turn_duration if turn_duration > 0 else 0.0
    pulse_samples = max(1, int(round(pulse_duration / dt)))
    pulse = step_peak * np.sin(np.pi * (np.arange(pulse_samples) + 0.5) / pulse_samples)

    xy = np.zeros(2)
    for leg in range(num_legs):
        leg_start = leg * (leg_duration + turn_duration)
        leg_heading = start_heading + 90.0 * leg

        for s in range(steps_per_leg):
            # Offset by half a period so the first footfall is not at t = 0
            t_step = leg_start + (s + 0.5) * step_period
            k = int(round(t_step / dt))
            if k >= n:
                break
            step_times.append(t[k])
            direction = rng.normal(size=3)
            direction /= np.linalg.norm(direction)
            k_end = min(n, k + pulse_samples)
            accel[k:k_end] = pulse[: k_end - k, np.newaxis] * direction

            xy = xy + step_length * heading_to_unit_vector(leg_heading)
            pos[k:] = xy

        k0 = int(round(leg_start / dt))
        k_turn = int(round((leg_start + leg_duration) / dt))
        k_next = min(n, int(round((leg_start + leg_duration + turn_duration) / dt)))
        heading[k0:k_turn] = leg_heading
        if k_next > k_turn:
            progress = (t[k_turn:k_next] - t[k_turn]) / turn_duration
            heading[k_turn:k_next] = leg_heading + 90.0 * progress
            gyro[k_turn:k_next, 0] += turn_rate
        heading[k_next:] = leg_heading + 90.0

    heading_true = wrap_heading_deg_array(heading)
    orientation = wrap_heading_deg_array(
        heading + orientation_bias + rng.normal(0.0, orientation_noise, n)
    )

    meta = {
        "num_legs": num_legs,
        "steps_per_leg": steps_per_leg,
        "step_length_m": step_length,
        "step_freq_hz": step_freq,
        "dt_s": dt,
        "turn_duration_s": turn_duration,
        "start_heading_deg": start_heading,
        "step_peak_m_s2": step_peak,
        "pulse_duration_s": pulse_duration,
        "accel_noise_m_s2": accel_noise,
        "gyro_noise_deg_s": gyro_noise,
        "orientation_noise_deg": orientation_noise,
        "orientation_bias_deg": orientation_bias,
        "seed": seed,
    }

    return WalkDataset(
        t=t,
        accel=accel,
        gyro=gyro,
        orientation=orientation,
        pos_true=pos,
        heading_true=heading_true,
        step_times=np.array(step_times),
        meta=meta,
    )
