"""
PDR session state.

PDRState is the single mutable aggregate the PDR components read and
mutate. It is owned by the caller that drives the sensor loop and is passed
explicitly into every component; there is no module-level singleton.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from pdrnav.config import PDRConfig
from pdrnav.estimators.particle_filter import ParticleCloud
from pdrnav.sensors.types import DeviceContext, MotionState


@dataclass
class PDRState:
    """
    Mutable PDR session state.

    Attributes:
        position: Estimated position [x, y, z], shape (3,). z is passed
                  through unchanged; only x and y are estimated.
        particles: Particle population (fixed size for the whole session).
        last_step_time: Timestamp of the most recent step. Units: s.
        step_count: Number of detected steps (diagnostic).
        last_accel_mag: Most recent acceleration magnitude. Units: m/s².
        heading: Corrected heading used for the most recent step. Units: deg.
        heading_bias: Heading correction term. Units: deg.
        device_context: How the device is carried.
        motion_state: Motion regime of the most recent step.

    Notes:
        - This is a MUTABLE dataclass to allow in-place updates each step.
        - Single writer: the sensor loop that owns it.
    """

    position: np.ndarray
    particles: ParticleCloud
    last_step_time: float = 0.0
    step_count: int = 0
    last_accel_mag: float = 0.0
    heading: float = 0.0
    heading_bias: float = 0.0
    device_context: DeviceContext = DeviceContext.HOLDING
    motion_state: MotionState = MotionState.WALKING

    def __post_init__(self) -> None:
        """Validate shapes and coerce labels to their enumerations."""
        self.position = np.asarray(self.position, dtype=float)
        if self.position.shape != (3,):
            raise ValueError(
                f"PDRState.position must have shape (3,), got {self.position.shape}"
            )
        self.device_context = DeviceContext(self.device_context)
        self.motion_state = MotionState(self.motion_state)

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])


def create_pdr_state(
    config: Optional[PDRConfig] = None,
    device_context: DeviceContext = DeviceContext.HOLDING,
) -> PDRState:
    """
    Create the initial session state.

    Particles start at the origin with zero heading and uniform weight 1/N,
    N = config.particle_count.
    """
    if config is None:
        config = PDRConfig()

    return PDRState(
        position=np.zeros(3),
        particles=ParticleCloud(config.particle_count),
        device_context=device_context,
    )


def reset_pdr_state(state: PDRState) -> None:
    """
    Restore a state to its initial condition in place.

    Position goes back to the origin, particles to the origin with zero
    heading and uniform weights, step counters and cached readings to zero,
    heading bias to zero and the motion label to WALKING. The device
    context is kept (it describes the user, not the session).
    """
    state.position[:] = 0.0
    state.particles.reset()
    state.last_step_time = 0.0
    state.step_count = 0
    state.last_accel_mag = 0.0
    state.heading = 0.0
    state.heading_bias = 0.0
    state.motion_state = MotionState.WALKING


def set_starting_position(state: PDRState, x: float, y: float, z: float = 0.0) -> None:
    """
    Move the session to a new starting position.

    Besides the position, the particle population is reinitialized at
    (x, y) with zero heading and uniform weights so no stale hypotheses are
    averaged against the new origin. Step counters are kept.
    """
    state.position[:] = (x, y, z)
    state.particles.reset(x, y)


def set_heading_bias(state: PDRState, bias: float, config: Optional[PDRConfig] = None) -> float:
    """Set the heading bias, clamped to ±config.max_heading_bias. Returns the stored value."""
    if not np.isfinite(bias):
        raise ValueError(f"heading bias must be finite, got {bias}")
    if config is None:
        config = PDRConfig()

    limit = config.max_heading_bias
    state.heading_bias = float(np.clip(bias, -limit, limit))
    return state.heading_bias
