"""
Particle Filter for step-and-heading pedestrian dead reckoning.

The belief over the walker's planar pose is a fixed-size population of
weighted hypotheses (x, y, heading). Each detected step:
    1. Propagate: x_i += (L + n_L) * sin(ψ + n_ψ),  y_i += (L + n_L) * cos(ψ + n_ψ)
    2. Normalize weights: w_i ← w_i / Σw
    3. Degeneracy check: N_eff = 1 / Σ w_i²
    4. Systematic resampling when N_eff < threshold
    5. Estimate: weighted mean of particle positions

There is no observation/likelihood model (no map constraints): weights only
change through normalization and the uniform reset after resampling. The
update() hook for observations is a stub that raises NotImplementedError.

Heading convention: degrees, 0 = +y, 90 = +x.
"""

import warnings
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from pdrnav.config import PDRConfig
from pdrnav.estimators.base import StateEstimator
from pdrnav.utils.angles import wrap_heading_deg_array

if TYPE_CHECKING:
    from pdrnav.session.state import PDRState


class ParticleCloud:
    """
    Fixed-size particle population.

    Attributes:
        states: Particle poses, shape (N, 3), columns [x, y, heading_deg].
        weights: Importance weights, shape (N,), non-negative.

    Notes:
        - N never changes after construction; reset() and resampling
          overwrite contents in place.
        - A second (N, 3) buffer is preallocated so resampling does not
          allocate a new population on every step.
    """

    def __init__(self, n_particles: int, x: float = 0.0, y: float = 0.0):
        if n_particles < 1:
            raise ValueError(f"n_particles must be >= 1, got {n_particles}")
        self.states = np.zeros((n_particles, 3))
        self.weights = np.zeros(n_particles)
        self._buffer = np.zeros((n_particles, 3))
        self.reset(x, y)

    def __len__(self) -> int:
        return self.states.shape[0]

    @property
    def n_particles(self) -> int:
        return self.states.shape[0]

    @property
    def x(self) -> np.ndarray:
        return self.states[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.states[:, 1]

    @property
    def heading(self) -> np.ndarray:
        return self.states[:, 2]

    def reset(self, x: float = 0.0, y: float = 0.0, heading: float = 0.0) -> None:
        """Put every particle at (x, y, heading) with uniform weight 1/N."""
        self.states[:, 0] = x
        self.states[:, 1] = y
        self.states[:, 2] = heading
        self.weights.fill(1.0 / self.n_particles)

    def copy(self) -> "ParticleCloud":
        other = ParticleCloud(self.n_particles)
        other.states[:] = self.states
        other.weights[:] = self.weights
        return other

    def _swap_buffer(self) -> None:
        self.states, self._buffer = self._buffer, self.states


def propagate_particles(
    particles: ParticleCloud,
    step_length: float,
    heading_deg: float,
    heading_noise: float,
    step_len_noise: float,
    rng: np.random.Generator,
) -> None:
    """
    Move every particle by one noisy step (in place).

    Each particle draws independent uniform noise:
        n_ψ ~ U(-heading_noise/2, heading_noise/2)
        n_L ~ U(-step_len_noise/2, step_len_noise/2)

    and is displaced by
        ψ_i = wrap(ψ + n_ψ)
        [dx, dy] = (L + n_L) * [sin(ψ_i), cos(ψ_i)]

    The particle's stored heading becomes ψ_i.
    """
    n = particles.n_particles
    heading_i = wrap_heading_deg_array(
        heading_deg + (rng.random(n) - 0.5) * heading_noise
    )
    step_i = step_length + (rng.random(n) - 0.5) * step_len_noise

    rad = np.deg2rad(heading_i)
    particles.states[:, 0] += step_i * np.sin(rad)
    particles.states[:, 1] += step_i * np.cos(rad)
    particles.states[:, 2] = heading_i


def normalize_weights(weights: np.ndarray) -> bool:
    """
    Normalize weights in place so they sum to 1.

    Returns:
        True if the weights were normalized. When Σw <= 0 the weights are
        left unmodified, a RuntimeWarning is emitted, and False is returned.
    """
    weight_sum = float(np.sum(weights))
    if weight_sum > 0:
        weights /= weight_sum
        return True

    warnings.warn(
        f"Particle weights sum to {weight_sum}; normalization skipped",
        RuntimeWarning,
    )
    return False


def effective_sample_size(weights: np.ndarray) -> float:
    """
    Compute the effective sample size.

        N_eff = 1 / Σ(w_i²)

    Returns inf when all weights are zero (no resampling is triggered).
    """
    sum_sq = float(np.sum(weights**2))
    if sum_sq == 0.0:
        return float("inf")
    return 1.0 / sum_sq


def systematic_resample(
    particles: ParticleCloud, rng: np.random.Generator
) -> np.ndarray:
    """
    Systematic resampling of the population (in place).

    With cumulative weights c_j and total C = c_{N-1}, one offset
    u_0 ~ U(0, C/N) is drawn and the N positions u_k = u_0 + k * C/N select
    the first particle j with c_j >= u_k. Selected particles keep their
    position and heading; all weights are reset to 1/N.

    Args:
        particles: Population to resample.
        rng: Random generator for the offset u_0.

    Returns:
        Selected source indices, shape (N,).
    """
    n = particles.n_particles
    cumsum = np.cumsum(particles.weights)
    stride = cumsum[-1] / n

    u0 = rng.uniform(0.0, stride) if stride > 0 else 0.0
    positions = u0 + stride * np.arange(n)

    # cumsum[-1] can fall a rounding error short of the last position
    indices = np.minimum(np.searchsorted(cumsum, positions, side='left'), n - 1)

    np.take(particles.states, indices, axis=0, out=particles._buffer)
    particles._swap_buffer()
    particles.weights.fill(1.0 / n)

    return indices


def weighted_mean_position(particles: ParticleCloud) -> np.ndarray:
    """
    Weighted mean of particle positions, shape (2,).

    Falls back to the unweighted mean when the weights do not sum to a
    positive value.
    """
    weights = particles.weights
    weight_sum = np.sum(weights)
    if weight_sum <= 0:
        return particles.states[:, :2].mean(axis=0)
    return weights @ particles.states[:, :2] / weight_sum


class ParticleFilter(StateEstimator):
    """
    Particle filter over planar position hypotheses driven by detected steps.

    The filter operates on a ParticleCloud it does not own (typically the
    one held by the session state), so resetting the session state resets
    the filter too.

    Attributes:
        particles: The particle population (shared with the session state).
        config: PDR configuration (noise amplitudes, resample threshold).
        rng: Random generator used for propagation noise and resampling.
        state: Weighted mean position [x, y].
        covariance: Weighted covariance of particle positions (2×2).
        n_eff: Effective sample size computed at the last update.
        resampled: True if the last update resampled.
        resample_count: Number of resampling events so far.
    """

    def __init__(
        self,
        particles: ParticleCloud,
        config: Optional[PDRConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize Particle Filter.

        Args:
            particles: Particle population to operate on.
            config: PDR configuration. Default: PDRConfig().
            rng: Random generator. Default: np.random.default_rng().

        Raises:
            ValueError: If the population size does not match
                config.particle_count.
        """
        super().__init__(state_dim=2)

        if config is None:
            config = PDRConfig()
        if particles.n_particles != config.particle_count:
            raise ValueError(
                f"Particle population has {particles.n_particles} members, "
                f"config.particle_count is {config.particle_count}"
            )

        self.particles = particles
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.resample_count = 0
        self.sync()

    def _update_state_estimate(self) -> None:
        """
        Update state and covariance estimates from particles and weights.

        Uses weighted mean and covariance of particle positions.
        """
        self.state = weighted_mean_position(self.particles)

        weights = self.particles.weights
        weight_sum = np.sum(weights)
        if weight_sum <= 0:
            weights = np.full(self.particles.n_particles, 1.0 / self.particles.n_particles)
        else:
            weights = weights / weight_sum

        # Weighted covariance: P = Σ wᵢ (xᵢ - x̂)(xᵢ - x̂)ᵀ
        diff = self.particles.states[:, :2] - self.state
        self.covariance = (weights[:, np.newaxis] * diff).T @ diff

    def predict(self, u: np.ndarray) -> None:
        """
        Propagate all particles by one detected step.

        Args:
            u: Control input [step_length, heading_deg].
        """
        step_length, heading_deg = np.asarray(u, dtype=float)

        propagate_particles(
            self.particles,
            float(step_length),
            float(heading_deg),
            self.config.heading_noise,
            self.config.step_len_noise,
            self.rng,
        )

    def update(self, z: Optional[np.ndarray] = None) -> None:
        """
        Normalize weights, resample on degeneracy and refresh the estimate.

        Args:
            z: Observation for likelihood reweighting. Not supported: any
               value other than None raises NotImplementedError.
        """
        if z is not None:
            raise NotImplementedError(
                "Observation reweighting (e.g. map matching) is not supported"
            )

        normalize_weights(self.particles.weights)

        self.n_eff = effective_sample_size(self.particles.weights)
        self.resampled = self.n_eff < self.config.resample_threshold
        if self.resampled:
            systematic_resample(self.particles, self.rng)
            self.resample_count += 1

        self._update_state_estimate()

    def sync(self) -> None:
        """Recompute N_eff and the estimate after the population was reset externally."""
        self.n_eff = effective_sample_size(self.particles.weights)
        self.resampled = False
        self._update_state_estimate()

    def get_particles(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get current particles and weights.

        Returns:
            Tuple of (states, weights).
                - states: (n_particles, 3) columns [x, y, heading_deg]
                - weights: (n_particles,)
        """
        return self.particles.states.copy(), self.particles.weights.copy()


def particle_filter_update(
    state: "PDRState",
    step_length: float,
    heading_deg: float,
    config: PDRConfig,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Apply one particle filter step to a session state.

    config must describe the state's population: its particle_count has to
    match state.particles, otherwise ParticleFilter raises ValueError.

    Writes the weighted mean into state.position[0:2]; z is untouched.

    Returns:
        Estimated position [x, y].
    """
    pf = ParticleFilter(state.particles, config, rng)
    xy = pf.step(step_length, heading_deg)
    state.position[:2] = xy
    return xy
