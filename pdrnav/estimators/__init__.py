"""
State estimation for pedestrian dead reckoning.

Available estimators:
    - Particle Filter (PF) over planar position/heading hypotheses
"""

from pdrnav.estimators.base import StateEstimator
from pdrnav.estimators.particle_filter import (
    ParticleCloud,
    ParticleFilter,
    propagate_particles,
    normalize_weights,
    effective_sample_size,
    systematic_resample,
    weighted_mean_position,
    particle_filter_update,
)

__all__ = [
    "StateEstimator",
    "ParticleCloud",
    "ParticleFilter",
    "propagate_particles",
    "normalize_weights",
    "effective_sample_size",
    "systematic_resample",
    "weighted_mean_position",
    "particle_filter_update",
]
