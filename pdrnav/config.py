"""
PDR configuration.

PDRConfig is an immutable parameter set shared by reference between the
step detector, step-length estimator, heading correction and particle
filter. It is never mutated at runtime; build a new instance (e.g. with
dataclasses.replace) to change parameters.

Configurations can be stored as JSON:

    {
      "particle_count": 150,
      "heading_noise": 5.0,
      "step_length_walk_range": [0.5, 0.7]
    }

Missing keys take their defaults; unknown keys are rejected.
"""

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union


@dataclass(frozen=True)
class PDRConfig:
    """
    Parameters of the PDR estimator.

    Attributes:
        particle_count: Number of particles N. Default: 150.
        heading_noise: Full width of the uniform per-particle heading noise.
                       Units: degrees. Default: 5.0 (i.e. ±2.5°).
        step_len_noise: Full width of the uniform per-particle step-length
                        noise. Units: same as step length. Default: 0.1.
        resample_threshold: Resample when N_eff falls below this absolute
                            value. Default: 75.0 (half of N=150).
        max_heading_bias: Bound on |heading_bias|. Units: degrees. Default: 10.0.
        heading_correction_gain: Gain k in ψ' = ψ + k * bias. Default: 0.3.
        step_length_walk_range: (min, max) plausible walking step. Units: m.
        step_length_run_range: (min, max) plausible running step. Units: m.
        step_threshold: Acceleration magnitude that counts as a step peak.
                        Units: m/s². Default: 1.2.
        refractory_period: Minimum time between two steps. Units: s. Default: 0.2.
        step_scale: Multiplier from meters to floor-plan grid units applied by
                    the tracker (one step = one grid cell). Default: 5.0.
        window_size: Samples kept for motion variance statistics. Default: 50.
        default_accel_variance: Acceleration variance used before the window
                                holds enough samples. Default: 0.3.
        default_gyro_variance: Rotation-rate variance used before the window
                               holds enough samples. Default: 2.0.
    """

    particle_count: int = 150
    heading_noise: float = 5.0
    step_len_noise: float = 0.1
    resample_threshold: float = 75.0
    max_heading_bias: float = 10.0
    heading_correction_gain: float = 0.3
    step_length_walk_range: Tuple[float, float] = (0.5, 0.7)
    step_length_run_range: Tuple[float, float] = (0.7, 1.1)
    step_threshold: float = 1.2
    refractory_period: float = 0.2
    step_scale: float = 5.0
    window_size: int = 50
    default_accel_variance: float = 0.3
    default_gyro_variance: float = 2.0

    def __post_init__(self) -> None:
        """Validate parameter ranges."""
        for f in fields(self):
            values = getattr(self, f.name)
            if not isinstance(values, (tuple, list)):
                values = (values,)
            if not all(math.isfinite(float(v)) for v in values):
                raise ValueError(f"{f.name} must be finite, got {getattr(self, f.name)}")

        if int(self.particle_count) != self.particle_count or self.particle_count < 1:
            raise ValueError(
                f"particle_count must be a positive integer, got {self.particle_count}"
            )
        if self.heading_noise < 0:
            raise ValueError(f"heading_noise must be non-negative, got {self.heading_noise}")
        if self.step_len_noise < 0:
            raise ValueError(f"step_len_noise must be non-negative, got {self.step_len_noise}")
        if self.resample_threshold < 0:
            raise ValueError(
                f"resample_threshold must be non-negative, got {self.resample_threshold}"
            )
        if self.max_heading_bias < 0:
            raise ValueError(
                f"max_heading_bias must be non-negative, got {self.max_heading_bias}"
            )
        if self.step_threshold < 0:
            raise ValueError(f"step_threshold must be non-negative, got {self.step_threshold}")
        if self.refractory_period < 0:
            raise ValueError(
                f"refractory_period must be non-negative, got {self.refractory_period}"
            )
        if self.step_scale <= 0:
            raise ValueError(f"step_scale must be positive, got {self.step_scale}")
        if int(self.window_size) != self.window_size or self.window_size < 2:
            raise ValueError(f"window_size must be an integer >= 2, got {self.window_size}")

        for name in ("step_length_walk_range", "step_length_run_range"):
            rng = tuple(float(v) for v in getattr(self, name))
            if len(rng) != 2:
                raise ValueError(f"{name} must be a (min, max) pair, got {rng}")
            if rng[0] > rng[1]:
                raise ValueError(f"{name} must satisfy min <= max, got {rng}")
            # JSON gives lists; keep tuples so the config stays hashable
            object.__setattr__(self, name, rng)

        object.__setattr__(self, "particle_count", int(self.particle_count))
        object.__setattr__(self, "window_size", int(self.window_size))

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "PDRConfig":
        """Build a config from a mapping; unknown keys raise ValueError."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unknown PDRConfig parameters: {unknown}")
        return cls(**params)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "PDRConfig":
        """Load a config from a JSON file."""
        with open(path, "r") as f:
            params = json.load(f)
        if not isinstance(params, dict):
            raise ValueError(f"PDR config file must hold a JSON object, got {type(params).__name__}")
        return cls.from_dict(params)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dict (ranges as lists)."""
        params = asdict(self)
        params["step_length_walk_range"] = list(self.step_length_walk_range)
        params["step_length_run_range"] = list(self.step_length_run_range)
        return params


DEFAULT_CONFIG = PDRConfig()
