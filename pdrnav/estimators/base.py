"""
Step-driven estimator contract.

A PDR estimator advances once per detected step rather than once per sensor
sample. Subclasses provide the motion model (predict), the population upkeep
after it (update) and a way to rebuild the estimate when the population they
operate on is reset from outside (sync).
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np


class StateEstimator(ABC):
    """
    Estimator advanced by (step_length, heading_deg) pairs.

    Attributes:
        state_dim: Dimension of the position estimate.
        state: Current position estimate, or None before the first sync().
        covariance: Spread of the estimate, or None before the first sync().
    """

    def __init__(self, state_dim: int):
        self.state_dim = state_dim
        self.state: Optional[np.ndarray] = None
        self.covariance: Optional[np.ndarray] = None

    @abstractmethod
    def predict(self, u: np.ndarray) -> None:
        """Move the hypotheses by one step, u = [step_length, heading_deg]."""

    @abstractmethod
    def update(self, z: Optional[np.ndarray] = None) -> None:
        """Reweight or resample after a predict() and refresh the estimate."""

    @abstractmethod
    def sync(self) -> None:
        """Rebuild the estimate from the current population without moving it."""

    def step(self, step_length: float, heading_deg: float) -> np.ndarray:
        """
        Run one full cycle for a detected step.

        Args:
            step_length: Step length (already clamped and scaled).
            heading_deg: Corrected compass heading in degrees.

        Returns:
            Estimated position, shape (state_dim,).
        """
        self.predict(np.array([step_length, heading_deg], dtype=float))
        self.update()
        return self.state.copy()

    def get_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Return copies of the position estimate and its covariance.

        Raises:
            RuntimeError: If no estimate has been computed yet.
        """
        if self.state is None or self.covariance is None:
            raise RuntimeError("No position estimate yet; call sync() or step() first")
        return self.state.copy(), self.covariance.copy()
