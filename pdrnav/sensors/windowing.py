"""
Short-window variance statistics for motion classification.

The motion classifier and step-length model consume two scalars:
    - variance of the acceleration magnitude over the recent samples
    - variance of the rotation-rate magnitude over the recent samples

MotionWindow keeps the most recent ``size`` samples in fixed-size numpy
buffers and computes both variances on demand. With fewer than two
samples the configured defaults are returned instead.
"""

from typing import Optional, Tuple

import numpy as np

from pdrnav.config import PDRConfig


class MotionWindow:
    """
    Bounded window of acceleration and rotation-rate magnitudes.

    Attributes:
        size: Maximum number of samples kept.
        count: Number of samples currently held (<= size).
    """

    def __init__(self, size: int = 50, config: Optional[PDRConfig] = None):
        if size < 2:
            raise ValueError(f"size must be >= 2, got {size}")
        if config is None:
            config = PDRConfig()

        self.size = size
        self._default_accel_var = config.default_accel_variance
        self._default_gyro_var = config.default_gyro_variance
        self._accel_mag = np.zeros(size)
        self._gyro_mag = np.zeros(size)
        self._head = 0
        self.count = 0

    @classmethod
    def from_config(cls, config: PDRConfig) -> "MotionWindow":
        return cls(size=config.window_size, config=config)

    def push(self, accel: np.ndarray, gyro: np.ndarray) -> None:
        """Add one sample (acceleration and rotation rate, each shape (3,))."""
        a_mag = float(np.linalg.norm(accel))
        g_mag = float(np.linalg.norm(gyro))
        # Non-finite samples would poison every variance until they age out
        if not (np.isfinite(a_mag) and np.isfinite(g_mag)):
            return

        self._accel_mag[self._head] = a_mag
        self._gyro_mag[self._head] = g_mag
        self._head = (self._head + 1) % self.size
        self.count = min(self.count + 1, self.size)

    def clear(self) -> None:
        self._head = 0
        self.count = 0

    def variances(self) -> Tuple[float, float]:
        """
        Return (accel_variance, gyro_variance) over the held samples.

        Falls back to the configured defaults when fewer than two samples
        have been pushed.
        """
        if self.count < 2:
            return self._default_accel_var, self._default_gyro_var
        n = self.count
        return (
            float(np.var(self._accel_mag[:n])),
            float(np.var(self._gyro_mag[:n])),
        )

    def __len__(self) -> int:
        return self.count
