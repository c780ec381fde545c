"""
Evaluation metrics for PDR trajectories.

This module provides functions to compare an estimated walk against ground
truth: per-sample errors, RMSE, error statistics and end-point drift.
"""

from typing import Dict, Optional, Union

import numpy as np


def compute_position_errors(
    truth: np.ndarray, estimated: np.ndarray
) -> np.ndarray:
    """
    Compute position errors between true and estimated positions.

    Args:
        truth: True positions, shape (N, 2) or (N, 3)
        estimated: Estimated positions, shape (N, 2) or (N, 3)

    Returns:
        errors: Position error vectors, shape (N, 2) or (N, 3)

    Raises:
        ValueError: If inputs have incompatible shapes
    """
    truth = np.asarray(truth)
    estimated = np.asarray(estimated)

    if truth.shape != estimated.shape:
        raise ValueError(
            f"Shape mismatch: truth {truth.shape} vs estimated {estimated.shape}"
        )

    return estimated - truth


def compute_rmse(errors: np.ndarray, axis: Optional[int] = None) -> Union[float, np.ndarray]:
    """
    Compute Root Mean Square Error (RMSE).

    Args:
        errors: Error vectors, shape (N, d) or (N,)
        axis: Axis along which to compute RMSE
              None: scalar RMSE of the error magnitudes
              0: per-dimension RMSE
              1: per-sample RMSE

    Returns:
        rmse: RMSE value(s)
    """
    errors = np.asarray(errors)

    if axis is None:
        if errors.ndim > 1:
            errors = np.linalg.norm(errors, axis=1)
        return float(np.sqrt(np.mean(errors**2)))
    return np.sqrt(np.mean(errors**2, axis=axis))


def compute_error_stats(errors: np.ndarray) -> Dict[str, float]:
    """
    Compute error statistics.

    Args:
        errors: Error vectors, shape (N, d) or (N,)

    Returns:
        stats: Dictionary with keys 'mean', 'median', 'std', 'rmse',
               'p75', 'p90', 'p95' and 'max' of the error magnitudes.
    """
    errors = np.asarray(errors)

    if errors.ndim > 1:
        error_magnitudes = np.linalg.norm(errors, axis=1)
    else:
        error_magnitudes = np.abs(errors)

    return {
        "mean": float(np.mean(error_magnitudes)),
        "median": float(np.median(error_magnitudes)),
        "std": float(np.std(error_magnitudes)),
        "rmse": float(np.sqrt(np.mean(error_magnitudes**2))),
        "p75": float(np.percentile(error_magnitudes, 75)),
        "p90": float(np.percentile(error_magnitudes, 90)),
        "p95": float(np.percentile(error_magnitudes, 95)),
        "max": float(np.max(error_magnitudes)),
    }


def path_length(positions: np.ndarray) -> float:
    """Total length of a polyline, positions shape (N, d)."""
    positions = np.asarray(positions, dtype=float)
    if len(positions) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(positions, axis=0), axis=1)))


def final_drift(truth: np.ndarray, estimated: np.ndarray) -> Dict[str, float]:
    """
    End-point drift of a dead-reckoned walk.

    Returns:
        Dictionary with:
            - 'drift': distance between final true and estimated positions
            - 'distance': true path length
            - 'drift_percent': drift as a percentage of distance walked
              (nan for a zero-length walk)
    """
    errors = compute_position_errors(truth, estimated)
    drift = float(np.linalg.norm(errors[-1]))
    distance = path_length(truth)
    drift_percent = 100.0 * drift / distance if distance > 0 else float("nan")
    return {"drift": drift, "distance": distance, "drift_percent": drift_percent}
