"""
Evaluation and Visualization Module.

Modules:
    metrics: Error metrics (RMSE, error statistics, end-point drift)
    plots: Trajectory and error plots
"""

from .metrics import (
    compute_error_stats,
    compute_position_errors,
    compute_rmse,
    final_drift,
    path_length,
)
from .plots import (
    plot_position_error_time,
    plot_trajectory_2d,
    save_figure,
)

__all__ = [
    # Metrics
    "compute_position_errors",
    "compute_rmse",
    "compute_error_stats",
    "final_drift",
    "path_length",
    # Plots
    "plot_trajectory_2d",
    "plot_position_error_time",
    "save_figure",
]
