"""
Visualization helpers for PDR walks.

Plots compare dead-reckoned trajectories with ground truth and show the
particle cloud at a given step.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np


def plot_trajectory_2d(
    truth_xy: np.ndarray,
    est_xy_dict: Dict[str, np.ndarray],
    particles_xy: Optional[np.ndarray] = None,
    steps_xy: Optional[np.ndarray] = None,
    title: str = "PDR Trajectory",
) -> plt.Figure:
    """
    Plot 2D trajectory with true and estimated paths.

    Args:
        truth_xy: True trajectory, shape (N, 2)
        est_xy_dict: Dictionary of estimated trajectories {name: array}
        particles_xy: Final particle positions, shape (M, 2) (optional)
        steps_xy: Estimated positions at detected steps, shape (K, 2) (optional)
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    ax.plot(truth_xy[:, 0], truth_xy[:, 1], "k-", linewidth=2,
            label="Ground Truth", zorder=10)
    ax.plot(truth_xy[0, 0], truth_xy[0, 1], "go", markersize=10,
            label="Start", zorder=11)
    ax.plot(truth_xy[-1, 0], truth_xy[-1, 1], "ro", markersize=10,
            label="End", zorder=11)

    colors = ["blue", "red", "green", "orange", "purple"]
    linestyles = ["-", "--", "-.", ":", "-"]

    for i, (name, est_xy) in enumerate(est_xy_dict.items()):
        ax.plot(
            est_xy[:, 0],
            est_xy[:, 1],
            linestyle=linestyles[i % len(linestyles)],
            color=colors[i % len(colors)],
            linewidth=1.5,
            label=name,
            alpha=0.7,
        )

    if particles_xy is not None:
        ax.scatter(particles_xy[:, 0], particles_xy[:, 1], s=6, color="gray",
                   alpha=0.5, label="Particles", zorder=5)

    if steps_xy is not None and len(steps_xy) > 0:
        ax.plot(steps_xy[:, 0], steps_xy[:, 1], "x", color="tab:blue",
                markersize=5, label=f"Detected steps ({len(steps_xy)})", zorder=6)

    ax.set_xlabel("X (m)", fontsize=12)
    ax.set_ylabel("Y (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis("equal")

    plt.tight_layout()
    return fig


def plot_position_error_time(
    t: np.ndarray,
    errors_dict: Dict[str, np.ndarray],
    title: str = "Position Error vs Time",
) -> plt.Figure:
    """
    Plot error magnitude over time for one or more estimators.

    Args:
        t: Timestamps, shape (N,)
        errors_dict: {name: error vectors (N, d) or magnitudes (N,)}
        title: Plot title
    """
    fig, ax = plt.subplots(figsize=(10, 5))

    for name, errors in errors_dict.items():
        errors = np.asarray(errors)
        magnitude = np.linalg.norm(errors, axis=1) if errors.ndim > 1 else np.abs(errors)
        ax.plot(t, magnitude, linewidth=1.5, label=name)

    ax.set_xlabel("Time (s)", fontsize=12)
    ax.set_ylabel("Error (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("svg", "png"),
) -> List[Path]:
    """
    Save figure in multiple formats.

    Args:
        fig: Matplotlib figure to save
        out_dir: Output directory
        name: Base filename (without extension)
        formats: Tuple of format extensions

    Returns:
        paths: List of saved file paths
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    return paths
