"""
Replay a recorded (or simulated) walk through the PDR tracker.

Feeds every sample of a dataset produced by generate_pdr_walk_dataset.py
into PDRTracker exactly as the live sensor loop would, then reports:
    - Steps detected online vs. the offline peak detector vs. ground truth
    - Motion labels assigned to the detected steps
    - Position RMSE and end-point drift (tracker output converted from
      grid units back to meters with config.step_scale)

Example:
    python scripts/replay_pdr_session.py data/sim/pdr_corridor_walk --plot figs/
    python scripts/replay_pdr_session.py data/sim/pdr_corridor_walk --preset wide_noise
"""

import argparse
import json
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional

import numpy as np
from tqdm import tqdm

from pdrnav.config import PDRConfig
from pdrnav.eval import compute_error_stats, compute_position_errors, final_drift
from pdrnav.sensors import detect_steps_peak_detector
from pdrnav.session import PDRTracker
from pdrnav.sim import WalkDataset


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'default': {
        'description': 'Default PDR parameters (150 particles)',
    },
    'wide_noise': {
        'description': 'Wider per-particle noise for unreliable compasses',
        'heading_noise': 15.0,
        'step_len_noise': 0.3,
    },
    'small_cloud': {
        'description': 'Fewer particles for low-power devices',
        'particle_count': 50,
        'resample_threshold': 25.0,
    },
}


def replay(
    walk: WalkDataset,
    config: PDRConfig,
    heading_bias: float = 0.0,
    seed: int = 42,
) -> Dict[str, np.ndarray]:
    """
    Run the tracker over every sample of a walk.

    Returns:
        Dictionary with:
            - 'pos_est': estimated positions in meters, shape (N, 2)
            - 'step_flags': True where a step was detected, shape (N,)
            - 'motion': motion label per detected step
            - 'tracker': the tracker after the replay
    """
    tracker = PDRTracker(config, rng=np.random.default_rng(seed))
    tracker.set_starting_position(0.0, 0.0, 0.0)
    tracker.set_heading_bias(heading_bias)
    tracker.start_tracking()

    n = len(walk.t)
    pos_est = np.zeros((n, 2))
    step_flags = np.zeros(n, dtype=bool)
    motion = []

    for k, sample in enumerate(tqdm(walk.samples(), total=n, desc="Replaying", unit="sample")):
        stepped = tracker.process_sample(sample)
        step_flags[k] = stepped
        if stepped:
            motion.append(tracker.state.motion_state.value)
        pos_est[k] = tracker.state.position[:2] / config.step_scale

    return {
        "pos_est": pos_est,
        "step_flags": step_flags,
        "motion": motion,
        "tracker": tracker,
    }


def run_replay(
    dataset_dir: str,
    config: PDRConfig,
    heading_bias: float = 0.0,
    lowpass_hz: Optional[float] = None,
    seed: int = 42,
    plot_dir: Optional[str] = None,
) -> Dict[str, float]:
    """Replay a dataset directory and print a summary. Returns the metrics."""
    dataset_path = Path(dataset_dir)
    meta = {}
    if (dataset_path / "config.json").exists():
        with open(dataset_path / "config.json", "r") as f:
            meta = json.load(f)
    walk = WalkDataset.load(dataset_path / "samples.npz", meta=meta)
    dt = float(np.median(np.diff(walk.t)))

    print(f"\n{'='*70}")
    print(f"Replaying PDR session: {dataset_path.name}")
    print(f"{'='*70}")
    print(f"  Samples: {len(walk.t)}  (dt = {dt:.3f} s)")
    print(f"  Particles: {config.particle_count}")
    print(f"  Heading bias: {heading_bias:.1f} deg")

    print("\n1. Online tracking...")
    result = replay(walk, config, heading_bias=heading_bias, seed=seed)
    tracker = result["tracker"]

    print("\n2. Offline step detection...")
    peaks, _ = detect_steps_peak_detector(
        walk.accel,
        dt,
        min_peak_height=config.step_threshold,
        min_peak_distance=config.refractory_period,
        lowpass_cutoff=lowpass_hz,
    )

    n_true = len(walk.step_times)
    print(f"  True steps:      {n_true}")
    print(f"  Online detector: {tracker.step_count}")
    print(f"  Peak detector:   {len(peaks)}")
    for label, count in sorted(Counter(result["motion"]).items()):
        print(f"    {label:8s}: {count} steps")

    print("\n3. Accuracy...")
    errors = compute_position_errors(walk.pos_true, result["pos_est"])
    stats = compute_error_stats(errors)
    drift = final_drift(walk.pos_true, result["pos_est"])
    print(f"  RMSE:        {stats['rmse']:.2f} m")
    print(f"  P90 error:   {stats['p90']:.2f} m")
    print(f"  Final drift: {drift['drift']:.2f} m "
          f"({drift['drift_percent']:.1f}% of {drift['distance']:.1f} m)")
    print(f"  Resampling events: {tracker.filter.resample_count}")

    if plot_dir is not None:
        from pdrnav.eval import plot_position_error_time, plot_trajectory_2d, save_figure

        particles_m = tracker.state.particles.states[:, :2] / config.step_scale
        fig = plot_trajectory_2d(
            walk.pos_true,
            {"PDR particle filter": result["pos_est"]},
            particles_xy=particles_m,
            steps_xy=result["pos_est"][result["step_flags"]],
            title=f"PDR replay: {dataset_path.name}",
        )
        paths = save_figure(fig, plot_dir, f"{dataset_path.name}_trajectory")
        fig = plot_position_error_time(walk.t, {"PDR particle filter": errors})
        paths += save_figure(fig, plot_dir, f"{dataset_path.name}_error")
        for p in paths:
            print(f"  Saved: {p}")

    print(f"\n{'='*70}\n")

    return {
        "true_steps": n_true,
        "online_steps": tracker.step_count,
        "peak_steps": int(len(peaks)),
        **stats,
        **drift,
    }


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Replay a walk dataset through the PDR tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Available presets: " + ", ".join(PRESETS.keys()),
    )
    parser.add_argument('dataset', type=str,
                        help='Dataset directory (samples.npz + config.json)')
    parser.add_argument('--config', type=str,
                        help='PDR configuration JSON file')
    parser.add_argument('--preset', type=str, choices=PRESETS.keys(),
                        help='Apply a preset on top of the configuration')
    parser.add_argument('--heading-bias', type=float, default=0.0,
                        help='Heading bias in degrees, clamped to max_heading_bias (default: 0.0)')
    parser.add_argument('--lowpass-hz', type=float, default=None,
                        help='Low-pass cutoff for the offline peak detector (default: off)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for the particle filter (default: 42)')
    parser.add_argument('--plot', type=str, default=None, metavar='DIR',
                        help='Save trajectory and error plots into DIR')
    parser.add_argument('--json', type=str, default=None, metavar='FILE',
                        help='Write the metrics to FILE as JSON')

    args = parser.parse_args()

    config = PDRConfig.from_json(args.config) if args.config else PDRConfig()
    if args.preset:
        overrides = {k: v for k, v in PRESETS[args.preset].items() if k != 'description'}
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {PRESETS[args.preset]['description']}")
        try:
            config = replace(config, **overrides)
        except ValueError as exc:
            parser.error(str(exc))

    metrics = run_replay(
        args.dataset,
        config,
        heading_bias=args.heading_bias,
        lowpass_hz=args.lowpass_hz,
        seed=args.seed,
        plot_dir=args.plot,
    )

    if args.json:
        with open(args.json, "w") as f:
            json.dump(metrics, f, indent=2)
        print(f"Saved metrics: {args.json}")


if __name__ == "__main__":
    main()
