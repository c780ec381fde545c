"""
Generate a synthetic smartphone PDR walk dataset.

Creates a corridor walk (straight legs joined by 90° turns) with the sensor
streams a phone motion API would deliver to the PDR core:
    - Linear acceleration with one half-sine pulse per footfall
    - Rotation rate with the turn rate on the alpha axis
    - Noisy device orientation (optionally biased)

Saves to: data/sim/pdr_corridor_walk/
    samples.npz   sensor streams + ground truth
    config.json   generation parameters and summary

Example:
    python scripts/generate_pdr_walk_dataset.py --preset biased_compass
"""

import argparse
import json
from pathlib import Path

from pdrnav.eval import path_length
from pdrnav.sim import generate_corridor_walk


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'baseline': {
        'description': 'Normal walking pace, clean compass',
        'step_freq': 2.0,
        'orientation_noise': 2.0,
        'orientation_bias': 0.0,
        'accel_noise': 0.1,
    },
    'noisy_compass': {
        'description': 'Large orientation noise (indoor magnetic disturbances)',
        'step_freq': 2.0,
        'orientation_noise': 10.0,
        'orientation_bias': 0.0,
        'accel_noise': 0.1,
    },
    'biased_compass': {
        'description': 'Constant 8 degree compass misalignment',
        'step_freq': 2.0,
        'orientation_noise': 2.0,
        'orientation_bias': 8.0,
        'accel_noise': 0.1,
    },
    'slow_walk': {
        'description': 'Slow pace with shorter steps',
        'step_freq': 1.5,
        'step_length': 0.55,
        'orientation_noise': 2.0,
        'orientation_bias': 0.0,
        'accel_noise': 0.1,
    },
}


def generate_dataset(
    output_dir: str = "data/sim/pdr_corridor_walk",
    seed: int = 42,
    num_legs: int = 4,
    steps_per_leg: int = 20,
    step_length: float = 0.7,
    step_freq: float = 2.0,
    dt: float = 0.02,
    accel_noise: float = 0.1,
    orientation_noise: float = 2.0,
    orientation_bias: float = 0.0,
    preset: str = None,
) -> Path:
    """
    Generate and save a walk dataset.

    Returns:
        Output directory path.
    """
    print(f"\n{'='*70}")
    print(f"Generating PDR walk dataset: {Path(output_dir).name}")
    print(f"{'='*70}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    print("\n1. Simulating corridor walk...")
    walk = generate_corridor_walk(
        num_legs=num_legs,
        steps_per_leg=steps_per_leg,
        step_length=step_length,
        step_freq=step_freq,
        dt=dt,
        accel_noise=accel_noise,
        orientation_noise=orientation_noise,
        orientation_bias=orientation_bias,
        seed=seed,
    )
    distance = path_length(walk.pos_true)
    print(f"   Duration: {walk.t[-1]:.1f} s")
    print(f"   Samples: {len(walk.t)}")
    print(f"   True steps: {len(walk.step_times)}")
    print(f"   Distance: {distance:.1f} m")

    print("\n2. Saving streams...")
    walk.save(output_path / "samples.npz")
    print("   Saved: samples.npz")

    config = {
        "dataset_info": {
            "description": "Synthetic smartphone corridor walk for PDR",
            "preset": preset,
            "seed": seed,
            "duration_sec": float(walk.t[-1]),
            "num_samples": int(len(walk.t)),
            "num_steps": int(len(walk.step_times)),
            "distance_m": distance,
        },
        "walk": walk.meta,
        "coordinate_frame": {
            "description": "Floor plan frame, heading 0 = +y, 90 = +x",
            "origin": "Start of the walk",
            "units": "meters",
        },
    }
    with open(output_path / "config.json", "w") as f:
        json.dump(config, f, indent=2)
    print("   Saved: config.json")

    print(f"\n{'='*70}")
    print("Dataset generation complete!")
    print(f"{'='*70}")
    print(f"Output directory: {output_path.absolute()}\n")

    return output_path


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic smartphone PDR walk dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate with default parameters
  python %(prog)s

  # Use a preset configuration
  python %(prog)s --preset noisy_compass --output data/sim/pdr_noisy_compass

  # Custom parameters
  python %(prog)s --num-legs 6 --steps-per-leg 30 --step-freq 1.8

Available presets: """ + ", ".join(PRESETS.keys())
    )

    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='data/sim/pdr_corridor_walk',
        help='Output directory (default: data/sim/pdr_corridor_walk)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for reproducibility (default: 42)'
    )

    walk_group = parser.add_argument_group('Walk Parameters')
    walk_group.add_argument('--num-legs', type=int, default=4,
                            help='Number of corridor legs (default: 4)')
    walk_group.add_argument('--steps-per-leg', type=int, default=20,
                            help='Footfalls per leg (default: 20)')
    walk_group.add_argument('--step-length', type=float, default=0.7,
                            help='True step length in meters (default: 0.7)')
    walk_group.add_argument('--step-freq', type=float, default=2.0,
                            help='Step frequency in Hz (default: 2.0)')
    walk_group.add_argument('--dt', type=float, default=0.02,
                            help='Sample period in seconds (default: 0.02)')

    sensor_group = parser.add_argument_group('Sensor Parameters')
    sensor_group.add_argument('--accel-noise', type=float, default=0.1,
                              help='Acceleration noise std in m/s^2 (default: 0.1)')
    sensor_group.add_argument('--orientation-noise', type=float, default=2.0,
                              help='Orientation noise std in degrees (default: 2.0)')
    sensor_group.add_argument('--orientation-bias', type=float, default=0.0,
                              help='Constant orientation bias in degrees (default: 0.0)')

    args = parser.parse_args()

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}")
        for key, value in preset_config.items():
            if key != 'description':
                setattr(args, key, value)

    if args.dt <= 0:
        parser.error("Sample period must be positive")
    if args.step_freq <= 0:
        parser.error("Step frequency must be positive")

    generate_dataset(
        output_dir=args.output,
        seed=args.seed,
        num_legs=args.num_legs,
        steps_per_leg=args.steps_per_leg,
        step_length=args.step_length,
        step_freq=args.step_freq,
        dt=args.dt,
        accel_noise=args.accel_noise,
        orientation_noise=args.orientation_noise,
        orientation_bias=args.orientation_bias,
        preset=args.preset,
    )


if __name__ == "__main__":
    main()
