#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
simpletrack BENCHMARK: Hungarian vs nearest-neighbor linking
═══════════════════════════════════════════════════════════════════════════════

USAGE:
    python benchmark.py              # Run with default settings
    python benchmark.py --runs 10    # More Monte Carlo runs per density
    python benchmark.py --seed 7     # Custom seed for reproducibility

Reports, per particle density and linking method: wall-clock time, link
purity against ground truth (fraction of links joining detections of the
same particle) and mean link length.

License: AGPL-3.0-or-later
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import time

import numpy as np

from simpletrack import (
    LinkingMethod, SimpleTracker, SyntheticScenarioGenerator, TrackerConfig,
)
from simpletrack.demo import identity_purity

# =============================================================================
# SCENARIOS
# =============================================================================

DENSITIES = {
    'sparse': {'n_particles': 50, 'extent': 200.0},
    'medium': {'n_particles': 200, 'extent': 200.0},
    'dense': {'n_particles': 500, 'extent': 200.0},
}


def run_once(method, density, seed, args):
    gen = SyntheticScenarioGenerator(seed=seed, noise_std=args.noise,
                                     p_detection=args.p_detection)
    scenario = gen.random_walks(n_frames=args.frames, step_std=args.step, **density)
    config = TrackerConfig(method=method, max_linking_distance=args.max_distance,
                           max_gap_closing=args.max_gap)

    t0 = time.perf_counter()
    result = SimpleTracker(config).track(scenario.frames)
    elapsed = time.perf_counter() - t0

    d = result.link_distances()
    return {
        'time_s': elapsed,
        'purity': identity_purity(result, scenario.identities),
        'mean_link': float(d.mean()) if len(d) else 0.0,
        'tracks': result.n_tracks,
    }


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(description='simpletrack linking benchmark')
    parser.add_argument('--runs', type=int, default=3, help='Monte Carlo runs per cell')
    parser.add_argument('--seed', type=int, default=42, help='Base random seed')
    parser.add_argument('--frames', type=int, default=20, help='Frames per scenario')
    parser.add_argument('--step', type=float, default=1.0, help='Random walk step std')
    parser.add_argument('--noise', type=float, default=0.1, help='Detection noise std')
    parser.add_argument('--p-detection', type=float, default=0.9, help='Detection probability')
    parser.add_argument('--max-distance', type=float, default=4.0, help='Linking distance cap')
    parser.add_argument('--max-gap', type=int, default=3, help='Gap-closing horizon')
    args = parser.parse_args()

    print("=" * 78)
    print(f"{'density':<10}{'method':<20}{'time [s]':>12}{'purity':>10}"
          f"{'mean link':>12}{'tracks':>10}")
    print("-" * 78)

    for name, density in DENSITIES.items():
        for method in LinkingMethod:
            runs = [run_once(method, density, args.seed + r, args) for r in range(args.runs)]
            print(f"{name:<10}{method.value:<20}"
                  f"{np.mean([r['time_s'] for r in runs]):>12.4f}"
                  f"{np.mean([r['purity'] for r in runs]):>10.4f}"
                  f"{np.mean([r['mean_link'] for r in runs]):>12.3f}"
                  f"{np.mean([r['tracks'] for r in runs]):>10.1f}")
    print("=" * 78)


if __name__ == '__main__':
    main()
