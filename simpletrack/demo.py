#!/usr/bin/env python3
"""
simpletrack Demo: track a synthetic scenario or a CSV of detections
===================================================================

Run with:
    python -m simpletrack.demo                          # Synthetic random walks
    python -m simpletrack.demo --csv points.csv         # Detections from file
    python -m simpletrack.demo --method nearest_neighbor --debug
    python -m simpletrack.demo --save tracks.png        # Render tracks (matplotlib)

License: AGPL-3.0-or-later
"""

import argparse
import logging
import math
import sys

import numpy as np

from .simpletrack_config import SimpleTrackError, TrackerConfig
from .simpletrack_datasets import (
    SyntheticScenarioGenerator, load_points_csv, save_tracks_csv,
)
from .simpletrack_tracker import SimpleTracker, TrackingResult
from .simpletrack_tracks import track_lengths


def identity_purity(result: TrackingResult, identities) -> float:
    """Fraction of links joining two detections of the same true particle."""
    ids = np.concatenate(identities) if identities else np.zeros(0, dtype=np.int64)
    e = result.graph.edge_array()
    if len(e) == 0:
        return 1.0
    return float(np.mean(ids[e[:, 0]] == ids[e[:, 1]]))


def plot_tracks(result: TrackingResult, save_path=None):
    """Draw every track over the concatenated points (first two coordinates)."""
    import matplotlib
    if save_path:
        matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    pts = result.all_points
    if pts.shape[1] == 1:
        pts = np.column_stack([pts[:, 0], result.graph.frame_of(np.arange(len(pts)))])

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.scatter(pts[:, 0], pts[:, 1], s=6, c='0.6', zorder=1)
    for adjacency_track in result.adjacency_tracks:
        if len(adjacency_track) > 1:
            xy = pts[adjacency_track]
            ax.plot(xy[:, 0], xy[:, 1], lw=1.0, zorder=2)
    ax.set_title(f"{result.n_tracks} tracks over {result.n_frames} frames")
    ax.set_aspect('equal', adjustable='datalim')

    if save_path:
        fig.savefig(save_path, dpi=120, bbox_inches='tight')
        plt.close(fig)
        print(f"  Saved: {save_path}")
    else:
        plt.show()


def run_demo(args) -> int:
    config = TrackerConfig(
        method=args.method,
        max_linking_distance=args.max_linking_distance,
        max_gap_closing=args.max_gap_closing,
        debug=args.debug,
    )

    identities = None
    if args.csv:
        points = load_points_csv(args.csv)
        print(f"Loaded {sum(len(p) for p in points)} points in {len(points)} frames from {args.csv}")
    else:
        gen = SyntheticScenarioGenerator(seed=args.seed, p_detection=args.p_detection)
        scenario = gen.random_walks(n_particles=args.particles, n_frames=args.frames,
                                    step_std=args.step)
        points, identities = scenario.frames, scenario.identities
        print(f"Synthetic scenario: {args.particles} particles, {args.frames} frames, "
              f"p_detection={args.p_detection}")

    result = SimpleTracker(config).track(points)

    lengths = track_lengths(result.tracks)
    print(f"  Method: {config.method.value} | Links: {result.graph.n_edges} | "
          f"Tracks: {result.n_tracks}")
    if result.n_tracks:
        print(f"  Track length: mean {lengths.mean():.1f}, max {lengths.max()} | "
              f"Total link distance: {result.total_link_distance():.2f}")
    if identities is not None:
        print(f"  Link purity vs ground truth: {identity_purity(result, identities):.3f}")

    if args.output:
        n = save_tracks_csv(args.output, result.tracks)
        print(f"  Wrote {n} rows to {args.output}")
    if args.save or args.show:
        plot_tracks(result, save_path=args.save)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='simpletrack Demo: particle tracking with gap closing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
CSV input format (header row skipped):
  frame,x,y[,z...]      frame numbers are 0-based integers

Examples:
  python -m simpletrack.demo --particles 50 --p-detection 0.8
  python -m simpletrack.demo --csv points.csv --max-linking-distance 5 -o tracks.csv
""")
    parser.add_argument('--csv', type=str, default=None,
                        help='CSV file of detections (default: synthetic scenario)')
    parser.add_argument('--method', '-m', type=str, default='hungarian',
                        help='hungarian or nearest_neighbor (default: hungarian)')
    parser.add_argument('--max-linking-distance', '-d', type=float, default=math.inf,
                        help='Maximum link length (default: unrestricted)')
    parser.add_argument('--max-gap-closing', '-g', type=float, default=3,
                        help='Maximum frame span of a gap-closing link, or inf (default: 3)')
    parser.add_argument('--debug', action='store_true',
                        help='Report linking progress')
    parser.add_argument('--particles', type=int, default=20,
                        help='Synthetic: number of particles (default: 20)')
    parser.add_argument('--frames', type=int, default=30,
                        help='Synthetic: number of frames (default: 30)')
    parser.add_argument('--step', type=float, default=0.5,
                        help='Synthetic: random walk step std (default: 0.5)')
    parser.add_argument('--p-detection', type=float, default=0.9,
                        help='Synthetic: detection probability (default: 0.9)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Synthetic: random seed (default: 42)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Write tracks to this CSV file')
    parser.add_argument('--save', type=str, default=None,
                        help='Save a track plot to this PNG file')
    parser.add_argument('--show', action='store_true',
                        help='Display the track plot')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.debug else logging.WARNING,
                        format='%(message)s')
    try:
        return run_demo(args)
    except (SimpleTrackError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
