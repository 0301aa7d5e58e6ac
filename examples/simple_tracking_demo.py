#!/usr/bin/env python3
"""simpletrack Quick Start: track 3 particles through missed detections.

Run:
    python examples/simple_tracking_demo.py

Output:
    Per-track frame indices (-1 marks a gap) and the adjacency matrix size.
"""
import numpy as np

from simpletrack import NO_DETECTION, simpletracker


def generate_particles(n_frames=10, seed=42):
    """Three particles drifting right; particle 1 is missed in frames 4 and 5."""
    rng = np.random.default_rng(seed)
    starts = np.array([[0.0, 0.0], [0.0, 5.0], [0.0, 10.0]])
    points = []
    for t in range(n_frames):
        pos = starts + np.array([0.5 * t, 0.0]) + rng.normal(0, 0.05, size=starts.shape)
        if t in (4, 5):
            pos = pos[[0, 2]]
        points.append(pos[rng.permutation(len(pos))])
    return points


def main():
    points = generate_particles()
    tracks, adjacency_tracks, A = simpletracker(
        points, method="hungarian", max_linking_distance=1.0, max_gap_closing=3)

    all_points = np.vstack(points)
    for k, (track, adj) in enumerate(zip(tracks, adjacency_tracks)):
        gaps = int(np.sum(track == NO_DETECTION))
        start, end = all_points[adj[0]], all_points[adj[-1]]
        print(f"Track {k}: {track.tolist()}  gaps={gaps}  "
              f"from ({start[0]:.1f}, {start[1]:.1f}) to ({end[0]:.1f}, {end[1]:.1f})")
    print(f"Adjacency matrix: {A.shape[0]}x{A.shape[1]}, {A.nnz} links")


if __name__ == "__main__":
    main()
