"""simpletrack: synthetic scenarios and CSV point/track files.

- SyntheticScenarioGenerator: reproducible random-walk particles with missed
  detections and ground-truth identities, for benchmarking and tests
- load_points_csv: ``frame, c1, c2, ...`` rows -> list of frames
- save_tracks_csv: per-frame tracks -> ``track, frame, point`` rows

License: AGPL-3.0-or-later
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from .simpletrack_config import InputError
from .simpletrack_tracks import NO_DETECTION


@dataclass
class Scenario:
    """Synthetic tracking problem with ground truth.

    Attributes:
        frames: Detections per frame, (n_i, n_dim), shuffled within each frame
        identities: Per frame, the true particle id of each detection
        truth: (n_particles, n_frames, n_dim) true positions
    """
    frames: List[np.ndarray] = field(default_factory=list)
    identities: List[np.ndarray] = field(default_factory=list)
    truth: np.ndarray = field(default_factory=lambda: np.empty((0, 0, 0)))

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    @property
    def n_particles(self) -> int:
        return self.truth.shape[0]


class SyntheticScenarioGenerator:
    """Generate random-walk particle scenarios.

    Usage::

        gen = SyntheticScenarioGenerator(seed=42, p_detection=0.9)
        scenario = gen.random_walks(n_particles=20, n_frames=30)
        result = SimpleTracker().track(scenario.frames)
    """

    def __init__(self, seed: int = 42, noise_std: float = 0.0,
                 p_detection: float = 1.0):
        if not 0.0 < p_detection <= 1.0:
            raise ValueError(f"p_detection must be in (0, 1], got {p_detection}")
        self.rng = np.random.RandomState(seed)
        self.noise_std = noise_std
        self.p_detection = p_detection

    def random_walks(self, n_particles: int = 10, n_frames: int = 20,
                     n_dim: int = 2, step_std: float = 0.5,
                     extent: float = 100.0) -> Scenario:
        """Independent gaussian random walks started uniformly in a box.

        Each particle is detected in each frame with probability
        ``p_detection``. Detection order inside a frame is shuffled so that
        identity cannot be read from position in the array.
        """
        start = self.rng.rand(n_particles, 1, n_dim) * extent
        steps = self.rng.randn(n_particles, n_frames, n_dim) * step_std
        steps[:, 0, :] = 0.0
        truth = start + np.cumsum(steps, axis=1)

        frames, identities = [], []
        for t in range(n_frames):
            seen = np.flatnonzero(self.rng.rand(n_particles) < self.p_detection)
            seen = self.rng.permutation(seen)
            pos = truth[seen, t, :]
            if self.noise_std > 0:
                pos = pos + self.rng.randn(*pos.shape) * self.noise_std
            frames.append(pos.reshape(len(seen), n_dim))
            identities.append(seen.astype(np.int64))

        return Scenario(frames=frames, identities=identities, truth=truth)


def load_points_csv(filepath: str, delimiter: str = ",",
                    skiprows: int = 1) -> List[np.ndarray]:
    """Load detections from a CSV with columns ``frame, c1, c2, ...``.

    Frame numbers must be non-negative integers. Frames between 0 and the
    largest frame number that have no rows become empty frames.
    """
    data = np.loadtxt(filepath, delimiter=delimiter, skiprows=skiprows, ndmin=2)
    if data.size == 0:
        return []
    if data.shape[1] < 2:
        raise InputError(f"{filepath}: expected a frame column and at least one coordinate")

    frame_col = data[:, 0]
    if np.any(frame_col < 0) or np.any(frame_col != np.round(frame_col)):
        raise InputError(f"{filepath}: frame numbers must be non-negative integers")
    frame_col = frame_col.astype(np.int64)
    coords = data[:, 1:]

    return [coords[frame_col == f] for f in range(int(frame_col.max()) + 1)]


def save_tracks_csv(filepath: str, tracks: Sequence[np.ndarray]) -> int:
    """Write per-frame tracks as ``track, frame, point`` rows, skipping gaps.

    Returns:
        Number of rows written.
    """
    rows = []
    for k, track in enumerate(tracks):
        for f in np.flatnonzero(np.asarray(track) != NO_DETECTION):
            rows.append((k, int(f), int(track[f])))
    np.savetxt(filepath, np.array(rows, dtype=np.int64).reshape(-1, 3),
               fmt="%d", delimiter=",", header="track,frame,point", comments="")
    return len(rows)
