"""simpletrack: particle tracking with gap closing.

Rebuilds particle trajectories from per-frame detections in three passes:

1. Frame-to-frame linking of every consecutive frame pair (Hungarian or
   nearest-neighbor)
2. Gap closing: unmatched track ends are linked to unmatched track starts
   up to ``max_gap_closing`` frames later (always nearest-neighbor)
3. Track extraction from the resulting forward adjacency graph

Example::

    from simpletrack import SimpleTracker, TrackerConfig

    tracker = SimpleTracker(TrackerConfig(max_linking_distance=5.0))
    result = tracker.track(points)       # points: list of (n_i, n_dim) arrays
    for track in result.tracks:
        print(track)                     # local index per frame, -1 in gaps

License: AGPL-3.0-or-later
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from .simpletrack_config import TrackerConfig
from .simpletrack_gaps import close_gaps
from .simpletrack_graph import AdjacencyGraph
from .simpletrack_linkers import make_linker
from .simpletrack_linking import as_frames, link_frames
from .simpletrack_tracks import extract_tracks

logger = logging.getLogger(__name__)


@dataclass
class TrackingResult:
    """Complete tracking result.

    Attributes:
        tracks: Per track, a length-F array of local point indices
            (NO_DETECTION where the track has no point)
        adjacency_tracks: Per track, the GlobalIndex values it visits
        graph: Frozen forward adjacency graph
        frame_sizes: Number of points in each frame
        all_points: Every frame's points stacked in frame order
    """
    tracks: List[np.ndarray] = field(default_factory=list)
    adjacency_tracks: List[np.ndarray] = field(default_factory=list)
    graph: AdjacencyGraph = field(default_factory=lambda: AdjacencyGraph([]))
    frame_sizes: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    all_points: np.ndarray = field(default_factory=lambda: np.empty((0, 1)))

    @property
    def n_tracks(self) -> int:
        return len(self.tracks)

    @property
    def n_frames(self) -> int:
        return len(self.frame_sizes)

    @property
    def adjacency_matrix(self) -> sp.csr_matrix:
        """Sparse boolean N x N matrix, A[i, j] set for each link i -> j."""
        return self.graph.to_sparse()

    def track_points(self, k: int) -> np.ndarray:
        """Coordinates of the points of track ``k``, in track order."""
        return self.all_points[self.adjacency_tracks[k]]

    def link_distances(self) -> np.ndarray:
        """Euclidean length of every link, in increasing source order."""
        e = self.graph.edge_array()
        if len(e) == 0:
            return np.zeros(0)
        return np.linalg.norm(self.all_points[e[:, 1]] - self.all_points[e[:, 0]], axis=1)

    def total_link_distance(self) -> float:
        return float(self.link_distances().sum())

    def as_tuple(self) -> Tuple[List[np.ndarray], List[np.ndarray], sp.csr_matrix]:
        """(tracks, adjacency_tracks, adjacency_matrix)."""
        return self.tracks, self.adjacency_tracks, self.adjacency_matrix


class SimpleTracker:
    """Batch particle tracker.

    All frames must be available up front. The frame-to-frame linker is
    chosen once from ``config.method``; gap closing always uses the greedy
    nearest-neighbor linker.

    Args:
        config: TrackerConfig (defaults: Hungarian, unrestricted distance,
            gap horizon of 3 frames)
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self.linker = make_linker(self.config.method)

    def _report(self, msg, *args):
        if self.config.debug:
            logger.info(msg, *args)
        else:
            logger.debug(msg, *args)

    def track(self, points: Sequence) -> TrackingResult:
        """Run linking, gap closing and extraction over ``points``.

        Args:
            points: One entry per frame, each (n_points, n_dim) coordinates

        Returns:
            TrackingResult. An empty frame list gives an empty result.
        """
        cfg = self.config
        frames = as_frames(points)
        frame_sizes = np.array([len(f) for f in frames], dtype=np.int64)
        graph = AdjacencyGraph(frame_sizes)
        all_points = np.vstack(frames) if frames else np.empty((0, 1))

        unmatched = link_frames(frames, self.linker, cfg.max_linking_distance, graph,
                                progress_callback=cfg.progress_callback,
                                report=self._report)
        close_gaps(frames, unmatched, graph, cfg.max_linking_distance,
                   cfg.max_gap_closing, report=self._report)
        graph.freeze()

        self._report("Building tracks:")
        tracks, adjacency_tracks = extract_tracks(graph)
        self._report("Found %d tracks over %d frames.", len(tracks), len(frames))

        return TrackingResult(
            tracks=tracks,
            adjacency_tracks=adjacency_tracks,
            graph=graph,
            frame_sizes=frame_sizes,
            all_points=all_points,
        )


def simpletracker(points: Sequence, **options):
    """Functional entry point.

    Accepts the tracker options as keywords, in either spelling
    (``max_linking_distance=...`` or ``MaxLinkingDistance=...``).

    Returns:
        (tracks, adjacency_tracks, adjacency_matrix)
    """
    config = TrackerConfig.from_kwargs(**options)
    return SimpleTracker(config).track(points).as_tuple()
