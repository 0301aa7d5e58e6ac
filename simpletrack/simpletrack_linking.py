"""simpletrack: frame-to-frame linking and frame validation.

License: AGPL-3.0-or-later
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from .simpletrack_config import InputError
from .simpletrack_graph import AdjacencyGraph
from .simpletrack_linkers import PointSetLinker

logger = logging.getLogger(__name__)


def as_frames(points: Sequence) -> List[np.ndarray]:
    """Normalise raw per-frame input into (n_points, n_dim) float arrays.

    When every non-empty frame is 1-D, a frame of length n is read as n
    points on a line. Once any non-empty frame is 2-D, a 1-D frame is read
    as a single point, so ``[x, y]`` next to ``[[x, y], ...]`` is one
    detection. Empty frames are reshaped to (0, n_dim) once the dimension
    is known. The dimension is fixed by the first non-empty frame; any later
    frame that disagrees raises InputError naming that frame, as does any
    non-finite coordinate.
    """
    raw_frames = []
    for f, raw in enumerate(points):
        try:
            arr = np.asarray(raw, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InputError(f"Frame {f} is not numeric: {exc}", frame_index=f) from exc
        if arr.ndim > 2:
            raise InputError(
                f"Frame {f} must be a (n_points, n_dim) array, got shape {arr.shape}",
                frame_index=f)
        if not np.all(np.isfinite(arr)):
            raise InputError(f"Frame {f} contains non-finite coordinates", frame_index=f)
        raw_frames.append(arr)

    points_on_line = all(a.ndim < 2 for a in raw_frames if a.size)
    frames = []
    n_dim = None
    for f, arr in enumerate(raw_frames):
        if arr.ndim < 2:
            if points_on_line or arr.size == 0:
                arr = arr.reshape(-1, 1)
            else:
                arr = arr.reshape(1, -1)
        if arr.shape[0] > 0:
            if n_dim is None:
                n_dim = arr.shape[1]
            elif arr.shape[1] != n_dim:
                raise InputError(
                    f"Frame {f} has {arr.shape[1]}-D points, expected {n_dim}-D",
                    frame_index=f)
        frames.append(arr)

    n_dim = n_dim or 1
    return [a if a.shape[0] > 0 else np.empty((0, n_dim)) for a in frames]


@dataclass
class UnmatchedSets:
    """Per-frame local indices not yet consumed by any link.

    Attributes:
        sources: frame -> points with no outgoing link (frames 0..F-2)
        targets: frame -> points with no incoming link (frames 1..F-1)
    """
    sources: Dict[int, np.ndarray] = field(default_factory=dict)
    targets: Dict[int, np.ndarray] = field(default_factory=dict)

    def n_sources(self) -> int:
        return sum(len(v) for v in self.sources.values())

    def n_targets(self) -> int:
        return sum(len(v) for v in self.targets.values())


def link_frames(
    frames: Sequence[np.ndarray],
    linker: PointSetLinker,
    max_distance: float,
    graph: AdjacencyGraph,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    report: Callable[..., None] = logger.debug,
) -> UnmatchedSets:
    """Link every consecutive frame pair and write the links to ``graph``.

    Args:
        frames: Validated frames (see as_frames)
        linker: Strategy used for each (i, i+1) pair
        max_distance: Link length cap
        graph: Graph built over the same frame sizes
        progress_callback: Optional callback(pair_index, n_pairs)
        report: Logging function for progress messages

    Returns:
        UnmatchedSets with the residual sources and targets of every pair.
    """
    n_frames = len(frames)
    n_pairs = max(n_frames - 1, 0)
    unmatched = UnmatchedSets()
    offsets = graph.frame_offsets
    n_links = 0

    report("Frame to frame linking using %s method.", linker.method.value)

    for i in range(n_pairs):
        result = linker.link(frames[i], frames[i + 1], max_distance)

        unmatched.sources[i] = result.unmatched_sources
        unmatched.targets[i + 1] = result.unmatched_targets

        for s, t in result.pairs():
            graph.add_edge(int(offsets[i] + s), int(offsets[i + 1] + t))
        n_links += result.n_links

        report("%03d/%03d", i + 1, n_pairs)
        if progress_callback is not None:
            progress_callback(i, n_pairs)

    report("Created %d links over a total of %d points.", n_links, graph.n_nodes)
    return unmatched
