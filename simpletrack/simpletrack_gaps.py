"""simpletrack: gap closing.

After frame-to-frame linking, a track that ends in frame i may continue in
frame j > i + 1 if the particle was missed in between. Gap closing tries to
link the unmatched sources of frame i to the unmatched targets of frames
i+2, i+3, ... up to the configured horizon, nearest candidate frame first.
A source consumed by frame j is not offered to any later frame.

Gap closing always uses the greedy nearest-neighbor linker, whatever method
was configured for frame-to-frame linking.

License: AGPL-3.0-or-later
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .simpletrack_graph import AdjacencyGraph
from .simpletrack_linkers import NearestNeighborLinker
from .simpletrack_linking import UnmatchedSets

logger = logging.getLogger(__name__)

_GAP_LINKER = NearestNeighborLinker()
_NONE = np.empty(0, dtype=np.int64)


@dataclass
class GapStep:
    """Result of one (source frame, target frame) gap-closing attempt.

    Attributes:
        links: (source local index, target local index) pairs created
        sources: Source indices still unmatched afterwards
        targets: Target indices still unmatched afterwards
    """
    links: List[Tuple[int, int]]
    sources: np.ndarray
    targets: np.ndarray


def close_gap(
    source_points: np.ndarray,
    target_points: np.ndarray,
    sources: np.ndarray,
    targets: np.ndarray,
    max_distance: float,
) -> GapStep:
    """Link unmatched sources of one frame to unmatched targets of a later one.

    ``sources`` and ``targets`` are local indices into ``source_points`` and
    ``target_points``. Neither input array is modified; the remainders are
    returned in the GapStep.
    """
    if len(sources) == 0 or len(targets) == 0:
        return GapStep(links=[], sources=sources, targets=targets)

    result = _GAP_LINKER.link(source_points[sources], target_points[targets], max_distance)
    links = [(int(sources[s]), int(targets[t])) for s, t in result.pairs()]
    return GapStep(
        links=links,
        sources=sources[result.unmatched_sources],
        targets=targets[result.unmatched_targets],
    )


def close_gaps(
    frames: Sequence[np.ndarray],
    unmatched: UnmatchedSets,
    graph: AdjacencyGraph,
    max_distance: float,
    max_gap_closing,
    report: Callable[..., None] = logger.debug,
) -> UnmatchedSets:
    """Bridge detection gaps of up to ``max_gap_closing`` frames.

    Args:
        frames: Validated frames
        unmatched: Residual sets from frame-to-frame linking
        graph: Graph receiving the new links
        max_distance: Link length cap
        max_gap_closing: Largest frame span of a gap link (int or math.inf)
        report: Logging function for diagnostic messages

    Returns:
        New UnmatchedSets with the residues left after gap closing.
    """
    n_frames = len(frames)
    offsets = graph.frame_offsets
    sources = dict(unmatched.sources)
    targets = dict(unmatched.targets)
    n_links = 0

    report("Gap-closing:")

    for i in range(n_frames - 2):
        if max_gap_closing == math.inf:
            last = n_frames - 1
        else:
            last = min(i + int(max_gap_closing), n_frames - 1)

        for j in range(i + 2, last + 1):
            step = close_gap(frames[i], frames[j], sources.get(i, _NONE),
                             targets.get(j, _NONE), max_distance)
            for s, t in step.links:
                report("Creating a link between point %d of frame %d and point %d of frame %d.",
                       s, i, t, j)
                graph.add_edge(int(offsets[i] + s), int(offsets[j] + t))
            n_links += len(step.links)
            sources[i] = step.sources
            targets[j] = step.targets
            if len(sources[i]) == 0:
                break

    report("Gap closing created %d links.", n_links)
    return UnmatchedSets(sources=sources, targets=targets)
