"""simpletrack: track extraction from a frozen adjacency graph.

Every node without a predecessor starts a track; the track follows the
successor slots until a node without a successor. Tracks come in two forms:

- adjacency track: GlobalIndex sequence of the visited nodes
- frame track: length-F array of local point indices, NO_DETECTION in gaps

License: AGPL-3.0-or-later
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .simpletrack_graph import NO_NODE, AdjacencyGraph, frame_offsets

NO_DETECTION = -1


def extract_adjacency_tracks(graph: AdjacencyGraph) -> List[np.ndarray]:
    """Walk every maximal path of ``graph``.

    Tracks are ordered by the GlobalIndex of their first node. The graph is
    only read, so repeated calls give identical results.
    """
    tracks = []
    successor = graph.successor
    for start in graph.starts():
        chain = [int(start)]
        node = successor[start]
        while node != NO_NODE:
            chain.append(int(node))
            node = successor[node]
        tracks.append(np.asarray(chain, dtype=np.int64))
    return tracks


def remap_track(adjacency_track: np.ndarray, offsets: np.ndarray) -> np.ndarray:
    """Convert one GlobalIndex sequence into a per-frame local index array.

    Each node is placed by the frame its GlobalIndex falls in, whatever its
    position along the chain.
    """
    n_frames = len(offsets) - 1
    track = np.full(n_frames, NO_DETECTION, dtype=np.int64)
    nodes = np.asarray(adjacency_track, dtype=np.int64)
    frames = np.searchsorted(offsets, nodes, side="right") - 1
    track[frames] = nodes - offsets[frames]
    return track


def remap_tracks(adjacency_tracks: Sequence[np.ndarray],
                 frame_sizes: Sequence[int]) -> List[np.ndarray]:
    """remap_track over a list of tracks."""
    offsets = frame_offsets(frame_sizes)
    return [remap_track(t, offsets) for t in adjacency_tracks]


def extract_tracks(graph: AdjacencyGraph):
    """Return (frame tracks, adjacency tracks) for ``graph``."""
    adjacency_tracks = extract_adjacency_tracks(graph)
    return remap_tracks(adjacency_tracks, graph.frame_sizes), adjacency_tracks


def track_lengths(tracks: Sequence[np.ndarray]) -> np.ndarray:
    """Number of detections in each frame track."""
    return np.array([np.count_nonzero(t != NO_DETECTION) for t in tracks], dtype=np.int64)
