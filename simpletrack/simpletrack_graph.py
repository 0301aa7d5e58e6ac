"""simpletrack: forward adjacency graph over all detections.

Nodes are GlobalIndex values, i.e. positions in the concatenation of every
frame's points in frame order. Each node has one successor slot and one
predecessor slot, so the graph is always a disjoint union of simple forward
paths. Edges are only ever added.

License: AGPL-3.0-or-later
"""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from .simpletrack_config import GraphError

NO_NODE = -1


def frame_offsets(frame_sizes: Sequence[int]) -> np.ndarray:
    """Cumulative frame sizes: offsets[f] is the GlobalIndex of frame f's point 0.

    Has F + 1 entries; the last one is the total point count.
    """
    offsets = np.zeros(len(frame_sizes) + 1, dtype=np.int64)
    np.cumsum(np.asarray(frame_sizes, dtype=np.int64), out=offsets[1:])
    return offsets


class AdjacencyGraph:
    """Sparse directed graph of links between detections.

    Usage::

        graph = AdjacencyGraph([2, 3, 2])
        graph.add_edge(graph.global_index(0, 1), graph.global_index(1, 0))
        graph.freeze()
        A = graph.to_sparse()
    """

    def __init__(self, frame_sizes: Sequence[int]):
        self.frame_sizes = np.asarray(frame_sizes, dtype=np.int64)
        self.frame_offsets = frame_offsets(self.frame_sizes)
        self.n_nodes = int(self.frame_offsets[-1])
        self.successor = np.full(self.n_nodes, NO_NODE, dtype=np.int64)
        self.predecessor = np.full(self.n_nodes, NO_NODE, dtype=np.int64)
        self.n_edges = 0
        self._frozen = False

    @property
    def n_frames(self) -> int:
        return len(self.frame_sizes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the graph read-only. Further add_edge calls raise GraphError."""
        self._frozen = True

    # -- index conversion ---------------------------------------------------

    def global_index(self, frame: int, local: int) -> int:
        """GlobalIndex of point ``local`` of frame ``frame``."""
        if not 0 <= local < self.frame_sizes[frame]:
            raise IndexError(f"Point {local} out of range for frame {frame} "
                             f"({self.frame_sizes[frame]} points)")
        return int(self.frame_offsets[frame] + local)

    def frame_of(self, node) -> np.ndarray:
        """Frame index of one node or an array of nodes."""
        return np.searchsorted(self.frame_offsets, node, side="right") - 1

    def locate(self, node: int) -> Tuple[int, int]:
        """Map a GlobalIndex back to (frame, local index)."""
        if not 0 <= node < self.n_nodes:
            raise IndexError(f"Node {node} out of range ({self.n_nodes} nodes)")
        frame = int(self.frame_of(node))
        return frame, int(node - self.frame_offsets[frame])

    # -- mutation -------------------------------------------------------------

    def add_edge(self, source: int, target: int) -> None:
        """Link ``source`` to ``target`` (both GlobalIndex values)."""
        if self._frozen:
            raise GraphError("Graph is frozen")
        src_frame, _ = self.locate(source)
        tgt_frame, _ = self.locate(target)
        if tgt_frame <= src_frame:
            raise GraphError(
                f"Edge {source}->{target} is not forward in time "
                f"(frame {src_frame} -> frame {tgt_frame})")
        if self.successor[source] != NO_NODE:
            raise GraphError(f"Node {source} already links to {self.successor[source]}")
        if self.predecessor[target] != NO_NODE:
            raise GraphError(f"Node {target} already linked from {self.predecessor[target]}")
        self.successor[source] = target
        self.predecessor[target] = source
        self.n_edges += 1

    # -- queries --------------------------------------------------------------

    def has_edge(self, source: int, target: int) -> bool:
        return bool(self.successor[source] == target)

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield (source, target) pairs in increasing source order."""
        for s in np.flatnonzero(self.successor != NO_NODE):
            yield int(s), int(self.successor[s])

    def edge_array(self) -> np.ndarray:
        """(n_edges, 2) array of (source, target) GlobalIndex pairs."""
        sources = np.flatnonzero(self.successor != NO_NODE)
        return np.column_stack([sources, self.successor[sources]]).astype(np.int64)

    def starts(self) -> np.ndarray:
        """Nodes without a predecessor, in increasing GlobalIndex order."""
        return np.flatnonzero(self.predecessor == NO_NODE)

    def to_sparse(self) -> sp.csr_matrix:
        """Boolean N x N matrix with A[i, j] set for every edge i -> j."""
        e = self.edge_array()
        data = np.ones(len(e), dtype=bool)
        return sp.csr_matrix((data, (e[:, 0], e[:, 1])),
                             shape=(self.n_nodes, self.n_nodes))

    def __repr__(self):
        return (f"AdjacencyGraph(frames={self.n_frames}, nodes={self.n_nodes}, "
                f"edges={self.n_edges}, frozen={self._frozen})")
