"""simpletrack: point-set linkers.

Two strategies behind one interface, both matching a source point set to a
target point set under a hard distance cap:

- HungarianLinker: globally optimal one-to-one matching (minimum summed
  euclidean distance), scipy.optimize.linear_sum_assignment, O(n^3)
- NearestNeighborLinker: greedy closest-pair-first matching, O(n^2 log n)

The exact solver becomes slow above roughly a thousand points per frame;
use the greedy linker for such problems.

License: AGPL-3.0-or-later
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Type

import numpy as np
from scipy.optimize import linear_sum_assignment
from scipy.spatial.distance import cdist

from .simpletrack_config import LinkingMethod

UNMATCHED = -1


@dataclass
class LinkResult:
    """Outcome of linking one source set to one target set.

    Attributes:
        target_indices: (n_source,) target index per source, UNMATCHED if none
        target_distances: (n_source,) link length per source, NaN if none
        unmatched_sources: Sorted source indices left without a target
        unmatched_targets: Sorted target indices left without a source
    """
    target_indices: np.ndarray
    target_distances: np.ndarray
    unmatched_sources: np.ndarray
    unmatched_targets: np.ndarray

    @property
    def n_links(self) -> int:
        return int(np.count_nonzero(self.target_indices != UNMATCHED))

    def pairs(self):
        """Iterate over (source, target) index pairs in source order."""
        for s in np.flatnonzero(self.target_indices != UNMATCHED):
            yield int(s), int(self.target_indices[s])


def _as_points(points) -> np.ndarray:
    arr = np.asarray(points, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr


def _build_result(target_indices: np.ndarray, distances: np.ndarray,
                  n_target: int) -> LinkResult:
    matched = target_indices != UNMATCHED
    target_distances = np.full(len(target_indices), np.nan)
    target_distances[matched] = distances[np.flatnonzero(matched), target_indices[matched]]
    taken = np.zeros(n_target, dtype=bool)
    taken[target_indices[matched]] = True
    return LinkResult(
        target_indices=target_indices,
        target_distances=target_distances,
        unmatched_sources=np.flatnonzero(~matched),
        unmatched_targets=np.flatnonzero(~taken),
    )


class PointSetLinker(ABC):
    """One-to-one matcher between two point sets under a distance cap."""

    method: LinkingMethod

    def link(self, source_points, target_points,
             max_distance: float = np.inf) -> LinkResult:
        """Match source points to target points.

        Args:
            source_points: (n_source, n_dim) coordinates
            target_points: (n_target, n_dim) coordinates
            max_distance: Pairs farther apart than this are never linked

        Returns:
            LinkResult. Either set being empty leaves everything unmatched.
        """
        source = _as_points(source_points)
        target = _as_points(target_points)
        n_source, n_target = len(source), len(target)

        if n_source == 0 or n_target == 0:
            return LinkResult(
                target_indices=np.full(n_source, UNMATCHED, dtype=int),
                target_distances=np.full(n_source, np.nan),
                unmatched_sources=np.arange(n_source),
                unmatched_targets=np.arange(n_target),
            )
        if source.shape[1] != target.shape[1]:
            raise ValueError(
                f"Dimension mismatch: source has {source.shape[1]}, "
                f"target has {target.shape[1]}")

        distances = cdist(source, target)
        admissible = distances <= max_distance
        target_indices = self._assign(distances, admissible)
        return _build_result(target_indices, distances, n_target)

    @abstractmethod
    def _assign(self, distances: np.ndarray, admissible: np.ndarray) -> np.ndarray:
        """Return the (n_source,) target index array for a distance matrix."""


class HungarianLinker(PointSetLinker):
    """Exact assignment: minimum total distance over all admissible links.

    Inadmissible pairs are priced above the sum of every admissible cost, so
    the solver first maximises the number of admissible links and only then
    minimises their summed length. Assignments that land on a forbidden
    pair are discarded afterwards.
    """
    method = LinkingMethod.HUNGARIAN

    def _assign(self, distances, admissible):
        target_indices = np.full(distances.shape[0], UNMATCHED, dtype=int)
        if not admissible.any():
            return target_indices

        forbidden = distances[admissible].sum() + 1.0
        cost = np.where(admissible, distances, forbidden)
        rows, cols = linear_sum_assignment(cost)

        keep = admissible[rows, cols]
        target_indices[rows[keep]] = cols[keep]
        return target_indices


class NearestNeighborLinker(PointSetLinker):
    """Greedy matching: the closest remaining admissible pair is linked first.

    Only locally optimal. Ties in distance resolve to the lower source index,
    then the lower target index.
    """
    method = LinkingMethod.NEAREST_NEIGHBOR

    def _assign(self, distances, admissible):
        n_source, n_target = distances.shape
        target_indices = np.full(n_source, UNMATCHED, dtype=int)

        src, tgt = np.nonzero(admissible)  # row-major, so ties keep index order
        order = np.argsort(distances[src, tgt], kind="stable")

        source_free = np.ones(n_source, dtype=bool)
        target_free = np.ones(n_target, dtype=bool)
        remaining = min(n_source, n_target)
        for k in order:
            s, t = src[k], tgt[k]
            if source_free[s] and target_free[t]:
                target_indices[s] = t
                source_free[s] = False
                target_free[t] = False
                remaining -= 1
                if remaining == 0:
                    break
        return target_indices


_LINKERS: Dict[LinkingMethod, Type[PointSetLinker]] = {
    LinkingMethod.HUNGARIAN: HungarianLinker,
    LinkingMethod.NEAREST_NEIGHBOR: NearestNeighborLinker,
}


def make_linker(method) -> PointSetLinker:
    """Instantiate the linker for a LinkingMethod (or its name)."""
    return _LINKERS[LinkingMethod.parse(method)]()
