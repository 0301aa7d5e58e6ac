"""simpletrack 1.0: particle tracking with frame-to-frame linking and gap closing.

Rebuilds trajectories from per-frame point detections of unknown identity.
Frame pairs are linked with the Hungarian algorithm (global optimum) or a
greedy nearest-neighbor matcher; detection gaps are then bridged over up to
``max_gap_closing`` frames.

Quick Start::

    from simpletrack import simpletracker
    tracks, adjacency_tracks, A = simpletracker(
        points, max_linking_distance=5.0, max_gap_closing=3)

License: AGPL-3.0-or-later
"""

__version__ = "1.0.0"
__license__ = "AGPL-3.0-or-later"

# ---------------------------------------------------------------------------
# Configuration & errors
# ---------------------------------------------------------------------------
from .simpletrack_config import (
    TrackerConfig,
    LinkingMethod,
    SimpleTrackError,
    ConfigurationError,
    InputError,
    GraphError,
)

# ---------------------------------------------------------------------------
# Linkers
# ---------------------------------------------------------------------------
from .simpletrack_linkers import (
    UNMATCHED,
    LinkResult,
    PointSetLinker,
    HungarianLinker,
    NearestNeighborLinker,
    make_linker,
)

# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------
from .simpletrack_graph import AdjacencyGraph, NO_NODE, frame_offsets
from .simpletrack_linking import UnmatchedSets, as_frames, link_frames
from .simpletrack_gaps import GapStep, close_gap, close_gaps
from .simpletrack_tracks import (
    NO_DETECTION,
    extract_adjacency_tracks,
    extract_tracks,
    remap_track,
    remap_tracks,
    track_lengths,
)

# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------
from .simpletrack_tracker import SimpleTracker, TrackingResult, simpletracker

# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------
from .simpletrack_datasets import (
    Scenario,
    SyntheticScenarioGenerator,
    load_points_csv,
    save_tracks_csv,
)

# ---------------------------------------------------------------------------
# __all__
# ---------------------------------------------------------------------------
__all__ = [
    "__version__",
    # Config
    "TrackerConfig", "LinkingMethod",
    "SimpleTrackError", "ConfigurationError", "InputError", "GraphError",
    # Linkers
    "UNMATCHED", "LinkResult", "PointSetLinker", "HungarianLinker",
    "NearestNeighborLinker", "make_linker",
    # Pipeline
    "AdjacencyGraph", "NO_NODE", "frame_offsets",
    "UnmatchedSets", "as_frames", "link_frames",
    "GapStep", "close_gap", "close_gaps",
    "NO_DETECTION", "extract_adjacency_tracks", "extract_tracks",
    "remap_track", "remap_tracks", "track_lengths",
    # Tracker
    "SimpleTracker", "TrackingResult", "simpletracker",
    # Datasets
    "Scenario", "SyntheticScenarioGenerator", "load_points_csv", "save_tracks_csv",
]
