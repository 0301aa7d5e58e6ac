"""Tests for the simpletrack tracker: configuration, end-to-end scenarios and
graph properties of the tracking result."""
import logging
import math

import numpy as np
import pytest
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simpletrack import (
    SimpleTracker, TrackerConfig, TrackingResult, LinkingMethod, simpletracker,
    ConfigurationError, InputError, GraphError, SimpleTrackError,
    SyntheticScenarioGenerator, NO_DETECTION,
)


def _track(points, **options):
    return SimpleTracker(TrackerConfig.from_kwargs(**options)).track(points)


@pytest.fixture(scope="module")
def noisy_scenario():
    """Dense random walks with missed detections."""
    gen = SyntheticScenarioGenerator(seed=5, noise_std=0.05, p_detection=0.8)
    return gen.random_walks(n_particles=25, n_frames=15, n_dim=2, step_std=0.6, extent=20.0)


# =============================================================================
# CONFIGURATION
# =============================================================================

class TestTrackerConfig:
    """Option parsing and validation."""

    def test_defaults(self):
        cfg = TrackerConfig()
        assert cfg.method is LinkingMethod.HUNGARIAN
        assert cfg.max_linking_distance == math.inf
        assert cfg.max_gap_closing == 3
        assert cfg.debug is False

    def test_method_strings(self):
        assert TrackerConfig(method="NearestNeighbor").method is LinkingMethod.NEAREST_NEIGHBOR
        assert TrackerConfig(method="HUNGARIAN").method is LinkingMethod.HUNGARIAN

    def test_unknown_method(self):
        with pytest.raises(ConfigurationError) as exc:
            TrackerConfig(method="kalman")
        assert exc.value.option == "method"

    @pytest.mark.parametrize("value", [-1.0, 0.0, float("nan"), "5", None, True])
    def test_bad_distance(self, value):
        with pytest.raises(ConfigurationError):
            TrackerConfig(max_linking_distance=value)

    @pytest.mark.parametrize("value", [0, -2, 2.5, "3", float("nan"), False])
    def test_bad_gap(self, value):
        with pytest.raises(ConfigurationError):
            TrackerConfig(max_gap_closing=value)

    def test_gap_accepts_integral_float_and_inf(self):
        assert TrackerConfig(max_gap_closing=4.0).max_gap_closing == 4
        assert TrackerConfig(max_gap_closing=math.inf).max_gap_closing == math.inf

    def test_bad_debug(self):
        with pytest.raises(ConfigurationError):
            TrackerConfig(debug="yes")

    def test_bad_callback(self):
        with pytest.raises(ConfigurationError):
            TrackerConfig(progress_callback=42)

    def test_from_kwargs_aliases(self):
        cfg = TrackerConfig.from_kwargs(Method="NearestNeighbor", MaxLinkingDistance=2,
                                        MaxGapClosing=5, Debug=True)
        assert cfg.method is LinkingMethod.NEAREST_NEIGHBOR
        assert cfg.max_linking_distance == 2.0
        assert cfg.max_gap_closing == 5
        assert cfg.debug is True

    def test_from_kwargs_unknown(self):
        with pytest.raises(ConfigurationError):
            TrackerConfig.from_kwargs(max_speed=3.0)

    def test_from_kwargs_duplicate(self):
        with pytest.raises(ConfigurationError):
            TrackerConfig.from_kwargs(debug=True, Debug=False)

    def test_error_hierarchy(self):
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(InputError, SimpleTrackError)
        assert issubclass(GraphError, RuntimeError)


# =============================================================================
# SCENARIOS
# =============================================================================

class TestScenarios:
    """Reference tracking situations."""

    def test_single_particle_three_frames(self):
        """Three close points in three frames form a single track."""
        result = _track([[[0.0, 0.0]], [[0.5, 0.0]], [[1.0, 0.0]]], max_linking_distance=1.0)
        assert result.n_tracks == 1
        np.testing.assert_array_equal(result.tracks[0], [0, 0, 0])
        np.testing.assert_array_equal(result.adjacency_tracks[0], [0, 1, 2])

    def test_gap_is_bridged(self):
        """A particle missed in the middle frame keeps one track."""
        result = _track([[[0.0, 0.0]], [], [[0.5, 0.0]]],
                        max_linking_distance=1.0, max_gap_closing=3)
        assert result.n_tracks == 1
        np.testing.assert_array_equal(result.tracks[0], [0, NO_DETECTION, 0])

    def test_exact_beats_greedy_on_crossing(self):
        """Crossing particles: Hungarian total distance < nearest-neighbor total."""
        points = [
            [[0.0, 0.0], [2.1, 0.0]],
            [[1.0, 0.0], [-1.05, 0.0]],
        ]
        exact = _track(points, method="hungarian")
        greedy = _track(points, method="nearest_neighbor")
        assert exact.total_link_distance() == pytest.approx(2.15)
        assert greedy.total_link_distance() == pytest.approx(4.15)
        assert exact.total_link_distance() < greedy.total_link_distance()
        np.testing.assert_array_equal(exact.tracks[0], [0, 1])
        np.testing.assert_array_equal(greedy.tracks[0], [0, 0])

    def test_no_neighbor_starts_new_track(self):
        """A point with no neighbor within the cap ends its track."""
        result = _track([[[0.0, 0.0]], [[10.0, 0.0]]], max_linking_distance=1.0)
        assert result.n_tracks == 2
        assert [t.tolist() for t in result.tracks] == [[0, NO_DETECTION], [NO_DETECTION, 0]]
        assert result.graph.n_edges == 0

    def test_empty_input(self):
        result = _track([])
        assert result.n_tracks == 0
        assert result.graph.n_nodes == 0
        assert result.adjacency_tracks == []

    def test_single_frame(self):
        result = _track([[[0.0], [1.0], [2.0]]])
        assert [t.tolist() for t in result.tracks] == [[0], [1], [2]]

    def test_all_frames_empty(self):
        result = _track([[], [], []])
        assert result.n_tracks == 0
        assert result.n_frames == 3

    def test_three_dimensional(self):
        points = [[[0, 0, 0], [10, 10, 10]], [[10, 10, 10.5], [0.2, 0, 0]]]
        result = _track(points, max_linking_distance=1.0)
        assert [t.tolist() for t in result.tracks] == [[0, 1], [1, 0]]

    def test_dimension_mismatch_aborts(self):
        with pytest.raises(InputError):
            _track([[[0.0, 0.0]], [[0.0, 0.0, 0.0]]])

    @pytest.mark.parametrize("method", ["hungarian", "nearest_neighbor"])
    def test_infinite_coordinate_aborts(self, method):
        with pytest.raises(InputError):
            _track([[[0.0, 0.0], [math.inf, 0.0]], [[0.1, 0.0], [1.0, 0.0]]],
                   method=method)


# =============================================================================
# RESULT PROPERTIES
# =============================================================================

class TestResultProperties:
    """Invariants that hold for any input."""

    @pytest.mark.parametrize("method", ["hungarian", "nearest_neighbor"])
    def test_distance_cap(self, noisy_scenario, method):
        result = _track(noisy_scenario.frames, method=method, max_linking_distance=1.5)
        assert np.all(result.link_distances() <= 1.5)

    @pytest.mark.parametrize("method", ["hungarian", "nearest_neighbor"])
    def test_degree_bound(self, noisy_scenario, method):
        result = _track(noisy_scenario.frames, method=method, max_linking_distance=1.5)
        A = result.adjacency_matrix
        assert A.sum(axis=1).max() <= 1
        assert A.sum(axis=0).max() <= 1

    def test_forward_only_and_gap_horizon(self, noisy_scenario):
        result = _track(noisy_scenario.frames, max_linking_distance=1.5, max_gap_closing=3)
        e = result.graph.edge_array()
        assert len(e) > 0
        span = result.graph.frame_of(e[:, 1]) - result.graph.frame_of(e[:, 0])
        assert np.all(span >= 1)
        assert np.all(span <= 3)

    def test_coverage(self, noisy_scenario):
        """Each detection sits in exactly one track, at its own frame slot."""
        result = _track(noisy_scenario.frames, max_linking_distance=1.5)
        tracks = np.array(result.tracks)
        for f, frame in enumerate(noisy_scenario.frames):
            column = tracks[:, f]
            present = np.sort(column[column != NO_DETECTION])
            np.testing.assert_array_equal(present, np.arange(len(frame)))
        all_nodes = np.sort(np.concatenate(result.adjacency_tracks))
        np.testing.assert_array_equal(all_nodes, np.arange(result.graph.n_nodes))

    def test_views_agree(self, noisy_scenario):
        """Frame tracks, adjacency tracks and coordinates describe the same points."""
        result = _track(noisy_scenario.frames, max_linking_distance=1.5)
        for k, (track, adj) in enumerate(zip(result.tracks, result.adjacency_tracks)):
            frames = np.flatnonzero(track != NO_DETECTION)
            assert len(frames) == len(adj)
            expected = np.array([noisy_scenario.frames[f][track[f]] for f in frames])
            np.testing.assert_array_equal(result.track_points(k), expected)

    def test_graph_frozen(self, noisy_scenario):
        result = _track(noisy_scenario.frames[:3])
        assert result.graph.frozen
        with pytest.raises(GraphError):
            result.graph.add_edge(0, result.graph.n_nodes - 1)

    def test_deterministic(self, noisy_scenario):
        a = _track(noisy_scenario.frames, max_linking_distance=1.5)
        b = _track(noisy_scenario.frames, max_linking_distance=1.5)
        assert (a.adjacency_matrix != b.adjacency_matrix).nnz == 0


# =============================================================================
# FUNCTIONAL API & REPORTING
# =============================================================================

class TestFunctionalApi:
    """simpletracker() entry point."""

    def test_returns_three_views(self):
        tracks, adjacency_tracks, A = simpletracker(
            [[[0.0, 0.0]], [[0.5, 0.0]], [[1.0, 0.0]]],
            MaxLinkingDistance=1.0, Method="NearestNeighbor")
        assert len(tracks) == len(adjacency_tracks) == 1
        assert A.shape == (3, 3)
        assert A.nnz == 2
        assert A[0, 1] and A[1, 2]

    def test_bad_option(self):
        with pytest.raises(ConfigurationError):
            simpletracker([[[0.0]]], method="fastest")

    def test_as_tuple(self):
        result = _track([[[0.0]], [[0.1]]])
        assert isinstance(result, TrackingResult)
        tracks, adjacency_tracks, A = result.as_tuple()
        assert tracks is result.tracks
        assert A.nnz == 1


class TestReporting:
    """Debug reporting has no behavioural effect."""

    POINTS = [[[0.0, 0.0]], [], [[0.5, 0.0]]]

    def test_debug_reports_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="simpletrack"):
            _track(self.POINTS, max_linking_distance=1.0, debug=True)
        messages = [r.getMessage() for r in caplog.records]
        assert "Frame to frame linking using hungarian method." in messages
        assert ("Creating a link between point 0 of frame 0 and point 0 of frame 2."
                in messages)

    def test_quiet_without_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="simpletrack"):
            _track(self.POINTS, max_linking_distance=1.0)
        assert not [r for r in caplog.records if r.levelno >= logging.INFO]

    def test_debug_same_result(self):
        a = _track(self.POINTS, max_linking_distance=1.0, debug=True)
        b = _track(self.POINTS, max_linking_distance=1.0)
        assert [t.tolist() for t in a.tracks] == [t.tolist() for t in b.tracks]

    def test_progress_callback(self):
        calls = []
        _track([[[0.0]], [[0.1]], [[0.2]]], progress_callback=lambda i, n: calls.append(i))
        assert calls == [0, 1]
