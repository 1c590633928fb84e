"""Tests for the occlusion graph and blocker tracking."""
import random

import pytest
from app.core.layout import LayoutGenerator, build_pattern
from app.core.occlusion import OcclusionGraph, overlaps
from app.models.level import Tile


def make_tile(i, x, y, layer):
    return Tile(id=f"tile-{i}", x=x, y=y, layer=layer)


@pytest.fixture
def stacked():
    """Two layer-1 tiles partly covered by one layer-2 tile."""
    return [
        make_tile(0, 300, 500, 1),
        make_tile(1, 380, 500, 1),
        make_tile(2, 340, 500, 2),
    ]


class TestOverlaps:
    """Test cases for the footprint overlap rule."""

    def test_touching_edges_do_not_overlap(self):
        """Test that tiles exactly one tile apart do not overlap."""
        assert not overlaps(0, 0, 80, 0, 80)
        assert not overlaps(0, 0, 0, 80, 80)

    def test_partial_overlap(self):
        """Test that any shared area counts as overlap."""
        assert overlaps(0, 0, 79.9, 79.9, 80)
        assert overlaps(0, 0, 40, 0, 80)

    def test_one_axis_is_not_enough(self):
        """Test that both axes must overlap."""
        assert not overlaps(0, 0, 10, 120, 80)


class TestOcclusionGraph:
    """Test cases for graph construction."""

    def test_edges_point_down(self, stacked):
        """Test that the upper tile blocks both lower tiles."""
        graph = OcclusionGraph.build(stacked, 80)

        assert sorted(graph.blocking[2]) == [0, 1]
        assert graph.blocked_by[0] == [2]
        assert graph.blocked_by[1] == [2]
        assert graph.edge_count == 2
        assert graph.out_degree(2) == 2

    def test_same_layer_never_blocks(self):
        """Test that overlapping tiles on the same layer have no edge."""
        tiles = [make_tile(0, 0, 0, 1), make_tile(1, 10, 10, 1)]
        graph = OcclusionGraph.build(tiles, 80)

        assert graph.edge_count == 0

    def test_lower_tile_listed_first(self):
        """Test edge direction does not depend on arena order."""
        tiles = [make_tile(0, 0, 0, 1), make_tile(1, 0, 0, 3)]
        graph = OcclusionGraph.build(tiles, 80)

        assert list(graph.edges()) == [(1, 0)]

    def test_generated_board_edges_go_to_lower_layers(self):
        """Test that every edge runs from a higher layer to a lower one."""
        tiles = LayoutGenerator().generate(
            90, 6, build_pattern("dense_pile"), random.Random(4)
        )
        graph = OcclusionGraph.build(tiles, 80)

        assert graph.edge_count > 0
        for blocker, blocked in graph.edges():
            assert tiles[blocker].layer > tiles[blocked].layer

    def test_single_layer_has_no_edges(self):
        """Test that a one-layer board has an empty graph."""
        tiles = LayoutGenerator().generate(
            30, 1, build_pattern("random"), random.Random(4)
        )
        graph = OcclusionGraph.build(tiles, 80)

        assert graph.edge_count == 0


class TestBlockerTracker:
    """Test cases for live blocker counters."""

    def test_initial_state(self, stacked):
        """Test initial counters."""
        tracker = OcclusionGraph.build(stacked, 80).tracker()

        assert tracker.remaining == [1, 1, 0]
        assert tracker.blocked_count == 2
        assert tracker.free_handles() == [2]

    def test_resolve_frees_covered_tiles(self, stacked):
        """Test that resolving a blocker frees what it covered."""
        tracker = OcclusionGraph.build(stacked, 80).tracker()

        freed = tracker.resolve(2)

        assert sorted(freed) == [0, 1]
        assert tracker.blocked_count == 0
        assert tracker.free_handles() == [0, 1]

    def test_resolve_twice_is_noop(self, stacked):
        """Test that a tile is only resolved once."""
        tracker = OcclusionGraph.build(stacked, 80).tracker()

        tracker.resolve(2)
        assert tracker.resolve(2) == []
        assert tracker.remaining == [0, 0, 0]

    def test_trackers_are_independent(self, stacked):
        """Test that each tracker starts from the graph, not from another run."""
        graph = OcclusionGraph.build(stacked, 80)
        graph.tracker().resolve(2)

        assert graph.tracker().blocked_count == 2
