"""Tests for centering and bounds normalization."""
import random

import pytest
from app.core.layout import LayoutGenerator, build_pattern
from app.core.normalizer import (
    bounding_box,
    center_tiles,
    clamp_tiles,
    compute_grid_size,
    normalize_tiles,
)
from app.models.level import CanvasSpec, Tile


@pytest.fixture
def canvas():
    return CanvasSpec()


def make_tile(i, x, y, layer=1):
    return Tile(id=f"tile-{i}", x=x, y=y, layer=layer)


class TestCentering:
    """Test cases for centering."""

    def test_bounding_box_empty(self):
        """Test that an empty board has no bounding box."""
        assert bounding_box([]) is None

    def test_center_on_focal_point(self, canvas):
        """Test that the bounding box midpoint lands on the focal point."""
        tiles = [make_tile(0, 0, 0), make_tile(1, 100, 40)]
        center_tiles(tiles, canvas)

        assert (tiles[0].x, tiles[0].y) == (325.0, 560.0)
        assert (tiles[1].x, tiles[1].y) == (425.0, 600.0)

    def test_center_keeps_relative_positions(self, canvas):
        """Test that centering is a pure translation."""
        tiles = [make_tile(0, 10, 20), make_tile(1, 90, 60), make_tile(2, 50, 200)]
        center_tiles(tiles, canvas)

        assert tiles[1].x - tiles[0].x == pytest.approx(80)
        assert tiles[2].y - tiles[0].y == pytest.approx(180)

    def test_center_empty_is_noop(self, canvas):
        """Test that centering an empty board does nothing."""
        tiles = []
        center_tiles(tiles, canvas)
        assert tiles == []


class TestClamping:
    """Test cases for clamping."""

    def test_clamp_into_safe_rectangle(self, canvas):
        """Test that out-of-bounds coordinates are pinned to the edges."""
        tiles = [make_tile(0, 0, 2000), make_tile(1, 1000, -50)]
        clamp_tiles(tiles, canvas)

        assert (tiles[0].x, tiles[0].y) == (90.0, 910.0)
        assert (tiles[1].x, tiles[1].y) == (660.0, 240.0)

    def test_clamp_leaves_inner_tiles(self, canvas):
        """Test that tiles inside the safe area are untouched."""
        tiles = [make_tile(0, 300, 500)]
        clamp_tiles(tiles, canvas)

        assert (tiles[0].x, tiles[0].y) == (300, 500)


class TestNormalize:
    """Test cases for the combined pass."""

    def test_grid_size(self):
        """Test grid extent in whole tiles."""
        tiles = [make_tile(0, 0, 0), make_tile(1, 160, 80)]
        assert compute_grid_size(tiles, 80) == {"cols": 3, "rows": 2}

    def test_grid_size_empty(self):
        """Test grid extent of an empty board."""
        assert compute_grid_size([], 80) == {"cols": 0, "rows": 0}

    @pytest.mark.parametrize("pattern", ["scattered_pile", "spiral", "boss", "dense_pile"])
    def test_generated_board_inside_safe_area(self, canvas, pattern):
        """Test that normalized boards stay in the safe rectangle."""
        tiles = LayoutGenerator(canvas).generate(
            120, 6, build_pattern(pattern), random.Random(21)
        )
        grid_size = normalize_tiles(tiles, canvas)

        for tile in tiles:
            assert canvas.safe_min_x <= tile.x <= canvas.safe_max_x
            assert canvas.safe_min_y <= tile.y <= canvas.safe_max_y
        assert grid_size["cols"] >= 1
        assert grid_size["rows"] >= 1
