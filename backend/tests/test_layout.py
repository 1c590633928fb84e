"""Tests for layout patterns and the layout generator."""
import random

import pytest
from app.core.errors import ConfigError
from app.core.layout import (
    PATTERN_REGISTRY,
    Brick,
    Layout,
    LayoutGenerator,
    Pyramid,
    RandomGrid,
    Staggered,
    build_pattern,
)
from app.models.level import CanvasSpec, PatternParams, PatternType


@pytest.fixture
def canvas():
    """Canvas without jitter so positions are exact."""
    return CanvasSpec(jitter=0.0)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(7)


class TestBuildPattern:
    """Test cases for pattern resolution."""

    def test_registry_covers_every_pattern(self):
        """Test that every pattern name has a descriptor."""
        assert set(PATTERN_REGISTRY) == set(PatternType)

    def test_defaults_applied(self):
        """Test that missing parameters fall back to defaults."""
        pattern = build_pattern("staggered")
        assert isinstance(pattern, Staggered)
        assert pattern.width == 4
        assert pattern.height == 4

    def test_params_passed_through(self):
        """Test that given parameters reach the descriptor."""
        pattern = build_pattern("brick", PatternParams(width=6, height=2))
        assert isinstance(pattern, Brick)
        assert (pattern.width, pattern.height) == (6, 2)

    def test_unknown_pattern(self):
        """Test that an unknown pattern name is rejected."""
        with pytest.raises(ConfigError):
            build_pattern("hexagon")

    @pytest.mark.parametrize("pattern,params", [
        ("staggered", PatternParams(width=-2)),
        ("pyramid", PatternParams(size=-1)),
        ("spiral", PatternParams(turns=-1.5)),
        ("scattered_pile", PatternParams(piles=-3)),
        ("random", PatternParams(density=0)),
    ])
    def test_non_positive_params_rejected(self, pattern, params):
        """Test that non-positive pattern parameters are rejected."""
        with pytest.raises(ConfigError):
            build_pattern(pattern, params)

    def test_config_error_is_value_error(self):
        """Test that ConfigError can be caught as ValueError."""
        with pytest.raises(ValueError):
            build_pattern("nope")


class TestPatternEmit:
    """Test cases for single-layer pattern emission."""

    def test_staggered_single_cell_centered(self, canvas, rng):
        """Test that a 1x1 staggered grid sits on the focal point."""
        layout = Layout(3, 2, canvas, rng)
        Staggered(width=1, height=1).emit(layout, 0)

        tile = layout.tiles[0]
        assert (tile.x, tile.y) == (375.0, 580.0)
        assert tile.layer == 1

    def test_odd_layer_shifted_half_tile(self, canvas, rng):
        """Test that odd layers are offset by half a tile on both axes."""
        layout = Layout(3, 2, canvas, rng)
        Staggered(width=1, height=1).emit(layout, 1)

        tile = layout.tiles[0]
        assert (tile.x, tile.y) == (415.0, 620.0)
        assert tile.layer == 2

    def test_brick_shifts_odd_rows(self, canvas, rng):
        """Test that brick offsets every other row by half a tile."""
        layout = Layout(6, 1, canvas, rng)
        Brick(width=2, height=2).emit(layout, 0)

        positions = [(t.x, t.y) for t in layout.tiles]
        assert positions == [
            (335.0, 540.0), (415.0, 540.0),
            (375.0, 620.0), (455.0, 620.0),
        ]

    def test_pyramid_capped_per_layer(self, canvas, rng):
        """Test that pyramid stops at the per-layer quota."""
        layout = Layout(30, 3, canvas, rng)
        Pyramid(size=4).emit(layout, 0)

        assert layout.layer_quota == 10
        assert len(layout.tiles) == 10

    def test_random_uses_distinct_cells(self, canvas, rng):
        """Test that the random rule never stacks two tiles on one cell of a layer."""
        layout = Layout(45, 3, canvas, rng)
        RandomGrid().emit(layout, 0)

        positions = {(t.x, t.y) for t in layout.tiles}
        assert len(layout.tiles) == 15
        assert len(positions) == 15

    def test_add_tile_refuses_past_budget(self, canvas, rng):
        """Test that the layout never exceeds its tile budget."""
        layout = Layout(2, 1, canvas, rng)
        assert layout.add_tile(0, 0, 1)
        assert layout.add_tile(0, 0, 1)
        assert not layout.add_tile(0, 0, 1)
        assert len(layout.tiles) == 2


class TestLayoutGenerator:
    """Test cases for full layout generation."""

    @pytest.mark.parametrize("pattern", PatternType.names())
    def test_exact_tile_count(self, pattern):
        """Test that every pattern yields exactly the requested count."""
        generator = LayoutGenerator()
        tiles = generator.generate(60, 4, build_pattern(pattern), random.Random(11))

        assert len(tiles) == 60

    @pytest.mark.parametrize("pattern", PatternType.names())
    def test_layers_in_range(self, pattern):
        """Test that tile layers stay within 1..layer_count."""
        generator = LayoutGenerator()
        tiles = generator.generate(90, 5, build_pattern(pattern), random.Random(3))

        assert all(1 <= t.layer <= 5 for t in tiles)

    def test_ids_follow_handles(self):
        """Test that tile ids match their arena index."""
        generator = LayoutGenerator()
        tiles = generator.generate(12, 2, build_pattern("staggered"), random.Random(1))

        assert [t.id for t in tiles] == [f"tile-{i}" for i in range(12)]
        assert all(t.type is None for t in tiles)

    def test_short_pattern_topped_up(self):
        """Test that a pattern smaller than the budget is filled with random cells."""
        generator = LayoutGenerator()
        pattern = build_pattern("staggered", PatternParams(width=1, height=1))
        tiles = generator.generate(30, 2, pattern, random.Random(5))

        assert len(tiles) == 30

    def test_same_seed_same_layout(self):
        """Test that layout is reproducible for a fixed seed."""
        generator = LayoutGenerator()
        pattern = build_pattern("scattered_pile")

        first = generator.generate(45, 3, pattern, random.Random(99))
        second = generator.generate(45, 3, pattern, random.Random(99))

        assert [(t.x, t.y, t.layer) for t in first] == [(t.x, t.y, t.layer) for t in second]
