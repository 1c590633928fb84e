"""Tests for level generator."""
import dataclasses
import statistics

import pytest
from app.core.errors import ConfigError
from app.core.generator import LevelGenerator, get_generator
from app.core.occlusion import OcclusionGraph
from app.core.simulator import LevelSimulator
from app.models.level import (
    DEFAULT_PALETTE,
    GenerationResult,
    LevelConfig,
    PatternParams,
    PatternType,
)

SIX_TYPES = ["carrot", "wheat", "wood", "grass", "stone", "coin"]


@pytest.fixture
def generator():
    """Create generator instance."""
    return LevelGenerator()


@pytest.fixture
def simulator():
    """Create simulator instance."""
    return LevelSimulator()


def hard_config(**overrides):
    """Tall dense pile that forces look-ahead."""
    values = dict(
        total_tiles=210,
        layer_count=20,
        pattern="dense_pile",
        pattern_params=PatternParams(size=6),
    )
    values.update(overrides)
    return LevelConfig(**values)


class TestLevelGenerator:
    """Test cases for LevelGenerator."""

    def test_generate_returns_result(self, generator):
        """Test that generate returns a GenerationResult."""
        config = LevelConfig(total_tiles=30, layer_count=3, pattern="staggered")
        result = generator.generate(config, DEFAULT_PALETTE, seed=1)

        assert isinstance(result, GenerationResult)
        assert result.config == config
        assert result.generation_time_ms >= 0

    def test_scenario_small_staggered(self, generator):
        """Test 21 tiles on two staggered layers with six types."""
        config = LevelConfig(
            total_tiles=21,
            layer_count=2,
            pattern="staggered",
            pattern_params=PatternParams(width=3, height=4),
        )
        result = generator.generate(config, SIX_TYPES, seed=42)

        assert len(result.board) == 21
        assert result.stats.unassigned_count == 0
        assert result.stats.match_count * 3 == 21

    def test_scenario_single_group(self, generator):
        """Test a three-tile board with a one-type palette."""
        config = LevelConfig(total_tiles=3, layer_count=1, pattern="random")
        result = generator.generate(config, ["carrot"], seed=5)

        assert result.stats.match_count == 1
        assert result.stats.dig_count == 0
        assert result.stats.unassigned_count == 0
        assert [t.type for t in result.board.tiles] == ["carrot"] * 3

    @pytest.mark.parametrize("pattern", PatternType.names())
    def test_scenario_single_layer_no_digs(self, generator, pattern):
        """Test that one layer gives no occlusion and no digs."""
        config = LevelConfig(total_tiles=30, layer_count=1, pattern=pattern)
        result = generator.generate(config, SIX_TYPES, seed=8)

        assert result.stats.occlusion_edges == 0
        assert result.stats.delayed_match_ratio == 0.0

    @pytest.mark.parametrize("total", [1, 20, 22, 100, 301])
    def test_count_rounded_up_to_multiple_of_three(self, generator, total):
        """Test that the board size is the next multiple of three."""
        config = LevelConfig(total_tiles=total, layer_count=4, pattern="random")
        result = generator.generate(config, SIX_TYPES, seed=total)

        assert len(result.board) % 3 == 0
        assert len(result.board) >= total
        assert len(result.board) == config.target_tiles

    @pytest.mark.parametrize("pattern", PatternType.names())
    def test_every_tile_typed(self, generator, pattern):
        """Test that every output tile carries a palette type."""
        config = LevelConfig(total_tiles=90, layer_count=6, pattern=pattern)
        result = generator.generate(config, SIX_TYPES, seed=13)

        assert all(t.type in SIX_TYPES for t in result.board.tiles)
        assert result.stats.is_complete

    def test_type_counts_are_triples(self, generator):
        """Test that each type appears a multiple of three times."""
        result = generator.generate(hard_config(), SIX_TYPES, seed=3)

        counts = {}
        for tile in result.board.tiles:
            counts[tile.type] = counts.get(tile.type, 0) + 1
        assert all(c % 3 == 0 for c in counts.values())

    def test_resolution_order_respects_occlusion(self, generator):
        """Test that replaying the resolution order never takes a covered tile."""
        result = generator.generate(hard_config(), SIX_TYPES, seed=17)
        tiles = list(result.board.tiles)
        graph = OcclusionGraph.build(tiles, generator.canvas.tile_size)

        position = {tile_id: i for i, tile_id in enumerate(result.resolution_order)}
        for blocker, blocked in graph.edges():
            assert position[tiles[blocker].id] < position[tiles[blocked].id]

    @pytest.mark.parametrize("pattern", PatternType.names())
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_solution_clears_board(self, generator, simulator, pattern, seed):
        """Test that the recorded play-through clears the board in a 7-slot dock."""
        config = LevelConfig(total_tiles=150, layer_count=10, pattern=pattern)
        result = generator.generate(config, SIX_TYPES, seed=seed)

        replay = simulator.replay(result.board.tiles, result.resolution_order)

        assert replay.cleared, replay.failure_reason
        assert replay.tiles_cleared == len(result.board)
        assert replay.peak_slot_usage <= 6

    def test_hard_config_needs_look_ahead(self, generator):
        """Test that tall boards dig before matching on average."""
        ratios = [
            generator.generate(hard_config(), DEFAULT_PALETTE, seed=seed).stats.delayed_match_ratio
            for seed in range(10)
        ]

        assert statistics.mean(ratios) > 0.1

    def test_same_seed_same_board(self, generator):
        """Test that a fixed seed reproduces the board exactly."""
        config = hard_config(seed=123)
        first = generator.generate(config, SIX_TYPES)
        second = generator.generate(config, SIX_TYPES)

        assert first.board.to_dict() == second.board.to_dict()
        assert first.stats.to_dict() == second.stats.to_dict()

    def test_seed_argument_overrides_config(self, generator):
        """Test that the seed argument wins over LevelConfig.seed."""
        config = hard_config(seed=1)
        from_config = generator.generate(hard_config(seed=99), SIX_TYPES)
        from_arg = generator.generate(config, SIX_TYPES, seed=99)

        assert from_config.board.to_dict() == from_arg.board.to_dict()

    def test_dig_probability_override(self, generator):
        """Test that a per-level dig probability reaches the engine."""
        eager = generator.generate(hard_config(dig_probability=1.0), SIX_TYPES, seed=4)
        lazy = generator.generate(hard_config(dig_probability=0.0), SIX_TYPES, seed=4)

        assert lazy.stats.dig_count < eager.stats.dig_count

    def test_tiles_inside_safe_area(self, generator):
        """Test that generated tiles lie in the canvas safe rectangle."""
        config = LevelConfig(total_tiles=120, layer_count=6, pattern="scattered_pile")
        result = generator.generate(config, SIX_TYPES, seed=6)
        canvas = generator.canvas

        for tile in result.board.tiles:
            assert canvas.safe_min_x <= tile.x <= canvas.safe_max_x
            assert canvas.safe_min_y <= tile.y <= canvas.safe_max_y

    def test_to_dict_shape(self, generator):
        """Test the persisted board shape."""
        config = LevelConfig(total_tiles=9, layer_count=1, pattern="staggered")
        data = generator.generate(config, SIX_TYPES, seed=2).to_dict(include_solution=True)

        assert set(data["board"]) == {"tiles", "gridSize"}
        assert set(data["board"]["tiles"][0]) == {"id", "type", "x", "y", "layer"}
        assert len(data["resolution_order"]) == 9
        assert data["solution"][0]["action"] == "match"

    def test_board_is_read_only(self, generator):
        """Test that a finished board cannot be edited through its tiles."""
        config = LevelConfig(total_tiles=9, layer_count=1, pattern="staggered")
        result = generator.generate(config, SIX_TYPES, seed=2)

        assert isinstance(result.board.tiles, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.board.tiles[0].type = "coin"
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.board.tiles[0].layer = 2

    def test_singleton(self):
        """Test that get_generator returns one shared instance."""
        assert get_generator() is get_generator()


class TestGeneratorValidation:
    """Test cases for fail-fast input validation."""

    @pytest.mark.parametrize("config", [
        LevelConfig(total_tiles=0, layer_count=3, pattern="random"),
        LevelConfig(total_tiles=-3, layer_count=3, pattern="random"),
        LevelConfig(total_tiles=30, layer_count=0, pattern="random"),
        LevelConfig(total_tiles=30, layer_count=3, pattern="zigzag"),
        LevelConfig(total_tiles=30, layer_count=3, pattern="random", dig_probability=1.5),
        LevelConfig(total_tiles=30, layer_count=3, pattern="random", dig_probability=-0.1),
        LevelConfig(total_tiles=30, layer_count=3, pattern="random", buffer_safety_margin=0),
        LevelConfig(total_tiles=30, layer_count=3, pattern="random", buffer_safety_margin=5),
    ])
    def test_invalid_config(self, generator, config):
        """Test that bad configurations raise ConfigError."""
        with pytest.raises(ConfigError):
            generator.generate(config, SIX_TYPES)

    @pytest.mark.parametrize("palette", [[], [""], ["carrot", ""]])
    def test_invalid_palette(self, generator, palette):
        """Test that empty palettes or type names raise ConfigError."""
        config = LevelConfig(total_tiles=30, layer_count=3, pattern="random")
        with pytest.raises(ConfigError):
            generator.generate(config, palette)

    def test_largest_allowed_margin(self, generator):
        """Test that a buffer of exactly three slots is accepted."""
        config = LevelConfig(
            total_tiles=60, layer_count=5, pattern="random", buffer_safety_margin=4
        )
        result = generator.generate(config, SIX_TYPES, seed=1)

        assert result.stats.unassigned_count == 0
