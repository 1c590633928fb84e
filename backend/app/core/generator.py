"""Level generator: layout, normalization, occlusion and type assignment."""
import logging
import random
import time
from typing import Optional, Sequence

from ..models.level import (
    Board,
    CanvasSpec,
    EngineSpec,
    GenerationResult,
    LevelConfig,
)
from .assignment import SolvableAssigner
from .errors import ConfigError
from .layout import LayoutGenerator, LayoutPattern, build_pattern
from .normalizer import normalize_tiles
from .occlusion import OcclusionGraph

logger = logging.getLogger(__name__)


class LevelGenerator:
    """Generates solvable triple-match boards."""

    # Smallest buffer that can still hold a full group
    MIN_BUFFER_CAPACITY = 3

    def __init__(
        self,
        canvas: Optional[CanvasSpec] = None,
        engine: Optional[EngineSpec] = None,
    ):
        self.canvas = canvas or CanvasSpec.from_settings()
        self.engine = engine or EngineSpec.from_settings()
        self.layout_generator = LayoutGenerator(self.canvas)

    def generate(
        self,
        config: LevelConfig,
        palette: Sequence[str],
        seed: Optional[int] = None,
    ) -> GenerationResult:
        """
        Generate a board for a level configuration.

        Args:
            config: Generator input for this run.
            palette: Ordered, non-empty list of tile type names.
            seed: Random seed; overrides config.seed when given.

        Returns:
            GenerationResult with the finished board and stats.

        Raises:
            ConfigError: If the configuration or palette is invalid.
            GenerationDeadlock: If assignment gets stuck or exceeds its iteration cap.
        """
        start_time = time.time()

        pattern = self.validate(config, palette)
        engine = self._engine_for(config)
        palette = list(palette)

        run_seed = seed if seed is not None else config.seed
        rng = random.Random(run_seed)

        tiles = self.layout_generator.generate(
            config.target_tiles, config.layer_count, pattern, rng
        )
        grid_size = normalize_tiles(tiles, self.canvas)

        graph = OcclusionGraph.build(tiles, self.canvas.tile_size)
        outcome = SolvableAssigner(engine).assign(tiles, graph, palette, rng)

        generation_time_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            "Generated %d tiles (%s, %d layers): %s",
            len(tiles), config.pattern, config.layer_count, outcome.stats.to_dict(),
        )

        return GenerationResult(
            board=Board.from_tiles(tiles, grid_size),
            stats=outcome.stats,
            config=config,
            solution=outcome.solution,
            resolution_order=outcome.resolution_order,
            generation_time_ms=generation_time_ms,
        )

    def validate(self, config: LevelConfig, palette: Sequence[str]) -> LayoutPattern:
        """Fail fast on bad input; returns the resolved pattern descriptor."""
        if config.total_tiles <= 0:
            raise ConfigError(f"total_tiles must be positive, got {config.total_tiles}")
        if config.layer_count <= 0:
            raise ConfigError(f"layer_count must be positive, got {config.layer_count}")
        if not palette:
            raise ConfigError("Tile palette must not be empty")
        if any(not isinstance(t, str) or not t for t in palette):
            raise ConfigError("Tile palette entries must be non-empty strings")

        engine = self._engine_for(config)
        if not 0.0 <= engine.dig_probability <= 1.0:
            raise ConfigError(
                f"dig_probability must be within [0, 1], got {engine.dig_probability}"
            )
        if engine.buffer_safety_margin < 1:
            raise ConfigError("buffer_safety_margin must leave at least one free slot")
        if engine.buffer_capacity < self.MIN_BUFFER_CAPACITY:
            raise ConfigError(
                f"Buffer capacity {engine.buffer_capacity} "
                f"(slots {engine.slot_capacity} - margin {engine.buffer_safety_margin}) "
                f"must be at least {self.MIN_BUFFER_CAPACITY}"
            )
        if engine.dig_candidates < 1:
            raise ConfigError("dig_candidates must be positive")

        return build_pattern(config.pattern, config.pattern_params)

    def _engine_for(self, config: LevelConfig) -> EngineSpec:
        """Apply per-level overrides on top of the default engine tuning."""
        return EngineSpec(
            slot_capacity=self.engine.slot_capacity,
            buffer_safety_margin=(
                config.buffer_safety_margin
                if config.buffer_safety_margin is not None
                else self.engine.buffer_safety_margin
            ),
            dig_probability=(
                config.dig_probability
                if config.dig_probability is not None
                else self.engine.dig_probability
            ),
            dig_candidates=self.engine.dig_candidates,
        )


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get or create generator singleton instance."""
    global _generator
    if _generator is None:
        _generator = LevelGenerator()
    return _generator
