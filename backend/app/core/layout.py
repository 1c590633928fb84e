"""Layout generator: tile placement for the named board patterns.

Every pattern is a small dataclass carrying its own parameters. The
generator walks the layers bottom-up and asks the pattern to emit tiles
for each layer until the global budget is spent. Positions are raw
canvas coordinates; centering and clamping happen afterwards.
"""
import math
import random
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Tuple, Type

from ..models.level import CanvasSpec, PatternParams, PatternType, Tile
from .errors import ConfigError


# Grid cells used by the random rule, relative to the canvas center
RANDOM_COL_RANGE = (-4, 3)
RANDOM_ROW_RANGE = (-4, 4)

# Safe area for spiral and boss scatter, in grid cells
SAFE_COL_RANGE = (-4, 4)
SAFE_ROW_RANGE = (-4, 6)

RANDOM_TILES_PER_LAYER = 15
PILE_SIZE = 3
PILE_FILL_PROBABILITY = 0.7


class Layout:
    """Mutable placement state shared by the patterns during one run."""

    def __init__(
        self,
        total_tiles: int,
        layer_count: int,
        canvas: CanvasSpec,
        rng: random.Random,
    ):
        self.total_tiles = total_tiles
        self.layer_count = layer_count
        self.canvas = canvas
        self.rng = rng
        self.layer_quota = math.ceil(total_tiles / layer_count)
        self.tiles: List[Tile] = []

    @property
    def remaining(self) -> int:
        return self.total_tiles - len(self.tiles)

    @property
    def is_full(self) -> bool:
        return len(self.tiles) >= self.total_tiles

    def layer_budget(self) -> int:
        """Tiles a per-layer capped pattern may still place on this layer."""
        return min(self.layer_quota, self.remaining)

    def structural_offset(self, layer_index: int) -> float:
        """Half-tile shift on odd layers so lower corners stay exposed."""
        return (layer_index % 2) * (self.canvas.tile_size / 2)

    def add_tile(self, x: float, y: float, layer: int) -> bool:
        """Place a tile with jitter. Returns False once the budget is spent."""
        if self.is_full:
            return False

        jitter = self.canvas.jitter
        jx = (self.rng.random() - 0.5) * jitter
        jy = (self.rng.random() - 0.5) * jitter

        handle = len(self.tiles)
        self.tiles.append(Tile(id=f"tile-{handle}", x=x + jx, y=y + jy, layer=layer))
        return True

    def add_cell(self, col: float, row: float, layer_index: int, offset: float = 0.0) -> bool:
        """Place a tile at a grid cell relative to the canvas center."""
        ts = self.canvas.tile_size
        return self.add_tile(
            self.canvas.center_x + col * ts + offset,
            self.canvas.center_y + row * ts + offset,
            layer_index + 1,
        )


def _grid_cells(col_range: Tuple[int, int], row_range: Tuple[int, int]) -> List[Tuple[int, int]]:
    return [
        (c, r)
        for r in range(row_range[0], row_range[1] + 1)
        for c in range(col_range[0], col_range[1] + 1)
    ]


@dataclass
class LayoutPattern:
    """Base class for pattern descriptors."""

    pattern_type: ClassVar[PatternType]

    @classmethod
    def from_params(cls, params: PatternParams) -> "LayoutPattern":
        raise NotImplementedError

    def validate(self) -> None:
        """Raise ConfigError for out-of-range parameters."""

    def emit(self, layout: Layout, layer_index: int) -> None:
        raise NotImplementedError


def _require_positive(pattern: PatternType, name: str, value: Optional[float]) -> None:
    if value is not None and value <= 0:
        raise ConfigError(f"{pattern.value}: '{name}' must be positive, got {value}")


@dataclass
class DensePile(LayoutPattern):
    """Mound silhouette: inclusion probability falls off from the center."""

    pattern_type: ClassVar[PatternType] = PatternType.DENSE_PILE
    size: int = 6

    @classmethod
    def from_params(cls, params: PatternParams) -> "DensePile":
        return cls(size=params.size or 6)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "size", self.size)

    def emit(self, layout: Layout, layer_index: int) -> None:
        ts = layout.canvas.tile_size
        offset = layout.structural_offset(layer_index)
        start_x = layout.canvas.center_x - (self.size * ts) / 2
        start_y = layout.canvas.center_y - (self.size * ts) / 2
        half = self.size / 2

        for r in range(self.size):
            for c in range(self.size):
                if layout.is_full:
                    return
                dist = math.hypot(r - half, c - half)
                prob = 1 - dist / self.size
                if layout.rng.random() < prob + 0.2:
                    layout.add_tile(
                        start_x + c * ts + offset,
                        start_y + r * ts + offset,
                        layer_index + 1,
                    )


@dataclass
class ScatteredPile(LayoutPattern):
    """Independent 3x3 clusters dropped at random canvas positions."""

    pattern_type: ClassVar[PatternType] = PatternType.SCATTERED_PILE
    piles: int = 3

    @classmethod
    def from_params(cls, params: PatternParams) -> "ScatteredPile":
        return cls(piles=params.piles or 3)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "piles", self.piles)

    def emit(self, layout: Layout, layer_index: int) -> None:
        canvas = layout.canvas
        ts = canvas.tile_size
        half_pile = (PILE_SIZE * ts) / 2
        min_x = canvas.scatter_min_x + half_pile
        max_x = canvas.scatter_max_x - half_pile
        min_y = canvas.scatter_min_y + half_pile
        max_y = canvas.scatter_max_y - half_pile

        for _ in range(self.piles):
            pile_x = min_x + layout.rng.random() * (max_x - min_x)
            pile_y = min_y + layout.rng.random() * (max_y - min_y)
            start_x = pile_x - half_pile
            start_y = pile_y - half_pile

            for r in range(PILE_SIZE):
                for c in range(PILE_SIZE):
                    if layout.is_full:
                        return
                    if layout.rng.random() < PILE_FILL_PROBABILITY:
                        layout.add_tile(start_x + c * ts, start_y + r * ts, layer_index + 1)


@dataclass
class Staggered(LayoutPattern):
    """Rectangular grid; odd layers shift by half a tile."""

    pattern_type: ClassVar[PatternType] = PatternType.STAGGERED
    row_shift: ClassVar[bool] = False
    width: int = 4
    height: int = 4

    @classmethod
    def from_params(cls, params: PatternParams) -> "Staggered":
        return cls(width=params.width or 4, height=params.height or 4)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "width", self.width)
        _require_positive(self.pattern_type, "height", self.height)

    def emit(self, layout: Layout, layer_index: int) -> None:
        ts = layout.canvas.tile_size
        offset = layout.structural_offset(layer_index)
        start_x = layout.canvas.center_x - ((self.width - 1) * ts) / 2
        start_y = layout.canvas.center_y - ((self.height - 1) * ts) / 2

        for r in range(self.height):
            row_offset = ts / 2 if self.row_shift and r % 2 != 0 else 0.0
            for c in range(self.width):
                if not layout.add_tile(
                    start_x + c * ts + row_offset + offset,
                    start_y + r * ts + offset,
                    layer_index + 1,
                ):
                    return


@dataclass
class Brick(Staggered):
    """Staggered grid with every other row offset by half a tile."""

    pattern_type: ClassVar[PatternType] = PatternType.BRICK
    row_shift: ClassVar[bool] = True


@dataclass
class Pyramid(LayoutPattern):
    """Rows taper away from the middle row."""

    pattern_type: ClassVar[PatternType] = PatternType.PYRAMID
    size: int = 4

    @classmethod
    def from_params(cls, params: PatternParams) -> "Pyramid":
        return cls(size=params.size or 4)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "size", self.size)

    def emit(self, layout: Layout, layer_index: int) -> None:
        ts = layout.canvas.tile_size
        offset = layout.structural_offset(layer_index)
        budget = layout.layer_budget()
        placed = 0

        for r in range(self.size):
            row_width = self.size - abs(r - self.size / 2) * 1.5
            start_x = layout.canvas.center_x - (row_width * ts) / 2
            row_y = layout.canvas.center_y - (self.size * ts) / 2 + r * ts

            for c in range(max(0, math.ceil(row_width))):
                if placed >= budget:
                    return
                layout.add_tile(start_x + c * ts + offset, row_y + offset, layer_index + 1)
                placed += 1


@dataclass
class Spiral(LayoutPattern):
    """Square grid walk outward from the center (right, down, left, up)."""

    pattern_type: ClassVar[PatternType] = PatternType.SPIRAL
    turns: Optional[float] = None
    max_radius: ClassVar[int] = 10

    @classmethod
    def from_params(cls, params: PatternParams) -> "Spiral":
        return cls(turns=params.turns)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "turns", self.turns)

    def emit(self, layout: Layout, layer_index: int) -> None:
        offset = layout.structural_offset(layer_index)
        budget = layout.layer_budget()
        max_direction_changes = None if self.turns is None else self.turns * 4

        x, y = 0, 0
        dx, dy = 1, 0
        segment_length = 1
        segment_passed = 0
        direction_changes = 0
        placed = 0

        while placed < budget:
            if SAFE_COL_RANGE[0] <= x <= SAFE_COL_RANGE[1] and SAFE_ROW_RANGE[0] <= y <= SAFE_ROW_RANGE[1]:
                layout.add_cell(x, y, layer_index, offset)
                placed += 1

            x += dx
            y += dy
            segment_passed += 1

            if segment_passed >= segment_length:
                segment_passed = 0
                dx, dy = -dy, dx
                direction_changes += 1
                if direction_changes % 2 == 0:
                    segment_length += 1
                if max_direction_changes is not None and direction_changes >= max_direction_changes:
                    break

            if abs(x) > self.max_radius or abs(y) > self.max_radius:
                break


@dataclass
class Cross(LayoutPattern):
    """Both diagonals of a square grid, topped up with free random cells."""

    pattern_type: ClassVar[PatternType] = PatternType.CROSS
    size: int = 5

    @classmethod
    def from_params(cls, params: PatternParams) -> "Cross":
        return cls(size=params.size or 5)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "size", self.size)

    def emit(self, layout: Layout, layer_index: int) -> None:
        offset = layout.structural_offset(layer_index)
        budget = layout.layer_budget()
        half = self.size / 2
        placed = 0
        occupied = set()

        for i in range(self.size):
            for j in range(self.size):
                if i != j and i + j != self.size - 1:
                    continue
                if placed >= budget:
                    return
                layout.add_cell(j - half, i - half, layer_index, offset)
                occupied.add((math.floor(j - half), math.floor(i - half)))
                placed += 1

        free_cells = [
            cell for cell in _grid_cells((-4, 3), (-4, 3)) if cell not in occupied
        ]
        layout.rng.shuffle(free_cells)
        for col, row in free_cells:
            if placed >= budget:
                return
            layout.add_cell(col, row, layer_index, offset)
            placed += 1


@dataclass
class Boss(LayoutPattern):
    """Dense centered core with an outer ring of scattered tiles."""

    pattern_type: ClassVar[PatternType] = PatternType.BOSS
    size: int = 8

    @classmethod
    def from_params(cls, params: PatternParams) -> "Boss":
        return cls(size=params.size or 8)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "size", self.size)

    @property
    def core_size(self) -> int:
        return max(2, self.size // 2)

    def emit(self, layout: Layout, layer_index: int) -> None:
        offset = layout.structural_offset(layer_index)
        budget = layout.layer_budget()
        core = self.core_size
        core_half = (core - 1) / 2
        placed = 0

        for r in range(core):
            for c in range(core):
                if placed >= budget:
                    return
                layout.add_cell(c - core_half, r - core_half, layer_index, offset)
                placed += 1

        ring = [
            (c, r) for c, r in _grid_cells(SAFE_COL_RANGE, SAFE_ROW_RANGE)
            if not (abs(c) <= core_half and abs(r) <= core_half)
        ]
        layout.rng.shuffle(ring)
        for col, row in ring:
            if placed >= budget:
                return
            layout.add_cell(col, row, layer_index, offset)
            placed += 1


@dataclass
class RandomGrid(LayoutPattern):
    """Up to 15 tiles per layer on distinct random cells around the center."""

    pattern_type: ClassVar[PatternType] = PatternType.RANDOM
    density: float = 1.0

    @classmethod
    def from_params(cls, params: PatternParams) -> "RandomGrid":
        return cls(density=params.density if params.density is not None else 1.0)

    def validate(self) -> None:
        _require_positive(self.pattern_type, "density", self.density)

    def emit(self, layout: Layout, layer_index: int) -> None:
        offset = layout.structural_offset(layer_index)
        per_layer = max(1, round(RANDOM_TILES_PER_LAYER * min(self.density, 1.0)))
        count = min(layout.layer_budget(), per_layer)

        cells = _grid_cells(RANDOM_COL_RANGE, RANDOM_ROW_RANGE)
        for col, row in layout.rng.sample(cells, min(count, len(cells))):
            layout.add_cell(col, row, layer_index, offset)


PATTERN_REGISTRY: Dict[PatternType, Type[LayoutPattern]] = {
    cls.pattern_type: cls
    for cls in (DensePile, ScatteredPile, Staggered, Brick, Pyramid, Spiral, Cross, Boss, RandomGrid)
}


def build_pattern(pattern: str, params: Optional[PatternParams] = None) -> LayoutPattern:
    """Resolve a pattern name and parameters into a validated descriptor."""
    try:
        pattern_type = PatternType(pattern)
    except ValueError:
        raise ConfigError(
            f"Unknown pattern '{pattern}'. Must be one of: {PatternType.names()}"
        ) from None

    descriptor = PATTERN_REGISTRY[pattern_type].from_params(params or PatternParams())
    descriptor.validate()
    return descriptor


class LayoutGenerator:
    """Places tiles for a pattern and guarantees the exact tile count."""

    def __init__(self, canvas: Optional[CanvasSpec] = None):
        self.canvas = canvas or CanvasSpec()

    def generate(
        self,
        total_tiles: int,
        layer_count: int,
        pattern: LayoutPattern,
        rng: random.Random,
    ) -> List[Tile]:
        """
        Emit exactly `total_tiles` untyped tiles.

        Args:
            total_tiles: Target count (already a multiple of 3).
            layer_count: Number of layers; tile layers are 1-based.
            pattern: Pattern descriptor from build_pattern().
            rng: Random source for this run.

        Returns:
            Tiles in placement order; handle i has id "tile-i".
        """
        layout = Layout(total_tiles, layer_count, self.canvas, rng)

        for layer_index in range(layer_count):
            if layout.is_full:
                break
            pattern.emit(layout, layer_index)

        self._fill_remaining(layout)
        return layout.tiles

    def _fill_remaining(self, layout: Layout) -> None:
        """Top up with random cells on random layers until the count is met."""
        while not layout.is_full:
            col = layout.rng.randint(*RANDOM_COL_RANGE)
            row = layout.rng.randint(*RANDOM_ROW_RANGE)
            layer_index = layout.rng.randrange(layout.layer_count)
            layout.add_cell(col, row, layer_index)
