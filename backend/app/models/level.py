"""Level data models and structures."""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Sequence, Tuple
from enum import Enum

from ..config import Settings, get_settings


class PatternType(str, Enum):
    """Layout pattern enumeration."""
    DENSE_PILE = "dense_pile"
    SCATTERED_PILE = "scattered_pile"
    STAGGERED = "staggered"
    BRICK = "brick"
    PYRAMID = "pyramid"
    SPIRAL = "spiral"
    CROSS = "cross"
    BOSS = "boss"
    RANDOM = "random"

    @classmethod
    def names(cls) -> List[str]:
        """Return all pattern names."""
        return [p.value for p in cls]


class StepAction(str, Enum):
    """Action taken by the assignment engine in one step."""
    DIG = "dig"
    MATCH = "match"


@dataclass(frozen=True)
class PatternParams:
    """Optional numeric parameters shared by the layout patterns."""
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None
    turns: Optional[float] = None
    piles: Optional[int] = None
    density: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, dropping unset fields."""
        values = {
            "width": self.width,
            "height": self.height,
            "size": self.size,
            "turns": self.turns,
            "piles": self.piles,
            "density": self.density,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class LevelConfig:
    """Immutable generator input for one run."""
    total_tiles: int
    layer_count: int
    pattern: str
    pattern_params: PatternParams = field(default_factory=PatternParams)
    seed: Optional[int] = None
    # None means "use the application default"
    dig_probability: Optional[float] = None
    buffer_safety_margin: Optional[int] = None

    @property
    def target_tiles(self) -> int:
        """Requested tile count rounded up to a multiple of 3."""
        return -(-self.total_tiles // 3) * 3

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "total_tiles": self.total_tiles,
            "layer_count": self.layer_count,
            "pattern": self.pattern,
            "pattern_params": self.pattern_params.to_dict(),
        }
        if self.seed is not None:
            result["seed"] = self.seed
        if self.dig_probability is not None:
            result["dig_probability"] = self.dig_probability
        if self.buffer_safety_margin is not None:
            result["buffer_safety_margin"] = self.buffer_safety_margin
        return result


@dataclass(frozen=True)
class CanvasSpec:
    """Canvas geometry used by layout and normalization."""
    center_x: float = 375.0
    center_y: float = 580.0
    tile_size: float = 80.0
    jitter: float = 12.0
    safe_min_x: float = 90.0
    safe_max_x: float = 660.0
    safe_min_y: float = 240.0
    safe_max_y: float = 910.0
    scatter_min_x: float = 50.0
    scatter_max_x: float = 700.0
    scatter_min_y: float = 200.0
    scatter_max_y: float = 950.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CanvasSpec":
        """Build canvas geometry from application settings."""
        s = settings or get_settings()
        return cls(
            center_x=s.canvas_center_x,
            center_y=s.canvas_center_y,
            tile_size=s.tile_size,
            jitter=s.tile_jitter,
            safe_min_x=s.safe_min_x,
            safe_max_x=s.safe_max_x,
            safe_min_y=s.safe_min_y,
            safe_max_y=s.safe_max_y,
            scatter_min_x=s.scatter_min_x,
            scatter_max_x=s.scatter_max_x,
            scatter_min_y=s.scatter_min_y,
            scatter_max_y=s.scatter_max_y,
        )


@dataclass(frozen=True)
class EngineSpec:
    """Tuning of the solvable assignment engine."""
    slot_capacity: int = 7
    buffer_safety_margin: int = 1
    dig_probability: float = 0.6
    dig_candidates: int = 3

    @property
    def buffer_capacity(self) -> int:
        return self.slot_capacity - self.buffer_safety_margin

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EngineSpec":
        """Build engine tuning from application settings."""
        s = settings or get_settings()
        return cls(
            slot_capacity=s.slot_capacity,
            buffer_safety_margin=s.buffer_safety_margin,
            dig_probability=s.dig_probability,
            dig_candidates=s.dig_candidates,
        )


@dataclass
class Tile:
    """A single board tile. `type` stays None until assignment."""
    id: str
    x: float
    y: float
    layer: int
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.freeze().to_dict()

    def freeze(self) -> "BoardTile":
        """Read-only copy for a finished board."""
        return BoardTile(id=self.id, x=self.x, y=self.y, layer=self.layer, type=self.type)


@dataclass(frozen=True)
class BoardTile:
    """Tile of a finished board. Copied out of the working arena."""
    id: str
    x: float
    y: float
    layer: int
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "layer": self.layer,
        }


@dataclass
class GenerationStats:
    """Diagnostics of one assignment run (not persisted with the board)."""
    match_count: int = 0
    dig_count: int = 0
    unassigned_count: int = 0
    occlusion_edges: int = 0

    @property
    def delayed_match_ratio(self) -> float:
        """Fraction of digs among all resolving actions."""
        actions = self.dig_count + self.match_count
        if actions == 0:
            return 0.0
        return self.dig_count / actions

    @property
    def is_complete(self) -> bool:
        """False when the cleanup pass had to invent types."""
        return self.unassigned_count == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "match_count": self.match_count,
            "dig_count": self.dig_count,
            "unassigned_count": self.unassigned_count,
            "occlusion_edges": self.occlusion_edges,
            "delayed_match_ratio": round(self.delayed_match_ratio, 4),
        }


@dataclass(frozen=True)
class SolutionStep:
    """One DIG or MATCH step recorded by the assignment engine."""
    action: StepAction
    tile_ids: Tuple[str, ...]
    tile_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "action": self.action.value,
            "tile_ids": list(self.tile_ids),
            "tile_type": self.tile_type,
        }


@dataclass(frozen=True)
class Board:
    """Finished board handed to persistence and rendering."""
    tiles: Tuple[BoardTile, ...]
    grid_size: Dict[str, int]

    @classmethod
    def from_tiles(cls, tiles: Sequence[Tile], grid_size: Dict[str, int]) -> "Board":
        """Freeze the working tiles into a board."""
        return cls(tiles=tuple(t.freeze() for t in tiles), grid_size=dict(grid_size))

    def __len__(self) -> int:
        return len(self.tiles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tiles": [t.to_dict() for t in self.tiles],
            "gridSize": dict(self.grid_size),
        }


@dataclass
class GenerationResult:
    """Result of level generation."""
    board: Board
    stats: GenerationStats
    config: LevelConfig
    solution: List[SolutionStep] = field(default_factory=list)
    resolution_order: List[str] = field(default_factory=list)
    generation_time_ms: int = 0

    def to_dict(self, include_solution: bool = False) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "board": self.board.to_dict(),
            "stats": self.stats.to_dict(),
            "config": self.config.to_dict(),
            "generation_time_ms": self.generation_time_ms,
        }
        if include_solution:
            result["solution"] = [s.to_dict() for s in self.solution]
            result["resolution_order"] = list(self.resolution_order)
        return result


@dataclass
class SimulationResult:
    """Result of level simulation."""
    clear_rate: float
    avg_moves: float
    min_moves: int
    max_moves: int
    iterations: int
    strategy: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "clear_rate": round(self.clear_rate, 3),
            "avg_moves": round(self.avg_moves, 2),
            "min_moves": self.min_moves,
            "max_moves": self.max_moves,
            "iterations": self.iterations,
            "strategy": self.strategy,
        }


@dataclass
class ReplayResult:
    """Outcome of replaying a click order under the game rules."""
    cleared: bool
    moves_used: int
    tiles_cleared: int
    peak_slot_usage: int
    failure_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cleared": self.cleared,
            "moves_used": self.moves_used,
            "tiles_cleared": self.tiles_cleared,
            "peak_slot_usage": self.peak_slot_usage,
            "failure_reason": self.failure_reason,
        }


# Default tile palette used by the level seeder
TILE_TYPES = {
    "carrot": "Carrot",
    "wheat": "Wheat",
    "wood": "Wood",
    "grass": "Grass",
    "stone": "Stone",
    "coin": "Coin",
    "shovel": "Shovel",
}

DEFAULT_PALETTE: List[str] = list(TILE_TYPES.keys())
