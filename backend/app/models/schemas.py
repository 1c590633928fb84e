"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional


class PatternParamsSchema(BaseModel):
    """Optional layout pattern parameters."""
    width: Optional[int] = Field(default=None, ge=1, description="Grid width (staggered/brick)")
    height: Optional[int] = Field(default=None, ge=1, description="Grid height (staggered/brick)")
    size: Optional[int] = Field(default=None, ge=1, description="Pattern size (pile/pyramid/cross/boss)")
    turns: Optional[float] = Field(default=None, gt=0, description="Spiral turns")
    piles: Optional[int] = Field(default=None, ge=1, description="Number of piles (scattered_pile)")
    density: Optional[float] = Field(default=None, gt=0, le=1, description="Cell density (random)")


class GenerateRequest(BaseModel):
    """Request schema for board generation."""
    total_tiles: int = Field(..., ge=1, le=2000, description="Requested tile count (rounded up to a multiple of 3)")
    layer_count: int = Field(..., ge=1, le=50, description="Number of layers")
    pattern: str = Field(default="random", description="Layout pattern name")
    pattern_params: PatternParamsSchema = Field(default_factory=PatternParamsSchema)
    tile_types: Optional[List[str]] = Field(default=None, description="Tile palette (defaults to the built-in palette)")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible boards")
    dig_probability: Optional[float] = Field(default=None, description="Per-level dig probability override")
    buffer_safety_margin: Optional[int] = Field(default=None, description="Per-level buffer margin override")
    include_solution: bool = Field(default=False, description="Return the solution trace")


class TileSchema(BaseModel):
    """A single board tile."""
    id: str
    type: Optional[str] = None
    x: float
    y: float
    layer: int = Field(..., ge=1, description="Layer, 1 = bottom")


class GenerateResponse(BaseModel):
    """Response schema for board generation."""
    tiles: List[TileSchema] = Field(..., description="Board tiles")
    grid_size: Dict[str, int] = Field(..., description="Board extent in tile units")
    stats: Dict[str, Any] = Field(..., description="Generation diagnostics")
    config: Dict[str, Any] = Field(..., description="Effective level configuration")
    generation_time_ms: int = Field(default=0, description="Generation time in milliseconds")
    solution: Optional[List[Dict[str, Any]]] = Field(default=None, description="DIG/MATCH steps")
    resolution_order: Optional[List[str]] = Field(default=None, description="Tile ids in clearing order")


class SimulateRequest(BaseModel):
    """Request schema for board simulation."""
    tiles: List[TileSchema] = Field(..., min_length=1, description="Typed board tiles")
    strategy: str = Field(default="greedy", description="Simulation strategy (replay/greedy/random)")
    click_order: Optional[List[str]] = Field(default=None, description="Tile ids to click (replay only)")
    iterations: int = Field(default=100, ge=1, le=10000, description="Number of simulation iterations")
    seed: Optional[int] = Field(default=None, description="Base random seed")


class SimulateResponse(BaseModel):
    """Response schema for board simulation."""
    strategy: str = Field(..., description="Strategy used")
    clear_rate: float = Field(..., ge=0, le=1, description="Clear rate (0-1)")
    avg_moves: float = Field(..., description="Average moves used")
    min_moves: int = Field(..., description="Minimum moves used")
    max_moves: int = Field(..., description="Maximum moves used")
    peak_slot_usage: Optional[int] = Field(default=None, description="Peak dock usage (replay only)")
    failure_reason: Optional[str] = Field(default=None, description="Why the replay failed")


class LevelConfigRequest(BaseModel):
    """Request schema for a single level's configuration."""
    level_number: int = Field(..., ge=1, description="Level number (1-based)")


class LevelProgressionRequest(BaseModel):
    """Request schema for a range of level configurations."""
    start_level: int = Field(default=1, ge=1, description="First level")
    count: int = Field(default=10, ge=1, le=200, description="Number of levels")


class LevelGenerateRequest(BaseModel):
    """Request schema for generating the board of a level."""
    level_number: int = Field(..., ge=1, description="Level number (1-based)")
    seed: Optional[int] = Field(default=None, description="Random seed")
    tile_types: Optional[List[str]] = Field(default=None, description="Tile palette override")
    include_solution: bool = Field(default=False, description="Return the solution trace")


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
