"""Board generation and simulation API routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import (
    GenerateRequest,
    GenerateResponse,
    SimulateRequest,
    SimulateResponse,
    TileSchema,
    ErrorResponse,
)
from ...models.level import (
    DEFAULT_PALETTE,
    GenerationResult,
    LevelConfig,
    PatternParams,
    Tile,
)
from ...core.generator import LevelGenerator
from ...core.simulator import LevelSimulator
from ..deps import get_level_generator, get_level_simulator

router = APIRouter(prefix="/api", tags=["generate"])


def build_generate_response(result: GenerationResult, include_solution: bool) -> GenerateResponse:
    """Flatten a GenerationResult into the API response."""
    data = result.to_dict(include_solution=include_solution)
    return GenerateResponse(
        tiles=data["board"]["tiles"],
        grid_size=data["board"]["gridSize"],
        stats=data["stats"],
        config=data["config"],
        generation_time_ms=data["generation_time_ms"],
        solution=data.get("solution"),
        resolution_order=data.get("resolution_order"),
    )


def to_tiles(tiles: List[TileSchema]) -> List[Tile]:
    """Convert request tiles into model tiles."""
    return [Tile(id=t.id, x=t.x, y=t.y, layer=t.layer, type=t.type) for t in tiles]


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate_level(
    request: GenerateRequest,
    generator: LevelGenerator = Depends(get_level_generator),
) -> GenerateResponse:
    """
    Generate a solvable board from an explicit configuration.

    Args:
        request: GenerateRequest with layout and engine parameters.
        generator: LevelGenerator dependency.

    Returns:
        GenerateResponse with the board and generation stats.
    """
    try:
        config = LevelConfig(
            total_tiles=request.total_tiles,
            layer_count=request.layer_count,
            pattern=request.pattern,
            pattern_params=PatternParams(**request.pattern_params.model_dump()),
            seed=request.seed,
            dig_probability=request.dig_probability,
            buffer_safety_margin=request.buffer_safety_margin,
        )
        palette = request.tile_types if request.tile_types is not None else DEFAULT_PALETTE

        result = generator.generate(config, palette)

        return build_generate_response(result, request.include_solution)
    except (ValueError, RuntimeError) as e:
        raise HTTPException(status_code=400, detail=f"Generation failed: {str(e)}")


@router.post(
    "/simulate",
    response_model=SimulateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def simulate_level(
    request: SimulateRequest,
    simulator: LevelSimulator = Depends(get_level_simulator),
) -> SimulateResponse:
    """
    Replay a click order or run Monte Carlo play on a board.

    Args:
        request: SimulateRequest with the board and simulation parameters.
        simulator: LevelSimulator dependency.

    Returns:
        SimulateResponse with simulation statistics.
    """
    try:
        valid_strategies = ["replay", "greedy", "random"]
        if request.strategy not in valid_strategies:
            raise ValueError(f"Invalid strategy. Must be one of: {valid_strategies}")

        tiles = to_tiles(request.tiles)
        if any(not t.type for t in tiles):
            raise ValueError("Every tile needs a type to be simulated")

        if request.strategy == "replay":
            if not request.click_order:
                raise ValueError("Replay needs a click_order")
            replay = simulator.replay(tiles, request.click_order)
            return SimulateResponse(
                strategy="replay",
                clear_rate=1.0 if replay.cleared else 0.0,
                avg_moves=float(replay.moves_used),
                min_moves=replay.moves_used,
                max_moves=replay.moves_used,
                peak_slot_usage=replay.peak_slot_usage,
                failure_reason=replay.failure_reason,
            )

        result = simulator.simulate(
            tiles,
            iterations=request.iterations,
            strategy=request.strategy,
            seed=request.seed,
        )

        return SimulateResponse(
            strategy=result.strategy,
            clear_rate=result.clear_rate,
            avg_moves=result.avg_moves,
            min_moves=result.min_moves,
            max_moves=result.max_moves,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Simulation failed: {str(e)}")
