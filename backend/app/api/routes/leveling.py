"""Level curve API routes."""
from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, List, Any

from ...models.schemas import (
    ErrorResponse,
    GenerateResponse,
    LevelConfigRequest,
    LevelGenerateRequest,
    LevelProgressionRequest,
)
from ...models.level import DEFAULT_PALETTE
from ...models.leveling_config import (
    ENDLESS_LAYER_RANGE,
    ENDLESS_TILE_RANGE,
    LEVEL_CURVE,
    PHASE_RANGES,
    SAWTOOTH_PATTERN_10,
    generate_level_progression,
    get_complete_level_config,
    get_level_config,
)
from ...core.generator import LevelGenerator
from ..deps import get_level_generator
from .generate import build_generate_response


router = APIRouter(prefix="/api/leveling", tags=["leveling"])


@router.get("/config")
async def get_leveling_config() -> Dict[str, Any]:
    """
    Full difficulty curve settings.

    Returns:
        - level_curve: hand-tuned rows for levels 1-20
        - phase_ranges: level range per phase
        - sawtooth_pattern: 10-level endless modifier
        - endless: tile and layer ranges past level 20
    """
    return {
        "level_curve": {
            level: {
                "total_tiles": entry.tiles,
                "layer_count": entry.layers,
                "pattern": entry.pattern.value,
                "pattern_params": entry.params.to_dict(),
            }
            for level, entry in LEVEL_CURVE.items()
        },
        "phase_ranges": {
            phase.value: list(level_range)
            for phase, level_range in PHASE_RANGES.items()
        },
        "sawtooth_pattern": SAWTOOTH_PATTERN_10,
        "endless": {
            "tile_range": list(ENDLESS_TILE_RANGE),
            "layer_range": list(ENDLESS_LAYER_RANGE),
        },
        "palette": list(DEFAULT_PALETTE),
    }


@router.post("/level-config")
async def get_single_level_config(request: LevelConfigRequest) -> Dict[str, Any]:
    """
    Resolved generator settings for one level.

    Returns:
        - level_number, phase, is_boss_level
        - config: total_tiles, layer_count, pattern, pattern_params
        - palette: default tile types
    """
    return get_complete_level_config(request.level_number)


@router.post("/progression")
async def get_level_progression(request: LevelProgressionRequest) -> List[Dict[str, Any]]:
    """Generator settings for consecutive levels."""
    return generate_level_progression(request.start_level, request.count)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate_level_board(
    request: LevelGenerateRequest,
    generator: LevelGenerator = Depends(get_level_generator),
) -> GenerateResponse:
    """
    Generate the board for a level number using its curve settings.

    Args:
        request: LevelGenerateRequest with level number and seed.
        generator: LevelGenerator dependency.

    Returns:
        GenerateResponse with the board and generation stats.
    """
    try:
        config = get_level_config(request.level_number)
        palette = request.tile_types if request.tile_types is not None else DEFAULT_PALETTE

        result = generator.generate(config, palette, seed=request.seed)

        return build_generate_response(result, request.include_solution)
    except (ValueError, RuntimeError) as e:
        raise HTTPException(status_code=400, detail=f"Level generation failed: {str(e)}")
