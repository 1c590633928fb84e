"""Data models package.

This package contains data models, schemas, and the level curve.
"""
from .level import (
    PatternType,
    StepAction,
    PatternParams,
    LevelConfig,
    CanvasSpec,
    EngineSpec,
    Tile,
    Board,
    GenerationStats,
    SolutionStep,
    GenerationResult,
    SimulationResult,
    ReplayResult,
    TILE_TYPES,
    DEFAULT_PALETTE,
)
from .schemas import (
    GenerateRequest,
    GenerateResponse,
    SimulateRequest,
    SimulateResponse,
    LevelConfigRequest,
    LevelProgressionRequest,
    LevelGenerateRequest,
    ErrorResponse,
)

__all__ = [
    # Level models
    "PatternType",
    "StepAction",
    "PatternParams",
    "LevelConfig",
    "CanvasSpec",
    "EngineSpec",
    "Tile",
    "Board",
    "GenerationStats",
    "SolutionStep",
    "GenerationResult",
    "SimulationResult",
    "ReplayResult",
    "TILE_TYPES",
    "DEFAULT_PALETTE",
    # API schemas
    "GenerateRequest",
    "GenerateResponse",
    "SimulateRequest",
    "SimulateResponse",
    "LevelConfigRequest",
    "LevelProgressionRequest",
    "LevelGenerateRequest",
    "ErrorResponse",
]
