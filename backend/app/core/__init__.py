"""Core business logic package.

This package contains the layout, occlusion, assignment, generation
and simulation engines.
"""
from .errors import ConfigError, GenerationDeadlock
from .occlusion import OcclusionGraph, BlockerTracker
from .assignment import SolvableAssigner
from .generator import LevelGenerator, get_generator
from .simulator import LevelSimulator, get_simulator

__all__ = [
    "ConfigError",
    "GenerationDeadlock",
    "OcclusionGraph",
    "BlockerTracker",
    "SolvableAssigner",
    "LevelGenerator",
    "get_generator",
    "LevelSimulator",
    "get_simulator",
]
