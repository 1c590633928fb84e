"""API dependencies."""
from ..core.generator import get_generator, LevelGenerator
from ..core.simulator import get_simulator, LevelSimulator


def get_level_generator() -> LevelGenerator:
    """Dependency for level generator."""
    return get_generator()


def get_level_simulator() -> LevelSimulator:
    """Dependency for level simulator."""
    return get_simulator()
