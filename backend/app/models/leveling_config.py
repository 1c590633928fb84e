"""
Level difficulty curve for the triple-match board generator.

Maps a level ordinal to a LevelConfig. The first 20 levels are hand-tuned;
later levels follow an endless curve built on a 10-level sawtooth.

Phases:
1. Tutorial (1): a single small staggered grid
2. Strategy (2-5): one new pattern per level
3. Hell (6-10): larger boards, first boss level
4. Nightmare (11-15): dense stacks, 13-15 layers
5. Abyss (16-20): 345-420 tiles, 15-18 layers
6. Endless (21+): abyss patterns on a sawtooth, boss every 10th level
"""
from typing import Dict, List, Any, Tuple
from dataclasses import dataclass, field
from enum import Enum

from .level import DEFAULT_PALETTE, LevelConfig, PatternParams, PatternType
from ..core.errors import ConfigError


class LevelPhase(str, Enum):
    """Level progression phase."""
    TUTORIAL = "tutorial"
    STRATEGY = "strategy"
    HELL = "hell"
    NIGHTMARE = "nightmare"
    ABYSS = "abyss"
    ENDLESS = "endless"


@dataclass(frozen=True)
class CurveEntry:
    """One hand-tuned row of the difficulty curve."""
    tiles: int
    layers: int
    pattern: PatternType
    params: PatternParams = field(default_factory=PatternParams)


# =========================================================
# Hand-tuned curve: levels 1-20
# =========================================================

LEVEL_CURVE: Dict[int, CurveEntry] = {
    # Tutorial
    1: CurveEntry(21, 2, PatternType.STAGGERED, PatternParams(width=3, height=3)),

    # Strategy
    2: CurveEntry(54, 4, PatternType.BRICK, PatternParams(width=5, height=5)),
    3: CurveEntry(72, 5, PatternType.PYRAMID, PatternParams(size=5)),
    4: CurveEntry(90, 6, PatternType.SPIRAL, PatternParams(turns=2.5)),
    5: CurveEntry(108, 7, PatternType.CROSS, PatternParams(size=6)),

    # Hell
    6: CurveEntry(135, 8, PatternType.STAGGERED, PatternParams(width=6, height=7)),
    7: CurveEntry(162, 9, PatternType.PYRAMID, PatternParams(size=7)),
    8: CurveEntry(189, 10, PatternType.SPIRAL, PatternParams(turns=4)),
    9: CurveEntry(216, 11, PatternType.RANDOM, PatternParams(density=0.9)),
    10: CurveEntry(240, 12, PatternType.BOSS, PatternParams(size=8)),

    # Nightmare
    11: CurveEntry(261, 13, PatternType.BRICK, PatternParams(width=7, height=8)),
    12: CurveEntry(279, 13, PatternType.PYRAMID, PatternParams(size=8)),
    13: CurveEntry(300, 14, PatternType.SPIRAL, PatternParams(turns=5)),
    14: CurveEntry(315, 14, PatternType.CROSS, PatternParams(size=8)),
    15: CurveEntry(330, 15, PatternType.BOSS, PatternParams(size=9)),

    # Abyss
    16: CurveEntry(345, 15, PatternType.RANDOM, PatternParams(density=1.0)),
    17: CurveEntry(360, 16, PatternType.STAGGERED, PatternParams(width=8, height=9)),
    18: CurveEntry(375, 16, PatternType.SPIRAL, PatternParams(turns=6)),
    19: CurveEntry(390, 17, PatternType.BRICK, PatternParams(width=8, height=9)),
    20: CurveEntry(420, 18, PatternType.BOSS, PatternParams(size=10)),
}

PHASE_RANGES: Dict[LevelPhase, Tuple[int, int]] = {
    LevelPhase.TUTORIAL: (1, 1),
    LevelPhase.STRATEGY: (2, 5),
    LevelPhase.HELL: (6, 10),
    LevelPhase.NIGHTMARE: (11, 15),
    LevelPhase.ABYSS: (16, 20),
}


# =========================================================
# Endless curve: levels 21+
# =========================================================
# Sawtooth over 10 levels: 0.0 = easiest, 1.0 = boss.

SAWTOOTH_PATTERN_10: List[float] = [
    0.0,   # fresh start
    0.1,
    0.2,
    0.35,
    0.45,
    0.55,
    0.7,
    0.85,
    0.75,  # rest before the boss
    1.0,   # boss
]

ENDLESS_TILE_RANGE = (345, 420)
ENDLESS_LAYER_RANGE = (15, 18)

# Non-boss endless levels rotate through these
ENDLESS_ROTATION: List[CurveEntry] = [
    CurveEntry(0, 0, PatternType.RANDOM, PatternParams(density=1.0)),
    CurveEntry(0, 0, PatternType.STAGGERED, PatternParams(width=8, height=9)),
    CurveEntry(0, 0, PatternType.SPIRAL, PatternParams(turns=6)),
    CurveEntry(0, 0, PatternType.BRICK, PatternParams(width=8, height=9)),
    CurveEntry(0, 0, PatternType.DENSE_PILE, PatternParams(size=7)),
    CurveEntry(0, 0, PatternType.CROSS, PatternParams(size=8)),
    CurveEntry(0, 0, PatternType.PYRAMID, PatternParams(size=8)),
    CurveEntry(0, 0, PatternType.SCATTERED_PILE, PatternParams(piles=4)),
]

ENDLESS_BOSS = CurveEntry(0, 0, PatternType.BOSS, PatternParams(size=10))


# =========================================================
# Helpers
# =========================================================

def _check_level_number(level_number: int) -> None:
    if level_number < 1:
        raise ConfigError(f"Level number must be 1 or greater, got {level_number}")


def get_phase_for_level(level_number: int) -> LevelPhase:
    """Return the progression phase of a level."""
    _check_level_number(level_number)
    for phase, (start, end) in PHASE_RANGES.items():
        if start <= level_number <= end:
            return phase
    return LevelPhase.ENDLESS


def is_boss_level(level_number: int) -> bool:
    """Every 10th level is a boss level."""
    return level_number > 0 and level_number % 10 == 0


def _endless_entry(level_number: int) -> CurveEntry:
    """Build the curve entry for a level beyond the hand-tuned table."""
    modifier = SAWTOOTH_PATTERN_10[(level_number - 1) % 10]

    min_tiles, max_tiles = ENDLESS_TILE_RANGE
    tiles = min_tiles + int((max_tiles - min_tiles) * modifier)
    tiles = (tiles // 3) * 3

    min_layers, max_layers = ENDLESS_LAYER_RANGE
    layers = min_layers + round((max_layers - min_layers) * modifier)

    if is_boss_level(level_number):
        template = ENDLESS_BOSS
    else:
        template = ENDLESS_ROTATION[(level_number - 21) % len(ENDLESS_ROTATION)]

    return CurveEntry(tiles, layers, template.pattern, template.params)


def get_curve_entry(level_number: int) -> CurveEntry:
    """Return the curve row for a level."""
    _check_level_number(level_number)
    if level_number in LEVEL_CURVE:
        return LEVEL_CURVE[level_number]
    return _endless_entry(level_number)


def get_level_config(level_number: int) -> LevelConfig:
    """Resolve a level ordinal into generator input."""
    entry = get_curve_entry(level_number)
    return LevelConfig(
        total_tiles=entry.tiles,
        layer_count=entry.layers,
        pattern=entry.pattern.value,
        pattern_params=entry.params,
    )


def get_complete_level_config(level_number: int) -> Dict[str, Any]:
    """
    Full description of a level's generation settings.

    Returns:
        {
            "level_number": 4,
            "phase": "strategy",
            "is_boss_level": False,
            "config": {"total_tiles": 90, "layer_count": 6, "pattern": "spiral", ...},
            "palette": ["carrot", ...],
        }
    """
    config = get_level_config(level_number)
    return {
        "level_number": level_number,
        "phase": get_phase_for_level(level_number).value,
        "is_boss_level": is_boss_level(level_number),
        "config": config.to_dict(),
        "palette": list(DEFAULT_PALETTE),
    }


def generate_level_progression(start_level: int, count: int) -> List[Dict[str, Any]]:
    """Level settings for `count` consecutive levels."""
    return [get_complete_level_config(start_level + i) for i in range(count)]
