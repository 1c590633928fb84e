#!/usr/bin/env python3
"""
Generate boards for a range of levels and write one JSON file per level.

Usage:
    python seed_levels.py [--start N] [--count N] [--seed N] [--output DIR]
"""

import argparse
import json
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.errors import ConfigError, GenerationDeadlock
from app.core.generator import LevelGenerator
from app.models.level import DEFAULT_PALETTE
from app.models.leveling_config import get_complete_level_config, get_level_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


def seed_level(
    generator: LevelGenerator, level_number: int, seed: Optional[int]
) -> Dict[str, Any]:
    """Generate one level and return its persisted form."""
    config = get_level_config(level_number)
    result = generator.generate(config, DEFAULT_PALETTE, seed=seed)
    info = get_complete_level_config(level_number)

    if result.stats.unassigned_count > 0:
        logger.warning(
            f"Level {level_number}: {result.stats.unassigned_count} tiles were "
            f"randomly filled, board may not be solvable"
        )

    return {
        "level_number": level_number,
        "phase": info["phase"],
        "is_boss_level": info["is_boss_level"],
        "config": config.to_dict(),
        "board": result.board.to_dict(),
        "stats": result.stats.to_dict(),
    }


def main():
    parser = argparse.ArgumentParser(description="Generate level boards as JSON files")
    parser.add_argument("--start", type=int, default=1, help="First level number")
    parser.add_argument("--count", type=int, default=20, help="Number of levels")
    parser.add_argument("--seed", type=int, default=None, help="Base seed (level N uses seed + N)")
    parser.add_argument("--output", type=str, default="seeded_levels", help="Output directory")
    args = parser.parse_args()

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    generator = LevelGenerator()
    written = 0
    failed = 0

    for level_number in range(args.start, args.start + args.count):
        seed = args.seed + level_number if args.seed is not None else None
        try:
            data = seed_level(generator, level_number, seed)
        except (ConfigError, GenerationDeadlock) as e:
            logger.error(f"Level {level_number} failed: {e}")
            failed += 1
            continue

        output_file = output_dir / f"level_{level_number:04d}.json"
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        written += 1

        stats = data["stats"]
        logger.info(
            f"Level {level_number}: {len(data['board']['tiles'])} tiles, "
            f"{stats['dig_count']} digs, {stats['match_count']} matches "
            f"-> {output_file}"
        )

    logger.info(f"Done: {written} written, {failed} failed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
