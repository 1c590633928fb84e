#!/usr/bin/env python3
"""Generation Benchmark Script.

Generates the same hard configuration many times and reports how often the
assignment engine had to dig before matching.

Usage:
    python benchmark_generation.py [--runs N] [--tiles N] [--layers N] [--pattern NAME]
"""

import argparse
import statistics
import sys
import time
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.generator import LevelGenerator
from app.models.level import DEFAULT_PALETTE, LevelConfig, PatternParams

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# Minimum average share of digs for a hard board
MIN_DELAYED_MATCH_RATIO = 0.1


def main():
    parser = argparse.ArgumentParser(description="Benchmark the solvable assignment engine")
    parser.add_argument("--runs", type=int, default=10, help="Number of generations")
    parser.add_argument("--tiles", type=int, default=210, help="Total tiles")
    parser.add_argument("--layers", type=int, default=20, help="Layer count")
    parser.add_argument("--pattern", type=str, default="dense_pile", help="Layout pattern")
    parser.add_argument("--size", type=int, default=6, help="Pattern size parameter")
    parser.add_argument("--seed", type=int, default=None, help="Base seed (run i uses seed + i)")
    args = parser.parse_args()

    config = LevelConfig(
        total_tiles=args.tiles,
        layer_count=args.layers,
        pattern=args.pattern,
        pattern_params=PatternParams(size=args.size),
    )
    generator = LevelGenerator()

    logger.info(
        f"Benchmarking {args.runs} runs: {config.target_tiles} tiles, "
        f"{config.layer_count} layers, {config.pattern}"
    )

    digs, matches, unassigned, ratios, times = [], [], [], [], []
    start = time.time()

    for i in range(args.runs):
        seed = args.seed + i if args.seed is not None else None
        result = generator.generate(config, DEFAULT_PALETTE, seed=seed)
        stats = result.stats

        digs.append(stats.dig_count)
        matches.append(stats.match_count)
        unassigned.append(stats.unassigned_count)
        ratios.append(stats.delayed_match_ratio)
        times.append(result.generation_time_ms)

    total_time = time.time() - start
    avg_ratio = statistics.mean(ratios)

    print("\n" + "=" * 60)
    print("GENERATION BENCHMARK")
    print("=" * 60)
    print(f"  Runs:                 {args.runs}")
    print(f"  Avg digs:             {statistics.mean(digs):.2f}")
    print(f"  Avg matches:          {statistics.mean(matches):.2f}")
    print(f"  Avg unassigned tiles: {statistics.mean(unassigned):.2f}")
    print(f"  Delayed match ratio:  {avg_ratio:.2%}")
    print(f"  Avg generation time:  {statistics.mean(times):.1f}ms")
    print(f"  Total time:           {total_time:.2f}s")
    print("=" * 60)

    if avg_ratio > MIN_DELAYED_MATCH_RATIO:
        logger.info(
            f"SUCCESS: delayed match ratio {avg_ratio:.2%} is above "
            f"{MIN_DELAYED_MATCH_RATIO:.0%}, boards need look-ahead"
        )
    else:
        logger.warning(
            f"WARNING: delayed match ratio {avg_ratio:.2%} is at or below "
            f"{MIN_DELAYED_MATCH_RATIO:.0%}, boards may be too easy"
        )

    if sum(unassigned) > 0:
        logger.warning(f"{sum(unassigned)} tiles needed random cleanup across all runs")

    return 0


if __name__ == "__main__":
    sys.exit(main())
