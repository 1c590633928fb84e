"""Solvable type assignment by simulated play-through.

Types are not drawn up front. The engine plays the board forward under
the game rules, with tiles still untyped: it either DIGs a reachable tile
into the buffer, or MATCHes three tiles (buffer first, then reachable
tiles) and only then gives the group a type. Each group is cleared at the
moment it is typed, so the recorded play-through is a valid clearing
order for the finished board.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from ..models.level import (
    EngineSpec,
    GenerationStats,
    SolutionStep,
    StepAction,
    Tile,
)
from .errors import GenerationDeadlock
from .occlusion import BlockerTracker, OcclusionGraph

logger = logging.getLogger(__name__)

GROUP_SIZE = 3


@dataclass
class AssignmentOutcome:
    """Stats and solution trace of one assignment run."""
    stats: GenerationStats
    solution: List[SolutionStep] = field(default_factory=list)
    resolution_order: List[str] = field(default_factory=list)


class SolvableAssigner:
    """Assigns palette types so that a clearing order is guaranteed."""

    def __init__(self, spec: Optional[EngineSpec] = None):
        self.spec = spec or EngineSpec()

    def assign(
        self,
        tiles: Sequence[Tile],
        graph: OcclusionGraph,
        palette: Sequence[str],
        rng: random.Random,
    ) -> AssignmentOutcome:
        """
        Type every tile in place.

        Args:
            tiles: Tile arena; tiles must be untyped.
            graph: Occlusion graph built from the final positions.
            palette: Non-empty list of type names.
            rng: Random source for this run.

        Returns:
            AssignmentOutcome with stats, solution steps and resolution order.

        Raises:
            GenerationDeadlock: If no tile can be reached while some are still
                untyped, or the iteration cap is exceeded.
        """
        total = len(tiles)
        capacity = self.spec.buffer_capacity
        tracker = graph.tracker()
        frontier: Set[int] = set(tracker.free_handles())
        buffer: List[int] = []

        stats = GenerationStats(occlusion_edges=graph.edge_count)
        outcome = AssignmentOutcome(stats=stats)

        assigned_count = 0
        max_steps = 2 * total + 16
        steps = 0

        while assigned_count < total:
            steps += 1
            if steps > max_steps:
                raise GenerationDeadlock(
                    f"Assignment exceeded {max_steps} steps "
                    f"({assigned_count}/{total} tiles assigned)",
                    assigned=assigned_count,
                    total=total,
                )

            clickable = sorted(frontier)
            action = self._choose_action(buffer, clickable, tracker, rng)

            # Never under-fill a group while the board can still be opened up
            if (
                action == StepAction.MATCH
                and clickable
                and len(buffer) + len(clickable) < GROUP_SIZE
                and len(buffer) < capacity
            ):
                action = StepAction.DIG

            if action == StepAction.DIG:
                handle = self._pick_dig_target(clickable, graph, rng)
                frontier.discard(handle)
                buffer.append(handle)
                frontier.update(tracker.resolve(handle))

                stats.dig_count += 1
                outcome.solution.append(SolutionStep(StepAction.DIG, (tiles[handle].id,)))
                outcome.resolution_order.append(tiles[handle].id)
                continue

            group = self._collect_group(buffer, clickable, frontier, tracker, tiles, outcome, rng)
            if not group:
                # Nothing reachable, nothing buffered, tiles still untyped
                raise GenerationDeadlock(
                    f"No reachable tiles with {total - assigned_count} tiles unassigned "
                    f"({assigned_count}/{total} tiles assigned)",
                    assigned=assigned_count,
                    total=total,
                )

            tile_type = rng.choice(palette)
            for handle in group:
                tiles[handle].type = tile_type
            assigned_count += len(group)
            stats.match_count += 1
            outcome.solution.append(
                SolutionStep(StepAction.MATCH, tuple(tiles[h].id for h in group), tile_type)
            )

        stats.unassigned_count = self._cleanup(tiles, palette, rng)
        return outcome

    def _choose_action(
        self,
        buffer: List[int],
        clickable: List[int],
        tracker: BlockerTracker,
        rng: random.Random,
    ) -> StepAction:
        """Pick DIG or MATCH for the next step."""
        if len(buffer) >= self.spec.buffer_capacity:
            return StepAction.MATCH
        if not clickable:
            return StepAction.MATCH
        # Digging only pays off while something is still covered
        if tracker.blocked_count > 0 and rng.random() < self.spec.dig_probability:
            return StepAction.DIG
        return StepAction.MATCH

    def _pick_dig_target(
        self, clickable: List[int], graph: OcclusionGraph, rng: random.Random
    ) -> int:
        """Random choice among the reachable tiles that cover the most others."""
        ranked = sorted(clickable, key=lambda h: (-graph.out_degree(h), h))
        candidates = ranked[: self.spec.dig_candidates]
        return rng.choice(candidates)

    def _collect_group(
        self,
        buffer: List[int],
        clickable: List[int],
        frontier: Set[int],
        tracker: BlockerTracker,
        tiles: Sequence[Tile],
        outcome: AssignmentOutcome,
        rng: random.Random,
    ) -> List[int]:
        """Drain the buffer (most recent first), then pull reachable tiles."""
        group: List[int] = []
        while len(group) < GROUP_SIZE and buffer:
            group.append(buffer.pop())

        pool = list(clickable)
        while len(group) < GROUP_SIZE and pool:
            handle = pool.pop(rng.randrange(len(pool)))
            frontier.discard(handle)
            frontier.update(tracker.resolve(handle))
            outcome.resolution_order.append(tiles[handle].id)
            group.append(handle)

        return group

    def _cleanup(self, tiles: Sequence[Tile], palette: Sequence[str], rng: random.Random) -> int:
        """Give any untyped tile a random type; returns how many needed it."""
        unassigned = [t for t in tiles if t.type is None]
        if unassigned:
            logger.warning(
                "Cleanup: %d tiles were unassigned. Randomly filling.", len(unassigned)
            )
            for tile in unassigned:
                tile.type = rng.choice(palette)
        return len(unassigned)
