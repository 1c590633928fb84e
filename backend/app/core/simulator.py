"""Level simulation engine with dock-based triple matching.

Game rules (shared with the client):
- a tile can be clicked while no overlapping higher-layer tile remains
  on the board;
- a clicked tile moves into the dock (7 slots by default);
- three tiles of the same type in the dock clear immediately;
- the game is lost when the dock is full after a click without a match.
"""
import random
import statistics
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from ..config import get_settings
from ..models.level import (
    BoardTile,
    ReplayResult,
    SimulationResult,
    SolutionStep,
    StepAction,
    Tile,
)
from .occlusion import BlockerTracker, OcclusionGraph

# Working tiles or the frozen tiles of a finished board
AnyTile = Union[Tile, BoardTile]


class SimulationStrategy(str, Enum):
    """Simulation strategy enumeration."""
    RANDOM = "random"
    GREEDY = "greedy"


@dataclass
class GameState:
    """Represents the current state of a simulated game."""
    tiles: Sequence[AnyTile]
    graph: OcclusionGraph
    tracker: BlockerTracker
    dock: List[int] = field(default_factory=list)  # handles currently in the dock
    dock_max_size: int = 7
    moves_used: int = 0
    tiles_cleared: int = 0
    peak_dock: int = 0
    cleared: bool = False
    failed: bool = False
    failure_reason: Optional[str] = None

    def fail(self, reason: str) -> None:
        self.failed = True
        self.failure_reason = reason


class LevelSimulator:
    """Plays finished boards under the triple-match rules."""

    def __init__(self, slot_capacity: Optional[int] = None, tile_size: Optional[float] = None):
        settings = get_settings()
        self.slot_capacity = slot_capacity or settings.slot_capacity
        self.tile_size = tile_size or settings.tile_size

    def replay(self, tiles: Sequence[AnyTile], click_order: Sequence[str]) -> ReplayResult:
        """
        Click tiles in a fixed order and report whether the board clears.

        Args:
            tiles: Finished, fully typed board tiles.
            click_order: Tile ids in click order.

        Returns:
            ReplayResult with the outcome and peak dock usage.
        """
        state = self._create_initial_state(tiles)
        handles = {t.id: i for i, t in enumerate(tiles)}

        for tile_id in click_order:
            handle = handles.get(tile_id)
            if handle is None:
                state.fail(f"Unknown tile id '{tile_id}'")
                break
            self._apply_click(state, handle)
            if state.failed:
                break

        return self._finish(state)

    def replay_solution(
        self, tiles: Sequence[AnyTile], solution: Sequence[SolutionStep]
    ) -> ReplayResult:
        """
        Play a DIG/MATCH trace as a player who only digs or matches visible triples.

        A DIG clicks one reachable tile into the dock. A MATCH names three
        tiles; each must already be taken or be reachable when the step
        starts, and the untaken ones are clicked in order.

        Args:
            tiles: Finished, fully typed board tiles.
            solution: Steps recorded by the assignment engine.

        Returns:
            ReplayResult; fails on the first step that breaks the rules.
        """
        state = self._create_initial_state(tiles)
        handles = {t.id: i for i, t in enumerate(tiles)}

        for step in solution:
            unknown = [tile_id for tile_id in step.tile_ids if tile_id not in handles]
            if unknown:
                state.fail(f"Unknown tile id '{unknown[0]}'")
                break

            step_handles = [handles[tile_id] for tile_id in step.tile_ids]
            to_click = step_handles
            if step.action == StepAction.MATCH:
                to_click = [h for h in step_handles if not state.tracker.resolved[h]]
                covered = [h for h in to_click if not state.tracker.is_free(h)]
                if covered:
                    state.fail(f"Match needs covered tile {tiles[covered[0]].id}")
                    break

            for handle in to_click:
                self._apply_click(state, handle)
                if state.failed:
                    break
            if state.failed:
                break

        return self._finish(state)

    def simulate(
        self,
        tiles: Sequence[AnyTile],
        iterations: int = 100,
        strategy: str = "greedy",
        seed: Optional[int] = None,
    ) -> SimulationResult:
        """
        Run Monte Carlo simulation on a board.

        Args:
            tiles: Finished, fully typed board tiles.
            iterations: Number of simulation runs.
            strategy: Strategy to use (random/greedy).
            seed: Base seed; run i uses seed + i.

        Returns:
            SimulationResult with statistics.
        """
        strategy_enum = SimulationStrategy(strategy)
        graph = OcclusionGraph.build(tiles, self.tile_size)
        rng = random.Random()
        results: List[GameState] = []

        for i in range(iterations):
            if seed is not None:
                rng.seed(seed + i)
            state = self._create_initial_state(tiles, graph)
            self._play_game(state, strategy_enum, rng)
            results.append(state)

        cleared_count = sum(1 for r in results if r.cleared)
        moves_list = [r.moves_used for r in results]

        return SimulationResult(
            clear_rate=cleared_count / len(results) if results else 0.0,
            avg_moves=statistics.mean(moves_list) if moves_list else 0,
            min_moves=min(moves_list) if moves_list else 0,
            max_moves=max(moves_list) if moves_list else 0,
            iterations=iterations,
            strategy=strategy_enum.value,
        )

    def _create_initial_state(
        self, tiles: Sequence[AnyTile], graph: Optional[OcclusionGraph] = None
    ) -> GameState:
        """Create initial game state for a board."""
        if graph is None:
            graph = OcclusionGraph.build(tiles, self.tile_size)
        return GameState(
            tiles=tiles,
            graph=graph,
            tracker=graph.tracker(),
            dock_max_size=self.slot_capacity,
        )

    def _play_game(self, state: GameState, strategy: SimulationStrategy, rng: random.Random) -> None:
        """Play until the board clears or the dock overflows."""
        while not state.failed:
            if state.tiles_cleared == len(state.tiles):
                state.cleared = True
                break
            clickable = state.tracker.free_handles()
            if not clickable:
                state.fail("No reachable tiles left")
                break
            handle = self._select_move(state, clickable, strategy, rng)
            self._apply_click(state, handle)

    def _select_move(
        self,
        state: GameState,
        clickable: List[int],
        strategy: SimulationStrategy,
        rng: random.Random,
    ) -> int:
        """Pick the next tile to click."""
        if strategy == SimulationStrategy.RANDOM:
            return rng.choice(clickable)

        tiles = state.tiles
        dock_counts = Counter(tiles[h].type for h in state.dock)
        by_type: Dict[str, List[int]] = {}
        for handle in clickable:
            by_type.setdefault(tiles[handle].type, []).append(handle)

        # 1. Finish a triple that is fully visible
        completable = [
            t for t, handles in by_type.items()
            if dock_counts[t] + len(handles) >= 3
        ]
        if completable:
            best = max(completable, key=lambda t: (dock_counts[t], len(by_type[t])))
            return rng.choice(by_type[best])

        # 2. Build on a type already waiting in the dock
        for tile_type, _ in dock_counts.most_common():
            if tile_type in by_type:
                return rng.choice(by_type[tile_type])

        # 3. Dig: uncover as much as possible
        return max(clickable, key=lambda h: (state.graph.out_degree(h), -h))

    def _apply_click(self, state: GameState, handle: int) -> None:
        """Apply one click. Marks the state failed on an illegal click."""
        tile = state.tiles[handle]
        if state.tracker.resolved[handle]:
            state.fail(f"Tile {tile.id} was already taken")
            return
        if not state.tracker.is_free(handle):
            state.fail(f"Tile {tile.id} is still covered")
            return
        if len(state.dock) >= state.dock_max_size:
            state.fail("Dock is full")
            return

        state.tracker.resolve(handle)
        state.dock.append(handle)
        state.moves_used += 1
        state.peak_dock = max(state.peak_dock, len(state.dock))

        self._process_dock_matches(state)

        if len(state.dock) >= state.dock_max_size:
            state.fail("Dock is full")

    def _process_dock_matches(self, state: GameState) -> None:
        """Clear three tiles of any type that reached a triple."""
        counts = Counter(state.tiles[h].type for h in state.dock)
        for tile_type, count in counts.items():
            if count >= 3:
                matched = [h for h in state.dock if state.tiles[h].type == tile_type][:3]
                state.dock = [h for h in state.dock if h not in matched]
                state.tiles_cleared += 3
                return

    def _finish(self, state: GameState) -> ReplayResult:
        remaining = len(state.tiles) - state.tiles_cleared
        if not state.failed:
            if remaining == 0:
                state.cleared = True
            else:
                state.fail(f"Click order ended with {remaining} tiles not cleared")

        return ReplayResult(
            cleared=state.cleared,
            moves_used=state.moves_used,
            tiles_cleared=state.tiles_cleared,
            peak_slot_usage=state.peak_dock,
            failure_reason=state.failure_reason,
        )


# Singleton instance
_simulator = None


def get_simulator() -> LevelSimulator:
    """Get or create simulator singleton instance."""
    global _simulator
    if _simulator is None:
        _simulator = LevelSimulator()
    return _simulator
