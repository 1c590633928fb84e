"""Occlusion (blocking) graph over a tile arena.

Tile A blocks tile B when A sits on a higher layer and their square
footprints overlap on both axes. Handles are list indices into the tile
arena; adjacency and blocker counters are flat lists indexed by handle.
"""
from typing import Iterator, List, Sequence, Tuple

from ..models.level import Tile


def overlaps(ax: float, ay: float, bx: float, by: float, tile_size: float) -> bool:
    """Footprint overlap test shared by the generator and the simulator."""
    return abs(ax - bx) < tile_size and abs(ay - by) < tile_size


class OcclusionGraph:
    """Immutable blocks-relation built once per run."""

    def __init__(self, blocking: List[List[int]], blocked_by: List[List[int]]):
        self.blocking = blocking      # handle -> handles it covers
        self.blocked_by = blocked_by  # handle -> handles covering it

    @classmethod
    def build(cls, tiles: Sequence[Tile], tile_size: float) -> "OcclusionGraph":
        """Compare every pair once; edges point from higher to lower layer."""
        n = len(tiles)
        blocking: List[List[int]] = [[] for _ in range(n)]
        blocked_by: List[List[int]] = [[] for _ in range(n)]

        xs = [t.x for t in tiles]
        ys = [t.y for t in tiles]
        layers = [t.layer for t in tiles]

        for i in range(n):
            xi, yi, li = xs[i], ys[i], layers[i]
            for j in range(i + 1, n):
                lj = layers[j]
                if li == lj:
                    continue
                if not overlaps(xi, yi, xs[j], ys[j], tile_size):
                    continue
                if li > lj:
                    blocking[i].append(j)
                    blocked_by[j].append(i)
                else:
                    blocking[j].append(i)
                    blocked_by[i].append(j)

        return cls(blocking, blocked_by)

    def __len__(self) -> int:
        return len(self.blocking)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.blocking)

    def out_degree(self, handle: int) -> int:
        return len(self.blocking[handle])

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield (blocker, blocked) pairs."""
        for blocker, targets in enumerate(self.blocking):
            for blocked in targets:
                yield blocker, blocked

    def tracker(self) -> "BlockerTracker":
        """Fresh live counters for one simulated play-through."""
        return BlockerTracker(self)


class BlockerTracker:
    """Live remaining-blocker counters, updated incrementally."""

    def __init__(self, graph: OcclusionGraph):
        self.graph = graph
        self.remaining = [len(b) for b in graph.blocked_by]
        self.resolved = [False] * len(graph)
        self.blocked_count = sum(1 for c in self.remaining if c > 0)

    def is_free(self, handle: int) -> bool:
        return self.remaining[handle] == 0

    def free_handles(self) -> List[int]:
        """Unresolved handles with no remaining blockers."""
        return [
            h for h, count in enumerate(self.remaining)
            if count == 0 and not self.resolved[h]
        ]

    def resolve(self, handle: int) -> List[int]:
        """
        Mark a tile as taken off the board and release what it covered.

        Returns:
            Handles whose blocker count just reached zero.
        """
        if self.resolved[handle]:
            return []
        self.resolved[handle] = True

        freed = []
        for blocked in self.graph.blocking[handle]:
            if self.remaining[blocked] > 0:
                self.remaining[blocked] -= 1
                if self.remaining[blocked] == 0:
                    self.blocked_count -= 1
                    freed.append(blocked)
        return freed
