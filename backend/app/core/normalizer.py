"""Centering and bounds normalization for raw layout coordinates."""
from typing import Dict, List, Optional, Tuple

from ..models.level import CanvasSpec, Tile


def bounding_box(tiles: List[Tile]) -> Optional[Tuple[float, float, float, float]]:
    """Return (min_x, max_x, min_y, max_y) over tile centers, or None."""
    if not tiles:
        return None
    xs = [t.x for t in tiles]
    ys = [t.y for t in tiles]
    return min(xs), max(xs), min(ys), max(ys)


def center_tiles(tiles: List[Tile], canvas: CanvasSpec) -> None:
    """Translate tiles so their bounding box is centered on the focal point."""
    box = bounding_box(tiles)
    if box is None:
        return

    min_x, max_x, min_y, max_y = box
    offset_x = canvas.center_x - (min_x + max_x) / 2
    offset_y = canvas.center_y - (min_y + max_y) / 2

    for tile in tiles:
        tile.x += offset_x
        tile.y += offset_y


def clamp_tiles(tiles: List[Tile], canvas: CanvasSpec) -> None:
    """Pin each coordinate into the safe rectangle (no rescaling)."""
    for tile in tiles:
        tile.x = min(max(tile.x, canvas.safe_min_x), canvas.safe_max_x)
        tile.y = min(max(tile.y, canvas.safe_min_y), canvas.safe_max_y)


def compute_grid_size(tiles: List[Tile], tile_size: float) -> Dict[str, int]:
    """Advisory grid extent of the board in whole tiles."""
    box = bounding_box(tiles)
    if box is None:
        return {"cols": 0, "rows": 0}

    min_x, max_x, min_y, max_y = box
    return {
        "cols": int(round((max_x - min_x) / tile_size)) + 1,
        "rows": int(round((max_y - min_y) / tile_size)) + 1,
    }


def normalize_tiles(tiles: List[Tile], canvas: CanvasSpec) -> Dict[str, int]:
    """
    Center and clamp tiles in place.

    Must run before the occlusion graph is built, since overlap tests use
    the final coordinates.

    Returns:
        Advisory grid size {"cols", "rows"} of the normalized board.
    """
    center_tiles(tiles, canvas)
    clamp_tiles(tiles, canvas)
    return compute_grid_size(tiles, canvas.tile_size)
