"""Grid geometry helpers shared by the generator and its consumers."""

from __future__ import annotations

from vellum import config
from vellum.types import GridCoord, GridPos

# Axis-aligned neighbour offsets, in the order neighbours are visited.
NEIGHBOR_OFFSETS: tuple[GridPos, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def manhattan_distance(a: GridPos, b: GridPos) -> int:
    """Sum of absolute coordinate differences between two cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def is_in_bounds(x: GridCoord, y: GridCoord, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def clamp_map_size(
    value: int,
    lower: int = config.MIN_MAP_SIZE,
    upper: int = config.MAX_MAP_SIZE,
) -> int:
    """Clamp a requested map dimension to the supported range."""
    return max(lower, min(value, upper))
