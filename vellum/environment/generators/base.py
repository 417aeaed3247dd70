"""Immutable output of a finished world generation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vellum.types import GridCoord, RandomSeed, TerrainID

if TYPE_CHECKING:
    from .pipeline.layers.connectivity import ConnectivityGraph
    from .pipeline.layers.locations import PlacedLocation


@dataclass(frozen=True)
class GeneratedWorld:
    """Everything a finished generation hands to its consumers.

    Renderers, the travel pathfinder and the economy only ever read this.

    Attributes:
        seed: Master seed the world was generated from.
        width: Grid width in cells.
        height: Grid height in cells.
        terrain: Resolved terrain id per cell, x-major (``terrain[x][y]``).
        collapse_order: Solver step at which each cell collapsed, x-major.
        locations: Placed locations in placement order.
        connections: Travel network keyed by index into ``locations``.
        restarts: Full grid restarts needed before success.
        steps: Collapse steps taken by the successful attempt.
    """

    seed: RandomSeed
    width: int
    height: int
    terrain: tuple[tuple[TerrainID, ...], ...]
    collapse_order: tuple[tuple[int, ...], ...]
    locations: tuple[PlacedLocation, ...]
    connections: ConnectivityGraph
    restarts: int = 0
    steps: int = 0

    def terrain_at(self, x: GridCoord, y: GridCoord) -> TerrainID:
        return self.terrain[x][y]

    def terrain_counts(self) -> Counter[TerrainID]:
        return Counter(terrain for column in self.terrain for terrain in column)

    def rows(self) -> list[list[TerrainID]]:
        """Terrain as a y-major list of rows, convenient for printing."""
        return [
            [self.terrain[x][y] for x in range(self.width)]
            for y in range(self.height)
        ]
