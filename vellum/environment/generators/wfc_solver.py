"""Collapse and propagation steps of the Wave Function Collapse solver.

The solver works on a WorldGrid one step at a time:
1. The driver selects the uncollapsed cell with minimum entropy
2. collapse_cell() resolves it to a single terrain (weighted random choice,
   biased towards terrain already present around it)
3. ConstraintPropagator.propagate() narrows the neighbourhood

Propagation is deliberately local. A candidate is kept as long as every
*collapsed* neighbour's adjacency list names it; uncollapsed neighbours impose
nothing until they collapse themselves. This is a partial approximation of arc
consistency, not AC-3, so a cell can collapse into a choice that only a later
step discovers to be a dead end. The driver handles that by restarting.

Compatibility is read from the collapsed neighbour's adjacency list only, so
asymmetric catalogs are honoured exactly as written.
"""

from __future__ import annotations

import logging
from collections import deque

from vellum import config
from vellum.environment.catalogs import WorldCatalog
from vellum.environment.generators.wfc_grid import WorldGrid
from vellum.types import GridCoord, TerrainID
from vellum.util.rng import RNG

logger = logging.getLogger(__name__)


class Contradiction(Exception):
    """Raised when propagation eliminates every possibility for a cell.

    The grid is left partially mutated and must be discarded wholesale.
    """

    def __init__(self, x: GridCoord, y: GridCoord) -> None:
        super().__init__(f"No valid terrain at ({x}, {y}) after propagation")
        self.x = x
        self.y = y


class NoValidOption(Exception):
    """Raised when a freshly selected cell has nothing left to collapse into.

    Propagation raises Contradiction before a cell can reach an empty set, so
    seeing this means the grid invariant was broken.
    """

    pass


def collapse_weights(
    grid: WorldGrid,
    catalog: WorldCatalog,
    x: GridCoord,
    y: GridCoord,
    boost: float = config.CLUSTER_BOOST,
) -> dict[TerrainID, float]:
    """Selection weight of every candidate terrain for a cell.

    Each candidate's catalog weight is multiplied by ``boost`` once for every
    collapsed 4-neighbour that already resolved to the same terrain.
    """
    neighbor_terrain = [
        grid.terrain_at(nx, ny)
        for nx, ny in grid.neighbors(x, y)
        if grid.is_collapsed(nx, ny)
    ]
    return {
        terrain_id: catalog.terrains[terrain_id].weight
        * boost ** neighbor_terrain.count(terrain_id)
        for terrain_id in grid.possibility_list(x, y)
    }


def collapse_cell(
    grid: WorldGrid,
    catalog: WorldCatalog,
    x: GridCoord,
    y: GridCoord,
    rng: RNG,
    boost: float = config.CLUSTER_BOOST,
) -> TerrainID:
    """Resolve one uncollapsed cell to a single terrain.

    Args:
        grid: The grid to modify.
        catalog: Source of terrain weights.
        x: Cell x coordinate.
        y: Cell y coordinate.
        rng: Stream used for the weighted draw.
        boost: Clustering multiplier (see collapse_weights).

    Returns:
        The chosen terrain id.

    Raises:
        NoValidOption: If the candidates' total weight is zero.
    """
    if grid.is_collapsed(x, y):
        raise ValueError(f"Cell ({x}, {y}) is already collapsed")

    weights = collapse_weights(grid, catalog, x, y, boost)
    total = sum(weights.values())
    if total <= 0:
        raise NoValidOption(f"Cell ({x}, {y}) has no weighted candidates left")

    candidates = list(weights)
    selected = rng.choices(candidates, weights=[weights[t] for t in candidates])[0]
    grid.collapse_to(x, y, selected)

    logger.debug(f"Collapsed ({x}, {y}) -> {selected}")
    return selected


class ConstraintPropagator:
    """Keeps a grid locally consistent after each collapse.

    For each terrain we precompute the bitmask of terrain its adjacency list
    allows next to it, so filtering a cell is a handful of bitwise ANDs.
    """

    def __init__(self, grid: WorldGrid, catalog: WorldCatalog) -> None:
        self.grid = grid
        # allowed_masks[bit] = mask of terrain allowed next to terrain_ids[bit]
        self.allowed_masks: list[int] = [
            grid.mask_of(catalog.terrains[terrain_id].adjacent)
            for terrain_id in grid.terrain_ids
        ]

    def allowed_mask(self, x: GridCoord, y: GridCoord) -> int:
        """Mask of terrain every collapsed neighbour of (x, y) allows."""
        grid = self.grid
        allowed = grid.all_terrain_mask
        for nx, ny in grid.neighbors(x, y):
            if grid.is_collapsed(nx, ny):
                allowed &= self.allowed_masks[int(grid.terrain_index[nx, ny])]
        return allowed

    def propagate(self, x: GridCoord, y: GridCoord) -> int:
        """Propagate the consequences of collapsing (x, y).

        Works through a queue seeded with the cell's neighbours. Every
        uncollapsed cell taken from the queue has its possibilities filtered
        against its collapsed neighbours; if the set shrank, that cell's own
        neighbours are queued in turn. Sets only shrink, so the cascade is
        bounded by the grid size.

        Returns:
            Number of cells whose possibility set shrank.

        Raises:
            Contradiction: If a cell is left with no possibilities.
        """
        grid = self.grid
        queue = deque(grid.neighbors(x, y))
        narrowed = 0

        while queue:
            cx, cy = queue.popleft()
            if grid.is_collapsed(cx, cy):
                continue

            current = grid.mask_at(cx, cy)
            remaining = current & self.allowed_mask(cx, cy)
            if remaining == current:
                continue

            grid.restrict(cx, cy, remaining)
            if remaining == 0:
                logger.debug(f"Contradiction at ({cx}, {cy})")
                raise Contradiction(cx, cy)

            narrowed += 1
            queue.extend(grid.neighbors(cx, cy))

        return narrowed
