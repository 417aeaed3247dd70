"""The mutable cell matrix used by the Wave Function Collapse solver.

Performance notes:
    Each cell's possibilities are stored as a uint64 bitmask in a numpy array.
    Bit i set means terrain ``terrain_ids[i]`` is still possible. Set
    operations become bitwise operations (& for intersection) and entropy is
    a vectorized popcount over the whole grid.

    Arrays are indexed ``[x, y]`` with shape ``(width, height)``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from vellum.environment.catalogs import (
    MAX_TERRAIN_KINDS,
    ConfigurationError,
    WorldCatalog,
)
from vellum.types import GridCoord, GridPos, TerrainID
from vellum.util.coordinates import NEIGHBOR_OFFSETS, is_in_bounds
from vellum.util.rng import RNG

_NO_TERRAIN = -1


@dataclass(frozen=True)
class Cell:
    """Read-only snapshot of one grid cell.

    Attributes:
        x: Column.
        y: Row.
        possibilities: Terrain ids still possible for this cell.
        collapsed: True once the solver has resolved the cell.
        terrain: The resolved terrain id, or None while uncollapsed.
    """

    x: GridCoord
    y: GridCoord
    possibilities: frozenset[TerrainID]
    collapsed: bool
    terrain: TerrainID | None

    @property
    def position(self) -> GridPos:
        return (self.x, self.y)


class WorldGrid:
    """Width x height matrix of cells and their possibility sets.

    Invariant: outside of a contradiction every cell has at least one
    possibility, and a collapsed cell has exactly one, equal to its terrain.

    Only the collapse operator, the constraint propagator and template
    pre-seeding mutate a grid. A grid that saw a contradiction is discarded.
    """

    def __init__(
        self, width: int, height: int, terrain_ids: Sequence[TerrainID]
    ) -> None:
        """Allocate a grid where every cell may still be any terrain.

        Args:
            width: Grid width in cells.
            height: Grid height in cells.
            terrain_ids: Terrain ids in catalog order. Bit i of a possibility
                mask refers to ``terrain_ids[i]``.

        Raises:
            ConfigurationError: If a dimension or the terrain list is empty,
                or if there are more terrain kinds than a mask can hold.
        """
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        if len(terrain_ids) <= 0:
            raise ConfigurationError("Cannot build a grid without terrain kinds")
        if len(terrain_ids) > MAX_TERRAIN_KINDS:
            raise ConfigurationError(
                f"At most {MAX_TERRAIN_KINDS} terrain kinds are supported, "
                f"got {len(terrain_ids)}"
            )

        self.width = width
        self.height = height
        self.terrain_ids: tuple[TerrainID, ...] = tuple(terrain_ids)
        self.terrain_to_bit: dict[TerrainID, int] = {
            terrain_id: i for i, terrain_id in enumerate(self.terrain_ids)
        }

        # Initial mask with all terrain possible (e.g., 0b11111 for 5 kinds)
        self.all_terrain_mask = (1 << len(self.terrain_ids)) - 1

        self.wave = np.full((width, height), self.all_terrain_mask, dtype=np.uint64)
        self.collapsed = np.zeros((width, height), dtype=bool)
        # Bit index of the resolved terrain, -1 while uncollapsed.
        self.terrain_index = np.full((width, height), _NO_TERRAIN, dtype=np.int16)
        # Step number at which each cell collapsed, -1 while uncollapsed.
        self.collapse_order = np.full((width, height), -1, dtype=np.int32)
        self._collapse_counter = 0

    @classmethod
    def initialize(cls, width: int, height: int, catalog: WorldCatalog) -> WorldGrid:
        """Create a fresh grid for ``catalog``'s terrain kinds."""
        return cls(width, height, catalog.terrain_ids)

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def in_bounds(self, x: GridCoord, y: GridCoord) -> bool:
        return is_in_bounds(x, y, self.width, self.height)

    def neighbors(self, x: GridCoord, y: GridCoord) -> list[GridPos]:
        """Return the up-to-4 axis-aligned neighbours that lie on the grid."""
        return [
            (x + dx, y + dy)
            for dx, dy in NEIGHBOR_OFFSETS
            if self.in_bounds(x + dx, y + dy)
        ]

    def positions(self) -> Iterator[GridPos]:
        """Iterate every cell position row by row."""
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    # -------------------------------------------------------------------------
    # Possibility masks
    # -------------------------------------------------------------------------

    def mask_of(self, terrain_ids: Iterable[TerrainID]) -> int:
        """Convert terrain ids to a possibility bitmask.

        Raises:
            ConfigurationError: If an id is not part of this grid's catalog.
        """
        mask = 0
        for terrain_id in terrain_ids:
            try:
                mask |= 1 << self.terrain_to_bit[terrain_id]
            except KeyError:
                raise ConfigurationError(
                    f"Unknown terrain id {terrain_id!r}"
                ) from None
        return mask

    def ids_of(self, mask: int) -> list[TerrainID]:
        """Convert a bitmask back to terrain ids, in catalog order."""
        return [
            terrain_id
            for bit, terrain_id in enumerate(self.terrain_ids)
            if mask & (1 << bit)
        ]

    def mask_at(self, x: GridCoord, y: GridCoord) -> int:
        return int(self.wave[x, y])

    def possibilities(self, x: GridCoord, y: GridCoord) -> frozenset[TerrainID]:
        return frozenset(self.ids_of(self.mask_at(x, y)))

    def possibility_list(self, x: GridCoord, y: GridCoord) -> list[TerrainID]:
        """Possibilities in catalog order, for deterministic weighted draws."""
        return self.ids_of(self.mask_at(x, y))

    def set_possibilities(
        self, x: GridCoord, y: GridCoord, terrain_ids: Iterable[TerrainID]
    ) -> None:
        """Overwrite a cell's possibility set without collapsing it."""
        self.wave[x, y] = self.mask_of(terrain_ids)

    def restrict(self, x: GridCoord, y: GridCoord, mask: int) -> None:
        """Store an already computed possibility mask for a cell."""
        self.wave[x, y] = mask

    # -------------------------------------------------------------------------
    # Collapse state
    # -------------------------------------------------------------------------

    def is_collapsed(self, x: GridCoord, y: GridCoord) -> bool:
        return bool(self.collapsed[x, y])

    def terrain_at(self, x: GridCoord, y: GridCoord) -> TerrainID | None:
        index = int(self.terrain_index[x, y])
        if index == _NO_TERRAIN:
            return None
        return self.terrain_ids[index]

    def collapse_to(self, x: GridCoord, y: GridCoord, terrain_id: TerrainID) -> None:
        """Resolve a cell to a single terrain."""
        bit = self.terrain_to_bit[terrain_id]
        self.wave[x, y] = 1 << bit
        self.collapsed[x, y] = True
        self.terrain_index[x, y] = bit
        self.collapse_order[x, y] = self._collapse_counter
        self._collapse_counter += 1

    def collapsed_count(self) -> int:
        return int(np.count_nonzero(self.collapsed))

    def is_complete(self) -> bool:
        return bool(self.collapsed.all())

    # -------------------------------------------------------------------------
    # Entropy
    # -------------------------------------------------------------------------

    def entropy(self, x: GridCoord, y: GridCoord) -> int:
        """Number of remaining candidate terrain ids for a cell."""
        return self.mask_at(x, y).bit_count()

    def entropy_map(self) -> np.ndarray:
        """Vectorized popcount of every cell's possibility mask."""
        return np.bitwise_count(self.wave)

    def select_lowest_entropy_cell(self, rng: RNG) -> GridPos | None:
        """Pick an uncollapsed cell with the fewest possibilities.

        Ties are broken uniformly at random using ``rng``.

        Returns:
            The chosen (x, y), or None when every cell is collapsed.
        """
        open_cells = ~self.collapsed
        if not open_cells.any():
            return None

        entropy = self.entropy_map()
        lowest = entropy[open_cells].min()
        # argwhere yields candidates in x-major order, which keeps the
        # tie-break draw deterministic for a given rng state.
        candidates = np.argwhere(open_cells & (entropy == lowest))
        x, y = candidates[rng.randrange(len(candidates))]
        return (int(x), int(y))

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def cell(self, x: GridCoord, y: GridCoord) -> Cell:
        return Cell(
            x=x,
            y=y,
            possibilities=self.possibilities(x, y),
            collapsed=self.is_collapsed(x, y),
            terrain=self.terrain_at(x, y),
        )

    def cells(self) -> Iterator[Cell]:
        for x, y in self.positions():
            yield self.cell(x, y)

    def terrain_columns(self) -> tuple[tuple[TerrainID | None, ...], ...]:
        """Resolved terrain as an x-major tuple of columns."""
        return tuple(
            tuple(self.terrain_at(x, y) for y in range(self.height))
            for x in range(self.width)
        )

    def __repr__(self) -> str:
        return (
            f"WorldGrid({self.width}x{self.height}, "
            f"collapsed={self.collapsed_count()}/{self.width * self.height})"
        )
