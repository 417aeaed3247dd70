"""Location placement layer.

Drops points of interest onto the finished terrain. Each location kind may
restrict the terrain it sits on and the terrain it needs next to it, and no
two locations may be closer than MIN_LOCATION_SPACING (Manhattan distance).

Kinds are placed scarcest-first: the kind with the fewest valid cells goes
first so that rare-fit kinds are not crowded out by generic ones. Placement
is best-effort. A kind with no valid cell is skipped, and a world with no
locations at all is still a valid world.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vellum import config
from vellum.environment.catalogs import LocationKind
from vellum.environment.generators.pipeline.layer import GenerationLayer
from vellum.environment.generators.wfc_grid import WorldGrid
from vellum.types import GridCoord, GridPos, LocationID
from vellum.util.coordinates import manhattan_distance
from vellum.util.rng import RNG

if TYPE_CHECKING:
    from vellum.environment.generators.pipeline.context import GenerationContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedLocation:
    """A location kind pinned to a grid cell."""

    x: GridCoord
    y: GridCoord
    kind: LocationKind

    @property
    def position(self) -> GridPos:
        return (self.x, self.y)

    @property
    def kind_id(self) -> LocationID:
        return self.kind.id


class LocationPlacer(GenerationLayer):
    """Places each location kind at most once on a collapsed grid."""

    description = "Placing locations"

    def __init__(
        self,
        locations: Sequence[LocationKind],
        min_spacing: int = config.MIN_LOCATION_SPACING,
    ) -> None:
        """Initialize the placer.

        Args:
            locations: Location kinds to try, in catalog order.
            min_spacing: Minimum Manhattan distance between placed locations.
        """
        self.locations = tuple(locations)
        self.min_spacing = min_spacing

    def apply(self, ctx: GenerationContext) -> None:
        ctx.locations.extend(self.place(ctx.grid, ctx.rng, ctx.locations))

    def place(
        self,
        grid: WorldGrid,
        rng: RNG,
        placed: Sequence[PlacedLocation] = (),
    ) -> list[PlacedLocation]:
        """Place as many location kinds as the terrain allows.

        Args:
            grid: A fully collapsed grid.
            rng: Stream used to pick among valid cells.
            placed: Locations already on the map; they occupy their cells
                and count towards spacing.

        Returns:
            The newly placed locations, in placement order.

        Raises:
            RuntimeError: If the grid still has uncollapsed cells.
        """
        if not grid.is_complete():
            raise RuntimeError("Locations can only be placed on a collapsed grid")

        occupied = {location.position for location in placed}
        candidates = [pos for pos in grid.positions() if pos not in occupied]
        existing = list(placed)

        # Stable sort keeps catalog order among equally scarce kinds.
        ordered = sorted(
            self.locations,
            key=lambda kind: len(self.valid_spots(grid, kind, candidates, existing)),
        )

        new_locations: list[PlacedLocation] = []
        for kind in ordered:
            spots = self.valid_spots(grid, kind, candidates, existing)
            if not spots:
                logger.debug(f"No valid spot for location {kind.id!r}; skipping")
                continue

            x, y = spots[rng.randrange(len(spots))]
            location = PlacedLocation(x, y, kind)
            existing.append(location)
            new_locations.append(location)
            candidates.remove((x, y))
            logger.debug(f"Placed {kind.display_name} at ({x}, {y})")

        return new_locations

    def valid_spots(
        self,
        grid: WorldGrid,
        kind: LocationKind,
        candidates: Sequence[GridPos],
        placed: Sequence[PlacedLocation],
    ) -> list[GridPos]:
        return [
            (x, y)
            for x, y in candidates
            if self.is_valid_spot(grid, x, y, kind, placed)
        ]

    def is_valid_spot(
        self,
        grid: WorldGrid,
        x: GridCoord,
        y: GridCoord,
        kind: LocationKind,
        placed: Sequence[PlacedLocation],
    ) -> bool:
        """Check terrain, neighbour and spacing rules for one cell."""
        if kind.allowed_terrain is not None and (
            grid.terrain_at(x, y) not in kind.allowed_terrain
        ):
            return False

        if kind.required_adjacent:
            neighbor_terrain = {
                grid.terrain_at(nx, ny)
                for nx, ny in grid.neighbors(x, y)
                if grid.is_collapsed(nx, ny)
            }
            if not kind.required_adjacent <= neighbor_terrain:
                return False

        return all(
            manhattan_distance((x, y), location.position) >= self.min_spacing
            for location in placed
        )
