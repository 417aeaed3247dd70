"""Generation context for the post-collapse layers.

The GenerationContext is a mutable container holding the collapsed grid and
everything derived from it. Each layer receives the same context and modifies
it in place; the driver freezes it into a GeneratedWorld at the end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vellum.environment.catalogs import WorldCatalog
from vellum.environment.generators.base import GeneratedWorld
from vellum.environment.generators.wfc_grid import WorldGrid
from vellum.types import RandomSeed
from vellum.util.rng import RNG

from .layers.connectivity import ConnectivityGraph

if TYPE_CHECKING:
    from .layers.locations import PlacedLocation


@dataclass
class GenerationContext:
    """Mutable state container passed through the post-collapse layers.

    Attributes:
        grid: The fully collapsed terrain grid.
        catalog: World content the grid was generated from.
        rng: The generation stream; layers draw from it in order.
        seed: Master seed, carried through to the output.
        locations: Placed locations, in placement order.
        connections: Travel network over ``locations``.
        restarts: Restarts the driver needed, carried through to the output.
        steps: Solver steps of the successful attempt.
    """

    grid: WorldGrid
    catalog: WorldCatalog
    rng: RNG
    seed: RandomSeed = None
    locations: list[PlacedLocation] = field(default_factory=list)
    connections: ConnectivityGraph = field(default_factory=ConnectivityGraph)
    restarts: int = 0
    steps: int = 0

    def to_generated_world(self) -> GeneratedWorld:
        """Freeze this context into the immutable generation output.

        Raises:
            RuntimeError: If the grid still has uncollapsed cells.
        """
        if not self.grid.is_complete():
            raise RuntimeError("Cannot export a world whose grid is incomplete")

        grid = self.grid
        return GeneratedWorld(
            seed=self.seed,
            width=grid.width,
            height=grid.height,
            terrain=grid.terrain_columns(),  # type: ignore[arg-type]
            collapse_order=tuple(
                tuple(int(step) for step in column) for column in grid.collapse_order
            ),
            locations=tuple(self.locations),
            connections=self.connections,
            restarts=self.restarts,
            steps=self.steps,
        )
