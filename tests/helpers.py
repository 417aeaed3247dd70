"""Shared builders for tests."""

from __future__ import annotations

from vellum.environment.catalogs import (
    LocationKind,
    Template,
    TerrainKind,
    WorldCatalog,
)
from vellum.environment.generators.wfc_grid import WorldGrid


def make_catalog(
    adjacency: dict[str, list[str]],
    weights: dict[str, float] | None = None,
    locations: list[LocationKind] | None = None,
    templates: list[Template] | None = None,
) -> WorldCatalog:
    """Build a catalog from a plain adjacency table."""
    weights = weights or {}
    return WorldCatalog.from_kinds(
        [
            TerrainKind(
                id=terrain_id,
                weight=weights.get(terrain_id, 1.0),
                adjacent=frozenset(adjacent),
            )
            for terrain_id, adjacent in adjacency.items()
        ],
        locations or (),
        templates or (),
    )


def paint_grid(grid: WorldGrid, rows: list[str]) -> WorldGrid:
    """Collapse every cell of ``grid`` from y-major rows of terrain ids.

    Each row is a string of single-character terrain ids.
    """
    for y, row in enumerate(rows):
        for x, terrain_id in enumerate(row):
            grid.collapse_to(x, y, terrain_id)
    return grid
