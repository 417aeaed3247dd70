"""Template pre-seeding for the terrain solver.

Before each generation attempt, one or two templates are drawn from the
catalog (weighted, with replacement) and stamped onto the fresh grid. A stamp
narrows the covered cells to a single terrain without collapsing them, so the
solver still "collapses" them as ordinary steps and the propagator still
filters their neighbours.

Overlapping stamps simply overwrite in application order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from vellum import config
from vellum.environment.catalogs import Template, TemplatePlacement
from vellum.environment.generators.wfc_grid import WorldGrid
from vellum.types import GridPos
from vellum.util.rng import RNG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StampedTemplate:
    """Record of a template applied to a grid."""

    template: Template
    origin: GridPos
    cells_seeded: int


def placement_origin(
    template: Template, width: int, height: int, rng: RNG
) -> GridPos:
    """Compute where a template's top-left corner lands on the grid.

    ``center`` centres the pattern, ``top-left`` pins it to (0, 0) and ``any``
    draws a uniform origin. The result is clamped so the pattern footprint
    stays on the grid whenever it fits.
    """
    t_width, t_height = template.width, template.height
    if t_width == 0 or t_height == 0:
        return (0, 0)

    max_x = width - t_width
    max_y = height - t_height

    match template.placement:
        case TemplatePlacement.CENTER:
            x, y = max_x // 2, max_y // 2
        case TemplatePlacement.TOP_LEFT:
            x, y = 0, 0
        case _:
            x = rng.randint(0, max(0, max_x))
            y = rng.randint(0, max(0, max_y))

    x = max(0, min(x, max_x))
    y = max(0, min(y, max_y))
    return (x, y)


class TemplatePlacer:
    """Chooses and stamps templates onto a fresh grid."""

    def __init__(
        self,
        templates: Sequence[Template],
        max_templates: int = config.MAX_TEMPLATES_PER_MAP,
    ) -> None:
        self.templates = tuple(templates)
        self.max_templates = max_templates

    def choose(self, rng: RNG) -> Template:
        """Weighted draw of one template."""
        return rng.choices(
            self.templates, weights=[t.weight for t in self.templates]
        )[0]

    def apply(self, grid: WorldGrid, rng: RNG) -> list[StampedTemplate]:
        """Stamp between 1 and ``max_templates`` templates onto ``grid``.

        Does nothing (and draws nothing from ``rng``) when there are no
        templates.

        Returns:
            The stamps applied, in application order.
        """
        if not self.templates:
            return []

        count = rng.randint(1, self.max_templates)
        stamped: list[StampedTemplate] = []
        for _ in range(count):
            template = self.choose(rng)
            origin = placement_origin(template, grid.width, grid.height, rng)
            seeded = stamp(template, origin, grid)
            stamped.append(StampedTemplate(template, origin, seeded))
            logger.debug(f"Applied template {template.id!r} at {origin}")
        return stamped


def stamp(template: Template, origin: GridPos, grid: WorldGrid) -> int:
    """Narrow every non-empty pattern cell to its terrain.

    Pattern cells that fall off the grid are skipped.

    Returns:
        Number of grid cells seeded.
    """
    origin_x, origin_y = origin
    seeded = 0
    for dy, row in enumerate(template.pattern):
        for dx, terrain_id in enumerate(row):
            if not terrain_id:
                continue
            x, y = origin_x + dx, origin_y + dy
            if not grid.in_bounds(x, y):
                continue
            grid.set_possibilities(x, y, (terrain_id,))
            seeded += 1
    return seeded
