"""Render-only colour decoration for generated worlds.

Terrain colour variation is purely cosmetic: it is derived from a finished
GeneratedWorld at draw time and never written back into generation output.
The decorator draws from its own RNG stream (DECORATION_DOMAIN), so redrawing
a map can never shift the terrain solver's sequence.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeAlias

from vellum.environment.generators.base import GeneratedWorld
from vellum.types import TerrainID
from vellum.util.rng import RNG

# Type alias for RGB colors
Color: TypeAlias = tuple[int, int, int]

FALLBACK_COLOR: Color = (51, 51, 51)


def hex_to_rgb(value: str) -> Color:
    """Convert ``#RRGGBB`` (or ``RRGGBB``) to an RGB tuple."""
    digits = value.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected a #RRGGBB colour, got {value!r}")
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


@dataclass(frozen=True)
class TerrainPalette:
    """Candidate colours per terrain id."""

    colors: Mapping[TerrainID, tuple[Color, ...]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", MappingProxyType(dict(self.colors)))

    @classmethod
    def from_hex(cls, palette: Mapping[TerrainID, Sequence[str]]) -> TerrainPalette:
        return cls(
            {
                terrain_id: tuple(hex_to_rgb(color) for color in colors)
                for terrain_id, colors in palette.items()
            }
        )

    def choices_for(self, terrain_id: TerrainID) -> tuple[Color, ...]:
        return self.colors.get(terrain_id, ())


class TerrainDecorator:
    """Picks one display colour per cell of a finished world."""

    def __init__(self, palette: TerrainPalette) -> None:
        self.palette = palette

    def color_for(self, terrain_id: TerrainID, rng: RNG) -> Color:
        """Random colour from the terrain's palette, or FALLBACK_COLOR."""
        choices = self.palette.choices_for(terrain_id)
        if not choices:
            return FALLBACK_COLOR
        return rng.choice(choices)

    def decorate(
        self, world: GeneratedWorld, rng: RNG
    ) -> tuple[tuple[Color, ...], ...]:
        """Colour every cell of ``world``.

        Cells are visited column by column, so the result is x-major like
        ``world.terrain``. The world itself is only read.
        """
        return tuple(
            tuple(self.color_for(terrain_id, rng) for terrain_id in column)
            for column in world.terrain
        )
