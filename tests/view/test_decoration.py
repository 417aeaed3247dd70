"""Tests for render-only terrain decoration."""

from __future__ import annotations

import dataclasses
import random

import pytest

from vellum.environment.catalogs import WorldCatalog
from vellum.environment.generators import generate_world
from vellum.environment.themes import FANTASY_PALETTE
from vellum.view.decoration import (
    FALLBACK_COLOR,
    TerrainDecorator,
    TerrainPalette,
    hex_to_rgb,
)


class TestHexToRgb:
    """Tests for hex_to_rgb."""

    def test_parses_with_and_without_hash(self) -> None:
        assert hex_to_rgb("#1D4ED8") == (29, 78, 216)
        assert hex_to_rgb("777777") == (119, 119, 119)

    def test_rejects_short_values(self) -> None:
        with pytest.raises(ValueError):
            hex_to_rgb("#333")


class TestTerrainDecorator:
    """Tests for TerrainDecorator."""

    @pytest.fixture
    def decorator(self) -> TerrainDecorator:
        return TerrainDecorator(TerrainPalette.from_hex(FANTASY_PALETTE))

    def test_colors_come_from_each_cells_palette(
        self, fantasy_catalog: WorldCatalog, decorator: TerrainDecorator
    ) -> None:
        """Every cell's colour is one of its terrain's palette entries."""
        world = generate_world(fantasy_catalog, 8, 8, seed=21)

        colors = decorator.decorate(world, random.Random(0))

        assert len(colors) == world.width
        for x in range(world.width):
            for y in range(world.height):
                palette = decorator.palette.choices_for(world.terrain_at(x, y))
                assert colors[x][y] in palette

    def test_decoration_never_writes_back(
        self, fantasy_catalog: WorldCatalog, decorator: TerrainDecorator
    ) -> None:
        """The generated world carries no colour and is left unchanged."""
        world = generate_world(fantasy_catalog, 8, 8, seed=22)
        before = dataclasses.replace(world)

        decorator.decorate(world, random.Random(1))

        assert world == before
        assert "color" not in {field.name for field in dataclasses.fields(world)}

    def test_unknown_terrain_uses_fallback(self) -> None:
        """Terrain without a palette entry is drawn in the fallback colour."""
        decorator = TerrainDecorator(TerrainPalette({}))

        assert decorator.color_for("lava", random.Random(0)) == FALLBACK_COLOR

    def test_decoration_is_deterministic(
        self, fantasy_catalog: WorldCatalog, decorator: TerrainDecorator
    ) -> None:
        """Same stream, same colours."""
        world = generate_world(fantasy_catalog, 8, 8, seed=23)

        assert decorator.decorate(world, random.Random(5)) == decorator.decorate(
            world, random.Random(5)
        )
