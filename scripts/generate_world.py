#!/usr/bin/env python3
"""Generate a world from the bundled fantasy theme and print it."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from vellum import config
from vellum.environment.catalogs import WorldCatalog
from vellum.environment.generators import (
    GeneratedWorld,
    GenerationFailed,
    generate_world,
)
from vellum.environment.naming import MapNamer, seed_from_name
from vellum.environment.themes import FANTASY_PALETTE, load_fantasy_catalog
from vellum.types import RandomSeed
from vellum.util.coordinates import clamp_map_size
from vellum.util.rng import DECORATION_DOMAIN, NAMING_DOMAIN, RNGProvider
from vellum.view.decoration import Color, TerrainDecorator, TerrainPalette

logger = logging.getLogger(__name__)


def parse_seed(value: str | None) -> RandomSeed:
    """Numeric seeds stay numeric; anything else is used as a string seed."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def render_ascii(
    world: GeneratedWorld, colors: tuple[tuple[Color, ...], ...] | None = None
) -> list[str]:
    """One line per row: terrain initial, or ``@`` where a location sits.

    With ``colors`` (x-major, as returned by TerrainDecorator.decorate) each
    glyph is wrapped in a 24-bit ANSI foreground colour.
    """
    occupied = {location.position for location in world.locations}
    lines = []
    for y, row in enumerate(world.rows()):
        glyphs = []
        for x, terrain in enumerate(row):
            glyph = "@" if (x, y) in occupied else terrain[0].upper()
            if colors is not None:
                r, g, b = colors[x][y]
                glyph = f"\033[38;2;{r};{g};{b}m{glyph}\033[0m"
            glyphs.append(glyph)
        lines.append(" ".join(glyphs))
    return lines


def world_to_dict(world: GeneratedWorld, name: str) -> dict:
    return {
        "name": name,
        "seed": world.seed,
        "width": world.width,
        "height": world.height,
        "restarts": world.restarts,
        "terrain": world.rows(),
        "locations": [
            {"id": location.kind_id, "x": location.x, "y": location.y}
            for location in world.locations
        ],
        "connections": {
            str(index): neighbors
            for index, neighbors in world.connections.to_dict().items()
        },
    }


def print_world(
    world: GeneratedWorld,
    name: str,
    catalog: WorldCatalog,
    decorator: TerrainDecorator | None = None,
    provider: RNGProvider | None = None,
) -> None:
    colors = None
    if decorator is not None:
        provider = provider or RNGProvider(world.seed)
        colors = decorator.decorate(world, provider.get(DECORATION_DOMAIN))

    print(name)
    print("=" * len(name))
    print(f"Seed: {world.seed!r}  Size: {world.width}x{world.height}  "
          f"Restarts: {world.restarts}")
    print()
    for line in render_ascii(world, colors):
        print(line)
    print()
    print("Terrain: " + ", ".join(
        f"{terrain_id[0].upper()}={kind.display_name}"
        for terrain_id, kind in catalog.terrains.items()
    ))
    print()
    print("Locations:")
    for index, location in enumerate(world.locations):
        print(f"  [{index}] {location.kind.display_name} at ({location.x}, {location.y})")
    print()
    print("Travel links:")
    for a, b in world.connections.edges():
        print(f"  {a} <-> {b}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a Vellum world map")
    parser.add_argument(
        "--width", type=int, default=config.DEFAULT_MAP_WIDTH, help="Grid width"
    )
    parser.add_argument(
        "--height", type=int, default=config.DEFAULT_MAP_HEIGHT, help="Grid height"
    )
    seed_group = parser.add_mutually_exclusive_group()
    seed_group.add_argument("--seed", type=str, help="Master seed (int or string)")
    seed_group.add_argument(
        "--name", type=str, help="Map name; hashed into the seed and used as title"
    )
    parser.add_argument(
        "--max-restarts",
        type=int,
        default=config.MAX_GENERATION_RESTARTS,
        help="Full restarts allowed before giving up",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument(
        "--color", action="store_true", help="Colour the map with ANSI escapes"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.VERBOSE_LOG_LEVEL if args.verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    width = clamp_map_size(args.width)
    height = clamp_map_size(args.height)
    seed = seed_from_name(args.name) if args.name else parse_seed(args.seed)

    catalog = load_fantasy_catalog()
    try:
        world = generate_world(
            catalog, width, height, seed, max_restarts=args.max_restarts
        )
    except GenerationFailed as exc:
        logger.error(str(exc))
        return 1

    # Cosmetic streams, separate from the one the driver consumed.
    provider = RNGProvider(seed)
    name = args.name or MapNamer(catalog).generate(
        world, provider.get(NAMING_DOMAIN)
    )
    decorator = (
        TerrainDecorator(TerrainPalette.from_hex(FANTASY_PALETTE))
        if args.color
        else None
    )

    if args.json:
        print(json.dumps(world_to_dict(world, name), indent=2, ensure_ascii=False))
    else:
        print_world(world, name, catalog, decorator, provider)
    return 0


if __name__ == "__main__":
    sys.exit(main())
