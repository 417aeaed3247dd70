"""Map titles and name-derived seeds.

MapNamer turns a finished world into a short evocative title, for example
"Whispering Sunlit Glades" or "River Wharf of the Glass Rivers". It draws
from its own RNG stream (NAMING_DOMAIN) so naming a world never changes the
world itself.

seed_from_name() maps a player-typed map name to a numeric seed, so the same
name always regenerates the same world.
"""

from __future__ import annotations

from collections import Counter

from vellum.environment.catalogs import WorldCatalog
from vellum.environment.generators.base import GeneratedWorld
from vellum.types import TerrainID
from vellum.util.rng import RNG

NAME_ADJECTIVES = (
    "Sacred",
    "Ancient",
    "Whispering",
    "Cursed",
    "Hidden",
    "Eternal",
    "Forgotten",
)

# Seeds derived from names fall in [0, NAME_SEED_MODULUS).
NAME_SEED_MODULUS = 1_000_000


def seed_from_name(name: str) -> int:
    """Hash a map name into a stable seed in [0, 1_000_000).

    This is the classic ``h = h * 31 + c`` string hash over UTF-16 code
    units, wrapped to a signed 32-bit integer at every step.

    Example:
        seed_from_name("abc") == 96354
    """
    encoded = name.encode("utf-16-le")
    code_units = [
        int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2)
    ]

    value = 0
    for unit in code_units:
        value = (value * 31 + unit) & 0xFFFFFFFF
        if value >= 0x80000000:
            value -= 0x100000000
    return abs(value) % NAME_SEED_MODULUS


class MapNamer:
    """Generates display titles for finished worlds."""

    def __init__(self, catalog: WorldCatalog) -> None:
        self.catalog = catalog

    def dominant_terrain(self, world: GeneratedWorld) -> TerrainID:
        """Most common terrain.

        Terrains are ranked in the order they are first met row by row, and
        a tie goes to the later one.
        """
        counts = Counter(terrain for row in world.rows() for terrain in row)
        dominant: TerrainID | None = None
        for terrain_id, count in counts.items():
            if dominant is None or count >= counts[dominant]:
                dominant = terrain_id
        if dominant is None:
            return self.catalog.terrain_ids[0]
        return dominant

    def generate(self, world: GeneratedWorld, rng: RNG) -> str:
        """Build a title from the dominant terrain and the first location.

        Args:
            world: The world to name.
            rng: Stream used for the adjective and the phrase shape.
        """
        terrain_id = self.dominant_terrain(world)
        terrain = self.catalog.terrains.get(terrain_id)
        terrain_label = terrain.display_name if terrain is not None else "Unknown"
        iconic = world.locations[0].kind.display_name if world.locations else None

        adjective = rng.choice(NAME_ADJECTIVES)
        patterns = [
            f"{adjective} {terrain_label}",
            f"{iconic or f'The {adjective} Site'} in the {terrain_label}",
            f"{f'{iconic} of' if iconic else f'The {adjective} Realm of'} the {terrain_label}",
            f"The {adjective} {iconic or 'Place'} by the {terrain_label}",
            f"Where the {terrain_label} Begins",
        ]
        return rng.choice(patterns)
