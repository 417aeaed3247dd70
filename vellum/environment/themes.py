"""Bundled world themes.

The fantasy theme is the stock content shipped with the game: five terrain
bands, ten points of interest and two hand-drawn templates.

Adjacency philosophy:
- SPIRE <-> FOREST (peaks rise out of woodland)
- FOREST <-> MEADOW (woods open into glades)
- MEADOW <-> WATER (rivers run through open ground)
- BARRENS touch everything (cursed ground cuts across every band)
- SPIRE cannot touch MEADOW or WATER, FOREST cannot touch WATER

Every template pattern only places terrain side by side where both adjacency
lists allow it, so stamping a template never forces a contradiction on its own.
"""

from __future__ import annotations

from typing import Any

from vellum.environment.catalogs import WorldCatalog, catalog_from_mapping

FANTASY_THEME: dict[str, Any] = {
    "name": "Fantasy",
    "description": "A quiet journey through enchanted lands",
    "terrain": {
        "spire": {
            "label": "Ancient Peaks",
            "weight": 12,
            "adjacent": ["spire", "forest", "barrens"],
        },
        "forest": {
            "label": "Whispering Woods",
            "weight": 30,
            "adjacent": ["forest", "meadow", "spire", "barrens"],
        },
        "meadow": {
            "label": "Sunlit Glades",
            "weight": 20,
            "adjacent": ["meadow", "forest", "water", "barrens"],
        },
        "water": {
            "label": "Glass Rivers",
            "weight": 18,
            "adjacent": ["water", "meadow", "barrens"],
        },
        "barrens": {
            "label": "Cursed Lands",
            "weight": 1,
            "adjacent": ["barrens", "spire", "forest", "meadow", "water"],
        },
    },
    "locations": {
        "cottage": {
            "label": "Hermit's Cottage",
            "emoji": "🏠",
            "allowed_terrain": ["forest"],
            "required_adjacent": ["meadow"],
        },
        "peak": {
            "label": "Dragon's Perch",
            "emoji": "🐉",
            "allowed_terrain": ["spire"],
        },
        "sanctum": {
            "label": "Crystal Sanctum",
            "emoji": "🔮",
            "allowed_terrain": ["spire"],
            "required_adjacent": ["barrens"],
        },
        "ruins": {
            "label": "Fallen Temple",
            "emoji": "🏛️",
            "allowed_terrain": ["barrens"],
            "required_adjacent": ["forest"],
        },
        "lighthouse": {
            "label": "Castle Craig",
            "emoji": "🏰",
            "allowed_terrain": ["meadow"],
            "required_adjacent": ["water"],
        },
        "wharf": {
            "label": "River Wharf",
            "emoji": "⚓",
            "allowed_terrain": ["meadow"],
            "required_adjacent": ["water"],
        },
        "crossroads": {
            "label": "Fae Crossroads",
            "emoji": "🏘️",
            "allowed_terrain": ["forest"],
            "required_adjacent": ["meadow", "spire"],
        },
        "mines": {
            "label": "Gem Caverns",
            "emoji": "💎",
            "allowed_terrain": ["spire"],
            "required_adjacent": ["forest"],
        },
        "grove": {
            "label": "Sacred Grove",
            "emoji": "🌳",
            "allowed_terrain": ["forest"],
        },
        "ford": {
            "label": "Stone Ford",
            "emoji": "🪨",
            "allowed_terrain": ["meadow"],
            "required_adjacent": ["forest"],
        },
    },
    "templates": {
        "river_flow": {
            "weight": 4,
            "placement": "any",
            "pattern": [
                [None, "meadow", "water", "meadow", None],
                [None, "meadow", "water", "meadow", None],
                ["forest", "meadow", "water", "meadow", "forest"],
                ["forest", "meadow", "water", "meadow", "forest"],
                [None, "meadow", "water", "meadow", None],
            ],
        },
        "mountain_heart": {
            "weight": 2,
            "placement": "center",
            "pattern": [
                ["spire", "spire", "spire"],
                ["spire", "spire", "spire"],
                ["forest", "forest", "barrens"],
            ],
        },
    },
}

# Render-only colour choices per terrain. Never stored on generation output.
FANTASY_PALETTE: dict[str, tuple[str, ...]] = {
    "spire": ("#777777", "#4B5563", "#6B7280"),
    "forest": ("#16A34A", "#15803D", "#166534"),
    "meadow": ("#A3E635", "#84CC16", "#65A30D"),
    "water": ("#1D4ED8", "#2563EB", "#3B82F6"),
    "barrens": ("#7C2D12", "#9A3412", "#C2410C"),
}


def load_fantasy_catalog() -> WorldCatalog:
    """Build the validated catalog for the bundled fantasy theme."""
    return catalog_from_mapping(FANTASY_THEME)
