from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

GridCoord: TypeAlias = int  # Always integer cell position

# Cell position on the world grid
GridPos: TypeAlias = tuple[GridCoord, GridCoord]  # Example: (3, 5) = column 3, row 5

# =============================================================================
# CATALOG TYPES
# =============================================================================

TerrainID: TypeAlias = str  # Example: "forest"
LocationID: TypeAlias = str  # Example: "wharf"
TemplateID: TypeAlias = str  # Example: "river_flow"

# =============================================================================
# GENERATION TYPES
# =============================================================================

# Master seed for deterministic generation. None means "use system entropy".
RandomSeed: TypeAlias = int | str | None

# Progress notifications emitted by the generation driver.
# Receives a human readable message and a percentage in the range 0..100.
ProgressCallback: TypeAlias = Callable[[str, int], None]
