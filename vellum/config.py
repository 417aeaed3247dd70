"""
Configuration constants.

Centralizes the tuning values used by world generation.
Organized by functional area for easy maintenance.
"""

import logging

# =============================================================================
# GENERAL
# =============================================================================

# RANDOM_SEED = "burrito1"
RANDOM_SEED = None

# =============================================================================
# MAP DIMENSIONS
# =============================================================================

DEFAULT_MAP_WIDTH = 10
DEFAULT_MAP_HEIGHT = 10

# Requested sizes are clamped to this range by clamp_map_size().
MIN_MAP_SIZE = 8
MAX_MAP_SIZE = 12

# =============================================================================
# TERRAIN COLLAPSE
# =============================================================================

# Weight multiplier per collapsed 4-neighbour that already holds the
# candidate terrain. Values above 1.0 make terrain clump together.
CLUSTER_BOOST = 1.7

# Templates stamped before each attempt: a random count in [1, this].
MAX_TEMPLATES_PER_MAP = 2

# An attempt is abandoned once it takes more than width * height * factor steps.
ATTEMPT_LIMIT_FACTOR = 2

# Full grid restarts allowed after contradictions before giving up.
MAX_GENERATION_RESTARTS = 100

# Steps between "collapsing terrain" progress notifications.
PROGRESS_REPORT_INTERVAL = 10

# =============================================================================
# LOCATIONS & TRAVEL NETWORK
# =============================================================================

# Minimum Manhattan distance between two placed locations.
MIN_LOCATION_SPACING = 3

# Locations within this Manhattan distance are linked directly.
CONNECTION_RADIUS = 4

# =============================================================================
# LOGGING
# =============================================================================

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_LEVEL = logging.WARNING
VERBOSE_LOG_LEVEL = logging.DEBUG
