"""Post-collapse layers for world generation.

Each layer derives something from the finished terrain:
- Location layers: place points of interest
- Connectivity layers: link placed locations into a travel network
"""

from .connectivity import (
    ConnectivityBuilder,
    ConnectivityGraph,
    build_connectivity_graph,
    connect_components,
)
from .locations import LocationPlacer, PlacedLocation

__all__ = [
    "ConnectivityBuilder",
    "ConnectivityGraph",
    "LocationPlacer",
    "PlacedLocation",
    "build_connectivity_graph",
    "connect_components",
]
