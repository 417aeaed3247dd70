"""Layered post-processing for collapsed terrain grids.

Once the solver has resolved every cell, the GenerationDriver runs a list of
GenerationLayers over a shared GenerationContext and freezes the result into
a GeneratedWorld.

The default layer list is:
    [LocationPlacer(catalog.locations), ConnectivityBuilder()]

Custom lists can be passed to the driver:
    from vellum.environment.generators import GenerationDriver
    from vellum.environment.generators.pipeline import ConnectivityBuilder

    driver = GenerationDriver(catalog, 10, 10, seed=7,
                              layers=[ConnectivityBuilder(radius=6)])
"""

from .layer import GenerationLayer
from .layers import (
    ConnectivityBuilder,
    ConnectivityGraph,
    LocationPlacer,
    PlacedLocation,
    build_connectivity_graph,
    connect_components,
)
from .context import GenerationContext

__all__ = [
    "ConnectivityBuilder",
    "ConnectivityGraph",
    "GenerationContext",
    "GenerationLayer",
    "LocationPlacer",
    "PlacedLocation",
    "build_connectivity_graph",
    "connect_components",
]
