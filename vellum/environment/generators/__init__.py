"""World generation for Vellum.

Generation runs in two phases:
- WorldGrid + wfc_solver: a Wave Function Collapse solver assigns a terrain
  kind to every cell, pre-seeded by catalog templates (TemplatePlacer)
- Pipeline layers: LocationPlacer drops points of interest onto the finished
  terrain and ConnectivityBuilder links them into a travel network

GenerationDriver ties both phases together as a resumable state machine that
restarts from scratch on contradiction. generate_world() is the one-call
entry point.
"""

from .base import GeneratedWorld
from .wfc_grid import Cell, WorldGrid
from .wfc_solver import (
    ConstraintPropagator,
    Contradiction,
    NoValidOption,
    collapse_cell,
    collapse_weights,
)
from .templates import StampedTemplate, TemplatePlacer, placement_origin, stamp
from .pipeline import (
    ConnectivityBuilder,
    ConnectivityGraph,
    GenerationContext,
    GenerationLayer,
    LocationPlacer,
    PlacedLocation,
    build_connectivity_graph,
    connect_components,
)
from .driver import (
    GenerationCancelled,
    GenerationDriver,
    GenerationFailed,
    GenerationSession,
    GenerationState,
    generate_world,
)

__all__ = [
    "Cell",
    "ConnectivityBuilder",
    "ConnectivityGraph",
    "ConstraintPropagator",
    "Contradiction",
    "GeneratedWorld",
    "GenerationCancelled",
    "GenerationContext",
    "GenerationDriver",
    "GenerationFailed",
    "GenerationLayer",
    "GenerationSession",
    "GenerationState",
    "LocationPlacer",
    "NoValidOption",
    "PlacedLocation",
    "StampedTemplate",
    "TemplatePlacer",
    "WorldGrid",
    "build_connectivity_graph",
    "collapse_cell",
    "collapse_weights",
    "connect_components",
    "generate_world",
    "placement_origin",
    "stamp",
]
