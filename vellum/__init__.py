"""Vellum: constraint-based procedural world maps.

Vellum turns a catalog of terrain kinds, location kinds and partial-pattern
templates into a small grid world:

- A Wave Function Collapse solver assigns a terrain kind to every cell.
- A placer drops named points of interest onto suitable terrain.
- A connectivity pass links those points into a single travel network.

The usual entry point is ``vellum.environment.generators.generate_world``.
"""

__version__ = "0.1.0"
