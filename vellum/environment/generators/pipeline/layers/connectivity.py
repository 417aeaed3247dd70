"""Travel network layer.

Links placed locations into an undirected graph. Locations within
CONNECTION_RADIUS (Manhattan distance) of each other are linked directly.
Anything not reachable from location 0 afterwards is joined to the closest
reachable location, one component at a time, until the whole network is a
single connected component.

The graph is the only thing the travel pathfinder reads.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vellum import config
from vellum.environment.generators.pipeline.layer import GenerationLayer
from vellum.types import GridPos
from vellum.util.coordinates import manhattan_distance

if TYPE_CHECKING:
    from vellum.environment.generators.pipeline.context import GenerationContext


@dataclass
class ConnectivityGraph:
    """Undirected adjacency list keyed by placed-location index.

    Every edge is stored in both endpoints' lists.
    """

    adjacency: dict[int, list[int]] = field(default_factory=dict)

    @classmethod
    def with_nodes(cls, count: int) -> ConnectivityGraph:
        return cls({index: [] for index in range(count)})

    def __len__(self) -> int:
        return len(self.adjacency)

    def add_edge(self, a: int, b: int) -> bool:
        """Link two locations in both directions.

        Returns:
            False if the edge already existed or ``a == b``.
        """
        if a == b or b in self.adjacency.setdefault(a, []):
            return False
        self.adjacency[a].append(b)
        self.adjacency.setdefault(b, []).append(a)
        return True

    def neighbors(self, index: int) -> list[int]:
        return list(self.adjacency.get(index, ()))

    def reachable_from(self, start: int = 0) -> set[int]:
        """Breadth-first traversal from ``start``."""
        if start not in self.adjacency:
            return set()

        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in self.adjacency[current]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return visited

    def is_connected(self) -> bool:
        return len(self.reachable_from(0)) == len(self.adjacency)

    def is_symmetric(self) -> bool:
        return all(
            a in self.adjacency.get(b, ())
            for a, neighbors in self.adjacency.items()
            for b in neighbors
        )

    def edges(self) -> list[tuple[int, int]]:
        """Each undirected edge once, as (low, high) pairs in sorted order."""
        return sorted(
            {
                (min(a, b), max(a, b))
                for a, neighbors in self.adjacency.items()
                for b in neighbors
            }
        )

    def to_dict(self) -> dict[int, list[int]]:
        return {index: list(neighbors) for index, neighbors in self.adjacency.items()}


def build_connectivity_graph(
    positions: Sequence[GridPos],
    radius: int = config.CONNECTION_RADIUS,
) -> ConnectivityGraph:
    """Build a connected travel network over location positions.

    Args:
        positions: Location positions; list index is the node id.
        radius: Maximum Manhattan distance for a direct link.

    Returns:
        A connected, symmetric ConnectivityGraph (empty for no positions).
    """
    graph = ConnectivityGraph.with_nodes(len(positions))

    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            if manhattan_distance(positions[i], positions[j]) <= radius:
                graph.add_edge(i, j)

    connect_components(graph, positions)
    return graph


def connect_components(graph: ConnectivityGraph, positions: Sequence[GridPos]) -> int:
    """Join every component to the one containing location 0.

    Repeatedly takes the lowest-index unreached location and links it to the
    nearest reachable location (lowest index wins ties), then re-traverses.

    Returns:
        Number of repair edges added.
    """
    added = 0
    while True:
        reached = graph.reachable_from(0)
        unreached = [index for index in range(len(positions)) if index not in reached]
        if not unreached:
            return added

        orphan = unreached[0]
        nearest = min(
            sorted(reached),
            key=lambda index: manhattan_distance(positions[orphan], positions[index]),
        )
        graph.add_edge(orphan, nearest)
        added += 1


class ConnectivityBuilder(GenerationLayer):
    """Builds the travel network for the context's placed locations."""

    description = "Linking travel routes"

    def __init__(self, radius: int = config.CONNECTION_RADIUS) -> None:
        self.radius = radius

    def apply(self, ctx: GenerationContext) -> None:
        ctx.connections = build_connectivity_graph(
            [location.position for location in ctx.locations], self.radius
        )
