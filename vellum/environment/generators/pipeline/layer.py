"""Abstract base class for post-collapse generation layers.

Once the terrain grid is fully collapsed the driver runs a short list of
layers over a shared GenerationContext. Each layer adds something derived
from the terrain: placed locations, the travel network, and so on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import GenerationContext


class GenerationLayer(ABC):
    """Abstract base class for post-collapse layers.

    Layers are applied sequentially by the GenerationDriver. Each layer
    receives a GenerationContext and modifies it in place.
    """

    # Progress message shown while the layer runs.
    description: str = "Finishing world"

    @abstractmethod
    def apply(self, ctx: GenerationContext) -> None:
        """Apply this layer's logic to the context.

        This method should modify the context in place. It may:
        - Append placed locations (ctx.locations)
        - Replace the travel network (ctx.connections)
        - Use ctx.rng for random decisions

        The terrain grid (ctx.grid) is complete and must not be changed.

        Args:
            ctx: The generation context to modify.
        """
        raise NotImplementedError
