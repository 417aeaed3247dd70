"""Deterministic random number generation with isolated streams.

Every random decision made during world generation is drawn from an explicit
stream object that is handed to the code that needs it. There is no ambient
module-level generator: callers build an RNGProvider from a master seed and
pass the streams around.

Each domain gets its own stream derived from the master seed. This ensures that:

1. Generation is fully deterministic from the same master seed
2. Cosmetic consumers (naming, colour decoration) never shift the sequence
   seen by the terrain solver
3. Adding a new consumer does not change existing worlds

Usage:
    provider = RNGProvider(seed)
    terrain_rng = provider.get("worldgen")
    naming_rng = provider.get("worldgen.naming")

Domain naming convention (hierarchical):
    - "worldgen" - the single stream consumed by the generation driver
    - "worldgen.naming" - map titles
    - "view.decoration" - per-cell colour variation
"""

from __future__ import annotations

import zlib
from collections.abc import Sequence
from random import Random
from typing import TYPE_CHECKING, TypeAlias, TypeVar

if TYPE_CHECKING:
    from vellum.types import RandomSeed

T = TypeVar("T")

WORLDGEN_DOMAIN = "worldgen"
NAMING_DOMAIN = "worldgen.naming"
DECORATION_DOMAIN = "view.decoration"


def derive_seed(master_seed: int | str, domain: str) -> int:
    """Derive a stable child seed for ``domain`` from ``master_seed``."""
    # Use crc32 instead of hash() - hash() is randomized per Python
    # session via PYTHONHASHSEED, which would break cross-session
    # determinism
    return zlib.crc32(f"{master_seed}:{domain}".encode())


class RNGStream:
    """A named stream bound to one domain of an RNGProvider.

    All method calls are forwarded to the domain's Random instance, so a
    stream can be passed anywhere a Random is accepted.
    """

    def __init__(self, provider: RNGProvider, domain: str) -> None:
        self._domain = domain
        self._random = provider._get_raw(domain)

    @property
    def domain(self) -> str:
        return self._domain

    def _rng(self) -> Random:
        return self._random

    # -------------------------------------------------------------------------
    # Random methods
    # -------------------------------------------------------------------------

    def random(self) -> float:
        """Return random float in [0.0, 1.0)."""
        return self._rng().random()

    def randint(self, a: int, b: int) -> int:
        """Return random integer N such that a <= N <= b."""
        return self._rng().randint(a, b)

    def randrange(self, start: int, stop: int | None = None, step: int = 1) -> int:
        """Return randomly selected element from range(start, stop, step)."""
        return self._rng().randrange(start, stop, step)

    def choice(self, seq: Sequence[T]) -> T:
        """Return random element from non-empty sequence."""
        return self._rng().choice(seq)

    def choices(
        self,
        population: Sequence[T],
        weights: Sequence[float] | None = None,
        *,
        cum_weights: Sequence[float] | None = None,
        k: int = 1,
    ) -> list[T]:
        """Return k-sized list of elements chosen with replacement."""
        return self._rng().choices(
            population, weights=weights, cum_weights=cum_weights, k=k
        )


# Type alias for functions that accept either Random or RNGStream.
# Use this in type hints: `def foo(rng: RNG) -> int:`
RNG: TypeAlias = Random | RNGStream


class RNGProvider:
    """Provides isolated RNG streams for different consumers.

    Each domain gets its own Random instance derived deterministically
    from the master seed. Domains are identified by string names.
    """

    def __init__(self, master_seed: RandomSeed = None) -> None:
        self._master_seed = master_seed
        self._streams: dict[str, Random] = {}
        self._handles: dict[str, RNGStream] = {}

    @property
    def master_seed(self) -> RandomSeed:
        return self._master_seed

    def get(self, domain: str) -> RNGStream:
        """Get an RNG stream for the named domain.

        Repeated calls return the same stream, so draws continue where the
        previous caller left off.

        Args:
            domain: Hierarchical name like "worldgen" or "view.decoration"

        Returns:
            An RNGStream with the same interface as Random
        """
        if domain not in self._handles:
            self._handles[domain] = RNGStream(self, domain)
        return self._handles[domain]

    def _get_raw(self, domain: str) -> Random:
        """Get the raw Random instance for a domain (internal use)."""
        if domain not in self._streams:
            if self._master_seed is None:
                # No seed: use system entropy for non-deterministic behavior
                self._streams[domain] = Random()
            else:
                self._streams[domain] = Random(derive_seed(self._master_seed, domain))
        return self._streams[domain]
