"""Generation driver: the state machine that turns a catalog into a world.

States:
    IDLE -> SEEDING -> STEPPING (repeats) -> PLACING_LOCATIONS -> COMPLETE
                          |
                          +-> CONTRADICTED -> SEEDING (retry) | FAILED

- SEEDING allocates a fresh WorldGrid and stamps templates onto it.
- Each STEPPING step selects the lowest-entropy cell, collapses it and
  propagates the consequences.
- A contradiction discards the grid wholesale and starts a new session. After
  ``max_restarts`` restarts the driver gives up with GenerationFailed.
- Once every cell is collapsed the post-collapse layers run (location
  placement, then the travel network) and the world is frozen.

The driver is single-threaded and cooperative. steps() yields after every
discrete step, which is the only point where a caller can regain control,
request cancellation or observe state. Nothing ever observes a half
propagated grid.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from vellum import config
from vellum.environment.catalogs import ConfigurationError, WorldCatalog
from vellum.environment.generators.base import GeneratedWorld
from vellum.environment.generators.pipeline import (
    ConnectivityBuilder,
    GenerationContext,
    GenerationLayer,
    LocationPlacer,
    PlacedLocation,
)
from vellum.environment.generators.templates import StampedTemplate, TemplatePlacer
from vellum.environment.generators.wfc_grid import WorldGrid
from vellum.environment.generators.wfc_solver import (
    Contradiction,
    ConstraintPropagator,
    collapse_cell,
)
from vellum.types import ProgressCallback, RandomSeed
from vellum.util.rng import RNG, WORLDGEN_DOMAIN, RNGProvider

logger = logging.getLogger(__name__)

# Progress percentages for the driver's milestones.
_SEEDING_PERCENT = 0
_STEPPING_START_PERCENT = 5
_STEPPING_SPAN_PERCENT = 80
_PLACING_PERCENT = 90
_COMPLETE_PERCENT = 100


class GenerationFailed(Exception):
    """Raised when the restart budget runs out without a finished grid."""

    def __init__(self, message: str, restarts: int) -> None:
        super().__init__(message)
        self.restarts = restarts


class GenerationCancelled(Exception):
    """Raised from steps() when cancellation was requested between steps."""

    pass


class GenerationState(Enum):
    """Lifecycle of a GenerationDriver."""

    IDLE = auto()
    SEEDING = auto()
    STEPPING = auto()
    CONTRADICTED = auto()
    PLACING_LOCATIONS = auto()
    COMPLETE = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (
            GenerationState.COMPLETE,
            GenerationState.FAILED,
            GenerationState.CANCELLED,
        )


@dataclass
class GenerationSession:
    """State of one generation attempt.

    A session is replaced wholesale whenever the driver restarts.

    Attributes:
        seed: Master seed of the generation.
        grid: The grid being collapsed.
        steps: Successful collapse-and-propagate steps in this attempt. This
            is also the attempt counter the driver caps.
        templates: Templates stamped at the start of the attempt.
        placed_locations: Filled in once the grid is complete.
    """

    seed: RandomSeed
    grid: WorldGrid
    steps: int = 0
    templates: list[StampedTemplate] = field(default_factory=list)
    placed_locations: list[PlacedLocation] = field(default_factory=list)


class GenerationDriver:
    """Orchestrates seeding, solving, restarting and post-collapse layers.

    Example:
        driver = GenerationDriver(catalog, 10, 10, seed=1234)
        world = driver.run()

    Or, to interleave generation with other work:
        for state in driver.steps():
            redraw_loading_screen()
        world = driver.result
    """

    def __init__(
        self,
        catalog: WorldCatalog,
        width: int,
        height: int,
        seed: RandomSeed = None,
        *,
        rng: RNG | None = None,
        progress: ProgressCallback | None = None,
        max_restarts: int = config.MAX_GENERATION_RESTARTS,
        layers: Sequence[GenerationLayer] | None = None,
        report_every: int = config.PROGRESS_REPORT_INTERVAL,
    ) -> None:
        """Initialize the driver.

        Args:
            catalog: Terrain, location and template definitions.
            width: Grid width in cells.
            height: Grid height in cells.
            seed: Master seed. Ignored for drawing when ``rng`` is given, but
                still recorded on the output.
            rng: Stream consumed by every random decision. Defaults to the
                "worldgen" stream of an RNGProvider built from ``seed``.
            progress: Optional ``(message, percent)`` callback. Errors it
                raises are logged and discarded.
            max_restarts: Full restarts allowed before GenerationFailed.
            layers: Post-collapse layers. Defaults to location placement
                followed by the travel network.
            report_every: Steps between progress notifications.

        Raises:
            ConfigurationError: If the dimensions or the catalog are unusable.
        """
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        catalog.validate()

        self.catalog = catalog
        self.width = width
        self.height = height
        self.seed = seed
        self.rng: RNG = rng if rng is not None else RNGProvider(seed).get(WORLDGEN_DOMAIN)
        self.progress = progress
        self.max_restarts = max_restarts
        self.report_every = max(1, report_every)
        self.attempt_limit = width * height * config.ATTEMPT_LIMIT_FACTOR
        self.layers: list[GenerationLayer] = (
            list(layers)
            if layers is not None
            else [LocationPlacer(catalog.locations), ConnectivityBuilder()]
        )

        self._template_placer = TemplatePlacer(catalog.templates)
        self._propagator: ConstraintPropagator | None = None
        self._cancel_requested = False
        self.state = GenerationState.IDLE
        self.session: GenerationSession | None = None
        self.restarts = 0
        self.total_steps = 0
        self.result: GeneratedWorld | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def cancel(self) -> None:
        """Request cancellation. Honoured before the next step starts."""
        self._cancel_requested = True

    def run(self) -> GeneratedWorld:
        """Run generation to completion.

        Raises:
            GenerationFailed: If the restart budget is exhausted.
            GenerationCancelled: If cancel() was called during generation.
        """
        for _state in self.steps():
            pass
        assert self.result is not None
        return self.result

    def steps(self) -> Iterator[GenerationState]:
        """Run generation one discrete step at a time.

        Yields the driver state after seeding, after every collapse step,
        after a contradiction and once the world is complete. The caller may
        do other work or call cancel() between yields.

        Raises:
            RuntimeError: If the driver has already been started.
            GenerationFailed: If the restart budget is exhausted.
            GenerationCancelled: If cancel() was called.
        """
        if self.state is not GenerationState.IDLE:
            raise RuntimeError("GenerationDriver can only be run once")

        logger.info(
            f"Generating {self.width}x{self.height} world (seed={self.seed!r})"
        )
        self._start_session()
        yield self.state

        while True:
            self._check_cancelled()

            session = self._current_session()
            cell = session.grid.select_lowest_entropy_cell(self.rng)
            if cell is None:
                break

            contradiction = self._step(session, cell)
            if contradiction is not None:
                self.state = GenerationState.CONTRADICTED
                logger.info(f"Contradiction: {contradiction}; restarting")
                yield self.state
                self._restart(contradiction)
                yield self.state
                continue

            session.steps += 1
            self.total_steps += 1
            # Each step collapses one cell, so a full attempt takes width * height
            # steps and this cap only trips if that invariant is ever broken.
            if session.steps > self.attempt_limit:
                self.state = GenerationState.CONTRADICTED
                yield self.state
                self._restart(None)
                yield self.state
                continue

            if session.steps % self.report_every == 0:
                self._notify(
                    f"Collapsing terrain ({session.grid.collapsed_count()}/"
                    f"{self.width * self.height})",
                    self._stepping_percent(session.grid),
                )
            yield self.state

        self._finish()
        yield self.state

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------

    def _start_session(self) -> None:
        """IDLE/CONTRADICTED -> SEEDING -> STEPPING with a fresh grid."""
        self.state = GenerationState.SEEDING
        self._notify("Seeding terrain", _SEEDING_PERCENT)

        grid = WorldGrid.initialize(self.width, self.height, self.catalog)
        stamped = self._template_placer.apply(grid, self.rng)
        self._propagator = ConstraintPropagator(grid, self.catalog)
        self.session = GenerationSession(seed=self.seed, grid=grid, templates=stamped)

        self.state = GenerationState.STEPPING
        self._notify("Collapsing terrain", _STEPPING_START_PERCENT)

    def _step(
        self, session: GenerationSession, cell: tuple[int, int]
    ) -> Contradiction | None:
        """Collapse one cell and propagate. Returns the contradiction, if any."""
        assert self._propagator is not None
        x, y = cell
        collapse_cell(session.grid, self.catalog, x, y, self.rng)
        try:
            self._propagator.propagate(x, y)
        except Contradiction as exc:
            return exc
        return None

    def _restart(self, cause: Contradiction | None) -> None:
        """CONTRADICTED -> SEEDING, or FAILED once the budget is spent."""
        if self.restarts >= self.max_restarts:
            self.state = GenerationState.FAILED
            message = (
                f"World generation failed after {self.max_restarts} restarts "
                f"({self.width}x{self.height}, seed={self.seed!r})"
            )
            logger.warning(message)
            raise GenerationFailed(message, self.restarts) from cause

        self.restarts += 1
        if cause is None:
            logger.info(
                f"Attempt exceeded {self.attempt_limit} steps; restarting "
                f"({self.restarts}/{self.max_restarts})"
            )
        self._notify(f"Restarting (attempt {self.restarts + 1})", _SEEDING_PERCENT)
        self._start_session()

    def _finish(self) -> None:
        """STEPPING -> PLACING_LOCATIONS -> COMPLETE."""
        session = self._current_session()
        self.state = GenerationState.PLACING_LOCATIONS

        ctx = GenerationContext(
            grid=session.grid,
            catalog=self.catalog,
            rng=self.rng,
            seed=self.seed,
            restarts=self.restarts,
            steps=session.steps,
        )
        span = _COMPLETE_PERCENT - _PLACING_PERCENT
        for i, layer in enumerate(self.layers):
            self._notify(
                layer.description, _PLACING_PERCENT + span * i // len(self.layers)
            )
            layer.apply(ctx)

        session.placed_locations = list(ctx.locations)
        self.result = ctx.to_generated_world()
        self.state = GenerationState.COMPLETE
        logger.info(
            f"World complete after {session.steps} steps and {self.restarts} "
            f"restarts; {len(ctx.locations)} locations placed"
        )
        self._notify("World complete", _COMPLETE_PERCENT)

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            self.state = GenerationState.CANCELLED
            logger.info("World generation cancelled")
            raise GenerationCancelled("World generation was cancelled")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _current_session(self) -> GenerationSession:
        assert self.session is not None
        return self.session

    def _stepping_percent(self, grid: WorldGrid) -> int:
        total = grid.width * grid.height
        return _STEPPING_START_PERCENT + (
            _STEPPING_SPAN_PERCENT * grid.collapsed_count() // total
        )

    def _notify(self, message: str, percent: int) -> None:
        """Invoke the progress callback, discarding anything it raises."""
        if self.progress is None:
            return
        try:
            self.progress(message, max(0, min(100, percent)))
        except Exception:
            logger.exception(f"Progress callback failed on {message!r}")


def generate_world(
    catalog: WorldCatalog,
    width: int = config.DEFAULT_MAP_WIDTH,
    height: int = config.DEFAULT_MAP_HEIGHT,
    seed: RandomSeed = config.RANDOM_SEED,
    *,
    progress: ProgressCallback | None = None,
    max_restarts: int = config.MAX_GENERATION_RESTARTS,
) -> GeneratedWorld:
    """Generate a world in one call.

    Raises:
        ConfigurationError: If the dimensions or the catalog are unusable.
        GenerationFailed: If the restart budget is exhausted.
    """
    driver = GenerationDriver(
        catalog,
        width,
        height,
        seed,
        progress=progress,
        max_restarts=max_restarts,
    )
    return driver.run()
