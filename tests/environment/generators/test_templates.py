"""Tests for template pre-seeding."""

from __future__ import annotations

import random

import pytest

from vellum.environment.catalogs import (
    ConfigurationError,
    Template,
    TemplatePlacement,
    WorldCatalog,
)
from vellum.environment.generators.templates import (
    TemplatePlacer,
    placement_origin,
    stamp,
)
from vellum.environment.generators.wfc_grid import WorldGrid


def square_template(
    size: int,
    placement: TemplatePlacement = TemplatePlacement.ANY,
    terrain_id: str = "A",
    weight: float = 1.0,
    template_id: str = "square",
) -> Template:
    return Template(
        id=template_id,
        pattern=tuple(tuple(terrain_id for _ in range(size)) for _ in range(size)),
        placement=placement,
        weight=weight,
    )


# =============================================================================
# Placement origins
# =============================================================================


class TestPlacementOrigin:
    """Tests for placement_origin."""

    def test_any_origin_is_clamped_for_every_draw(self) -> None:
        """A 5x5 'any' template on an 8-wide grid always lands at x in [0, 3]."""
        template = square_template(5)
        rng = random.Random(2024)

        xs = set()
        for _ in range(500):
            x, y = placement_origin(template, 8, 8, rng)
            assert 0 <= x <= 3
            assert 0 <= y <= 3
            xs.add(x)

        # Uniform draw covers the whole clamped range.
        assert xs == {0, 1, 2, 3}

    def test_center_origin(self) -> None:
        """'center' centres the footprint, rounding towards the top-left."""
        template = square_template(3, TemplatePlacement.CENTER)

        assert placement_origin(template, 10, 10, random.Random(0)) == (3, 3)
        assert placement_origin(template, 8, 9, random.Random(0)) == (2, 3)

    def test_top_left_origin(self) -> None:
        """'top-left' pins the pattern to (0, 0)."""
        template = square_template(3, TemplatePlacement.TOP_LEFT)

        assert placement_origin(template, 10, 10, random.Random(0)) == (0, 0)

    def test_fixed_placements_draw_nothing(self) -> None:
        """Only 'any' consumes random numbers."""
        rng = random.Random(7)
        before = rng.getstate()

        placement_origin(square_template(3, TemplatePlacement.CENTER), 9, 9, rng)
        placement_origin(square_template(3, TemplatePlacement.TOP_LEFT), 9, 9, rng)

        assert rng.getstate() == before

    def test_oversized_template_anchors_at_zero(self) -> None:
        """A pattern bigger than the grid starts at (0, 0) and is cropped."""
        template = square_template(6)

        for seed in range(10):
            assert placement_origin(template, 4, 4, random.Random(seed)) == (0, 0)

    def test_ragged_pattern_uses_longest_row(self) -> None:
        """Template width is the length of its longest row."""
        template = Template(id="ragged", pattern=(("A",), ("A", "A", "A")))

        assert template.width == 3
        assert template.height == 2
        x, _ = placement_origin(template, 4, 4, random.Random(1))
        assert 0 <= x <= 1


# =============================================================================
# Stamping
# =============================================================================


class TestStamp:
    """Tests for stamp."""

    def test_stamp_narrows_without_collapsing(
        self, gradient_catalog: WorldCatalog
    ) -> None:
        """Stamped cells become singletons but remain uncollapsed."""
        grid = WorldGrid.initialize(5, 5, gradient_catalog)
        template = Template(id="t", pattern=(("A", None), ("", "C")))

        seeded = stamp(template, (1, 2), grid)

        assert seeded == 2
        assert grid.possibilities(1, 2) == frozenset({"A"})
        assert grid.possibilities(2, 3) == frozenset({"C"})
        assert not grid.is_collapsed(1, 2)
        assert grid.collapsed_count() == 0

    def test_empty_pattern_cells_are_untouched(
        self, gradient_catalog: WorldCatalog
    ) -> None:
        """None and empty-string cells leave the grid as it was."""
        grid = WorldGrid.initialize(5, 5, gradient_catalog)
        template = Template(id="t", pattern=(("A", None), ("", "C")))

        stamp(template, (1, 2), grid)

        assert grid.entropy(2, 2) == 3
        assert grid.entropy(1, 3) == 3

    def test_cells_off_the_grid_are_skipped(
        self, gradient_catalog: WorldCatalog
    ) -> None:
        """Cropped pattern cells are ignored rather than raising."""
        grid = WorldGrid.initialize(2, 2, gradient_catalog)

        seeded = stamp(square_template(3, terrain_id="B"), (0, 0), grid)

        assert seeded == 4
        assert all(grid.possibilities(x, y) == {"B"} for x, y in grid.positions())

    def test_later_stamp_overwrites(self, gradient_catalog: WorldCatalog) -> None:
        """Overlapping stamps apply in order with no conflict detection."""
        grid = WorldGrid.initialize(4, 4, gradient_catalog)

        stamp(square_template(2, terrain_id="A"), (0, 0), grid)
        stamp(square_template(2, terrain_id="C"), (1, 1), grid)

        assert grid.possibilities(0, 0) == frozenset({"A"})
        assert grid.possibilities(1, 1) == frozenset({"C"})


# =============================================================================
# Template selection
# =============================================================================


class TestTemplatePlacer:
    """Tests for TemplatePlacer.apply."""

    def test_applies_one_or_two_templates(
        self, gradient_catalog: WorldCatalog
    ) -> None:
        """Each attempt stamps between one and two templates."""
        placer = TemplatePlacer([square_template(2)])
        counts = set()

        for seed in range(50):
            grid = WorldGrid.initialize(6, 6, gradient_catalog)
            counts.add(len(placer.apply(grid, random.Random(seed))))

        assert counts == {1, 2}

    def test_no_templates_draws_nothing(self, gradient_catalog: WorldCatalog) -> None:
        """An empty template list is a no-op that leaves the rng untouched."""
        grid = WorldGrid.initialize(4, 4, gradient_catalog)
        rng = random.Random(1)
        before = rng.getstate()

        assert TemplatePlacer([]).apply(grid, rng) == []
        assert rng.getstate() == before
        assert grid.entropy(0, 0) == 3

    def test_choice_is_weighted(self) -> None:
        """Heavier templates are chosen proportionally more often."""
        heavy = square_template(1, template_id="heavy", weight=9)
        light = square_template(1, template_id="light", weight=1)
        placer = TemplatePlacer([heavy, light])
        rng = random.Random(42)

        picks = [placer.choose(rng).id for _ in range(1000)]

        assert picks.count("heavy") > 800

    def test_records_stamps_in_application_order(
        self, gradient_catalog: WorldCatalog
    ) -> None:
        """Stamp records carry the template, origin and seeded cell count."""
        template = square_template(2, TemplatePlacement.TOP_LEFT, terrain_id="C")
        grid = WorldGrid.initialize(4, 4, gradient_catalog)

        stamped = TemplatePlacer([template]).apply(grid, random.Random(3))

        assert stamped
        for record in stamped:
            assert record.template is template
            assert record.origin == (0, 0)
            assert record.cells_seeded == 4

    def test_placement_parse_accepts_aliases(self) -> None:
        """Placement names accept the underscore spelling."""
        assert TemplatePlacement.parse("top_left") is TemplatePlacement.TOP_LEFT
        assert TemplatePlacement.parse("CENTER") is TemplatePlacement.CENTER

    def test_placement_parse_rejects_unknown(self) -> None:
        """Unknown placement modes are configuration errors."""
        with pytest.raises(ConfigurationError):
            TemplatePlacement.parse("middle")
