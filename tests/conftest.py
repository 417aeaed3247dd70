from __future__ import annotations

import pytest

from tests.helpers import make_catalog
from vellum.environment.catalogs import (
    LocationKind,
    Template,
    TemplatePlacement,
    WorldCatalog,
)
from vellum.environment.themes import load_fantasy_catalog


@pytest.fixture
def two_terrain_catalog() -> WorldCatalog:
    """A and B, both weight 10, each allowed next to both."""
    return make_catalog(
        {"A": ["A", "B"], "B": ["A", "B"]},
        weights={"A": 10, "B": 10},
    )


@pytest.fixture
def gradient_catalog() -> WorldCatalog:
    """A <-> B <-> C gradient: A and C may never touch.

    B is allowed next to everything, so propagation can never empty a cell
    and generation never contradicts.
    """
    return make_catalog(
        {"A": ["A", "B"], "B": ["A", "B", "C"], "C": ["B", "C"]},
        weights={"A": 3, "B": 2, "C": 1},
    )


@pytest.fixture
def impossible_catalog() -> WorldCatalog:
    """A single terrain that tolerates nothing next to it."""
    return make_catalog({"A": []})


@pytest.fixture
def isolated_c_catalog() -> WorldCatalog:
    """A/B grow from a top-left seed; C only tolerates itself.

    The top-left template forces (0, 0) to collapse first. Every later
    selection then comes from the narrowed frontier, so C never appears.
    """
    return make_catalog(
        {"A": ["A", "B"], "B": ["A", "B"], "C": ["C"]},
        locations=[
            LocationKind(id="shrine", required_adjacent=frozenset({"C"})),
            LocationKind(id="camp"),
        ],
        templates=[
            Template(
                id="corner",
                pattern=(("A",),),
                placement=TemplatePlacement.TOP_LEFT,
            )
        ],
    )


@pytest.fixture
def fantasy_catalog() -> WorldCatalog:
    return load_fantasy_catalog()
