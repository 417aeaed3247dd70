"""Immutable world content: terrain kinds, location kinds and templates.

A WorldCatalog bundles everything the generator needs to know about a theme.
It is built once (usually from a mapping that was deserialized from JSON) and
handed to the GenerationDriver explicitly; nothing here is process-global.

Catalog shape accepted by catalog_from_mapping():

    {
        "terrain": {
            "forest": {"weight": 30, "adjacent": ["forest", "meadow"]},
            ...
        },
        "locations": {
            "wharf": {"label": "River Wharf", "allowed_terrain": ["meadow"],
                      "required_adjacent": ["water"]},
            ...
        },
        "templates": {
            "river_flow": {"weight": 4, "placement": "any",
                           "pattern": [[None, "water", None], ...]},
            ...
        },
    }
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from vellum.types import LocationID, TemplateID, TerrainID

# Possibility sets are stored as bits of a uint64 per cell.
MAX_TERRAIN_KINDS = 64


class ConfigurationError(Exception):
    """Raised when world content or grid dimensions are unusable.

    This is always raised before any generation work begins.
    """

    pass


class TemplatePlacement(StrEnum):
    """Where a template's pattern is stamped onto the grid."""

    CENTER = "center"
    TOP_LEFT = "top-left"
    ANY = "any"

    @classmethod
    def parse(cls, value: str | TemplatePlacement) -> TemplatePlacement:
        """Parse a placement name, accepting the ``top_left`` spelling."""
        if isinstance(value, TemplatePlacement):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(
                f"Unknown template placement {value!r}; "
                f"expected one of {[p.value for p in cls]}"
            ) from None


@dataclass(frozen=True)
class TerrainKind:
    """A terrain kind and the terrain it tolerates next to it.

    Attributes:
        id: Unique terrain identifier.
        weight: Relative selection weight (finite and positive).
        adjacent: Terrain ids allowed in the 4-neighbourhood of a cell holding
            this terrain. Not symmetrized: ``b in a.adjacent`` says nothing
            about ``a in b.adjacent``.
        label: Display name, used for map titles.
    """

    id: TerrainID
    weight: float = 1.0
    adjacent: frozenset[TerrainID] = frozenset()
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.id.replace("_", " ").title()


@dataclass(frozen=True)
class LocationKind:
    """A point of interest that can be placed on the finished terrain.

    Attributes:
        id: Unique location identifier.
        label: Display name.
        emoji: Display glyph.
        allowed_terrain: Terrain the location may sit on. None means any.
        required_adjacent: Terrain that must all be present among the
            cell's 4-neighbours. None or empty means no requirement.
    """

    id: LocationID
    label: str = ""
    emoji: str = ""
    allowed_terrain: frozenset[TerrainID] | None = None
    required_adjacent: frozenset[TerrainID] | None = None

    @property
    def display_name(self) -> str:
        return self.label or self.id.replace("_", " ").title()


@dataclass(frozen=True)
class Template:
    """A partial terrain pattern stamped onto the grid before solving.

    Attributes:
        id: Unique template identifier.
        weight: Relative selection weight (finite and positive).
        placement: How the stamp origin is chosen.
        pattern: Rows of terrain ids; None leaves the cell untouched.
    """

    id: TemplateID
    pattern: tuple[tuple[TerrainID | None, ...], ...]
    weight: float = 1.0
    placement: TemplatePlacement = TemplatePlacement.ANY

    @property
    def width(self) -> int:
        return max((len(row) for row in self.pattern), default=0)

    @property
    def height(self) -> int:
        return len(self.pattern)

    def terrain_ids(self) -> set[TerrainID]:
        return {cell for row in self.pattern for cell in row if cell}


@dataclass(frozen=True)
class WorldCatalog:
    """Immutable configuration bundle handed to the generation driver.

    Attributes:
        terrains: Terrain kinds keyed by id, in declaration order.
        locations: Location kinds in declaration order.
        templates: Templates in declaration order.
    """

    terrains: Mapping[TerrainID, TerrainKind]
    locations: tuple[LocationKind, ...] = ()
    templates: tuple[Template, ...] = ()
    _validated: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "terrains", MappingProxyType(dict(self.terrains)))
        object.__setattr__(self, "locations", tuple(self.locations))
        object.__setattr__(self, "templates", tuple(self.templates))

    @classmethod
    def from_kinds(
        cls,
        terrains: Iterable[TerrainKind],
        locations: Iterable[LocationKind] = (),
        templates: Iterable[Template] = (),
    ) -> WorldCatalog:
        return cls(
            terrains={terrain.id: terrain for terrain in terrains},
            locations=tuple(locations),
            templates=tuple(templates),
        )

    @property
    def terrain_ids(self) -> tuple[TerrainID, ...]:
        return tuple(self.terrains)

    def location(self, location_id: LocationID) -> LocationKind:
        for kind in self.locations:
            if kind.id == location_id:
                return kind
        raise KeyError(location_id)

    def validate(self) -> None:
        """Check internal consistency.

        Raises:
            ConfigurationError: On the first problem found.
        """
        if self._validated:
            return

        if not self.terrains:
            raise ConfigurationError("Terrain catalog is empty")
        if len(self.terrains) > MAX_TERRAIN_KINDS:
            raise ConfigurationError(
                f"At most {MAX_TERRAIN_KINDS} terrain kinds are supported, "
                f"got {len(self.terrains)}"
            )

        known = set(self.terrains)
        for terrain_id, terrain in self.terrains.items():
            if terrain_id != terrain.id:
                raise ConfigurationError(
                    f"Terrain keyed as {terrain_id!r} declares id {terrain.id!r}"
                )
            if not _is_usable_weight(terrain.weight):
                raise ConfigurationError(
                    f"Terrain {terrain_id!r} has invalid weight {terrain.weight}"
                )
            _check_known(terrain.adjacent, known, f"terrain {terrain_id!r} adjacency")

        seen_locations: set[LocationID] = set()
        for kind in self.locations:
            if kind.id in seen_locations:
                raise ConfigurationError(f"Duplicate location kind {kind.id!r}")
            seen_locations.add(kind.id)
            _check_known(
                kind.allowed_terrain or (), known, f"location {kind.id!r} terrain"
            )
            _check_known(
                kind.required_adjacent or (), known, f"location {kind.id!r} adjacency"
            )

        for template in self.templates:
            if not _is_usable_weight(template.weight):
                raise ConfigurationError(
                    f"Template {template.id!r} has invalid weight "
                    f"{template.weight}"
                )
            _check_known(
                template.terrain_ids(), known, f"template {template.id!r} pattern"
            )

        object.__setattr__(self, "_validated", True)


def _check_known(ids: Iterable[TerrainID], known: set[TerrainID], where: str) -> None:
    unknown = sorted(set(ids) - known)
    if unknown:
        raise ConfigurationError(f"Unknown terrain id(s) {unknown} in {where}")


def _is_usable_weight(weight: float) -> bool:
    # random.choices rejects infinite and NaN totals mid-generation.
    return math.isfinite(weight) and weight > 0


# =============================================================================
# Mapping parser
# =============================================================================


def catalog_from_mapping(data: Mapping[str, Any]) -> WorldCatalog:
    """Build and validate a WorldCatalog from plain mappings.

    Args:
        data: Mapping with ``terrain``, optional ``locations`` and optional
            ``templates`` sections (see module docstring).

    Returns:
        A validated WorldCatalog.

    Raises:
        ConfigurationError: If the data is malformed or inconsistent.
    """
    terrains = [
        TerrainKind(
            id=terrain_id,
            weight=_number(entry.get("weight", 1), f"terrain {terrain_id!r} weight"),
            adjacent=frozenset(entry.get("adjacent") or ()),
            label=entry.get("label", ""),
        )
        for terrain_id, entry in _keyed_entries(data.get("terrain") or {}, "terrain")
    ]

    locations = [
        LocationKind(
            id=location_id,
            label=entry.get("label", ""),
            emoji=entry.get("emoji", ""),
            allowed_terrain=_optional_set(entry.get("allowed_terrain")),
            required_adjacent=_optional_set(entry.get("required_adjacent")),
        )
        for location_id, entry in _keyed_entries(
            data.get("locations") or {}, "locations"
        )
    ]

    templates = [
        Template(
            id=template_id,
            weight=_number(entry.get("weight", 1), f"template {template_id!r} weight"),
            placement=TemplatePlacement.parse(entry.get("placement", "any")),
            pattern=_pattern(entry.get("pattern") or (), template_id),
        )
        for template_id, entry in _named_entries(data.get("templates") or {})
    ]

    catalog = WorldCatalog.from_kinds(terrains, locations, templates)
    catalog.validate()
    return catalog


def _keyed_entries(section: Any, name: str) -> list[tuple[str, Mapping[str, Any]]]:
    """Pairs of (id, definition) from a section keyed by id."""
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"{name!r} must be a mapping of id -> definition")
    for entry_id, entry in section.items():
        _check_definition(entry, f"{name} entry {entry_id!r}")
    return list(section.items())


def _named_entries(
    section: Mapping[str, Any] | Sequence[Any],
) -> list[tuple[str, Mapping[str, Any]]]:
    """Accept templates either keyed by id or as a list of dicts."""
    if isinstance(section, Mapping):
        return _keyed_entries(section, "templates")
    if isinstance(section, str) or not isinstance(section, Sequence):
        raise ConfigurationError("'templates' must be a mapping or a list")

    entries = []
    for index, entry in enumerate(section):
        _check_definition(entry, f"templates entry {index}")
        entries.append((str(entry.get("id", f"template_{index}")), entry))
    return entries


def _check_definition(entry: Any, where: str) -> None:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Expected a mapping for {where}, got {entry!r}")


def _number(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Expected a number for {where}, got {value!r}") from None


def _optional_set(value: Iterable[TerrainID] | None) -> frozenset[TerrainID] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(value)


def _pattern(rows: Iterable[Iterable[Any]], template_id: str) -> tuple[tuple[Any, ...], ...]:
    pattern: list[tuple[TerrainID | None, ...]] = []
    for row in rows:
        if isinstance(row, str):
            raise ConfigurationError(
                f"Template {template_id!r} pattern rows must be sequences"
            )
        # Empty strings mark "no constraint" just like None.
        pattern.append(tuple(cell or None for cell in row))
    return tuple(pattern)
