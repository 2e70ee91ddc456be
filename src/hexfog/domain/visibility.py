"""Visibility domain logic for hexfog.

Pure functions computing one player's fog of war from the sight ranges of the
units and cities they own, plus the guard rails around the visibility state
machine:

    Hidden --> Visible <--> Explored

A tile becomes Visible only while it sits inside some owned sight radius.
A Visible tile that drops out of every radius becomes Explored. Nothing ever
goes back to Hidden.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from hexfog.domain.enums import Promotion, TerrainFeature, VisibilityState
from hexfog.domain.models import City, PlayerID, Tile, Unit
from hexfog.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexfog.domain.spatial_index import SpatialIndex, build_spatial_index
from hexfog.utils.hex_math import HexCoord, hex_distance, hexes_in_range

logger = logging.getLogger(__name__)

FOG_OPACITY: Mapping[VisibilityState, float] = MappingProxyType(
    {
        VisibilityState.HIDDEN: 0.0,
        VisibilityState.EXPLORED: 0.5,
        VisibilityState.VISIBLE: 1.0,
    }
)


class VisibilityTransitionError(ValueError):
    """Raised when a caller tries to move a tile back to Hidden."""

    def __init__(self, coord: HexCoord, old: VisibilityState, new: VisibilityState) -> None:
        self.coord = coord
        self.old = old
        self.new = new
        super().__init__(f"illegal visibility transition at {coord}: {old} -> {new}")


# --- Sight ranges ---------------------------------------------------------------


def unit_sight_range(
    unit: Unit, tile: Tile | None = None, rules: RulesConfig = DEFAULT_RULES
) -> int:
    """Calculate a unit's sight radius in hexes.

    Base value comes from the unit-type table (default 2).
    Standing on hills: +1.
    Sentry promotion: +1.

    Args:
        unit: The unit looking around
        tile: Tile the unit stands on, if it is on the map
        rules: Rule constants

    Returns:
        Radius in hexes, never negative
    """
    vision = rules.visibility
    radius = vision.base_sight_for(unit.unit_type)
    if tile is not None and tile.has_feature(TerrainFeature.HILLS):
        radius += vision.hills_bonus
    if Promotion.SENTRY in unit.promotions:
        radius += vision.sentry_bonus
    return max(0, radius)


def city_sight_range(city: City, rules: RulesConfig = DEFAULT_RULES) -> int:  # noqa: ARG001
    """Cities see a constant radius regardless of size or position."""
    return max(0, rules.visibility.city_sight)


def sight_sources(
    index: SpatialIndex,
    units: Iterable[Unit],
    cities: Iterable[City],
    player_id: PlayerID,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[tuple[HexCoord, int]]:
    """Collect (position, radius) pairs for everything ``player_id`` owns."""

    sources: list[tuple[HexCoord, int]] = []
    for unit in units:
        if unit.owner == player_id:
            tile = index.tiles.get(unit.position)
            sources.append((unit.position, unit_sight_range(unit, tile, rules)))
    for city in cities:
        if city.owner == player_id:
            sources.append((city.position, city_sight_range(city, rules)))
    return sources


def _ball_size(radius: int) -> int:
    return 3 * radius * radius + 3 * radius + 1


def in_sight_coordinates(
    index: SpatialIndex,
    sources: Iterable[tuple[HexCoord, int]],
) -> set[HexCoord]:
    """Union of the sight balls of ``sources``, restricted to on-map tiles.

    Small radii walk the ball and probe the index; a ball larger than the map
    scans the tiles instead.
    """

    visible: set[HexCoord] = set()
    map_size = len(index.tiles)
    for center, radius in sources:
        if _ball_size(radius) <= map_size:
            visible.update(c for c in hexes_in_range(center, radius) if c in index.tiles)
        else:
            visible.update(c for c in index.tiles if hex_distance(center, c) <= radius)
    return visible


# --- State machine --------------------------------------------------------------


def next_state(previous: VisibilityState, in_sight: bool) -> VisibilityState:
    """Apply one recomputation step to a single tile."""

    if in_sight:
        return VisibilityState.VISIBLE
    if previous == VisibilityState.VISIBLE:
        return VisibilityState.EXPLORED
    return previous


def check_transition(coord: HexCoord, old: VisibilityState, new: VisibilityState) -> None:
    """Raise if ``old -> new`` would send a seen tile back to Hidden."""

    if new == VisibilityState.HIDDEN and old != VisibilityState.HIDDEN:
        raise VisibilityTransitionError(coord, old, new)


def compute_visibility(
    tiles: Iterable[Tile],
    units: Iterable[Unit],
    cities: Iterable[City],
    player_id: PlayerID,
    *,
    previous: Mapping[HexCoord, VisibilityState] | None = None,
    rules: RulesConfig = DEFAULT_RULES,
    index: SpatialIndex | None = None,
) -> dict[HexCoord, VisibilityState]:
    """Compute ``player_id``'s visibility of every tile on the map.

    Args:
        tiles: Every tile on the map
        units: All units (any owner)
        cities: All cities (any owner)
        player_id: Player whose view is computed
        previous: The player's previous states. When omitted the tiles'
            own ``visibility`` field is used. Missing coordinates count as
            Hidden.
        rules: Sight-range constants
        index: A prebuilt index over the same collections, to skip a rebuild

    Returns:
        Mapping of every tile coordinate to its new state. Inputs are not
        mutated; use :func:`apply_visibility` to write back.
    """
    tiles = list(tiles)
    units = list(units)
    cities = list(cities)
    if index is None:
        index = build_spatial_index(tiles, units, cities)

    sources = sight_sources(index, units, cities, player_id, rules)
    in_sight = in_sight_coordinates(index, sources)

    states: dict[HexCoord, VisibilityState] = {}
    for tile in tiles:
        if previous is None:
            before = tile.visibility
        else:
            before = previous.get(tile.coord, VisibilityState.HIDDEN)
        states[tile.coord] = next_state(before, tile.coord in in_sight)

    logger.debug(
        "visibility for %s: %d sources, %d of %d tiles in sight",
        player_id,
        len(sources),
        len(in_sight),
        len(states),
    )
    return states


def apply_visibility(tiles: Iterable[Tile], states: Mapping[HexCoord, VisibilityState]) -> int:
    """Write ``states`` back onto the tiles' ``visibility`` field.

    Every transition is validated before anything is written, so a rejected
    update leaves all tiles untouched. Tiles without an entry keep their state.

    Returns:
        Number of tiles whose state changed

    Raises:
        VisibilityTransitionError: If any tile would return to Hidden
    """
    updates: list[tuple[Tile, VisibilityState]] = []
    for tile in tiles:
        new = states.get(tile.coord)
        if new is None or new == tile.visibility:
            continue
        check_transition(tile.coord, tile.visibility, new)
        updates.append((tile, new))

    for tile, new in updates:
        tile.visibility = new
    return len(updates)


class VisibilityTable:
    """Per-player visibility, keyed by (coordinate, player).

    Each player's view evolves independently; the shared ``Tile.visibility``
    field only mirrors whichever player is the local viewer.
    """

    def __init__(self) -> None:
        self._states: dict[PlayerID, dict[HexCoord, VisibilityState]] = {}

    def players(self) -> list[PlayerID]:
        return sorted(self._states)

    def get(self, coord: HexCoord, player_id: PlayerID) -> VisibilityState:
        return self._states.get(player_id, {}).get(coord, VisibilityState.HIDDEN)

    def states_for(self, player_id: PlayerID) -> Mapping[HexCoord, VisibilityState]:
        """Read-only view of one player's states (empty for unknown players)."""
        return MappingProxyType(self._states.get(player_id, {}))

    def update(self, player_id: PlayerID, states: Mapping[HexCoord, VisibilityState]) -> None:
        """Merge new states for a player after validating every transition."""

        current = self._states.get(player_id, {})
        for coord, new in states.items():
            check_transition(coord, current.get(coord, VisibilityState.HIDDEN), new)
        merged = dict(current)
        merged.update(states)
        self._states[player_id] = merged

    def forget(self, player_id: PlayerID) -> None:
        """Drop a player's view entirely (e.g. the player left the game)."""
        self._states.pop(player_id, None)


# --- Render policy --------------------------------------------------------------


def fog_opacity(state: VisibilityState) -> float:
    """How much of a tile the renderer reveals: 0 hidden, 0.5 explored, 1 visible."""
    return FOG_OPACITY[state]


def should_draw_unit(state: VisibilityState | None) -> bool:
    """Units are drawn on Visible tiles only, never on merely explored ones."""
    return state == VisibilityState.VISIBLE


def should_draw_city(state: VisibilityState | None) -> bool:
    return state in (VisibilityState.VISIBLE, VisibilityState.EXPLORED)


def is_city_dimmed(state: VisibilityState | None) -> bool:
    return state == VisibilityState.EXPLORED


def visible_units(
    index: SpatialIndex, states: Mapping[HexCoord, VisibilityState]
) -> list[Unit]:
    """Units the renderer may draw for a viewer with ``states``."""
    return [unit for coord, unit in index.units.items() if should_draw_unit(states.get(coord))]


def visible_cities(
    index: SpatialIndex, states: Mapping[HexCoord, VisibilityState]
) -> list[City]:
    """Cities the renderer may draw (dimmed on explored tiles)."""
    return [city for coord, city in index.cities.items() if should_draw_city(states.get(coord))]
