"""Runtime primitives backing the hexfog HTTP API.

A :class:`MapSession` stands in for the game-state store: it owns the
authoritative tile, unit and city collections for one map and forwards every
mutation to the :class:`VisibilityService` synchronously, the way a game
would after each event.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field

from hexfog.config import Settings, get_settings
from hexfog.domain.diff import VisibilitySnapshot
from hexfog.domain.models import City, CityID, PlayerID, Tile, Unit, UnitID
from hexfog.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexfog.domain.selection import SelectionResult
from hexfog.services.visibility_service import VisibilityService
from hexfog.utils.hex_math import HexCoord, HexLayout

logger = logging.getLogger(__name__)


class EntityNotFoundError(LookupError):
    """Unknown map, unit or city identifier."""


class EntityConflictError(ValueError):
    """Identifier already in use, or a placement the map cannot hold."""


@dataclass(slots=True)
class MapSession:
    """One live map and the visibility pipeline attached to it."""

    id: int
    tiles: list[Tile]
    service: VisibilityService
    units: dict[UnitID, Unit] = field(default_factory=dict)
    cities: dict[CityID, City] = field(default_factory=dict)
    turn: int = 0
    _on_map: set[HexCoord] = field(init=False, repr=False, default_factory=set)

    def __post_init__(self) -> None:
        coords = [tile.coord for tile in self.tiles]
        if len(set(coords)) != len(coords):
            msg = "tile coordinates must be unique"
            raise EntityConflictError(msg)
        self._on_map = set(coords)

    @property
    def players(self) -> list[PlayerID]:
        owners = {unit.owner for unit in self.units.values()}
        owners.update(city.owner for city in self.cities.values())
        owners.update(self.service.table.players())
        return sorted(owners)

    def _require_on_map(self, coord: HexCoord) -> None:
        if coord not in self._on_map:
            msg = f"coordinate {coord} is not on the map"
            raise EntityConflictError(msg)

    def _require_unoccupied(self, coord: HexCoord, *, ignore: UnitID | None = None) -> None:
        for unit in self.units.values():
            if unit.position == coord and unit.id != ignore:
                msg = f"unit {unit.id} already occupies {coord}"
                raise EntityConflictError(msg)

    def get_unit(self, unit_id: UnitID) -> Unit:
        try:
            return self.units[unit_id]
        except KeyError as exc:
            msg = f"unit {unit_id} not found"
            raise EntityNotFoundError(msg) from exc

    def add_unit(self, unit: Unit) -> VisibilitySnapshot:
        if unit.id in self.units:
            msg = f"unit {unit.id} already exists"
            raise EntityConflictError(msg)
        self._require_on_map(unit.position)
        self._require_unoccupied(unit.position)
        self.units[unit.id] = unit
        return self.service.on_unit_moved(
            self.tiles, self.units.values(), self.cities.values(), unit
        )

    def move_unit(self, unit_id: UnitID, destination: HexCoord) -> VisibilitySnapshot:
        unit = self.get_unit(unit_id)
        self._require_on_map(destination)
        self._require_unoccupied(destination, ignore=unit_id)
        unit.position = destination
        return self.service.on_unit_moved(
            self.tiles, self.units.values(), self.cities.values(), unit
        )

    def remove_unit(self, unit_id: UnitID) -> VisibilitySnapshot:
        unit = self.get_unit(unit_id)
        del self.units[unit_id]
        return self.service.on_unit_removed(
            self.tiles, self.units.values(), self.cities.values(), unit.owner
        )

    def found_city(self, city: City) -> VisibilitySnapshot:
        if city.id in self.cities:
            msg = f"city {city.id} already exists"
            raise EntityConflictError(msg)
        self._require_on_map(city.position)
        if any(existing.position == city.position for existing in self.cities.values()):
            msg = f"a city already stands at {city.position}"
            raise EntityConflictError(msg)
        self.cities[city.id] = city
        return self.service.on_city_founded(
            self.tiles, self.units.values(), self.cities.values(), city
        )

    def advance_turn(
        self, players: list[PlayerID] | None = None
    ) -> dict[PlayerID, VisibilitySnapshot]:
        self.turn += 1
        targets = players if players is not None else self.players
        return self.service.on_turn_advanced(
            self.tiles, self.units.values(), self.cities.values(), targets
        )

    def visibility_for(self, player_id: PlayerID) -> VisibilitySnapshot:
        """Return the player's last snapshot, or a read-only preview if none exists.

        Reading never publishes, so tile states and subscribers are untouched.
        """

        snapshot = self.service.snapshot_for(player_id)
        if snapshot is None:
            snapshot = self.service.preview(
                self.tiles, self.units.values(), self.cities.values(), player_id
            )
        return snapshot

    def select(self, coord: HexCoord) -> SelectionResult:
        return self.service.resolve_click(
            self.tiles, self.units.values(), self.cities.values(), coord
        )


class MapSessionStore:
    """In-memory registry of live map sessions."""

    def __init__(
        self, *, rules: RulesConfig = DEFAULT_RULES, local_player: PlayerID | None = None
    ) -> None:
        self._rules = rules
        self._local_player = local_player
        self._sessions: dict[int, MapSession] = {}
        self._ids = itertools.count(1)

    def create(self, tiles: list[Tile]) -> MapSession:
        service = VisibilityService(self._rules, local_player=self._local_player)
        session = MapSession(id=next(self._ids), tiles=tiles, service=service)
        self._sessions[session.id] = session
        logger.info("created map %s with %d tiles", session.id, len(tiles))
        return session

    def get(self, map_id: int) -> MapSession:
        try:
            return self._sessions[map_id]
        except KeyError as exc:
            msg = f"map {map_id} not found"
            raise EntityNotFoundError(msg) from exc

    def list_sessions(self) -> list[MapSession]:
        return [self._sessions[key] for key in sorted(self._sessions)]


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self, *, settings: Settings | None = None, rules: RulesConfig = DEFAULT_RULES
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = rules
        self.layout = HexLayout(self.settings.hex_size)
        local = self.settings.local_player
        self.maps = MapSessionStore(
            rules=rules, local_player=PlayerID(local) if local is not None else None
        )

    async def shutdown(self) -> None:
        self.layout.clear_cache()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
