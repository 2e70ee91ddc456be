"""Click routing: decide what a click on a coordinate selects.

Priority is fixed: a unit beats a city, a city beats the bare tile. A unit
may stand on a city's tile, so the city stays reachable once the unit moves
off. A coordinate with no tile yields :class:`NoSelection`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from hexfog.domain.models import CityID, UnitID
from hexfog.domain.spatial_index import SpatialIndex, lookup_city, lookup_tile, lookup_unit
from hexfog.utils.hex_math import HexCoord


@dataclass(frozen=True, slots=True)
class UnitSelected:
    kind: ClassVar[str] = "unit"

    unit_id: UnitID
    coord: HexCoord


@dataclass(frozen=True, slots=True)
class CitySelected:
    kind: ClassVar[str] = "city"

    city_id: CityID
    coord: HexCoord


@dataclass(frozen=True, slots=True)
class TileSelected:
    kind: ClassVar[str] = "tile"

    coord: HexCoord


@dataclass(frozen=True, slots=True)
class NoSelection:
    """Nothing to select, e.g. a click outside the map."""

    kind: ClassVar[str] = "none"

    coord: HexCoord | None = None


SelectionResult = UnitSelected | CitySelected | TileSelected | NoSelection


def resolve_click(index: SpatialIndex, coord: HexCoord) -> SelectionResult:
    """Resolve a click at ``coord`` against a freshly built index."""

    unit = lookup_unit(index, coord)
    if unit is not None:
        return UnitSelected(unit_id=unit.id, coord=coord)

    city = lookup_city(index, coord)
    if city is not None:
        return CitySelected(city_id=city.id, coord=coord)

    if lookup_tile(index, coord) is not None:
        return TileSelected(coord=coord)

    return NoSelection(coord=coord)
