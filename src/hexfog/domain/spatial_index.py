"""Coordinate-keyed lookups over tiles, units and cities.

The index is derived data. It is rebuilt from the authoritative collections
after every material change (a unit moves, a city is founded, a unit dies)
and is never patched in place or consulted as a record of which entities
exist.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from hexfog.domain.models import City, Tile, Unit
from hexfog.utils.hex_math import HexCoord, hex_neighbors

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SpatialIndex:
    """Three read-only lookups keyed by axial coordinate."""

    tiles: Mapping[HexCoord, Tile]
    units: Mapping[HexCoord, Unit]
    cities: Mapping[HexCoord, City]

    def __len__(self) -> int:
        return len(self.tiles)

    def __contains__(self, coord: object) -> bool:
        return coord in self.tiles


def build_spatial_index(
    tiles: Iterable[Tile],
    units: Iterable[Unit] = (),
    cities: Iterable[City] = (),
) -> SpatialIndex:
    """Build a fresh index in one linear pass over each collection.

    Two units (or two cities) recorded on one coordinate is a caller defect;
    the later entity wins and a warning is logged.
    """

    tile_map: dict[HexCoord, Tile] = {}
    for tile in tiles:
        tile_map[tile.coord] = tile

    unit_map: dict[HexCoord, Unit] = {}
    for unit in units:
        previous = unit_map.get(unit.position)
        if previous is not None:
            logger.warning(
                "units %s and %s share coordinate %s; keeping %s",
                previous.id,
                unit.id,
                unit.position,
                unit.id,
            )
        unit_map[unit.position] = unit

    city_map: dict[HexCoord, City] = {}
    for city in cities:
        if city.position in city_map:
            logger.warning(
                "cities %s and %s share coordinate %s; keeping %s",
                city_map[city.position].id,
                city.id,
                city.position,
                city.id,
            )
        city_map[city.position] = city

    return SpatialIndex(
        tiles=MappingProxyType(tile_map),
        units=MappingProxyType(unit_map),
        cities=MappingProxyType(city_map),
    )


def lookup_tile(index: SpatialIndex, coord: HexCoord) -> Tile | None:
    return index.tiles.get(coord)


def lookup_unit(index: SpatialIndex, coord: HexCoord) -> Unit | None:
    return index.units.get(coord)


def lookup_city(index: SpatialIndex, coord: HexCoord) -> City | None:
    return index.cities.get(coord)


def neighbor_tiles(index: SpatialIndex, coord: HexCoord) -> list[Tile]:
    """Return the on-map tiles adjacent to ``coord`` (0 to 6 of them)."""

    return [index.tiles[n] for n in hex_neighbors(coord) if n in index.tiles]
