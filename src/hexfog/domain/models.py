"""Dataclasses describing the map entities the visibility engine reads.

Tiles, units and cities are owned by the surrounding game state. The domain
layer reads them and writes back a single field, ``Tile.visibility``, through
:func:`hexfog.domain.visibility.apply_visibility`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

from hexfog.utils.hex_math import HexCoord

from .enums import Promotion, ResourceType, TerrainFeature, TerrainType, UnitType, VisibilityState

# --- Strongly typed identifiers -------------------------------------------------

PlayerID = NewType("PlayerID", str)
UnitID = NewType("UnitID", str)
CityID = NewType("CityID", str)


# --- Core dataclasses -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Resource:
    """Resource deposit on a tile."""

    kind: ResourceType
    quantity: int = 1


@dataclass(slots=True)
class Tile:
    """Map hex tile.

    ``coord`` is fixed at map generation. Only ``owner`` and ``visibility``
    change afterwards.
    """

    coord: HexCoord
    terrain: TerrainType
    features: frozenset[TerrainFeature] = frozenset()
    resource: Resource | None = None
    improvement: str | None = None
    owner: PlayerID | None = None
    visibility: VisibilityState = VisibilityState.HIDDEN

    def has_feature(self, feature: TerrainFeature) -> bool:
        return feature in self.features


@dataclass(slots=True)
class Unit:
    """A unit on the map. Moves by reassigning ``position``."""

    id: UnitID
    unit_type: UnitType
    owner: PlayerID
    position: HexCoord
    promotions: set[Promotion] = field(default_factory=set)


@dataclass(frozen=True, slots=True)
class City:
    """A founded city. Cities never move."""

    id: CityID
    name: str
    owner: PlayerID
    position: HexCoord
    is_capital: bool = False
