"""Enumerations used across the hexfog domain."""

from __future__ import annotations

from enum import StrEnum


class VisibilityState(StrEnum):
    """Tri-state fog of war classification of a tile for one player.

    Allowed transitions: Hidden -> Visible, Visible -> Explored,
    Explored -> Visible. Nothing ever returns to Hidden.
    """

    HIDDEN = "hidden"
    EXPLORED = "explored"
    VISIBLE = "visible"


class TerrainType(StrEnum):
    """Base terrain of a tile."""

    PLAINS = "plains"
    GRASSLAND = "grassland"
    DESERT = "desert"
    TUNDRA = "tundra"
    SNOW = "snow"
    COAST = "coast"
    OCEAN = "ocean"
    MOUNTAIN = "mountain"


class TerrainFeature(StrEnum):
    """Features layered on top of the base terrain."""

    FOREST = "forest"
    JUNGLE = "jungle"
    MARSH = "marsh"
    HILLS = "hills"
    RIVER = "river"
    OASIS = "oasis"


class ResourceType(StrEnum):
    """Map resources."""

    WHEAT = "wheat"
    CATTLE = "cattle"
    FISH = "fish"
    IRON = "iron"
    HORSES = "horses"
    COAL = "coal"
    OIL = "oil"
    GOLD = "gold"
    GEMS = "gems"
    MARBLE = "marble"
    STONE = "stone"


class UnitType(StrEnum):
    """Unit types; each maps to a sight range in the rules config."""

    SETTLER = "settler"
    WORKER = "worker"
    WARRIOR = "warrior"
    ARCHER = "archer"
    SWORDSMAN = "swordsman"
    HORSEMAN = "horseman"
    CATAPULT = "catapult"
    SCOUT = "scout"


class Promotion(StrEnum):
    """Unit promotions. Only SENTRY affects vision."""

    SENTRY = "sentry"
    SHOCK = "shock"
    DRILL = "drill"
    MEDIC = "medic"
    MARCH = "march"
