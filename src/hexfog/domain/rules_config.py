"""Declarative rule configuration for the visibility engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .enums import UnitType

_UNIT_SIGHT_OVERRIDES: Mapping[UnitType, int] = MappingProxyType(
    {
        UnitType.SCOUT: 3,
    }
)


@dataclass(frozen=True, slots=True)
class VisibilityRules:
    """Sight radii in hexes."""

    default_unit_sight: int = 2
    unit_sight: Mapping[UnitType, int] = field(default_factory=lambda: _UNIT_SIGHT_OVERRIDES)
    city_sight: int = 2
    hills_bonus: int = 1
    sentry_bonus: int = 1

    def base_sight_for(self, unit_type: UnitType) -> int:
        return self.unit_sight.get(unit_type, self.default_unit_sight)


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container."""

    visibility: VisibilityRules = VisibilityRules()


DEFAULT_RULES = RulesConfig()
