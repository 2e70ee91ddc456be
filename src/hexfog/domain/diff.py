"""Visibility diffing between successive computations.

Recomputing a player's fog is cheap enough to do on every event; pushing the
whole map to the renderer each time is not. A :class:`VisibilitySnapshot`
carries the full state plus the set of coordinates that changed since the
previously published snapshot, so consumers touch only those.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from hexfog.domain.enums import VisibilityState
from hexfog.domain.models import PlayerID
from hexfog.utils.hex_math import HexCoord


@dataclass(frozen=True, slots=True)
class VisibilitySnapshot:
    """One published visibility computation for one player."""

    player_id: PlayerID
    states: Mapping[HexCoord, VisibilityState]
    changed: frozenset[HexCoord] = field(default_factory=frozenset)

    def state_of(self, coord: HexCoord) -> VisibilityState | None:
        return self.states.get(coord)

    def changed_states(self) -> dict[HexCoord, VisibilityState | None]:
        """New state of every changed coordinate (``None`` if it disappeared)."""
        return {coord: self.states.get(coord) for coord in sorted(self.changed)}


def diff_visibility(
    previous: VisibilitySnapshot | Mapping[HexCoord, VisibilityState] | None,
    current: Mapping[HexCoord, VisibilityState],
) -> frozenset[HexCoord]:
    """Return the coordinates whose state differs between two computations.

    With no previous snapshot every coordinate in ``current`` is reported.
    A coordinate present on only one side always counts as changed.
    """

    if previous is None:
        return frozenset(current)

    before = previous.states if isinstance(previous, VisibilitySnapshot) else previous
    changed = {coord for coord, state in current.items() if before.get(coord) != state}
    changed.update(coord for coord in before if coord not in current)
    return frozenset(changed)


def publish_snapshot(
    previous: VisibilitySnapshot | None,
    current: Mapping[HexCoord, VisibilityState],
    player_id: PlayerID,
) -> VisibilitySnapshot:
    """Build the snapshot that replaces ``previous``."""

    return VisibilitySnapshot(
        player_id=player_id,
        states=MappingProxyType(dict(current)),
        changed=diff_visibility(previous, current),
    )
