"""Visibility recomputation service for hexfog.

The owning application calls into this service synchronously right after
every state-changing event (unit moved, city founded, unit removed, turn
advanced). Each call rebuilds the spatial index, recomputes the acting
player's fog, diffs it against the last published snapshot and notifies
subscribers before returning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from hexfog.domain.diff import VisibilitySnapshot, publish_snapshot
from hexfog.domain.enums import VisibilityState
from hexfog.domain.models import City, PlayerID, Tile, Unit
from hexfog.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexfog.domain.selection import SelectionResult, resolve_click
from hexfog.domain.spatial_index import build_spatial_index
from hexfog.domain.visibility import VisibilityTable, apply_visibility, compute_visibility
from hexfog.interfaces.visibility import SnapshotListener
from hexfog.utils.hex_math import HexCoord

logger = logging.getLogger(__name__)


class VisibilityService:
    """Service for keeping each player's fog of war current.

    Every player's states live in a :class:`VisibilityTable` and evolve only
    from that player's own previous states. ``Tile.visibility`` mirrors a
    single viewer: ``local_player`` when configured, otherwise the first
    player the service recomputes. Other players never touch the tiles.
    """

    def __init__(
        self,
        rules: RulesConfig = DEFAULT_RULES,
        *,
        local_player: PlayerID | None = None,
    ) -> None:
        self.rules = rules
        self.local_player = local_player
        self.viewer: PlayerID | None = local_player
        self.table = VisibilityTable()
        self._snapshots: dict[PlayerID, VisibilitySnapshot] = {}
        self._listeners: list[SnapshotListener] = []

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a consumer of published snapshots."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot_for(self, player_id: PlayerID) -> VisibilitySnapshot | None:
        """Return the last snapshot published for a player, if any."""
        return self._snapshots.get(player_id)

    def _previous_states(
        self, player_id: PlayerID
    ) -> Mapping[HexCoord, VisibilityState] | None:
        """Starting view for ``player_id``; ``None`` means read the tile field.

        Only the viewer's first pass is seeded from the tiles, which may carry
        a loaded game's fog. Everyone else starts from their own table entry.
        """
        if player_id not in self._snapshots and self.viewer in (None, player_id):
            return None
        return self.table.states_for(player_id)

    def preview(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        player_id: PlayerID,
    ) -> VisibilitySnapshot:
        """Compute ``player_id``'s view without publishing it.

        Nothing is stored, written back or sent to subscribers, so reads can
        call this freely.
        """
        states = compute_visibility(
            tiles,
            units,
            cities,
            player_id,
            previous=self._previous_states(player_id),
            rules=self.rules,
        )
        return publish_snapshot(self._snapshots.get(player_id), states, player_id)

    def recompute(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        player_id: PlayerID,
    ) -> VisibilitySnapshot:
        """Run the full pipeline for one player and publish the result.

        Args:
            tiles: Every tile on the map
            units: All units currently alive
            cities: All founded cities
            player_id: Player whose view is refreshed

        Returns:
            The newly published snapshot (its ``changed`` set is the diff)

        Raises:
            VisibilityTransitionError: If the viewer's write-back would hide a
                tile that something outside the service revealed
        """
        units = list(units)
        cities = list(cities)
        index = build_spatial_index(tiles, units, cities)

        if self.viewer is None:
            self.viewer = player_id
            logger.info("tile visibility now mirrors %s", player_id)

        states = compute_visibility(
            tiles,
            units,
            cities,
            player_id,
            previous=self._previous_states(player_id),
            rules=self.rules,
            index=index,
        )
        if player_id == self.viewer:
            apply_visibility(tiles, states)
        self.table.update(player_id, states)

        snapshot = publish_snapshot(self._snapshots.get(player_id), states, player_id)
        self._snapshots[player_id] = snapshot

        logger.debug(
            "published visibility for %s: %d tiles, %d changed",
            player_id,
            len(snapshot.states),
            len(snapshot.changed),
        )
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    # --- Event entry points -------------------------------------------------------

    def on_unit_moved(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        unit: Unit,
    ) -> VisibilitySnapshot:
        """Refresh the moving unit's owner after its position changed."""
        return self.recompute(tiles, units, cities, unit.owner)

    def on_city_founded(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        city: City,
    ) -> VisibilitySnapshot:
        return self.recompute(tiles, units, cities, city.owner)

    def on_unit_removed(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        owner: PlayerID,
    ) -> VisibilitySnapshot:
        """Refresh ``owner`` after one of their units died or was consumed.

        ``units`` must already exclude the removed unit.
        """
        return self.recompute(tiles, units, cities, owner)

    def on_turn_advanced(
        self,
        tiles: Sequence[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        players: Iterable[PlayerID],
    ) -> dict[PlayerID, VisibilitySnapshot]:
        """Refresh every player at the end of a turn."""
        units = list(units)
        cities = list(cities)
        return {
            player_id: self.recompute(tiles, units, cities, player_id) for player_id in players
        }

    def resolve_click(
        self,
        tiles: Iterable[Tile],
        units: Iterable[Unit],
        cities: Iterable[City],
        coord: HexCoord,
    ) -> SelectionResult:
        """Route a click at ``coord`` against the current collections."""
        return resolve_click(build_spatial_index(tiles, units, cities), coord)
