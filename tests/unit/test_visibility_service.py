"""Unit tests for VisibilityService."""

import pytest

from factories import P1, P2, line_map, make_city, make_unit

from hexfog.domain.enums import VisibilityState
from hexfog.domain.rules_config import RulesConfig, VisibilityRules
from hexfog.domain.selection import UnitSelected
from hexfog.domain.visibility import VisibilityTransitionError, should_draw_unit
from hexfog.services.visibility_service import VisibilityService
from hexfog.utils.hex_math import HexCoord

HIDDEN = VisibilityState.HIDDEN
EXPLORED = VisibilityState.EXPLORED
VISIBLE = VisibilityState.VISIBLE

ONE_HEX_SIGHT = RulesConfig(visibility=VisibilityRules(default_unit_sight=1, unit_sight={}))


def c(q: int, r: int) -> HexCoord:
    return HexCoord(q=q, r=r)


class TestVisibilityService:
    """Test cases for the mode without a configured local player."""

    def setup_method(self):
        self.service = VisibilityService(ONE_HEX_SIGHT)
        self.tiles = line_map(5)
        self.received = []
        self.service.subscribe(self.received.append)

    def test_first_recompute_reports_every_tile(self):
        warrior = make_unit("w1", 0, 0)

        snapshot = self.service.on_unit_moved(self.tiles, [warrior], [], warrior)

        assert snapshot.player_id == P1
        assert snapshot.changed == {t.coord for t in self.tiles}
        assert snapshot.state_of(c(1, 0)) == VISIBLE
        assert snapshot.state_of(c(2, 0)) == HIDDEN
        assert self.received == [snapshot]

    def test_writes_states_back_onto_tiles(self):
        warrior = make_unit("w1", 0, 0)
        self.service.on_unit_moved(self.tiles, [warrior], [], warrior)

        assert [t.visibility for t in self.tiles] == [VISIBLE, VISIBLE, HIDDEN, HIDDEN, HIDDEN]
        assert self.service.viewer == P1

    def test_move_reports_only_changed_tiles(self):
        warrior = make_unit("w1", 0, 0)
        self.service.on_unit_moved(self.tiles, [warrior], [], warrior)

        warrior.position = c(2, 0)
        snapshot = self.service.on_unit_moved(self.tiles, [warrior], [], warrior)

        assert snapshot.changed == {c(0, 0), c(2, 0), c(3, 0)}
        assert snapshot.changed_states() == {c(0, 0): EXPLORED, c(2, 0): VISIBLE, c(3, 0): VISIBLE}

    def test_removed_unit_leaves_explored_trail(self):
        warrior = make_unit("w1", 0, 0)
        self.service.on_unit_moved(self.tiles, [warrior], [], warrior)

        snapshot = self.service.on_unit_removed(self.tiles, [], [], P1)

        assert snapshot.changed == {c(0, 0), c(1, 0)}
        assert set(snapshot.changed_states().values()) == {EXPLORED}

    def test_city_founded_reveals_radius(self):
        city = make_city("rome", 4, 0)

        snapshot = self.service.on_city_founded(self.tiles, [], [city], city)

        assert [snapshot.state_of(t.coord) for t in self.tiles] == [
            HIDDEN,
            HIDDEN,
            VISIBLE,
            VISIBLE,
            VISIBLE,
        ]

    def test_unsubscribed_listener_is_not_called(self):
        self.service.unsubscribe(self.received.append)
        self.service.recompute(self.tiles, [], [], P1)
        assert self.received == []

    def test_snapshot_for_tracks_latest(self):
        assert self.service.snapshot_for(P1) is None
        snapshot = self.service.recompute(self.tiles, [], [], P1)
        assert self.service.snapshot_for(P1) is snapshot

    def test_externally_revealed_tile_is_rejected(self):
        warrior = make_unit("w1", 0, 0)
        self.service.on_unit_moved(self.tiles, [warrior], [], warrior)
        self.tiles[4].visibility = VISIBLE

        with pytest.raises(VisibilityTransitionError):
            self.service.on_unit_removed(self.tiles, [], [], P1)
        assert self.tiles[0].visibility == VISIBLE

    def test_resolve_click(self):
        warrior = make_unit("w1", 3, 0)
        result = self.service.resolve_click(self.tiles, [warrior], [], c(3, 0))
        assert result == UnitSelected(unit_id="w1", coord=c(3, 0))


class TestSharedTilesMultiplePlayers:
    """Several players recomputed against one set of tiles with no local player."""

    def setup_method(self):
        self.service = VisibilityService()
        self.tiles = line_map(3)

    def test_second_player_does_not_inherit_first_players_view(self):
        warrior = make_unit("w1", 0, 0)

        snapshots = self.service.on_turn_advanced(self.tiles, [warrior], [], [P1, P2])

        assert [snapshots[P2].state_of(t.coord) for t in self.tiles] == [HIDDEN] * 3
        assert self.service.table.get(c(0, 0), P2) == HIDDEN
        assert self.service.viewer == P1

    def test_tiles_keep_the_first_players_view(self):
        warrior = make_unit("w1", 0, 0)

        self.service.on_turn_advanced(self.tiles, [warrior], [], [P1, P2])

        assert self.tiles[0].visibility == VISIBLE
        assert should_draw_unit(self.tiles[0].visibility)

    def test_second_player_never_marks_unseen_tiles_explored(self):
        warrior = make_unit("w1", 0, 0)
        self.service.on_turn_advanced(self.tiles, [warrior], [], [P1, P2])

        snapshots = self.service.on_turn_advanced(self.tiles, [], [], [P1, P2])

        assert [snapshots[P1].state_of(t.coord) for t in self.tiles] == [EXPLORED] * 3
        assert [snapshots[P2].state_of(t.coord) for t in self.tiles] == [HIDDEN] * 3

    def test_preview_publishes_nothing(self):
        warrior = make_unit("w1", 0, 0)
        received = []
        self.service.subscribe(received.append)
        self.service.recompute(self.tiles, [warrior], [], P1)
        before = [t.visibility for t in self.tiles]

        snapshot = self.service.preview(self.tiles, [], [], P1)

        assert [snapshot.state_of(t.coord) for t in self.tiles] == [EXPLORED] * 3
        assert [t.visibility for t in self.tiles] == before
        assert self.service.snapshot_for(P1).state_of(c(0, 0)) == VISIBLE
        assert self.service.table.get(c(0, 0), P1) == VISIBLE
        assert len(received) == 1


class TestLocalPlayerMode:
    """Per-player views with only the local viewer mirrored onto tiles."""

    def setup_method(self):
        self.service = VisibilityService(local_player=P1)
        self.tiles = line_map(6)

    def test_other_players_do_not_touch_tiles(self):
        enemy = make_unit("e1", 5, 0, owner=P2)

        snapshot = self.service.on_unit_moved(self.tiles, [enemy], [], enemy)

        assert snapshot.state_of(c(5, 0)) == VISIBLE
        assert all(t.visibility == HIDDEN for t in self.tiles)
        assert self.service.table.get(c(5, 0), P2) == VISIBLE
        assert self.service.table.get(c(5, 0), P1) == HIDDEN
        assert self.service.viewer == P1

    def test_local_player_is_mirrored(self):
        mine = make_unit("m1", 0, 0)
        self.service.on_unit_moved(self.tiles, [mine], [], mine)

        assert self.tiles[0].visibility == VISIBLE
        assert self.tiles[2].visibility == VISIBLE
        assert self.tiles[3].visibility == HIDDEN

    def test_views_evolve_independently(self):
        mine = make_unit("m1", 0, 0)
        enemy = make_unit("e1", 5, 0, owner=P2)
        units = [mine, enemy]
        self.service.on_turn_advanced(self.tiles, units, [], [P1, P2])

        snapshots = self.service.on_turn_advanced(self.tiles, [enemy], [], [P1, P2])

        assert set(snapshots) == {P1, P2}
        assert snapshots[P1].state_of(c(0, 0)) == EXPLORED
        assert snapshots[P2].state_of(c(0, 0)) == HIDDEN
        assert snapshots[P2].changed == frozenset()
        assert self.service.table.players() == [P1, P2]
