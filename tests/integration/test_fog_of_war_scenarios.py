"""End-to-end fog-of-war scenarios driven through the visibility service."""

from hypothesis import given, settings
from hypothesis import strategies as st

from factories import P1, P2, hexagon_map, line_map, make_city, make_tile, make_unit

from hexfog.domain.enums import TerrainFeature, UnitType, VisibilityState
from hexfog.domain.rules_config import RulesConfig, VisibilityRules
from hexfog.domain.spatial_index import build_spatial_index
from hexfog.domain.visibility import visible_cities, visible_units
from hexfog.services.visibility_service import VisibilityService
from hexfog.utils.hex_math import HexCoord

HIDDEN = VisibilityState.HIDDEN
EXPLORED = VisibilityState.EXPLORED
VISIBLE = VisibilityState.VISIBLE

ONE_HEX_SIGHT = RulesConfig(visibility=VisibilityRules(default_unit_sight=1, unit_sight={}))


def c(q: int, r: int) -> HexCoord:
    return HexCoord(q=q, r=r)


class TestThreeTileLine:
    """A unit walks along a three-tile line and then dies."""

    def setup_method(self):
        self.service = VisibilityService(ONE_HEX_SIGHT)
        self.tiles = line_map(3)
        self.unit = make_unit("u1", 0, 0)

    def test_walk_and_die(self):
        first = self.service.on_unit_moved(self.tiles, [self.unit], [], self.unit)
        assert dict(first.states) == {c(0, 0): VISIBLE, c(1, 0): VISIBLE, c(2, 0): HIDDEN}

        self.unit.position = c(1, 0)
        second = self.service.on_unit_moved(self.tiles, [self.unit], [], self.unit)
        assert set(second.states.values()) == {VISIBLE}
        assert second.changed == {c(2, 0)}

        third = self.service.on_unit_removed(self.tiles, [], [], P1)
        assert dict(third.states) == {c(0, 0): EXPLORED, c(1, 0): EXPLORED, c(2, 0): EXPLORED}
        assert third.changed == {c(0, 0), c(1, 0), c(2, 0)}
        assert all(tile.visibility == EXPLORED for tile in self.tiles)

    def test_unit_leaving_keeps_explored_tiles_explored(self):
        self.service.on_unit_moved(self.tiles, [self.unit], [], self.unit)
        self.unit.position = c(2, 0)

        snapshot = self.service.on_unit_moved(self.tiles, [self.unit], [], self.unit)

        assert snapshot.state_of(c(0, 0)) == EXPLORED
        assert snapshot.changed == {c(0, 0), c(2, 0)}


class TestRenderingThroughFog:
    def test_enemy_units_vanish_but_cities_stay_dimmed(self):
        service = VisibilityService(local_player=P1)
        tiles = line_map(6)
        scout = make_unit("scout", 0, 0, unit_type=UnitType.SCOUT)
        enemy = make_unit("enemy", 3, 0, owner=P2)
        city = make_city("carthage", 2, 0, owner=P2)

        snapshot = service.on_unit_moved(tiles, [scout, enemy], [city], scout)
        index = build_spatial_index(tiles, [scout, enemy], [city])
        assert {u.id for u in visible_units(index, snapshot.states)} == {"scout", "enemy"}

        scout.position = c(-3, 0)
        snapshot = service.on_unit_moved(tiles, [scout, enemy], [city], scout)
        index = build_spatial_index(tiles, [scout, enemy], [city])

        assert snapshot.state_of(c(2, 0)) == EXPLORED
        assert visible_units(index, snapshot.states) == []
        assert [found.id for found in visible_cities(index, snapshot.states)] == ["carthage"]

    def test_hills_extend_sight(self):
        service = VisibilityService()
        tiles = [make_tile(0, 0, features=(TerrainFeature.HILLS,))]
        tiles += [make_tile(q, 0) for q in range(1, 5)]
        warrior = make_unit("w1", 0, 0)

        snapshot = service.on_unit_moved(tiles, [warrior], [], warrior)

        assert snapshot.state_of(c(3, 0)) == VISIBLE
        assert snapshot.state_of(c(4, 0)) == HIDDEN


class TestRandomEventSequences:
    @settings(max_examples=30, deadline=None)
    @given(
        steps=st.lists(
            st.tuples(
                st.sampled_from(["move", "remove", "turn"]),
                st.integers(-3, 3),
                st.integers(-3, 3),
            ),
            min_size=1,
            max_size=12,
        )
    )
    def test_seen_tiles_never_return_to_hidden(self, steps):
        """Property: along any event sequence, nothing once seen is Hidden again."""
        service = VisibilityService(local_player=P1)
        tiles = hexagon_map(3)
        units = {}
        seen: dict[str, set[HexCoord]] = {P1: set(), P2: set()}

        for index, (action, q, r) in enumerate(steps):
            owner = P1 if index % 2 == 0 else P2
            if action == "move":
                unit = units.setdefault(owner, make_unit(f"{owner}-u", q, r, owner=owner))
                unit.position = c(q, r)
                snapshots = {owner: service.on_unit_moved(tiles, units.values(), [], unit)}
            elif action == "remove":
                units.pop(owner, None)
                snapshots = {owner: service.on_unit_removed(tiles, units.values(), [], owner)}
            else:
                snapshots = service.on_turn_advanced(tiles, units.values(), [], [P1, P2])

            for player, snapshot in snapshots.items():
                for coord in seen[player]:
                    assert snapshot.state_of(coord) != HIDDEN
                seen[player].update(
                    coord for coord, state in snapshot.states.items() if state != HIDDEN
                )
