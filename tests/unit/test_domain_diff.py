"""Tests for visibility diffing and snapshots."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from factories import P1

from hexfog.domain.diff import VisibilitySnapshot, diff_visibility, publish_snapshot
from hexfog.domain.enums import VisibilityState
from hexfog.utils.hex_math import HexCoord

A = HexCoord(q=0, r=0)
B = HexCoord(q=1, r=0)
C = HexCoord(q=2, r=0)

state_maps = st.dictionaries(
    st.builds(HexCoord, q=st.integers(-3, 3), r=st.integers(-3, 3)),
    st.sampled_from(list(VisibilityState)),
    max_size=20,
)


class TestDiffVisibility:
    def test_first_computation_reports_everything(self):
        current = {A: VisibilityState.VISIBLE, B: VisibilityState.HIDDEN}
        assert diff_visibility(None, current) == {A, B}

    def test_identical_maps_have_empty_diff(self):
        current = {A: VisibilityState.VISIBLE, B: VisibilityState.EXPLORED}
        assert diff_visibility(dict(current), current) == frozenset()

    def test_value_changes_are_reported(self):
        before = {A: VisibilityState.VISIBLE, B: VisibilityState.VISIBLE, C: VisibilityState.HIDDEN}
        after = {A: VisibilityState.EXPLORED, B: VisibilityState.VISIBLE, C: VisibilityState.VISIBLE}
        assert diff_visibility(before, after) == {A, C}

    def test_key_set_differences_count_as_changed(self):
        before = {A: VisibilityState.VISIBLE, B: VisibilityState.HIDDEN}
        after = {A: VisibilityState.VISIBLE, C: VisibilityState.HIDDEN}
        assert diff_visibility(before, after) == {B, C}

    def test_accepts_snapshot_as_previous(self):
        snapshot = publish_snapshot(None, {A: VisibilityState.VISIBLE}, P1)
        assert diff_visibility(snapshot, {A: VisibilityState.EXPLORED}) == {A}

    @given(before=state_maps, after=state_maps)
    def test_diff_is_value_changes_plus_key_difference(self, before, after):
        expected = {k for k in before.keys() & after.keys() if before[k] != after[k]}
        expected |= before.keys() ^ after.keys()
        assert diff_visibility(before, after) == expected

    @given(states=state_maps)
    def test_self_diff_is_empty(self, states):
        assert diff_visibility(states, states) == frozenset()


class TestSnapshot:
    def test_publish_copies_states(self):
        current = {A: VisibilityState.VISIBLE}
        snapshot = publish_snapshot(None, current, P1)
        current[A] = VisibilityState.EXPLORED

        assert snapshot.state_of(A) == VisibilityState.VISIBLE
        assert snapshot.player_id == P1
        with pytest.raises(TypeError):
            snapshot.states[A] = VisibilityState.HIDDEN  # type: ignore[index]

    def test_changed_states_are_sorted_and_mark_removals(self):
        first = publish_snapshot(None, {A: VisibilityState.VISIBLE, C: VisibilityState.HIDDEN}, P1)
        second = publish_snapshot(
            first, {A: VisibilityState.EXPLORED, B: VisibilityState.VISIBLE}, P1
        )

        assert second.changed_states() == {
            A: VisibilityState.EXPLORED,
            B: VisibilityState.VISIBLE,
            C: None,
        }
        assert list(second.changed_states()) == [A, B, C]

    def test_state_of_unknown_coordinate(self):
        snapshot = VisibilitySnapshot(player_id=P1, states={})
        assert snapshot.state_of(A) is None
        assert snapshot.changed == frozenset()
