"""
Tests for the aircraft state store.
"""

import pytest

from replay.aircraft import AircraftStore
from replay.interpolate import interpolate
from replay.mission import Side, Track, Waypoint


def make_tracks():
    return [
        Track("A", "ALPHA", Side.FRIENDLY, (
            Waypoint(0, 0.0, 0.0), Waypoint(10, 0.0, 1.0), Waypoint(20, 1.0, 1.0),
        )),
        Track("B", "BRAVO", Side.HOSTILE, (
            Waypoint(0, 1.0, 0.0), Waypoint(20, 0.0, 0.0),
        )),
        Track("E", "EMPTY", Side.HOSTILE, ()),
    ]


def test_initial_positions_are_path_start():
    store = AircraftStore(make_tracks())
    assert store.get("A").position.lng == 0.0
    assert store.get("B").position.lat == 1.0
    assert store.get("E").position is None
    assert all(st.alive for st in store.states())


def test_update_moves_live_aircraft():
    store = AircraftStore(make_tracks())
    store.update(5)
    assert store.get("A").position.lng == pytest.approx(0.5)
    assert store.get("A").position.heading == pytest.approx(90.0)


def test_trail_folds_waypoints_and_ends_at_current_position():
    store = AircraftStore(make_tracks())
    store.update(12)
    st = store.get("A")
    assert st.trail == [(0.0, 0.0), (0.0, 1.0)]
    assert st.trail_cursor == 2
    pts = st.trail_points()
    assert pts[-1] == (st.position.lat, st.position.lng)


def test_trail_never_shrinks_while_alive():
    store = AircraftStore(make_tracks())
    lengths = []
    for t in (0, 3, 9.9, 10, 10.1, 15, 20, 25):
        store.update(t)
        lengths.append(len(store.get("A").trail_points()))
    assert lengths == sorted(lengths)


def test_trails_disabled_does_not_fold():
    store = AircraftStore(make_tracks())
    store.update(15, trails=False)
    st = store.get("A")
    assert st.trail == []
    assert st.trail_cursor == 0
    store.update(16, trails=True)
    assert len(st.trail) == 2


def test_kill_freezes_at_kill_instant():
    store = AircraftStore(make_tracks())
    store.update(4)
    assert store.kill("B", at_time=10)
    st = store.get("B")
    expected = interpolate(st.track.path, 10)
    assert not st.alive
    assert st.position == expected
    store.update(18)
    assert st.position == expected
    assert st.trail_points()[-1] == (expected.lat, expected.lng)


def test_kill_is_one_shot_and_unknown_ids_are_ignored():
    store = AircraftStore(make_tracks())
    assert store.kill("A", at_time=1)
    assert not store.kill("A", at_time=2)
    assert not store.kill("NOPE", at_time=2)
    assert not store.kill(None, at_time=2)


def test_empty_path_is_skipped_not_removed():
    store = AircraftStore(make_tracks())
    store.update(5)
    store.update(6)
    assert "E" in store
    assert store.get("E").position is None


def test_reset_restores_start_state():
    store = AircraftStore(make_tracks())
    store.update(15)
    store.kill("B", at_time=15)
    store.select("A")
    store.reset()
    for st in store.states():
        assert st.alive
        assert st.trail == []
        assert st.trail_cursor == 0
        assert st.head is None
    assert store.get("A").position.lng == 0.0
    assert store.selected_id is None


def test_focus_prefers_live_selection_then_centroid():
    store = AircraftStore(make_tracks())
    store.update(0)
    assert store.select("A")
    assert store.focus_point() == (0.0, 0.0)
    store.kill("A", at_time=0)
    assert store.focus_point() == pytest.approx((1.0, 0.0))
    store.kill("B", at_time=0)
    assert store.focus_point() is None


def test_select_unknown_is_rejected():
    store = AircraftStore(make_tracks())
    assert not store.select("ZZZ")
    assert store.selected_id is None
    assert store.first_of_side(Side.HOSTILE) == "B"
