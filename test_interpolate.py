"""
Tests for track interpolation and bearings.
"""

import pytest

from replay.geo import initial_bearing, project_to_radar, radar_polar
from replay.interpolate import Position, interpolate
from replay.mission import Waypoint


LINEAR = (Waypoint(0, 0.0, 0.0), Waypoint(10, 0.0, 10.0))

ROUTE = (
    Waypoint(0, 51.47, -0.32),
    Waypoint(40, 51.52, -0.17),
    Waypoint(90, 51.51, 0.02),
    Waypoint(120, 51.49, -0.04),
)


def test_linear_flight_midpoint():
    pos = interpolate(LINEAR, 5)
    assert pos.lat == pytest.approx(0.0)
    assert pos.lng == pytest.approx(5.0)
    assert pos.heading == pytest.approx(90.0)


def test_endpoints_are_exact_with_zero_heading():
    assert interpolate(ROUTE, 0) == Position(51.47, -0.32, 0.0)
    assert interpolate(ROUTE, 120) == Position(51.49, -0.04, 0.0)


def test_clamps_outside_span():
    assert interpolate(ROUTE, -5) == Position(51.47, -0.32, 0.0)
    assert interpolate(ROUTE, 500) == Position(51.49, -0.04, 0.0)


def test_empty_path_has_no_position():
    assert interpolate((), 3.0) is None


def test_single_waypoint_path_stays_put():
    path = (Waypoint(10, 1.0, 2.0),)
    assert interpolate(path, 0) == Position(1.0, 2.0, 0.0)
    assert interpolate(path, 50) == Position(1.0, 2.0, 0.0)


def test_position_stays_within_bracketing_segment():
    t = 0.0
    while t <= 120:
        pos = interpolate(ROUTE, t)
        for a, b in zip(ROUTE, ROUTE[1:]):
            if a.t <= t <= b.t:
                assert min(a.lat, b.lat) - 1e-9 <= pos.lat <= max(a.lat, b.lat) + 1e-9
                assert min(a.lng, b.lng) - 1e-9 <= pos.lng <= max(a.lng, b.lng) + 1e-9
                break
        t += 2.5


def test_heading_is_constant_within_a_segment():
    h1 = interpolate(ROUTE, 41).heading
    h2 = interpolate(ROUTE, 60).heading
    h3 = interpolate(ROUTE, 89).heading
    assert h1 == h2 == h3


def test_heading_changes_at_waypoints():
    assert interpolate(ROUTE, 39).heading != interpolate(ROUTE, 41).heading


def test_cardinal_bearings():
    assert initial_bearing(0, 0, 10, 0) == pytest.approx(0.0)
    assert initial_bearing(0, 0, 0, 10) == pytest.approx(90.0)
    assert initial_bearing(10, 0, 0, 0) == pytest.approx(180.0)
    assert initial_bearing(0, 10, 0, 0) == pytest.approx(270.0)


def test_radar_projection_orientation():
    center = (0.0, 0.0)
    dx, dy = project_to_radar(1.0, 0.0, center)
    assert dx == pytest.approx(0.0)
    assert dy > 0
    bearing, rng = radar_polar(*project_to_radar(0.0, 1.0, center))
    assert bearing == pytest.approx(90.0)
    assert rng == pytest.approx(360.0)
