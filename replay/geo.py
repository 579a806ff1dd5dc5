"""
Geographic helpers: great-circle bearing and the radar's flat projection.
"""

import math

# Radar units per degree (normalization 9000 x display factor 0.04)
RADAR_UNITS_PER_DEG = 360.0


def initial_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Forward azimuth from point 1 to point 2, degrees clockwise from north in [0, 360)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def project_to_radar(lat: float, lng: float, center: tuple[float, float]) -> tuple[float, float]:
    """
    Project lat/lng onto the radar plane around `center`.

    Returns (dx, dy) in radar units, +x east and +y north. Longitude is
    scaled by cos(center latitude) so the scope stays roughly isotropic.
    """
    lat0, lng0 = center
    kx = math.cos(math.radians(lat0))
    dx = (lng - lng0) * kx * RADAR_UNITS_PER_DEG
    dy = (lat - lat0) * RADAR_UNITS_PER_DEG
    return dx, dy


def radar_polar(dx: float, dy: float) -> tuple[float, float]:
    """Convert a radar-plane offset to (bearing_deg, range)."""
    rng = math.hypot(dx, dy)
    bearing = (math.degrees(math.atan2(dx, dy)) + 360.0) % 360.0 if rng else 0.0
    return bearing, rng
