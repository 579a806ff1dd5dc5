"""
Track interpolation: continuous position and heading from sparse waypoints.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .geo import initial_bearing
from .mission import Waypoint


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float
    heading: float = 0.0  # degrees clockwise from north


def interpolate(path: Sequence[Waypoint], t: float) -> Optional[Position]:
    """
    Position on `path` at time `t`.

    Clamps to the endpoints (heading 0) outside the authored span. Inside,
    lat/lng are linear in time across the first bracketing segment and the
    heading is that segment's initial great-circle bearing. Returns None for
    an empty path.
    """
    if not path:
        return None

    first, last = path[0], path[-1]
    if t <= first.t:
        return Position(first.lat, first.lng, 0.0)
    if t >= last.t:
        return Position(last.lat, last.lng, 0.0)

    for a, b in zip(path, path[1:]):
        if a.t <= t <= b.t:
            break
    else:
        # unreachable for a time-ordered path
        return None

    span = b.t - a.t
    u = (t - a.t) / span if span > 0 else 1.0
    return Position(
        lat=a.lat + (b.lat - a.lat) * u,
        lng=a.lng + (b.lng - a.lng) * u,
        heading=initial_bearing(a.lat, a.lng, b.lat, b.lng),
    )
