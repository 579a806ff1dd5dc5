"""
Radar picture: polar blips around the mission center.

Only geometry lives here; drawing the scope is up to the radar view.
"""

import logging
from dataclasses import dataclass

from .geo import project_to_radar, radar_polar

logger = logging.getLogger(__name__)

SCOPE_FILL = 0.46  # usable radius as a fraction of the shorter side


@dataclass(frozen=True)
class Blip:
    id: str
    callsign: str
    side: str
    dx: float
    dy: float
    bearing: float
    range: float
    danger: bool = False


class RadarScope:
    """Projection and range gate for a scope of a given surface size."""

    def __init__(self, center: tuple[float, float], width: int = 480, height: int = 480):
        self.center = center
        self.width = 0
        self.height = 0
        self.resize(width, height)

    def resize(self, width: int, height: int):
        self.width = max(0, int(width))
        self.height = max(0, int(height))

    @property
    def radius(self) -> float:
        return min(self.width, self.height) * SCOPE_FILL

    @property
    def usable(self) -> bool:
        return self.width > 0 and self.height > 0

    def blips(self, aircraft) -> list[Blip]:
        """
        Blips for the given aircraft snapshots that fall inside the scope.

        A zero-sized surface yields no blips; the next frame retries.
        """
        if not self.usable:
            logger.debug("Radar surface has zero size, skipping frame")
            return []
        out = []
        radius = self.radius
        for ac in aircraft:
            if not ac.alive:
                continue
            dx, dy = project_to_radar(ac.lat, ac.lng, self.center)
            bearing, rng = radar_polar(dx, dy)
            if rng > radius:
                continue
            out.append(Blip(
                id=ac.id, callsign=ac.callsign, side=ac.side,
                dx=dx, dy=dy, bearing=bearing, range=rng, danger=ac.danger,
            ))
        return out
