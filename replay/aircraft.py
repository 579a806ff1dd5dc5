"""
Aircraft state store: per-track runtime state for the replay.

Holds position, alive flag and traveled trail for every track, keyed by
track id. External code reads snapshots; only the replay engine mutates.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .interpolate import Position, interpolate
from .mission import Side, Track

logger = logging.getLogger(__name__)


@dataclass
class AircraftState:
    """Runtime state of one track."""
    track: Track
    position: Optional[Position] = None
    alive: bool = True
    trail: list[tuple[float, float]] = field(default_factory=list)  # folded waypoints
    head: Optional[tuple[float, float]] = None  # live interpolated point
    trail_cursor: int = 0  # next path index to fold into the trail
    killed_at: Optional[float] = None

    @property
    def id(self) -> str:
        return self.track.id

    def trail_points(self) -> list[tuple[float, float]]:
        """Folded trail plus the transient head."""
        if self.head is None:
            return list(self.trail)
        return self.trail + [self.head]


class AircraftStore:
    """Owned mapping of track id -> AircraftState."""

    def __init__(self, tracks: tuple[Track, ...] | list[Track]):
        self._states: dict[str, AircraftState] = {}
        for track in tracks:
            self._states[track.id] = AircraftState(track=track)
        self._skipped: set[str] = set()  # tracks already warned about this epoch
        self.selected_id: Optional[str] = None
        self.reset()

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, track_id: str) -> bool:
        return track_id in self._states

    def ids(self) -> list[str]:
        return list(self._states)

    def get(self, track_id: str) -> Optional[AircraftState]:
        return self._states.get(track_id)

    def states(self) -> list[AircraftState]:
        return list(self._states.values())

    def alive_states(self) -> list[AircraftState]:
        return [st for st in self._states.values() if st.alive and st.position is not None]

    def position_of(self, track_id: Optional[str]) -> Optional[Position]:
        st = self._states.get(track_id) if track_id else None
        return st.position if st else None

    # ------------------------------------------------------------------
    # Per-frame update
    # ------------------------------------------------------------------

    def update(self, t: float, trails: bool = True):
        """Recompute every live aircraft's position at time `t`."""
        for st in self._states.values():
            if not st.alive:
                continue
            self._move(st, t, trails)

    def _move(self, st: AircraftState, t: float, trails: bool):
        pos = interpolate(st.track.path, t)
        if pos is None:
            if st.id not in self._skipped:
                logger.warning(f"Aircraft {st.id} has no position at T={t:.1f}s, skipped")
                self._skipped.add(st.id)
            return
        st.position = pos
        if trails:
            self._fold_trail(st, t)
            st.head = (pos.lat, pos.lng)

    @staticmethod
    def _fold_trail(st: AircraftState, t: float):
        path = st.track.path
        idx = st.trail_cursor
        while idx < len(path) and path[idx].t <= t:
            st.trail.append((path[idx].lat, path[idx].lng))
            idx += 1
        st.trail_cursor = idx

    def kill(self, track_id: Optional[str], at_time: float, trails: bool = True) -> bool:
        """
        Mark a track dead at the kill instant.

        Position and trail are brought to `at_time` and then frozen. Returns
        False for unknown or already-dead tracks.
        """
        st = self._states.get(track_id) if track_id else None
        if st is None:
            logger.warning(f"Kill names unknown aircraft {track_id!r}")
            return False
        if not st.alive:
            return False
        self._move(st, at_time, trails)
        st.alive = False
        st.killed_at = at_time
        logger.info(f"Aircraft {st.track.callsign} ({st.id}) destroyed at T={at_time:.1f}s")
        return True

    def reset(self):
        """Back to the mission start: all alive, empty trails, selection cleared."""
        for st in self._states.values():
            st.alive = True
            st.trail = []
            st.head = None
            st.trail_cursor = 0
            st.killed_at = None
            pos = interpolate(st.track.path, 0.0)
            if pos is not None:
                st.position = pos
        self._skipped.clear()
        self.selected_id = None

    # ------------------------------------------------------------------
    # Selection / focus
    # ------------------------------------------------------------------

    def select(self, track_id: str) -> bool:
        if track_id not in self._states:
            logger.warning(f"Cannot select unknown aircraft {track_id!r}")
            return False
        self.selected_id = track_id
        return True

    def first_of_side(self, side: Side) -> Optional[str]:
        for st in self._states.values():
            if st.track.side == side:
                return st.id
        return None

    def focus_point(self) -> Optional[tuple[float, float]]:
        """Selected aircraft if alive, else the centroid of live aircraft."""
        sel = self._states.get(self.selected_id) if self.selected_id else None
        if sel is not None and sel.alive and sel.position is not None:
            return (sel.position.lat, sel.position.lng)
        live = self.alive_states()
        if not live:
            return None
        n = len(live)
        return (
            sum(st.position.lat for st in live) / n,
            sum(st.position.lng for st in live) / n,
        )
