"""
View contracts and the synchronous fan-out.

Views (map, radar, event log, HUD) are push-only consumers. After each
frame's state update the engine publishes, in order:

    reset (after a restart) -> log entries -> effects -> frame

Every view sees the same frame; a failing view is logged and skipped
without affecting the others.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .mission import EventType
from .radar import Blip

logger = logging.getLogger(__name__)


class EffectKind(Enum):
    WEAPONS_FIRE = "weapons_fire"
    IMPACT = "impact"


@dataclass(frozen=True)
class AircraftSnapshot:
    """Read-only per-aircraft state for one frame."""
    id: str
    callsign: str
    side: str
    lat: float
    lng: float
    heading: float
    alive: bool
    danger: bool = False
    trail: Optional[tuple[tuple[float, float], ...]] = None  # None when trails are off


@dataclass(frozen=True)
class CounterSnapshot:
    contacts: int
    engagements: int
    kills: int
    losses: int
    intensity: float
    last_event: str


@dataclass(frozen=True)
class LogEntry:
    """One line of the event log, in fire order."""
    time: float
    clock: str
    type: EventType
    text: str
    event_time: Optional[float] = None  # None for console notes


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    lat: float
    lng: float
    actor: Optional[str] = None


@dataclass(frozen=True)
class Frame:
    time: float
    clock: str
    status: str  # ARMED / END / PAUSED
    speed: float
    epoch: int
    aircraft: tuple[AircraftSnapshot, ...]
    counters: CounterSnapshot
    show_trails: bool = True
    show_labels: bool = True
    selected_id: Optional[str] = None
    focus: Optional[tuple[float, float]] = None
    radar: tuple[Blip, ...] = ()

    def get(self, track_id: str) -> Optional[AircraftSnapshot]:
        for ac in self.aircraft:
            if ac.id == track_id:
                return ac
        return None

    def to_dict(self) -> dict:
        return {
            "time": round(self.time, 3),
            "clock": self.clock,
            "status": self.status,
            "speed": self.speed,
            "epoch": self.epoch,
            "show_trails": self.show_trails,
            "show_labels": self.show_labels,
            "selected": self.selected_id,
            "focus": list(self.focus) if self.focus else None,
            "counters": {
                "contacts": self.counters.contacts,
                "engagements": self.counters.engagements,
                "kills": self.counters.kills,
                "losses": self.counters.losses,
                "intensity": round(self.counters.intensity, 3),
                "last_event": self.counters.last_event,
            },
            "aircraft": [
                {
                    "id": ac.id,
                    "callsign": ac.callsign,
                    "side": ac.side,
                    "lat": round(ac.lat, 6),
                    "lng": round(ac.lng, 6),
                    "heading": round(ac.heading, 2),
                    "alive": ac.alive,
                    "danger": ac.danger,
                    "trail": [list(p) for p in ac.trail] if ac.trail is not None else None,
                }
                for ac in self.aircraft
            ],
            "radar": [
                {
                    "id": b.id,
                    "side": b.side,
                    "bearing": round(b.bearing, 1),
                    "range": round(b.range, 1),
                    "danger": b.danger,
                }
                for b in self.radar
            ],
        }


class ReplayView(ABC):
    """Base class for replay consumers. Override the hooks you need."""

    name = "view"

    def on_reset(self):
        """Replay restarted: clear accumulated state (e.g. the event log)."""

    def on_log(self, entry: LogEntry):
        """A fired event or console note, in fire order."""

    def on_effect(self, effect: Effect):
        """One-shot visual effect."""

    def on_frame(self, frame: Frame):
        """Fully updated frame state."""


@dataclass
class FramePublication:
    """Everything published for one frame."""
    frame: Frame
    log: list[LogEntry] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)
    reset: bool = False


class ViewFanout:
    """Ordered, synchronous publish to all attached views."""

    def __init__(self):
        self.views: list[ReplayView] = []

    def attach(self, view: ReplayView):
        self.views.append(view)

    def detach(self, view: ReplayView):
        if view in self.views:
            self.views.remove(view)

    def publish(self, pub: FramePublication):
        for view in list(self.views):
            self._deliver(view, pub)

    def publish_log(self, entry: LogEntry):
        for view in list(self.views):
            self._call(view, "on_log", entry)

    def _deliver(self, view: ReplayView, pub: FramePublication):
        if pub.reset and not self._call(view, "on_reset"):
            return
        for entry in pub.log:
            if not self._call(view, "on_log", entry):
                return
        for effect in pub.effects:
            if not self._call(view, "on_effect", effect):
                return
        self._call(view, "on_frame", pub.frame)

    @staticmethod
    def _call(view: ReplayView, hook: str, *args) -> bool:
        try:
            getattr(view, hook)(*args)
        except Exception:
            logger.exception(f"View {view.name} failed in {hook}, skipping it this frame")
            return False
        return True
