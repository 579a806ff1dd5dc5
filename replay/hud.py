"""
HUD counters and clock formatting.
"""

from dataclasses import dataclass

from .mission import EventType, MissionEvent

NO_LAST_EVENT = "—"


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def format_clock(t: float) -> str:
    """Mission clock label, e.g. T+01:06."""
    s = max(0, int(t // 1))
    return f"T+{s // 60:02d}:{s % 60:02d}"


@dataclass
class Counters:
    """Running tallies for the current epoch."""
    contacts: int = 0
    engagements: int = 0
    kills: int = 0
    losses: int = 0
    last_event: str = NO_LAST_EVENT

    @property
    def intensity(self) -> float:
        """Bounded weighted activity level in [0.08, 1]."""
        raw = (self.engagements * 6 + self.kills * 10 + self.losses * 8) / 60
        return clamp(raw, 0.08, 1.0)

    def record(self, event: MissionEvent, now: float):
        if event.type == EventType.ENGAGEMENT:
            self.engagements += 1
        elif event.type == EventType.KILL:
            self.kills += 1
        elif event.type == EventType.LOSS:
            self.losses += 1
        self.last_event = f"{format_clock(now)} {event.type.value.upper()}: {event.text}"

    def reset(self):
        self.contacts = 0
        self.engagements = 0
        self.kills = 0
        self.losses = 0
        self.last_event = NO_LAST_EVENT
