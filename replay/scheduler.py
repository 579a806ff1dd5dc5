"""
Event scheduling: which mission events become due, exactly once per epoch.

The full event list is scanned every frame rather than advancing a cursor,
so a coarse time step (e.g. the first frame after a long stall) can never
skip an event.
"""

from typing import Iterable, Sequence

from .mission import EventType, MissionEvent


def event_key(event: MissionEvent) -> tuple:
    """Identity used for 'already fired' tracking: (type, t, actor, target)."""
    return event.key


def due_events(events: Sequence[MissionEvent], fired_keys: set, t: float) -> list[MissionEvent]:
    """
    Return events newly due at time `t`, in authoring order.

    Keys of returned events are added to `fired_keys` immediately, so
    querying the same time again returns nothing.
    """
    due = []
    for event in events:
        key = event.key
        if key in fired_keys:
            continue
        if t >= event.t:
            fired_keys.add(key)
            due.append(event)
    return due


def build_death_times(events: Iterable[MissionEvent]) -> dict[str, float]:
    """Earliest KILL time per target id."""
    deaths: dict[str, float] = {}
    for event in events:
        if event.type == EventType.KILL and event.target:
            prev = deaths.get(event.target)
            if prev is None or event.t < prev:
                deaths[event.target] = event.t
    return deaths


def is_imminent(death_t: float | None, t: float, alive: bool, window_s: float = 3.0) -> bool:
    """True while an alive aircraft is within `window_s` before its scripted kill."""
    if death_t is None or not alive:
        return False
    return death_t - window_s <= t < death_t
