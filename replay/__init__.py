"""
Replay engine for recorded air-combat missions.

Core modules:
- mission: Mission data model and loading
- interpolate: Continuous position/heading from waypoints
- scheduler: Exactly-once event firing
- clock: Replay clock and end-of-mission hold
- aircraft: Per-aircraft runtime state
- engine: Per-frame pass and fan-out to views
"""

from .mission import (
    Mission, MissionEvent, MissionError, MissionLoad, Track, Waypoint,
    EventType, Side, load_mission, parse_mission,
)
from .interpolate import Position, interpolate
from .scheduler import due_events, event_key, build_death_times
from .clock import ReplayClock, ReplayState, ClockPhase
from .aircraft import AircraftStore, AircraftState
from .hud import Counters, format_clock
from .radar import RadarScope, Blip
from .views import (
    ReplayView, ViewFanout, Frame, AircraftSnapshot, LogEntry, Effect, EffectKind,
)
from .config import ReplayConfig, load_config
from .engine import ReplayEngine
from .controls import ControlError, dispatch

__all__ = [
    # Mission
    "Mission", "MissionEvent", "MissionError", "MissionLoad", "Track", "Waypoint",
    "EventType", "Side", "load_mission", "parse_mission",
    # Core
    "Position", "interpolate",
    "due_events", "event_key", "build_death_times",
    "ReplayClock", "ReplayState", "ClockPhase",
    "AircraftStore", "AircraftState",
    "Counters", "format_clock",
    "RadarScope", "Blip",
    # Views
    "ReplayView", "ViewFanout", "Frame", "AircraftSnapshot", "LogEntry", "Effect", "EffectKind",
    # Engine
    "ReplayConfig", "load_config", "ReplayEngine", "ControlError", "dispatch",
]
