"""
Mission data model for the dogfight replay console.

A mission is a fixed timeline: aircraft tracks (sparse waypoints) and
time-coded events. Loaded once before playback and immutable afterwards.
"""

import json
import yaml
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DURATION_S = 120.0
DEFAULT_CENTER = (51.505, -0.09)


class MissionError(Exception):
    """Mission document missing, unreadable or structurally invalid."""


class Side(Enum):
    FRIENDLY = "friendly"
    HOSTILE = "hostile"


# Side labels seen in authored mission files
SIDE_ALIASES = {
    "friendly": Side.FRIENDLY,
    "raf": Side.FRIENDLY,
    "blue": Side.FRIENDLY,
    "own": Side.FRIENDLY,
    "hostile": Side.HOSTILE,
    "enemy": Side.HOSTILE,
    "red": Side.HOSTILE,
}


class EventType(Enum):
    CONTACT = "contact"
    ENGAGEMENT = "engagement"
    KILL = "kill"
    IMPACT = "impact"
    LOSS = "loss"
    NOTE = "note"


@dataclass(frozen=True)
class Waypoint:
    """One authored (time, position) sample on a track."""
    t: float
    lat: float
    lng: float


@dataclass(frozen=True)
class Track:
    """An aircraft's identity and authored path."""
    id: str
    callsign: str
    side: Side
    path: tuple[Waypoint, ...] = ()


@dataclass(frozen=True)
class MissionEvent:
    """A time-coded mission event."""
    t: float
    type: EventType
    text: str = ""
    actor: Optional[str] = None
    target: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def key(self) -> tuple:
        """Identity for exactly-once firing. Identical tuples are indistinguishable."""
        return (self.type, self.t, self.actor, self.target)


@dataclass(frozen=True)
class Mission:
    """Immutable mission timeline."""
    duration_s: float
    center: tuple[float, float]
    aircraft: tuple[Track, ...]
    events: tuple[MissionEvent, ...]
    title: str = "MISSION"
    sector: str = "SECTOR"

    def get_track(self, track_id: str) -> Optional[Track]:
        for track in self.aircraft:
            if track.id == track_id:
                return track
        return None

    def to_dict(self) -> dict:
        """Serialize back to the mission document format."""
        return {
            "meta": {"title": self.title, "sector": self.sector},
            "duration_s": self.duration_s,
            "center": {"lat": self.center[0], "lng": self.center[1]},
            "aircraft": [
                {
                    "id": tr.id,
                    "callsign": tr.callsign,
                    "side": tr.side.value,
                    "path": [{"t": w.t, "lat": w.lat, "lng": w.lng} for w in tr.path],
                }
                for tr in self.aircraft
            ],
            "events": [_event_to_dict(ev) for ev in self.events],
        }


@dataclass
class MissionLoad:
    """Result of loading a mission, with any repairs applied."""
    mission: Mission
    warnings: list[str] = field(default_factory=list)
    fallback_used: bool = False
    source: str = "built-in"


def _event_to_dict(ev: MissionEvent) -> dict:
    out = {"t": ev.t, "type": ev.type.value, "text": ev.text}
    for name in ("actor", "target", "lat", "lng"):
        value = getattr(ev, name)
        if value is not None:
            out[name] = value
    return out


def _number(value) -> Optional[float]:
    """Coerce to a finite float, or None."""
    if isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------

def parse_mission(data: dict, default_duration_s: float = DEFAULT_DURATION_S) -> MissionLoad:
    """Build a Mission from a decoded document, repairing item-level problems."""
    if not isinstance(data, dict):
        raise MissionError("Mission document must be a mapping")
    if not isinstance(data.get("aircraft"), list):
        raise MissionError("Mission document has no aircraft list")

    warnings: list[str] = []

    def warn(msg: str):
        logger.warning(msg)
        warnings.append(msg)

    duration = _number(data.get("duration_s"))
    if duration is None or duration <= 0:
        warn(f"Mission duration {data.get('duration_s')!r} invalid, using {default_duration_s}s")
        duration = default_duration_s

    center_data = data.get("center") or {}
    lat0 = _number(center_data.get("lat")) if isinstance(center_data, dict) else None
    lng0 = _number(center_data.get("lng")) if isinstance(center_data, dict) else None
    center = (lat0, lng0) if lat0 is not None and lng0 is not None else DEFAULT_CENTER

    tracks = []
    seen_ids = set()
    for idx, ac in enumerate(data["aircraft"]):
        if not isinstance(ac, dict) or not ac.get("id"):
            warn(f"Aircraft #{idx} has no id, skipped")
            continue
        track_id = str(ac["id"])
        if track_id in seen_ids:
            warn(f"Duplicate aircraft id {track_id}, keeping the first")
            continue
        seen_ids.add(track_id)
        tracks.append(_parse_track(track_id, ac, warn))

    events = []
    seen_keys = set()
    raw_events = data.get("events") or []
    if not isinstance(raw_events, list):
        warn("Mission events is not a list, ignored")
        raw_events = []
    for idx, raw in enumerate(raw_events):
        ev = _parse_event(idx, raw, warn)
        if ev is None:
            continue
        if ev.actor is not None and ev.actor not in seen_ids:
            warn(f"Event #{idx} ({ev.type.value}) names unknown actor {ev.actor}")
        if ev.target is not None and ev.target not in seen_ids:
            warn(f"Event #{idx} ({ev.type.value}) names unknown target {ev.target}")
        if ev.key in seen_keys:
            warn(f"Event #{idx} duplicates an earlier event identity, it will never fire")
        seen_keys.add(ev.key)
        events.append(ev)

    meta = data.get("meta") or {}
    if not isinstance(meta, dict):
        warn(f"Mission meta {meta!r} is not a mapping, ignored")
        meta = {}
    mission = Mission(
        duration_s=duration,
        center=center,
        aircraft=tuple(tracks),
        events=tuple(events),
        title=str(meta.get("title") or "MISSION"),
        sector=str(meta.get("sector") or "SECTOR"),
    )
    return MissionLoad(mission=mission, warnings=warnings)


def _parse_track(track_id: str, ac: dict, warn) -> Track:
    side_raw = str(ac.get("side", "")).strip().lower()
    side = SIDE_ALIASES.get(side_raw)
    if side is None:
        warn(f"Aircraft {track_id} has unknown side {ac.get('side')!r}, treating as hostile")
        side = Side.HOSTILE

    raw_path = ac.get("path") or []
    if not isinstance(raw_path, list):
        warn(f"Aircraft {track_id} path is not a list, ignored")
        raw_path = []

    path = []
    for point in raw_path:
        if not isinstance(point, dict):
            warn(f"Aircraft {track_id} has a malformed waypoint, dropped")
            continue
        t, lat, lng = _number(point.get("t")), _number(point.get("lat")), _number(point.get("lng"))
        if t is None or lat is None or lng is None:
            warn(f"Aircraft {track_id} waypoint {point!r} incomplete, dropped")
            continue
        path.append(Waypoint(t=t, lat=lat, lng=lng))

    if any(b.t < a.t for a, b in zip(path, path[1:])):
        warn(f"Aircraft {track_id} path out of time order, sorted")
        path.sort(key=lambda w: w.t)
    if not path:
        warn(f"Aircraft {track_id} has an empty path")

    return Track(
        id=track_id,
        callsign=str(ac.get("callsign") or track_id),
        side=side,
        path=tuple(path),
    )


def _parse_event(idx: int, raw, warn) -> Optional[MissionEvent]:
    if not isinstance(raw, dict):
        warn(f"Event #{idx} is malformed, dropped")
        return None
    t = _number(raw.get("t"))
    if t is None:
        warn(f"Event #{idx} has no time, dropped")
        return None
    try:
        ev_type = EventType(str(raw.get("type", "")).strip().lower())
    except ValueError:
        warn(f"Event #{idx} has unknown type {raw.get('type')!r}, treating as note")
        ev_type = EventType.NOTE

    actor = raw.get("actor")
    target = raw.get("target")
    return MissionEvent(
        t=t,
        type=ev_type,
        text=str(raw.get("text") or ""),
        actor=str(actor) if actor else None,
        target=str(target) if target else None,
        lat=_number(raw.get("lat")),
        lng=_number(raw.get("lng")),
    )


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------

FALLBACK_MISSION = {
    "meta": {"title": "Fallback mission"},
    "duration_s": 120,
    "center": {"lat": 51.505, "lng": -0.09},
    "aircraft": [
        {"id": "ELIZABETH", "callsign": "BENNET-01", "side": "friendly", "path": [
            {"t": 0, "lat": 51.47, "lng": -0.32},
            {"t": 40, "lat": 51.52, "lng": -0.17},
            {"t": 90, "lat": 51.51, "lng": 0.02},
            {"t": 120, "lat": 51.49, "lng": -0.04},
        ]},
        {"id": "GOTHA-1", "callsign": "KRAUT-17", "side": "hostile", "path": [
            {"t": 0, "lat": 51.60, "lng": -0.38},
            {"t": 65, "lat": 51.53, "lng": -0.12},
        ]},
    ],
    "events": [
        {"t": 10, "type": "contact", "text": "CONTACTS DETECTED: NW sector"},
        {"t": 30, "type": "engagement", "actor": "ELIZABETH", "target": "GOTHA-1",
         "text": "ELIZABETH opens fire."},
        {"t": 66, "type": "kill", "actor": "ELIZABETH", "target": "GOTHA-1",
         "text": "TARGET DESTROYED."},
        {"t": 66.2, "type": "impact", "lat": 51.532, "lng": -0.120, "text": "IMPACT recorded."},
    ],
}


def read_mission_file(path: Path | str) -> dict:
    """Decode a mission file (.json, .yaml or .yml)."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise MissionError(f"Mission file not found: {path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise MissionError(f"Mission file {path} unreadable: {e}") from e
    return data


def load_mission(
    path: Optional[Path | str] = None,
    fallback: Optional[dict] = FALLBACK_MISSION,
    default_duration_s: float = DEFAULT_DURATION_S,
) -> MissionLoad:
    """
    Load a mission, falling back to the built-in sample on data errors.

    Raises MissionError only when neither the file nor a fallback is usable.
    """
    if path is not None:
        try:
            result = parse_mission(read_mission_file(path), default_duration_s)
            result.source = str(path)
            logger.info(
                f"Loaded mission '{result.mission.title}' from {path}: "
                f"{len(result.mission.aircraft)} aircraft, {len(result.mission.events)} events"
            )
            return result
        except MissionError as e:
            if fallback is None:
                raise
            logger.warning(f"Mission load failed, using built-in sample: {e}")
            result = parse_mission(fallback, default_duration_s)
            result.warnings.insert(0, f"Mission load failed ({e}); using built-in sample.")
            result.fallback_used = True
            return result

    if fallback is None:
        raise MissionError("No mission data available")
    result = parse_mission(fallback, default_duration_s)
    result.fallback_used = True
    return result
