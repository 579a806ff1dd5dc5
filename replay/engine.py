"""
Replay engine: the per-frame pass.

Each frame:
1. Clock advances (or the end hold expires and the replay restarts)
2. Newly due events fire; kills freeze their target at the kill instant
3. Live aircraft move to the current time
4. Counters and effects are derived from the fired events
5. The frame is published to all views in one ordered pass
"""

import math
import logging
from typing import Iterable, Optional

from .aircraft import AircraftStore
from .clock import ClockPhase, ReplayClock
from .config import ReplayConfig
from .hud import Counters, format_clock
from .mission import EventType, Mission, MissionEvent, Side
from .radar import RadarScope
from .scheduler import build_death_times, due_events, is_imminent
from .views import (
    AircraftSnapshot, CounterSnapshot, Effect, EffectKind, Frame,
    FramePublication, LogEntry, ReplayView, ViewFanout,
)

logger = logging.getLogger(__name__)


class ReplayEngine:
    """Drives one mission replay and fans each frame out to the views."""

    def __init__(self, mission: Mission, config: Optional[ReplayConfig] = None):
        self.mission = mission
        self.config = config or ReplayConfig()
        self.clock = ReplayClock(
            mission.duration_s, speed=self.config.speed, hold_s=self.config.hold_s
        )
        self.store = AircraftStore(mission.aircraft)
        self.counters = Counters()
        self.death_times = build_death_times(mission.events)
        self.radar = RadarScope(
            mission.center, self.config.radar_width, self.config.radar_height
        )
        self.fanout = ViewFanout()

        self.show_trails = self.config.trails
        self.show_labels = self.config.labels
        self.follow = self.config.follow

        self.last_frame: Optional[Frame] = None
        self._pending_reset = False
        self._warned_events: set = set()

    def attach(self, view: ReplayView):
        self.fanout.attach(view)

    def detach(self, view: ReplayView):
        self.fanout.detach(view)

    @property
    def time(self) -> float:
        return self.clock.time

    @property
    def phase(self) -> ClockPhase:
        return self.clock.phase

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def boot(self, warnings: Iterable[str] = ()) -> Frame:
        """Announce the mission, select the lead friendly and publish frame 0."""
        self.note(f"{self.mission.title} • {self.mission.sector} • Replay initialized.")
        for msg in warnings:
            self.note(msg)
        lead = self.store.first_of_side(Side.FRIENDLY)
        if lead:
            self.store.select(lead)
        return self.render()

    def note(self, text: str, kind: EventType = EventType.NOTE):
        """Publish a console line to the log views without touching replay state."""
        t = self.clock.time
        self.fanout.publish_log(LogEntry(time=t, clock=format_clock(t), type=kind, text=text))

    def tick(self, wall_dt: float) -> Frame:
        """Advance by one frame of `wall_dt` wall-clock seconds and publish it."""
        if self.clock.advance(wall_dt):
            self._reset_runtime()
        return self.render()

    def render(self) -> Frame:
        """Run the event and position pass at the current time and publish."""
        t = self.clock.time
        fired = due_events(self.mission.events, self.clock.fired_events, t)

        for event in fired:
            if event.type == EventType.KILL:
                self._apply_kill(event)

        self.store.update(t, trails=self.show_trails)

        entries = []
        effects = []
        for event in fired:
            self.counters.record(event, t)
            entries.append(LogEntry(
                time=t, clock=format_clock(t), type=event.type,
                text=event.text, event_time=event.t,
            ))
            effects.extend(self._effects_for(event))

        aircraft = self._snapshots(t)
        blips = tuple(self.radar.blips(aircraft))
        self.counters.contacts = len(blips)

        frame = Frame(
            time=t,
            clock=format_clock(t),
            status=self.status,
            speed=self.clock.speed,
            epoch=self.clock.epoch,
            aircraft=aircraft,
            counters=CounterSnapshot(
                contacts=self.counters.contacts,
                engagements=self.counters.engagements,
                kills=self.counters.kills,
                losses=self.counters.losses,
                intensity=self.counters.intensity,
                last_event=self.counters.last_event,
            ),
            show_trails=self.show_trails,
            show_labels=self.show_labels,
            selected_id=self.store.selected_id,
            focus=self.store.focus_point() if self.follow else None,
            radar=blips,
        )

        pub = FramePublication(frame=frame, log=entries, effects=effects, reset=self._pending_reset)
        self._pending_reset = False
        self.last_frame = frame
        self.fanout.publish(pub)
        return frame

    @property
    def status(self) -> str:
        if self.clock.phase == ClockPhase.PAUSED:
            return "PAUSED"
        if self.clock.at_end:
            return "END"
        return "ARMED"

    def _reset_runtime(self):
        self.store.reset()
        self.counters.reset()
        self._warned_events.clear()
        self._pending_reset = True

    # ------------------------------------------------------------------
    # Event side effects
    # ------------------------------------------------------------------

    def _apply_kill(self, event: MissionEvent):
        if event.target and event.target in self.store:
            self.store.kill(event.target, at_time=event.t, trails=self.show_trails)
        else:
            self._warn_once(event, f"KILL at T={event.t:.1f}s names unknown target {event.target!r}")

    def _effects_for(self, event: MissionEvent) -> list[Effect]:
        if event.type in (EventType.ENGAGEMENT, EventType.KILL):
            pos = self.store.position_of(event.actor)
            if pos is None:
                if event.actor:
                    self._warn_once(event, f"{event.type.value} actor {event.actor!r} has no position")
                return []
            return [Effect(EffectKind.WEAPONS_FIRE, pos.lat, pos.lng, actor=event.actor)]
        if event.type == EventType.IMPACT and event.lat is not None and event.lng is not None:
            return [Effect(EffectKind.IMPACT, event.lat, event.lng)]
        return []

    def _warn_once(self, event: MissionEvent, msg: str):
        if event.key in self._warned_events:
            return
        self._warned_events.add(event.key)
        logger.warning(msg)

    def _snapshots(self, t: float) -> tuple[AircraftSnapshot, ...]:
        out = []
        window = self.config.danger_window_s
        for st in self.store.states():
            if st.position is None:
                continue
            out.append(AircraftSnapshot(
                id=st.id,
                callsign=st.track.callsign,
                side=st.track.side.value,
                lat=st.position.lat,
                lng=st.position.lng,
                heading=st.position.heading,
                alive=st.alive,
                danger=is_imminent(self.death_times.get(st.id), t, st.alive, window),
                trail=tuple(st.trail_points()) if self.show_trails else None,
            ))
        return tuple(out)

    # ------------------------------------------------------------------
    # User controls
    # ------------------------------------------------------------------

    def play(self):
        self.clock.resume()

    def pause(self):
        self.clock.pause()

    def restart(self, resume: bool = True):
        """Back to T=0 with a fresh epoch. Mission data is untouched."""
        logger.info(f"Replay restarted (epoch {self.clock.epoch + 1})")
        self.clock.restart()
        self._reset_runtime()
        if resume:
            self.clock.resume()

    def set_speed(self, multiplier: float):
        self.clock.set_speed(multiplier)

    def resize_radar(self, width: int, height: int):
        """Surface size reported by the radar view; zero skips blips until resized."""
        self.radar.resize(width, height)

    def set_trails(self, on: bool):
        self.show_trails = bool(on)

    def set_labels(self, on: bool):
        self.show_labels = bool(on)

    def set_follow(self, on: bool):
        self.follow = bool(on)

    def select_aircraft(self, track_id: str) -> bool:
        return self.store.select(track_id)

    def seek(self, target: float) -> Frame:
        """
        Jump to mission time `target`.

        Seeking backwards restarts first; every event up to the target fires
        once in the frame published here.
        """
        target = float(target)
        if not math.isfinite(target):
            raise ValueError(f"Seek target must be finite, got {target}")
        target = max(0.0, min(self.clock.duration, target))
        if target < self.clock.time:
            self.restart(resume=False)
        self.clock.jump_to(target)
        return self.render()
