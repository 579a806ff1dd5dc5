#!/usr/bin/env python3
"""
Terminal replay log - plays a mission headless and streams the event log.
"""

import sys
import time
import logging
import argparse

from replay import EventType, MissionError, ReplayView, load_config, load_mission, ReplayEngine
from replay.views import Frame, LogEntry

PREFIXES = {
    EventType.CONTACT: "📡 CONTACT",
    EventType.ENGAGEMENT: "🔫 ENGAGE",
    EventType.KILL: "💥 KILL",
    EventType.IMPACT: "💥 IMPACT",
    EventType.LOSS: "☠️  LOSS",
    EventType.NOTE: "⚡ NOTE",
}


def log_header(text):
    """Print a header."""
    print(f"\n{'='*70}")
    print(f"  {text}")
    print(f"{'='*70}\n")
    sys.stdout.flush()


class TerminalLogView(ReplayView):
    """Prints each log entry as it fires and keeps the latest frame for the HUD summary."""

    name = "terminal"

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self.lines: list[str] = []
        self.last_frame: Frame | None = None
        self.final_frame: Frame | None = None  # last frame of the latest finished epoch

    def on_reset(self):
        self.lines.clear()
        self._write("\n" + "-" * 70 + "\n")

    def on_log(self, entry: LogEntry):
        line = f"[{entry.clock}] {PREFIXES.get(entry.type, entry.type.value.upper())}: {entry.text}"
        self.lines.append(line)
        self._write(line + "\n")

    def on_frame(self, frame: Frame):
        self.last_frame = frame

    def summary(self) -> str:
        f = self.final_frame or self.last_frame
        if f is None:
            return "No frames rendered"
        c = f.counters
        alive = sum(1 for ac in f.aircraft if ac.alive)
        return (
            f"{f.clock} {f.status} | contacts {c.contacts} | engagements {c.engagements} | "
            f"kills {c.kills} | losses {c.losses} | intensity {c.intensity:.0%} | "
            f"tracks alive {alive}/{len(f.aircraft)}"
        )

    def _write(self, text: str):
        self.out.write(text)
        self.out.flush()


def run(engine: ReplayEngine, view: TerminalLogView, loops: int, fps: int, realtime: bool):
    """Tick the engine until `loops` epochs have completed."""
    dt = 1.0 / fps
    start_epoch = engine.clock.epoch
    last = time.monotonic()
    while engine.clock.epoch - start_epoch < loops:
        if realtime:
            time.sleep(dt)
            now = time.monotonic()
            wall_dt, last = now - last, now
        else:
            wall_dt = dt
        epoch = engine.clock.epoch
        frame_before = view.last_frame
        engine.tick(wall_dt)
        if engine.clock.epoch != epoch and frame_before is not None:
            view.final_frame = frame_before
            print(f"\n📊 Epoch {epoch + 1}: {summarize(frame_before)}")


def summarize(frame: Frame) -> str:
    c = frame.counters
    return (
        f"{frame.clock} | engagements {c.engagements} | kills {c.kills} | "
        f"losses {c.losses} | intensity {c.intensity:.0%}"
    )


def main():
    """Play a mission in the terminal."""
    parser = argparse.ArgumentParser(description="Dogfight replay - terminal log")
    parser.add_argument("--mission", default=None, help="Mission file (.yaml/.json)")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--speed", type=float, default=None, help="Playback speed multiplier")
    parser.add_argument("--loops", type=int, default=1, help="Replays to run before exiting")
    parser.add_argument("--fps", type=int, default=None, help="Frames per second")
    parser.add_argument("--realtime", action="store_true", help="Pace frames on the wall clock")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config = load_config(args.config)
    if args.speed is not None:
        config.speed = args.speed
    if args.fps is not None:
        config.fps = args.fps
    config.validate()

    view = TerminalLogView()
    mission_path = args.mission or config.resolve_mission_path()
    try:
        loaded = load_mission(mission_path, default_duration_s=config.default_duration_s)
    except MissionError as e:
        print("STATUS: ERROR")
        print(f"[T+00:00] {PREFIXES[EventType.LOSS]}: Console failed to boot. {e}")
        sys.exit(1)

    mission = loaded.mission
    log_header(f"{mission.title.upper()} - {mission.sector}")
    print(f"{len(mission.aircraft)} aircraft, {len(mission.events)} events, "
          f"{mission.duration_s:.0f}s at {config.speed:g}x\n")

    engine = ReplayEngine(mission, config)
    engine.attach(view)
    engine.boot(loaded.warnings)

    run(engine, view, args.loops, config.fps, args.realtime)

    log_header("REPLAY COMPLETE")
    print(view.summary())


if __name__ == "__main__":
    main()
