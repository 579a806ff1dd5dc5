"""
Replay clock: owns the single logical mission time.

States:
- PLAYING: time advances by wall_dt x speed, clamped at the duration
- PAUSED: time frozen
- END_HOLD: time == duration; a wall-clock hold runs, then the clock restarts
"""

import math
import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

END_HOLD_S = 0.8


class ClockPhase(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    END_HOLD = "end_hold"


@dataclass
class ReplayState:
    """Mutable replay progress. Mutated only by ReplayClock."""
    time: float = 0.0
    running: bool = True
    speed: float = 10.0
    fired_events: set = field(default_factory=set)


class ReplayClock:
    """Advances mission time from frame-to-frame wall-clock deltas."""

    def __init__(self, duration: float, speed: float = 10.0, hold_s: float = END_HOLD_S):
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")
        if not math.isfinite(speed) or speed <= 0:
            raise ValueError(f"Speed must be positive and finite, got {speed}")
        self.duration = float(duration)
        self.hold_s = hold_s
        self.state = ReplayState(speed=float(speed))
        self.phase = ClockPhase.PLAYING
        self.hold_elapsed = 0.0
        self.epoch = 0

    @property
    def time(self) -> float:
        return self.state.time

    @property
    def speed(self) -> float:
        return self.state.speed

    @property
    def fired_events(self) -> set:
        return self.state.fired_events

    @property
    def at_end(self) -> bool:
        return self.state.time >= self.duration

    def advance(self, wall_dt: float) -> bool:
        """
        Advance by one frame of `wall_dt` wall-clock seconds.

        Returns True when the end-of-mission hold expired and the clock
        restarted during this call.
        """
        if not math.isfinite(wall_dt) or wall_dt < 0:
            logger.debug(f"Frame interval {wall_dt}s treated as 0")
            wall_dt = 0.0

        if self.phase == ClockPhase.PAUSED:
            return False

        if self.phase == ClockPhase.END_HOLD:
            # Hold runs on wall time, independent of speed
            self.hold_elapsed += wall_dt
            if self.hold_elapsed >= self.hold_s:
                logger.info("End hold elapsed, restarting replay")
                self.restart()
                return True
            return False

        self.state.time = min(self.duration, self.state.time + wall_dt * self.state.speed)
        if self.at_end:
            logger.debug(f"Mission end reached at T={self.duration:.1f}s, holding")
            self.phase = ClockPhase.END_HOLD
            self.hold_elapsed = 0.0
        return False

    def pause(self):
        self.phase = ClockPhase.PAUSED
        self.state.running = False

    def resume(self):
        if self.phase != ClockPhase.PAUSED:
            return
        # A hold interrupted by pause picks up where it left off
        self.phase = ClockPhase.END_HOLD if self.at_end else ClockPhase.PLAYING
        self.state.running = True

    def restart(self):
        """Rewind to 0 and start a new epoch. Pause state is kept."""
        self.state.time = 0.0
        self.state.fired_events.clear()
        self.hold_elapsed = 0.0
        self.epoch += 1
        if self.phase == ClockPhase.END_HOLD:
            self.phase = ClockPhase.PLAYING

    def set_speed(self, multiplier: float):
        """Takes effect on the next advance."""
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ValueError(f"Speed must be positive and finite, got {multiplier}")
        self.state.speed = float(multiplier)

    def jump_to(self, target: float):
        """Move time forward to `target` (clamped). Never moves backwards."""
        if not math.isfinite(target):
            raise ValueError(f"Seek target must be finite, got {target}")
        target = max(0.0, min(self.duration, target))
        if target < self.state.time:
            raise ValueError("Clock time cannot move backwards without restart")
        self.state.time = target
        if self.at_end and self.phase == ClockPhase.PLAYING:
            self.phase = ClockPhase.END_HOLD
            self.hold_elapsed = 0.0
