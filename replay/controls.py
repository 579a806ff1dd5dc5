"""
Inbound user controls.

Messages are dicts such as {"type": "set_speed", "value": 20}; each maps
onto one ReplayEngine operation.
"""

import math
import logging

from .engine import ReplayEngine

logger = logging.getLogger(__name__)


class ControlError(ValueError):
    """Control message that cannot be applied."""


def _flag(msg: dict) -> bool:
    value = msg.get("value", msg.get("on", True))
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on", "yes")
    return bool(value)


def _number(msg: dict, key: str = "value") -> float:
    try:
        value = float(msg[key])
    except KeyError as e:
        raise ControlError(f"{msg.get('type')} requires '{key}'") from e
    except (TypeError, ValueError) as e:
        raise ControlError(f"{msg.get('type')} got non-numeric {key}={msg.get(key)!r}") from e
    if not math.isfinite(value):
        raise ControlError(f"{msg.get('type')} got non-finite {key}={msg.get(key)!r}")
    return value


def _set_speed(engine: ReplayEngine, msg: dict):
    value = _number(msg)
    if value <= 0:
        raise ControlError(f"Speed must be positive, got {value}")
    engine.set_speed(value)


def _resize_radar(engine: ReplayEngine, msg: dict):
    width, height = _number(msg, "width"), _number(msg, "height")
    if width < 0 or height < 0:
        raise ControlError(f"Radar size must not be negative, got {width}x{height}")
    engine.resize_radar(width, height)


def _select(engine: ReplayEngine, msg: dict):
    track_id = msg.get("id", msg.get("value"))
    if not track_id or not engine.select_aircraft(str(track_id)):
        raise ControlError(f"Unknown aircraft {track_id!r}")


COMMANDS = {
    "play": lambda engine, msg: engine.play(),
    "pause": lambda engine, msg: engine.pause(),
    "restart": lambda engine, msg: engine.restart(),
    "set_speed": _set_speed,
    "toggle_trails": lambda engine, msg: engine.set_trails(_flag(msg)),
    "toggle_labels": lambda engine, msg: engine.set_labels(_flag(msg)),
    "toggle_follow": lambda engine, msg: engine.set_follow(_flag(msg)),
    "select_aircraft": _select,
    "seek": lambda engine, msg: engine.seek(_number(msg)),
    "resize_radar": _resize_radar,
}


def dispatch(engine: ReplayEngine, msg: dict):
    """Apply one control message to the engine. Raises ControlError."""
    if not isinstance(msg, dict):
        raise ControlError("Control message must be an object")
    command = msg.get("type", "")
    handler = COMMANDS.get(command)
    if handler is None:
        raise ControlError(f"Unknown control: {command}")
    logger.debug(f"Control {command}: {msg}")
    handler(engine, msg)
