"""
Console configuration.

Defaults are overridden by a YAML file, then by environment variables
(a project-root .env is loaded first).
"""

import os
import math
import yaml
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "data" / "console.yaml"

# env var -> (field, type)
ENV_OVERRIDES = {
    "REPLAY_SPEED": ("speed", float),
    "REPLAY_HOLD_S": ("hold_s", float),
    "REPLAY_MISSION": ("mission_path", str),
    "REPLAY_FPS": ("fps", int),
    "HOST": ("host", str),
    "PORT": ("port", int),
}


def _finite(name: str, value, positive: bool = False) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        num = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(num):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if positive and num <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    if num < 0:
        raise ValueError(f"{name} must not be negative, got {value!r}")
    return num


@dataclass
class ReplayConfig:
    """Playback and presentation settings."""
    speed: float = 10.0
    hold_s: float = 0.8
    danger_window_s: float = 3.0
    default_duration_s: float = 120.0
    trails: bool = True
    labels: bool = True
    follow: bool = False
    fps: int = 30
    radar_width: int = 480
    radar_height: int = 480
    mission_path: str = "data/missions/pemberley.yaml"
    host: str = "0.0.0.0"
    port: int = 8080

    def validate(self):
        """Coerce numeric settings to finite numbers. Raises ValueError."""
        self.speed = _finite("speed", self.speed, positive=True)
        self.hold_s = _finite("hold_s", self.hold_s)
        self.danger_window_s = _finite("danger_window_s", self.danger_window_s)
        self.default_duration_s = _finite("default_duration_s", self.default_duration_s, positive=True)
        self.fps = int(_finite("fps", self.fps, positive=True))
        if self.fps <= 0:
            raise ValueError(f"fps must be at least 1, got {self.fps}")
        self.radar_width = int(_finite("radar_width", self.radar_width))
        self.radar_height = int(_finite("radar_height", self.radar_height))

    def resolve_mission_path(self) -> Path:
        path = Path(self.mission_path)
        return path if path.is_absolute() else PROJECT_ROOT / path


def load_config(path: Optional[Path | str] = None, use_env: bool = True) -> ReplayConfig:
    """Load config from YAML (if present) and apply environment overrides."""
    config = ReplayConfig()
    known = {f.name for f in fields(ReplayConfig)}

    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must be a mapping")
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Unknown config key '{key}' in {path}, ignored")
                continue
            setattr(config, key, value)
        logger.info(f"Config loaded from {path}")
    elif path != DEFAULT_CONFIG_PATH:
        logger.warning(f"Config file not found: {path}, using defaults")

    if use_env:
        load_dotenv(PROJECT_ROOT / ".env")
        for env_name, (attr, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                setattr(config, attr, cast(raw))
            except ValueError as e:
                raise ValueError(f"Invalid {env_name}={raw!r}") from e

    config.validate()
    return config
