"""Simulation configuration.

A single immutable ``SimConfig`` is built at startup (defaults, optionally
overridden from a JSON settings file) and handed to the ``Simulation``.
Nothing re-reads configuration while the simulation runs.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from tennis_engine import court

logger = logging.getLogger(__name__)

MIN_VISUAL_PACE = 0.05


@dataclass(frozen=True)
class SimConfig:
    """Read-only settings for one simulation run."""
    # Shot defaults offered to the player and used for the first launch
    default_force: float = 270.0
    default_angle: float = 39.0
    default_spin: float = 0.0
    force_step: float = 10.0
    angle_step: float = 1.0
    spin_step: float = 100.0

    # Accepted return-shot ranges
    min_force: float = 10.0
    max_force: float = 600.0
    min_angle: float = 0.0
    max_angle: float = 75.0
    min_spin: float = -3000.0
    max_spin: float = 9000.0

    # Clock and pace
    tick_rate: int = court.TICK_RATE
    visual_pace: float = 1.0
    player_speed: float = 6.0  # m/s

    # Physics
    air_drag: float = 0.0012
    net_noise: float = court.NET_DEFLECTION_NOISE
    friction_on_bounce: bool = False
    relaunch_delay: float = court.RELAUNCH_DELAY

    @property
    def dt(self) -> float:
        """Fixed tick length in seconds."""
        return 1.0 / max(self.tick_rate, 1)

    @property
    def pace(self) -> float:
        """Visual pace multiplier applied to the ball step only."""
        return max(self.visual_pace, MIN_VISUAL_PACE)

    @classmethod
    def from_dict(cls, data: dict) -> "SimConfig":
        """Build a config from a mapping, keeping defaults for missing keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: Optional[Union[str, Path]] = None) -> SimConfig:
    """Load settings from a JSON file, merged over the defaults.

    A missing path or file gives the defaults. An unreadable or malformed
    file is logged and also gives the defaults.
    """
    if path is None:
        return SimConfig()

    path = Path(path)
    if not path.exists():
        logger.info(f"No settings file at {path}, using defaults")
        return SimConfig()

    try:
        with open(path) as f:
            saved = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not read settings from {path}: {e}")
        return SimConfig()

    if not isinstance(saved, dict):
        logger.warning(f"Settings file {path} does not hold an object, using defaults")
        return SimConfig()

    return SimConfig.from_dict(saved)
