"""Configuration for the fireworks engine."""
from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional


HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass
class SimConfig:
    """Engine constants. These do not change while a simulation runs."""

    # World
    width: float = 800.0
    height: float = 600.0

    # Clock
    tick_interval: float = 0.05  # seconds between ticks

    # Flight
    launch_speed: float = 3.0  # pixels per tick

    # Burst
    burst_count: int = 30
    speed_min: float = 1.0
    speed_max: float = 4.0
    size_min: float = 1.0
    size_max: float = 4.0
    gravity_min: float = 1.0
    gravity_max: float = 3.0

    # Decay
    fade: float = 0.02  # opacity lost per tick
    duration_decrement: float = 0.05  # explosion budget lost per tick

    max_fireworks: Optional[int] = None
    seed: Optional[int] = None

    @property
    def emitter(self) -> tuple:
        """Launch point: bottom-center of the drawing surface."""
        return (self.width / 2, self.height)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimConfig":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class LaunchConfig:
    """The four user-editable values read when a firework is launched."""

    size: int = 3
    color: str = "#ffffff"
    explosion_duration: float = 3.0
    explosion_radius: float = 30.0

    def sanitized(self) -> "LaunchConfig":
        """
        Return a copy safe to feed into the simulation.

        Non-finite numbers fall back to the defaults. Size is clamped to at
        least 1 pixel and the radius to at least 0. A non-positive duration
        is kept: such a firework is spent on the tick it detonates.
        """
        color = self.color if HEX_COLOR.match(str(self.color)) else DEFAULT_LAUNCH.color
        size = _finite(self.size, DEFAULT_LAUNCH.size)
        duration = _finite(self.explosion_duration, DEFAULT_LAUNCH.explosion_duration)
        radius = _finite(self.explosion_radius, DEFAULT_LAUNCH.explosion_radius)
        return replace(
            self,
            size=max(1, int(size)),
            color=color.lower(),
            explosion_duration=duration,
            explosion_radius=max(0.0, radius),
        )

    def updated(self, **changes: Any) -> "LaunchConfig":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _finite(value: Any, default: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return float(default)
    return value if math.isfinite(value) else float(default)


DEFAULT_CONFIG = SimConfig()
DEFAULT_LAUNCH = LaunchConfig()
