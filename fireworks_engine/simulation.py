"""Firework flight, burst generation and particle decay."""
from __future__ import annotations

import enum
import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import DEFAULT_LAUNCH, LaunchConfig, SimConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Particles
# ============================================================================

@dataclass
class Particle:
    """A decaying point spawned by a detonation."""
    x: float
    y: float
    angle: float
    speed: float
    size: float
    color: str
    gravity: float
    opacity: float = 1.0
    age: int = 0
    # Per-tick velocity, fixed at spawn from angle and speed
    vx: float = field(init=False)
    vy: float = field(init=False)

    def __post_init__(self) -> None:
        self.vx = math.cos(self.angle) * self.speed
        self.vy = math.sin(self.angle) * self.speed

    @property
    def alive(self) -> bool:
        return self.opacity > 0.0

    def step(self, fade: float) -> None:
        """Advance one tick: drift, fall and fade."""
        self.x += self.vx
        self.y += self.vy
        self.y += self.gravity
        # Derived from age so that e.g. 50 ticks of 0.02 land exactly on 0
        self.age += 1
        self.opacity = 1.0 - self.age * fade

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "size": self.size,
            "color": self.color,
            "opacity": self.opacity,
        }


def generate_burst(
    origin: Tuple[float, float],
    color: str,
    base_size: float,
    explosion_radius: float,
    config: SimConfig,
    rng: np.random.RandomState,
) -> List[Particle]:
    """
    Turn one detonation into ``config.burst_count`` particles.

    Every particle inherits ``color``. Particles are spread through the
    explosion volume: each starts up to ``explosion_radius`` pixels from
    ``origin`` along its own direction of travel, so a radius of 0 gives a
    single burst point.

    Args:
        origin: Detonation point (x, y)
        color: Color shared by every particle
        base_size: Size of the parent firework; scales particle sizes
        explosion_radius: Maximum spawn offset from ``origin``
        config: Engine constants (count and sampling ranges)
        rng: Random source owned by the caller

    Returns:
        A new list of particles with opacity 1
    """
    n = config.burst_count
    scale = base_size / DEFAULT_LAUNCH.size

    angles = rng.uniform(0.0, 2.0 * math.pi, n)
    speeds = rng.uniform(config.speed_min, config.speed_max, n)
    sizes = rng.uniform(config.size_min, config.size_max, n) * scale
    gravities = rng.uniform(config.gravity_min, config.gravity_max, n)
    offsets = rng.uniform(0.0, max(0.0, explosion_radius), n)

    ox, oy = origin
    return [
        Particle(
            x=ox + float(offsets[i] * math.cos(angles[i])),
            y=oy + float(offsets[i] * math.sin(angles[i])),
            angle=float(angles[i]),
            speed=float(speeds[i]),
            size=float(sizes[i]),
            color=color,
            gravity=float(gravities[i]),
        )
        for i in range(n)
    ]


# ============================================================================
# Fireworks
# ============================================================================

class FireworkState(enum.Enum):
    FLYING = "flying"
    EXPLODED = "exploded"
    SPENT = "spent"


@dataclass
class Firework:
    """A projectile that flies to its target and bursts into particles."""
    id: int
    x: float
    y: float
    target_x: float
    target_y: float
    size: int
    color: str
    explosion_duration: float
    explosion_radius: float
    state: FireworkState = FireworkState.FLYING
    remaining_duration: float = 0.0
    exploded_ticks: int = 0
    particles: List[Particle] = field(default_factory=list)

    @property
    def exploded(self) -> bool:
        return self.state is not FireworkState.FLYING

    @property
    def spent(self) -> bool:
        return self.state is FireworkState.SPENT

    def distance_to_target(self) -> float:
        return math.hypot(self.target_x - self.x, self.target_y - self.y)

    def step(self, config: SimConfig, rng: np.random.RandomState) -> None:
        """Advance the firework by one tick."""
        if self.state is FireworkState.FLYING:
            self._fly(config, rng)
        elif self.state is FireworkState.EXPLODED:
            self._decay(config)

    def _fly(self, config: SimConfig, rng: np.random.RandomState) -> None:
        dx = self.target_x - self.x
        dy = self.target_y - self.y
        distance = math.hypot(dx, dy)

        # Covers distance == 0, so the division below never sees zero
        if distance < config.launch_speed:
            self._detonate(config, rng)
            return

        self.x += dx / distance * config.launch_speed
        self.y += dy / distance * config.launch_speed

    def _detonate(self, config: SimConfig, rng: np.random.RandomState) -> None:
        self.state = FireworkState.EXPLODED
        self.remaining_duration = self.explosion_duration
        self.particles = generate_burst(
            (self.x, self.y),
            self.color,
            self.size,
            self.explosion_radius,
            config,
            rng,
        )
        logger.debug("Firework %d exploded at (%.1f, %.1f)", self.id, self.x, self.y)
        self._check_spent()

    def _decay(self, config: SimConfig) -> None:
        self.exploded_ticks += 1
        self.remaining_duration = (
            self.explosion_duration - self.exploded_ticks * config.duration_decrement
        )
        for particle in self.particles:
            particle.step(config.fade)
        self.particles = [p for p in self.particles if p.alive]
        self._check_spent()

    def _check_spent(self) -> None:
        if self.remaining_duration <= 0.0 or not self.particles:
            self.state = FireworkState.SPENT
            self.particles = []

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "target_x": self.target_x,
            "target_y": self.target_y,
            "size": self.size,
            "color": self.color,
            "state": self.state.value,
            "exploded": self.exploded,
            "remaining_duration": self.remaining_duration,
            "particles": [p.to_dict() for p in self.particles],
        }


# ============================================================================
# Simulation (entity registry)
# ============================================================================

class Simulation:
    """
    Owns the live fireworks and advances them tick by tick.

    Launches are queued and join the registry at the start of the next
    tick; spent fireworks leave it at the end of the tick they are spent in.
    """

    def __init__(self, config: SimConfig):
        self.config = config
        self.rng = np.random.RandomState(config.seed)
        self.fireworks: List[Firework] = []
        self.pending: List[Firework] = []
        self.tick = 0
        self._ids = itertools.count(1)

    def launch(
        self,
        target: Tuple[float, float],
        launch_config: LaunchConfig = DEFAULT_LAUNCH,
    ) -> Optional[Firework]:
        """
        Queue a firework from the emitter towards ``target``.

        The launch values are copied into the firework, so later edits to the
        configuration never reach it. Returns None when ``max_fireworks`` is
        set and already reached.

        Raises:
            ValueError: If a target coordinate is not a finite number
        """
        target_x, target_y = float(target[0]), float(target[1])
        if not (math.isfinite(target_x) and math.isfinite(target_y)):
            raise ValueError(f"Launch target must be finite, got {target!r}")

        limit = self.config.max_fireworks
        if limit is not None and len(self.fireworks) + len(self.pending) >= limit:
            logger.warning("Launch rejected: %d fireworks already live", limit)
            return None

        values = launch_config.sanitized()
        x, y = self.config.emitter
        firework = Firework(
            id=next(self._ids),
            x=x,
            y=y,
            target_x=target_x,
            target_y=target_y,
            size=values.size,
            color=values.color,
            explosion_duration=values.explosion_duration,
            explosion_radius=values.explosion_radius,
        )
        self.pending.append(firework)
        return firework

    def step(self) -> None:
        """Advance every firework by one tick and prune the spent ones."""
        if self.pending:
            self.fireworks.extend(self.pending)
            self.pending = []

        for firework in self.fireworks:
            firework.step(self.config, self.rng)

        self.fireworks = [f for f in self.fireworks if not f.spent]
        self.tick += 1

    def particle_count(self) -> int:
        return sum(len(f.particles) for f in self.fireworks)

    def get_state(self) -> dict:
        """Get current state for API/visualization."""
        return {
            "width": self.config.width,
            "height": self.config.height,
            "tick": self.tick,
            "fireworks": [f.to_dict() for f in self.fireworks],
        }

    def reset(self) -> None:
        """Drop every live and queued firework."""
        self.fireworks = []
        self.pending = []
        self.tick = 0
        if self.config.seed is not None:
            self.rng = np.random.RandomState(self.config.seed)
