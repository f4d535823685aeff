"""Preset launch settings for the parameter form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .config import LaunchConfig


@dataclass
class LaunchPreset:
    """A named set of launch values."""
    name: str
    description: str
    launch: LaunchConfig


# ============================================================================
# Preset Definitions
# ============================================================================

CLASSIC = LaunchPreset(
    name="classic",
    description="White shell with the default burst",
    launch=LaunchConfig(size=3, color="#ffffff", explosion_duration=3.0, explosion_radius=30.0),
)

GRAND = LaunchPreset(
    name="grand",
    description="Large gold shell with a wide, long-lived burst",
    launch=LaunchConfig(size=6, color="#ffd700", explosion_duration=5.0, explosion_radius=80.0),
)

SPARKLER = LaunchPreset(
    name="sparkler",
    description="Small blue shell that bursts from a single point",
    launch=LaunchConfig(size=2, color="#4fc3f7", explosion_duration=1.5, explosion_radius=0.0),
)

CROSSETTE = LaunchPreset(
    name="crossette",
    description="Red shell with a short, scattered burst",
    launch=LaunchConfig(size=4, color="#ff3b30", explosion_duration=1.0, explosion_radius=50.0),
)


PRESETS: Dict[str, LaunchPreset] = {
    p.name: p for p in (CLASSIC, GRAND, SPARKLER, CROSSETTE)
}


def get_preset(name: str) -> LaunchPreset:
    """Get preset by name."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    return PRESETS[name]


def list_presets() -> List[LaunchPreset]:
    """List all available presets."""
    return list(PRESETS.values())
