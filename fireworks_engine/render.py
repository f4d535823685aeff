"""Pygame drawing of simulation snapshots."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import pygame

logger = logging.getLogger(__name__)

BACKGROUND = (0, 0, 0)


class RenderSurfaceError(RuntimeError):
    """Raised when there is no surface to draw on."""


class PygameRenderer:
    """
    Draws fireworks and particles from ``Simulation.get_state()`` output.

    Opacity is applied per draw through a scratch ``SRCALPHA`` surface, so
    nothing set for one particle carries over to the next draw.
    """

    def __init__(self, surface: Optional[pygame.Surface], background: Tuple[int, int, int] = BACKGROUND):
        if surface is None:
            raise RenderSurfaceError("No drawing surface available")
        self.surface = surface
        self.background = background

    def draw_frame(self, state: dict) -> int:
        """Clear the surface and draw every live entity. Returns circles drawn."""
        self.surface.fill(self.background)
        drawn = 0
        for firework in state["fireworks"]:
            if not firework["exploded"]:
                self.draw_circle(
                    (firework["x"], firework["y"]), firework["size"], firework["color"]
                )
                drawn += 1
            for particle in firework["particles"]:
                if particle["opacity"] <= 0.0:
                    continue
                self.draw_circle(
                    (particle["x"], particle["y"]),
                    particle["size"],
                    particle["color"],
                    particle["opacity"],
                )
                drawn += 1
        return drawn

    def draw_circle(self, center, radius, color, opacity: float = 1.0) -> None:
        """Draw a filled circle; ``opacity`` affects this circle only."""
        radius = max(1, int(round(radius)))
        rgb = pygame.Color(color)
        if opacity >= 1.0:
            pygame.draw.circle(self.surface, rgb, (int(center[0]), int(center[1])), radius)
            return

        rgb.a = max(0, min(255, int(opacity * 255)))
        scratch = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(scratch, rgb, (radius, radius), radius)
        self.surface.blit(scratch, (int(center[0]) - radius, int(center[1]) - radius))
