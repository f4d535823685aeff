#!/usr/bin/env python3
"""
Standalone Fireworks Viewer with Pygame
Click to launch, edit the launch values from the keyboard
"""

import argparse
import logging
import sys

import pygame

from fireworks_engine.config import DEFAULT_LAUNCH, SimConfig
from fireworks_engine.presets import list_presets
from fireworks_engine.render import PygameRenderer, RenderSurfaceError
from fireworks_engine.simulation import Simulation

logger = logging.getLogger("fireworks_viewer")

COLORS = ["#ffffff", "#ff3b30", "#ffd700", "#4cd964", "#4fc3f7", "#af52de"]


class FireworksViewer:
    """Input adapter, parameter form and render loop around a Simulation"""

    def __init__(self, config: SimConfig):
        self.config = config
        self.simulation = Simulation(config)
        self.launch_config = DEFAULT_LAUNCH
        self.presets = list_presets()

        pygame.init()
        try:
            screen = pygame.display.set_mode((int(config.width), int(config.height)))
        except pygame.error as e:
            pygame.quit()
            raise RenderSurfaceError(f"Could not open display: {e}") from e
        pygame.display.set_caption("Fireworks")
        self.renderer = PygameRenderer(screen)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 22)

        self.paused = False
        self.show_info = True

    def adjust(self, **changes):
        """Apply a form edit; only fireworks launched afterwards see it"""
        self.launch_config = self.launch_config.updated(**changes).sanitized()
        logger.info("Launch values: %s", self.launch_config)

    def next_color(self):
        current = self.launch_config.color
        index = COLORS.index(current) if current in COLORS else -1
        self.adjust(color=COLORS[(index + 1) % len(COLORS)])

    def draw_info(self):
        lc = self.launch_config
        lines = [
            f"Size: {lc.size}  (UP/DOWN)",
            f"Color: {lc.color}  (C)",
            f"Duration: {lc.explosion_duration:.1f}  ([ / ])",
            f"Radius: {lc.explosion_radius:.0f}  (LEFT/RIGHT)",
            f"Fireworks: {len(self.simulation.fireworks)}  Particles: {self.simulation.particle_count()}",
            "1-4 presets, R reset, SPACE pause, I info, Q quit",
        ]
        if self.paused:
            lines.append("PAUSED")
        for i, text in enumerate(lines):
            surface = self.font.render(text, True, (200, 200, 200))
            self.renderer.surface.blit(surface, (10, 10 + i * 20))

    def handle_events(self) -> bool:
        """Handle pygame events; returns False when the viewer should close"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                # Window coordinates are already relative to the surface origin
                self.simulation.launch(event.pos, self.launch_config)

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    return False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_i:
                    self.show_info = not self.show_info
                elif event.key == pygame.K_r:
                    self.simulation.reset()
                    logger.info("Reset simulation")
                elif event.key == pygame.K_UP:
                    self.adjust(size=self.launch_config.size + 1)
                elif event.key == pygame.K_DOWN:
                    self.adjust(size=self.launch_config.size - 1)
                elif event.key == pygame.K_RIGHT:
                    self.adjust(explosion_radius=self.launch_config.explosion_radius + 5)
                elif event.key == pygame.K_LEFT:
                    self.adjust(explosion_radius=self.launch_config.explosion_radius - 5)
                elif event.key == pygame.K_RIGHTBRACKET:
                    self.adjust(explosion_duration=self.launch_config.explosion_duration + 0.5)
                elif event.key == pygame.K_LEFTBRACKET:
                    self.adjust(explosion_duration=max(0.5, self.launch_config.explosion_duration - 0.5))
                elif event.key == pygame.K_c:
                    self.next_color()
                elif pygame.K_1 <= event.key < pygame.K_1 + len(self.presets):
                    preset = self.presets[event.key - pygame.K_1]
                    self.launch_config = preset.launch
                    logger.info("Preset: %s", preset.name)

        return True

    def run(self):
        """Main loop: input, one tick, draw"""
        ticks_per_second = 1.0 / self.config.tick_interval
        running = True

        while running:
            # Launches queued here join the registry at the next tick
            running = self.handle_events()

            if not self.paused:
                self.simulation.step()

            self.renderer.draw_frame(self.simulation.get_state())
            if self.show_info:
                self.draw_info()

            pygame.display.flip()
            self.clock.tick(ticks_per_second)

        pygame.quit()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Fireworks Viewer")
    parser.add_argument("--width", type=float, default=SimConfig.width)
    parser.add_argument("--height", type=float, default=SimConfig.height)
    parser.add_argument("--interval", type=float, default=SimConfig.tick_interval,
                        help="Seconds between ticks")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-fireworks", type=int, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimConfig(
        width=args.width,
        height=args.height,
        tick_interval=args.interval,
        seed=args.seed,
        max_fireworks=args.max_fireworks,
    )

    try:
        viewer = FireworksViewer(config)
    except RenderSurfaceError as e:
        logger.error("Cannot start: %s", e)
        return 1

    logger.info("Click to launch, Q to quit")
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
