"""Fixed-interval asyncio clock that drives a simulation."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional

from .simulation import Simulation

logger = logging.getLogger(__name__)

TickListener = Callable[[dict], Any]


class SimulationClock:
    """
    Steps a simulation every ``interval`` seconds and hands each post-tick
    snapshot to the registered listeners.

    Ticks run one after another inside a single task, so a slow tick delays
    the next one instead of overlapping it. Anything else that mutates the
    simulation must hold ``lock``.
    """

    def __init__(self, simulation: Simulation, interval: Optional[float] = None):
        self.simulation = simulation
        self.interval = interval if interval is not None else simulation.config.tick_interval
        self.lock = asyncio.Lock()
        self._listeners: List[TickListener] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_tick(self, callback: TickListener) -> TickListener:
        """Register ``callback(state)``; plain functions and coroutines both work."""
        self._listeners.append(callback)
        return callback

    def start(self) -> None:
        if self.running:
            return
        logger.info("Starting simulation clock (interval=%.3fs)", self.interval)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish."""
        if self._task is None:
            return
        logger.info("Stopping simulation clock")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def tick(self) -> dict:
        """Run exactly one tick and notify listeners."""
        async with self.lock:
            self.simulation.step()
            state = self.simulation.get_state()

        # Listeners only ever see settled, post-tick state
        for listener in list(self._listeners):
            try:
                result = listener(state)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Tick listener %r failed", listener)
        return state

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                state = await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                # One bad tick must not stop the clock
                logger.exception("Simulation tick failed")
                state = None
            if state is not None and state["tick"] % 100 == 0:
                logger.debug(
                    "Tick %d: %d fireworks, %d particles",
                    state["tick"],
                    len(self.simulation.fireworks),
                    self.simulation.particle_count(),
                )
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self.interval - elapsed))
