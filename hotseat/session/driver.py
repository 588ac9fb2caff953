"""
Tick Driver - The periodic loop that enforces deadlines.

Actions advance rooms immediately; the driver is what advances them
when nobody acts. It calls RoomRegistry.tick() every `interval`
seconds on the running event loop. A tick against a room that has
already moved on does nothing, so missed or late ticks are harmless.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import asyncio
import logging

from .registry import RoomRegistry


logger = logging.getLogger(__name__)


@dataclass
class TickDriver:
    """
    Usage:
        driver = TickDriver(registry, interval=1.0)
        driver.start()      # inside a running event loop
        ...
        await driver.stop()
    """
    registry: RoomRegistry
    interval: float = 1.0
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Tick driver started (every %.2fs)", self.interval)

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Tick driver stopped")

    def tick_once(self) -> int:
        """Run one tick; returns how many rooms advanced."""
        try:
            return len(self.registry.tick())
        except Exception:
            logger.exception("Tick failed")
            return 0

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            self.tick_once()


class ManualClock:
    """
    Clock that only moves when told to.

    Pass it as the scheduler's clock to step through deadlines
    without waiting on wall time.
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds
