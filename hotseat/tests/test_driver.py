"""
Tests for the tick driver and manual clock.
"""

import asyncio

from ..engine_core.state import Phase
from ..session import TickDriver, ManualClock


class TestManualClock:

    def test_advance(self):
        clock = ManualClock(start=100.0)

        clock.advance(2.5)

        assert clock() == 102.5


class TestTickDriver:
    """Tests for the periodic deadline loop."""

    def test_tick_once_counts_advanced_rooms(self, registry, started, clock):
        driver = TickDriver(registry, interval=1.0)

        assert driver.tick_once() == 0
        clock.advance(45)
        assert driver.tick_once() == 1
        assert started.phase == Phase.VOTING

    def test_tick_once_survives_failures(self, registry, started, monkeypatch):
        def boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(registry, "tick", boom)
        driver = TickDriver(registry)

        assert driver.tick_once() == 0

    def test_loop_ticks_until_stopped(self, registry, started, clock):
        """The background task advances due rooms on its own."""
        clock.advance(45)
        driver = TickDriver(registry, interval=0.01)

        async def run():
            driver.start()
            assert driver.running
            for _ in range(100):
                await asyncio.sleep(0.01)
                if started.phase == Phase.VOTING:
                    break
            await driver.stop()

        asyncio.run(run())

        assert started.phase == Phase.VOTING
        assert not driver.running
