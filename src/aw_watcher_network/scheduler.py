"""Drift-compensated periodic loops.

Each loop times its own iteration and sleeps only for what is left of the
interval. An iteration that overruns the interval is followed immediately by
the next one, with a warning, so delays do not pile up.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleTick:
    """Start instant and configured interval of one loop iteration."""

    started: float
    interval: float

    def remaining(self, now: float) -> float:
        """Seconds left in the interval at ``now``; zero or negative on overrun."""
        return self.interval - (now - self.started)


class PeriodicLoop:
    """Runs an async callable once per interval until stopped."""

    def __init__(
        self,
        name: str,
        interval: float,
        body: Callable[[], Awaitable[object]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._body = body
        self._clock = clock
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self.iterations = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        logger.info("Starting %s loop (interval=%gs)", self.name, self.interval)
        self._running = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        logger.info("Stopping %s loop", self.name)
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        while self._running:
            tick = ScheduleTick(started=self._clock(), interval=self.interval)
            try:
                await self._body()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("%s iteration failed", self.name)
            self.iterations += 1

            now = self._clock()
            remaining = tick.remaining(now)
            if remaining > 0:
                await asyncio.sleep(remaining)
            else:
                logger.warning(
                    "%s iteration took %.2fs, longer than the %gs interval; not sleeping",
                    self.name,
                    now - tick.started,
                    self.interval,
                )
