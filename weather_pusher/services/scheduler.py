from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from weather_pusher.services.pipeline import PushPipeline, PushResult

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PushScheduler:
    """
    Drives a `PushPipeline` on a fixed interval.

    States are idle (no timer task) and running (one timer task). Every
    tick spawns its own run task; runs are not awaited by the timer, so
    a slow run can overlap the next one unless `skip_if_busy` is set.
    A failed run is logged and never stops the timer.

    `start()` and `stop()` must be called from inside the running event
    loop (request handlers, the application lifespan, tests).
    """

    def __init__(
        self,
        pipeline: PushPipeline,
        interval_seconds: float,
        skip_if_busy: bool = False,
        sleep: Sleep = asyncio.sleep,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.skip_if_busy = skip_if_busy
        self._sleep = sleep
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    def is_running(self) -> bool:
        return self._timer is not None

    def start(self) -> float:
        """
        Start the schedule if idle, with one immediate run.

        Calling it while running changes nothing.

        Returns:
            The configured interval in seconds.
        """
        if self._timer is not None:
            return self.interval_seconds

        self._timer = asyncio.get_running_loop().create_task(self._tick_forever())
        logger.info("Push schedule started, every %ss", self.interval_seconds)
        self._spawn_run("initial")
        return self.interval_seconds

    def stop(self) -> bool:
        """
        Cancel the timer. Runs already in flight complete normally.

        Returns:
            False if the schedule was not running, True otherwise.
        """
        if self._timer is None:
            return False

        self._timer.cancel()
        self._timer = None
        logger.info("Push schedule stopped")
        return True

    async def shutdown(self) -> None:
        """Stop the schedule and wait for in-flight runs to finish."""
        timer = self._timer
        self.stop()
        pending = list(self._in_flight)
        if timer is not None:
            pending.append(timer)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _tick_forever(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            # fixed cadence: the next tick is due one interval after the last
            # deadline, however long the previous run took
            deadline += self.interval_seconds
            await self._sleep(max(0.0, deadline - loop.time()))
            self._spawn_run("tick")

    def _spawn_run(self, trigger: str) -> Optional[asyncio.Task]:
        if self.skip_if_busy and self._in_flight:
            logger.warning("Skipping %s push: previous push still running", trigger)
            return None

        task = asyncio.get_running_loop().create_task(self._run(trigger))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run(self, trigger: str) -> PushResult:
        result = await self.pipeline.run_once()
        if result.ok:
            logger.info(
                "Pushed observation (%s) id=%s observed_at=%s",
                trigger,
                result.row.id,
                result.row.observed_at.isoformat(),
            )
        else:
            logger.warning("Push (%s) failed at %s stage", trigger, result.error.stage)
        return result
