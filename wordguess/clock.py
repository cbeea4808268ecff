from __future__ import annotations

import asyncio
import logging

from wordguess.core.reducer import Tick
from wordguess.session import GameSession

logger = logging.getLogger(__name__)


class RoundClock:
    """Dispatches a `Tick` into the session once per second."""

    def __init__(self, *, session: GameSession, interval_s: float = 1.0):
        self.session = session
        self.interval_s = interval_s
        self._task: asyncio.Task[None] | None = None

    def tick(self) -> None:
        self.session.dispatch(Tick())

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                self.tick()
            except Exception:
                logger.exception("Clock tick failed")
            await asyncio.sleep(max(0.0, self.interval_s - (loop.time() - started)))

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="wordguess-clock")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
