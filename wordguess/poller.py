from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx

from wordguess.api.models import PendingSnapshot

logger = logging.getLogger(__name__)

# Receives the full snapshot each tick; returns the record ids to acknowledge.
TickHandler = Callable[[PendingSnapshot], list[str]]


class PendingPoller:
    """Fixed-cadence puller for the relay's `/pending` queue.

    One tick is: fetch, hand the snapshot to `on_tick`, acknowledge what it returns.
    Ticks never overlap and a failed tick is skipped, never retried early.
    """

    def __init__(
        self,
        *,
        on_tick: TickHandler,
        base_url: str = "http://localhost:8000",
        interval_s: float = 1.0,
        enabled: bool = True,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 5.0,
    ):
        self.on_tick = on_tick
        self.interval_s = interval_s
        self.enabled = enabled
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_s)
        self._owns_client = client is None
        self._task: asyncio.Task[None] | None = None

        self.current = PendingSnapshot()
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch_pending(self) -> PendingSnapshot | None:
        try:
            resp = await self._client.get("/pending", headers={"Cache-Control": "no-store"})
            resp.raise_for_status()
            return PendingSnapshot.model_validate(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers bad JSON and pydantic validation errors.
            logger.warning("Fetching pending records failed: %s", e)
            return None

    async def acknowledge(self, record_id: str) -> bool:
        try:
            resp = await self._client.post("/mark-processed", json={"key": record_id})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            # The record stays queued; the next tick re-delivers it and dedup turns it into an ack.
            logger.warning("Acknowledging %s failed: %s", record_id, e)
            return False
        return True

    async def poll_once(self) -> list[str]:
        """Run one tick. Returns the ids that were acknowledged."""

        self.ticks += 1
        snapshot = await self.fetch_pending()
        if snapshot is None:
            self.failures += 1
            return []

        self.current = snapshot
        acked: list[str] = []
        for record_id in self.on_tick(snapshot):
            if await self.acknowledge(record_id):
                acked.append(record_id)
        return acked

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        while self.enabled:
            started = loop.time()
            try:
                await self.poll_once()
            except Exception:
                self.failures += 1
                logger.exception("Poll tick failed")
            await asyncio.sleep(max(0.0, self.interval_s - (loop.time() - started)))

    def start(self) -> None:
        if not self.enabled:
            logger.info("Polling disabled; not starting the poller")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="wordguess-poller")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def aclose(self) -> None:
        await self.stop()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PendingPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
