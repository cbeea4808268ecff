from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Protocol

import httpx

from wordguess.core.events import GameAlert

logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    def notify(self, alert: GameAlert) -> None: ...

    async def aclose(self) -> None: ...


class NullAlertSink:
    """Default sink when no webhook is configured."""

    def notify(self, alert: GameAlert) -> None:
        logger.debug("alert %s (no sink configured)", alert.type)

    async def aclose(self) -> None:
        return None


def alert_payload(alert: GameAlert) -> dict[str, Any]:
    ts = alert.timestamp_ms or int(time.time() * 1000)
    return {"event": alert.type, "timestamp": ts, "data": alert.data}


class WebhookAlertSink:
    """POST each alert as JSON to an external webhook, fire-and-forget.

    `notify` is synchronous so it can be called from inside `GameSession.dispatch`; it
    schedules a delivery task on the running loop. Delivery failures are logged only.
    """

    def __init__(self, *, url: str, client: httpx.AsyncClient | None = None, timeout_s: float = 5.0):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._tasks: set[asyncio.Task[None]] = set()

    def notify(self, alert: GameAlert) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Dropping %s alert: no running event loop", alert.type)
            return

        task = loop.create_task(self._deliver(alert_payload(alert)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, payload: dict[str, Any]) -> None:
        try:
            resp = await self._client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Alert webhook %s failed for %s: %s", self.url, payload["event"], e)

    async def drain(self) -> None:
        """Wait for in-flight deliveries."""

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        if self._owns_client:
            await self._client.aclose()


def create_alert_sink(*, webhook_url: str | None) -> AlertSink:
    if webhook_url:
        return WebhookAlertSink(url=webhook_url)
    return NullAlertSink()
