"""Game host: the single consumer of the relay.

Wires one `GameSession` to the poller (remote triggers), the apply engine (dedup +
apply), the round clock and the alert sink, all on one asyncio loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from contextlib import suppress

import httpx

from wordguess.alerts import AlertSink, create_alert_sink
from wordguess.api.models import PendingSnapshot
from wordguess.assets.registry import WordBank
from wordguess.clock import RoundClock
from wordguess.core.models import GameConfig
from wordguess.dedup import DedupSet
from wordguess.engine import ApplyEngine
from wordguess.poller import PendingPoller
from wordguess.session import GameSession
from wordguess.settings import HostSettings, host_settings_from_env, log_level_from_env

logger = logging.getLogger(__name__)


class GameHost:
    def __init__(
        self,
        *,
        settings: HostSettings,
        word_bank: WordBank,
        config: GameConfig | None = None,
        alerts: AlertSink | None = None,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.alerts = alerts or create_alert_sink(webhook_url=settings.alerts_webhook_url)
        self.session = GameSession(config=config, word_bank=word_bank, alerts=self.alerts, rng=rng)
        self.engine = ApplyEngine(session=self.session, dedup=DedupSet(retain_ms=2 * settings.ttl_ms))
        self.poller = PendingPoller(
            on_tick=self.handle_snapshot,
            base_url=settings.relay_url,
            interval_s=settings.poll_interval_s,
            enabled=settings.polling_enabled,
            client=client,
        )
        self.clock = RoundClock(session=self.session)
        self._status_task: asyncio.Task[None] | None = None

    def handle_snapshot(self, snapshot: PendingSnapshot) -> list[str]:
        ids = self.engine.process(snapshot)
        pruned = self.engine.prune()
        if pruned:
            logger.debug("Forgot %d applied record id(s)", pruned)
        return ids

    def debug_snapshot(self) -> dict[str, object]:
        return {
            "relay_url": self.settings.relay_url,
            "polling": {
                "enabled": self.poller.enabled,
                "running": self.poller.running,
                "ticks": self.poller.ticks,
                "failures": self.poller.failures,
                "pending_guesses": len(self.poller.current.guesses),
                "pending_events": len(self.poller.current.events),
            },
            "engine": self.engine.stats.as_dict(),
            "dedup_size": len(self.engine.dedup),
            "game": self.session.snapshot(),
        }

    def log_status(self) -> None:
        logger.info("Host status %s", json.dumps(self.debug_snapshot(), ensure_ascii=False))

    async def _report_status(self) -> None:
        while True:
            await asyncio.sleep(self.settings.status_interval_s)
            self.log_status()

    async def start(self) -> None:
        self.clock.start()
        self.poller.start()
        if self.settings.status_interval_s > 0:
            self._status_task = asyncio.create_task(self._report_status(), name="wordguess-status")
        logger.info(
            "Game host started relay=%s polling=%s interval=%ss words=%d",
            self.settings.relay_url,
            self.settings.polling_enabled,
            self.settings.poll_interval_s,
            len(self.session.word_bank),
        )

    async def stop(self) -> None:
        task, self._status_task = self._status_task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await self.poller.aclose()
        await self.clock.stop()
        await self.alerts.aclose()
        self.log_status()
        logger.info("Game host stopped")

    async def __aenter__(self) -> "GameHost":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


async def run_host(*, settings: HostSettings | None = None, word_bank: WordBank | None = None) -> None:
    from wordguess.assets.startup import init_word_bank_for_host

    logging.basicConfig(level=log_level_from_env())

    host = GameHost(
        settings=settings or host_settings_from_env(),
        word_bank=word_bank if word_bank is not None else init_word_bank_for_host(),
    )
    async with host:
        if host.session.start_new_round() is None:
            logger.warning("No round started; add words to the word list")
        # Runs until cancelled (Ctrl+C).
        await asyncio.Event().wait()
