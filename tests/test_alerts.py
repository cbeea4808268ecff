from __future__ import annotations

import json

import httpx
import pytest

from wordguess.alerts import NullAlertSink, WebhookAlertSink, alert_payload, create_alert_sink
from wordguess.core.events import GameAlert


def test_payload_shape() -> None:
    alert = GameAlert.at(type="DOUBLE_POINTS", now_ms=1234, data={"duration": 30})

    assert alert_payload(alert) == {"event": "DOUBLE_POINTS", "timestamp": 1234, "data": {"duration": 30}}


def test_factory_picks_sink_from_url() -> None:
    assert isinstance(create_alert_sink(webhook_url=None), NullAlertSink)
    assert isinstance(create_alert_sink(webhook_url="http://hooks.local/alerts"), WebhookAlertSink)


@pytest.mark.asyncio
async def test_webhook_sink_posts_alerts() -> None:
    received: list[dict] = []

    def _hook(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(200)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_hook))
    sink = WebhookAlertSink(url="http://hooks.local/alerts", client=client)

    sink.notify(GameAlert.at(type="GAME_WIN", now_ms=5, data={"playerName": "Ana", "points": 10}))
    sink.notify(GameAlert.at(type="ROUND_END", now_ms=6, data={"word": "GATO"}))
    await sink.aclose()
    await client.aclose()

    by_event = {p["event"]: p for p in received}
    assert sorted(by_event) == ["GAME_WIN", "ROUND_END"]
    assert by_event["GAME_WIN"]["data"]["playerName"] == "Ana"
    assert by_event["GAME_WIN"]["timestamp"] == 5


@pytest.mark.asyncio
async def test_webhook_failures_are_swallowed() -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_down))
    sink = WebhookAlertSink(url="http://hooks.local/alerts", client=client)

    sink.notify(GameAlert.at(type="TIMER_WARNING", now_ms=1, data={"timeLeft": 10}))
    await sink.drain()
    await client.aclose()


def test_webhook_notify_without_loop_drops_alert() -> None:
    sink = WebhookAlertSink(url="http://hooks.local/alerts", client=httpx.AsyncClient())
    sink.notify(GameAlert.at(type="ROUND_START", now_ms=1, data={}))
