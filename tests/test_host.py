from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest

from wordguess.api.models import GuessRecord, PendingSnapshot
from wordguess.assets.registry import WordBank, WordEntry
from wordguess.host import GameHost
from wordguess.settings import HostSettings, host_settings_from_env


def _settings(**overrides: object) -> HostSettings:
    base: dict[str, object] = {
        "relay_url": "http://relay",
        "poll_interval_s": 1.0,
        "polling_enabled": False,
        "alerts_webhook_url": None,
        "status_interval_s": 0,
    }
    base.update(overrides)
    return HostSettings(**base)  # type: ignore[arg-type]


def _status_lines(caplog: pytest.LogCaptureFixture) -> list[dict]:
    prefix = "Host status "
    return [json.loads(rec.getMessage()[len(prefix) :]) for rec in caplog.records if rec.getMessage().startswith(prefix)]


def test_host_settings_read_ttl_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORDGUESS_TTL_MS", "300000")
    monkeypatch.setenv("WORDGUESS_STATUS_INTERVAL_S", "15")

    settings = host_settings_from_env()
    assert settings.ttl_ms == 300_000
    assert settings.status_interval_s == 15.0


def test_dedup_retention_follows_relay_ttl() -> None:
    bank = WordBank.from_entries([WordEntry(word="GATO", hint="Animal")])
    host = GameHost(settings=_settings(ttl_ms=300_000), word_bank=bank)

    assert host.engine.dedup.retain_ms == 600_000

    # Still remembered after the default two-minute window; the relay could re-deliver it.
    t0 = 1_700_000_000_000
    snapshot = PendingSnapshot(guesses=[GuessRecord(id="guess-1", user="Ana", word="GATO", timestamp=t0)])
    host.engine.process(snapshot, now_ms=t0)
    host.engine.prune(now_ms=t0 + 240_000)
    assert "guess-1" in host.engine.dedup


@pytest.mark.asyncio
async def test_host_logs_status_periodically_and_on_stop(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="wordguess.host")
    bank = WordBank.from_entries([WordEntry(word="GATO", hint="Animal")])

    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)), base_url="http://relay") as client:
        host = GameHost(settings=_settings(status_interval_s=0.01), word_bank=bank, client=client)
        async with host:
            host.session.start_new_round()
            host.handle_snapshot(PendingSnapshot(guesses=[GuessRecord(id="guess-1", user="Ana", word="GATO", timestamp=0)]))
            for _ in range(200):
                await asyncio.sleep(0.01)
                if _status_lines(caplog):
                    break
            periodic = len(_status_lines(caplog))

    lines = _status_lines(caplog)
    assert periodic >= 1
    # One more report at shutdown.
    assert len(lines) > periodic
    last = lines[-1]
    assert last["engine"]["applied"] == 1
    assert any("guessed GATO" in line for line in last["engine"]["recent"])
    assert last["game"]["state"]["winner"] == "Ana"
    assert last["polling"]["running"] is False
