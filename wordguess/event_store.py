from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

import redis
from pydantic import ValidationError

from wordguess.api.models import (
    EVENT_ID_PREFIX,
    GUESS_ID_PREFIX,
    ActionRecord,
    GuessRecord,
    PendingRecord,
    PendingSnapshot,
)
from wordguess.infra.redis_client import create_redis

logger = logging.getLogger(__name__)


RECORD_KEY_PREFIX = "wordguess:pending:"  # + {record id}
DEFAULT_TTL_MS = 60_000


def now_ms() -> int:
    return int(time.time() * 1000)


def _record_key(record_id: str) -> str:
    return f"{RECORD_KEY_PREFIX}{record_id}"


def _parse_record(record_id: str, raw: str) -> PendingRecord | None:
    try:
        if record_id.startswith(GUESS_ID_PREFIX):
            return GuessRecord.model_validate_json(raw)
        if record_id.startswith(EVENT_ID_PREFIX):
            return ActionRecord.model_validate_json(raw)
    except ValidationError as e:
        logger.error("Unparseable record %s: %s", record_id, e)
        return None

    logger.error("Record %s has no known kind prefix", record_id)
    return None


def is_expired(record: PendingRecord, *, now: int, ttl_ms: int = DEFAULT_TTL_MS) -> bool:
    return now - record.timestamp >= ttl_ms


def put_record(*, r: redis.Redis, record: PendingRecord, ttl_ms: int = DEFAULT_TTL_MS) -> None:
    """Store a record under its id.

    The caller owns id uniqueness. Redis expires the key `ttl_ms` after the put; readers
    additionally filter on `timestamp`, so a record is never served past its TTL even if
    the key is still present.
    """

    r.set(_record_key(record.id), record.model_dump_json(exclude_none=True), px=max(1, ttl_ms))


def _iter_records(r: redis.Redis) -> Iterator[tuple[str, str, PendingRecord | None]]:
    for key in r.scan_iter(match=f"{RECORD_KEY_PREFIX}*", count=500):
        raw = r.get(key)
        if raw is None:
            # Expired or acknowledged between SCAN and GET.
            continue
        record_id = key[len(RECORD_KEY_PREFIX) :]
        yield key, record_id, _parse_record(record_id, raw)


def list_pending(*, r: redis.Redis, now: int | None = None, ttl_ms: int = DEFAULT_TTL_MS) -> PendingSnapshot:
    ts = now_ms() if now is None else now
    snapshot = PendingSnapshot()

    for _key, _record_id, record in _iter_records(r):
        if record is None or record.processed:
            continue
        if is_expired(record, now=ts, ttl_ms=ttl_ms):
            continue
        if isinstance(record, GuessRecord):
            snapshot.guesses.append(record)
        else:
            snapshot.events.append(record)

    return snapshot


def delete_record(*, r: redis.Redis, record_id: str) -> bool:
    """Remove a record. Unknown ids are a no-op; returns whether a key was removed."""

    return bool(r.delete(_record_key(record_id)))


def sweep_expired(*, r: redis.Redis, now: int | None = None, ttl_ms: int = DEFAULT_TTL_MS) -> int:
    ts = now_ms() if now is None else now
    removed = 0

    for key, record_id, record in list(_iter_records(r)):
        if record is not None and not is_expired(record, now=ts, ttl_ms=ttl_ms):
            continue
        removed += int(r.delete(key))
        logger.info("Swept record %s", record_id)

    return removed


def store_stats(*, r: redis.Redis) -> dict[str, Any]:
    guesses: dict[str, Any] = {}
    events: dict[str, Any] = {}
    for _key, record_id, record in _iter_records(r):
        if record is None:
            continue
        target = guesses if isinstance(record, GuessRecord) else events
        target[record_id] = record.model_dump(mode="json", exclude_none=True)

    return {
        "totalGuesses": len(guesses),
        "totalEvents": len(events),
        "guesses": guesses,
        "events": events,
    }


async def run_sweeper(
    *,
    interval_s: float,
    ttl_ms: int = DEFAULT_TTL_MS,
    redis_factory: Callable[[], redis.Redis] = create_redis,
) -> None:
    """Background loop that physically purges expired records until cancelled."""

    r = redis_factory()
    try:
        while True:
            await asyncio.sleep(interval_s)
            try:
                removed = await asyncio.to_thread(sweep_expired, r=r, ttl_ms=ttl_ms)
            except redis.RedisError as e:
                logger.warning("Sweep skipped, storage unavailable: %s", e)
                continue
            if removed:
                logger.info("Sweep removed %d expired record(s)", removed)
    finally:
        r.close()
