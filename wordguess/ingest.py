"""Producer-side validation + normalization of remote triggers.

Each accepted call creates a brand new record with a fresh id. Retrying the same
logical request therefore creates a second record; only identical ids are ever
deduplicated, and that happens on the consumer side.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

import redis

from wordguess.api.models import (
    EVENT_ID_PREFIX,
    GUESS_ID_PREFIX,
    VALID_EVENTS,
    ActionKind,
    ActionRecord,
    GuessRecord,
)
from wordguess.event_store import DEFAULT_TTL_MS, now_ms, put_record

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Rejected ingest input. `body` is the JSON error payload returned to the caller."""

    def __init__(self, error: str, **details: Any) -> None:
        super().__init__(error)
        self.error = error
        self.details = details

    @property
    def body(self) -> dict[str, Any]:
        return {"error": self.error, **self.details}


def _new_id(prefix: str, ts: int) -> str:
    return f"{prefix}{ts}-{uuid4().hex[:12]}"


def _clean(value: str | None) -> str:
    return (value or "").strip()


def parse_duration(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise InvalidArgument("Invalid duration", received=raw) from None


def submit_guess(*, r: redis.Redis, user: str | None, word: str | None, ttl_ms: int = DEFAULT_TTL_MS) -> GuessRecord:
    user_clean = _clean(user)
    word_clean = _clean(word).upper()
    if not user_clean or not word_clean:
        raise InvalidArgument("Missing parameters", required=["user", "word"])

    ts = now_ms()
    record = GuessRecord(id=_new_id(GUESS_ID_PREFIX, ts), user=user_clean, word=word_clean, timestamp=ts)
    put_record(r=r, record=record, ttl_ms=ttl_ms)

    logger.info("Guess received id=%s user=%s word=%s", record.id, record.user, record.word)
    return record


def submit_action(
    *,
    r: redis.Redis,
    user: str | None,
    event: str | None,
    duration: str | int | None = None,
    ttl_ms: int = DEFAULT_TTL_MS,
) -> ActionRecord:
    user_clean = _clean(user)
    event_clean = _clean(event)
    if not user_clean or not event_clean:
        raise InvalidArgument("Missing parameters", required=["user", "event"])

    if event_clean not in VALID_EVENTS:
        raise InvalidArgument("Invalid event", valid=list(VALID_EVENTS), received=event_clean)

    seconds = parse_duration(duration)

    ts = now_ms()
    record = ActionRecord(
        id=_new_id(EVENT_ID_PREFIX, ts),
        user=user_clean,
        event=ActionKind(event_clean),
        duration=seconds,
        timestamp=ts,
    )
    put_record(r=r, record=record, ttl_ms=ttl_ms)

    logger.info("Event received id=%s user=%s event=%s", record.id, record.user, record.event.value)
    return record
