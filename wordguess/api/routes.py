from __future__ import annotations

import logging
from typing import Any

import redis
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from wordguess.api.deps import get_redis, get_relay_settings
from wordguess.api.models import MarkProcessedRequest
from wordguess.event_store import delete_record, list_pending, store_stats
from wordguess.infra.redis_client import ping_redis
from wordguess.ingest import InvalidArgument, submit_action, submit_guess
from wordguess.settings import RelaySettings

logger = logging.getLogger(__name__)

router = APIRouter()


def _storage_error(e: redis.RedisError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Storage error", "message": str(e)},
    )


@router.get("/healthcheck")
async def healthcheck(r: redis.Redis = Depends(get_redis)) -> dict[str, str]:
    return {"status": "ok", "storage": "ok" if ping_redis(r) else "unavailable"}


@router.api_route("/event", methods=["GET", "POST"], response_model=None)
async def event_route(
    user: str | None = None,
    event: str | None = None,
    duration: str | None = None,
    r: redis.Redis = Depends(get_redis),
    settings: RelaySettings = Depends(get_relay_settings),
) -> dict[str, Any] | JSONResponse:
    try:
        record = submit_action(r=r, user=user, event=event, duration=duration, ttl_ms=settings.ttl_ms)
    except InvalidArgument as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=e.body)
    except redis.RedisError as e:
        logger.error("Failed to store event: %s", e)
        return _storage_error(e)

    return {"success": True, "message": "Event received", "data": record.model_dump(mode="json", exclude_none=True)}


@router.api_route("/guess", methods=["GET", "POST"], response_model=None)
async def guess_route(
    user: str | None = None,
    word: str | None = None,
    r: redis.Redis = Depends(get_redis),
    settings: RelaySettings = Depends(get_relay_settings),
) -> dict[str, Any] | JSONResponse:
    try:
        record = submit_guess(r=r, user=user, word=word, ttl_ms=settings.ttl_ms)
    except InvalidArgument as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=e.body)
    except redis.RedisError as e:
        logger.error("Failed to store guess: %s", e)
        return _storage_error(e)

    return {"success": True, "message": "Guess received", "data": record.model_dump(mode="json")}


@router.get("/pending")
async def pending_route(
    response: Response,
    r: redis.Redis = Depends(get_redis),
    settings: RelaySettings = Depends(get_relay_settings),
) -> dict[str, list[dict[str, Any]]]:
    """Unprocessed, unexpired records.

    Storage faults degrade to an empty result: the poller should see "nothing new",
    never an error.
    """

    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    try:
        snapshot = list_pending(r=r, ttl_ms=settings.ttl_ms)
    except redis.RedisError as e:
        logger.error("Error fetching pending records: %s", e)
        return {"guesses": [], "events": []}

    if not snapshot.is_empty():
        logger.debug("Serving pending guesses=%d events=%d", len(snapshot.guesses), len(snapshot.events))
    return snapshot.model_dump(mode="json", exclude_none=True)


@router.post("/mark-processed", response_model=None)
async def mark_processed_route(
    request: Request,
    r: redis.Redis = Depends(get_redis),
) -> dict[str, Any] | JSONResponse:
    # Read the body by hand: a malformed body or a non-string key counts as "no key", never a 422.
    try:
        payload = MarkProcessedRequest.model_validate_json(await request.body() or b"{}")
    except ValidationError:
        payload = MarkProcessedRequest()
    key = (payload.key or "").strip()
    if not key:
        return {"success": True, "message": "No key given"}

    try:
        removed = delete_record(r=r, record_id=key)
    except redis.RedisError as e:
        logger.error("Failed to mark %s as processed: %s", key, e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )

    if removed:
        logger.info("Record %s processed and deleted", key)
    return {"success": True, "message": "Marked as processed", "key": key}


@router.get("/debug", response_model=None)
async def debug_route(r: redis.Redis = Depends(get_redis)) -> dict[str, Any] | JSONResponse:
    """Operator view of everything currently held, including expired-but-unswept records."""

    try:
        return store_stats(r=r)
    except redis.RedisError as e:
        return _storage_error(e)
