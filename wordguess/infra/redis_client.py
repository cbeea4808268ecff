from __future__ import annotations

import logging
import os

import redis

logger = logging.getLogger(__name__)


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # Short socket timeouts: a stalled backend should surface as a RedisError quickly
    # so /pending can degrade instead of hanging the poller's tick.
    timeout_s = float(os.environ.get("REDIS_SOCKET_TIMEOUT_S", "2.0"))
    return redis.Redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_timeout=timeout_s,
        socket_connect_timeout=timeout_s,
    )


def ping_redis(r: redis.Redis) -> bool:
    try:
        return bool(r.ping())
    except redis.RedisError as e:
        logger.warning("redis ping failed: %s", e)
        return False
