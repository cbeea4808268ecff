from __future__ import annotations

from collections.abc import Generator

import redis

from wordguess.infra.redis_client import create_redis
from wordguess.settings import RelaySettings, relay_settings_from_env


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        client.close()


def get_relay_settings() -> RelaySettings:
    return relay_settings_from_env()
