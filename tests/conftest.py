from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs, then pin the settings tests depend on.

    In CI, we don't auto-load `.env` unless WORDGUESS_LOAD_DOTENV_FOR_TESTS=1.
    """

    if not os.environ.get("CI") or os.environ.get("WORDGUESS_LOAD_DOTENV_FOR_TESTS") == "1":
        env_path = Path(__file__).resolve().parents[1] / ".env"
        if env_path.exists():
            from dotenv import load_dotenv

            load_dotenv(dotenv_path=env_path, override=False)

    # No background sweep during tests; expiry is exercised explicitly.
    os.environ["WORDGUESS_SWEEP_INTERVAL_S"] = "0"
    os.environ["WORDGUESS_TTL_MS"] = "60000"


@pytest.fixture(scope="session", autouse=True)
def _init_word_bank_from_test_fixtures() -> None:
    """Initialize the word bank from `tests/assets/words.csv` and forbid silent fallbacks."""

    os.environ["WORDGUESS_STRICT_ASSETS"] = "1"
    os.environ.pop("WORDGUESS_WORDS_FILE", None)

    from wordguess.assets.singleton import init_word_bank, reset_word_bank_for_tests

    reset_word_bank_for_tests()
    init_word_bank(project_root=Path(__file__).resolve().parent)


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    from wordguess.api.deps import get_redis
    from wordguess.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


@pytest.fixture()
def offline_client() -> Generator[TestClient, None, None]:
    """TestClient whose Redis refuses every command (storage outage)."""

    from wordguess.api.deps import get_redis
    from wordguess.main import app

    server = fakeredis.FakeServer()
    server.connected = False
    r = fakeredis.FakeRedis(server=server, decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
