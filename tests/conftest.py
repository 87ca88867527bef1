from __future__ import annotations

import os
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

from omnicorp.config import GameSettings
from omnicorp.game_session import GameSession


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI, we *don't* auto-load `.env`; opt in with OMNICORP_LOAD_DOTENV_FOR_TESTS=1.
    """

    if os.environ.get("CI") and os.environ.get("OMNICORP_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@dataclass
class FakeTime:
    """Manually advanced epoch-millisecond clock."""

    now: int = 1_700_000_000_000

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture()
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture()
def session(fake_time: FakeTime) -> GameSession:
    return GameSession(now_ms=fake_time)


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient over fakeredis with the clock left stopped.

    Tests drive the game explicitly; `/game/start` is exercised on its own.
    """

    from omnicorp.main import create_app

    r = fakeredis.FakeRedis(decode_responses=True)
    app = create_app(redis_factory=lambda: r, settings=GameSettings(autostart=False))
    with TestClient(app) as c:
        yield c, r
