from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator, Callable

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

from mentorship.app import app
from mentorship.database import create_tables, dispose_engine, init_engine
from mentorship.schemas.user import UserInfo
from mentorship.utils.jwt import encode_jwt


@pytest.fixture(autouse=True)
async def database(tmp_path: Path) -> AsyncIterator[None]:
    init_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables()
    yield
    await dispose_engine()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    redis = FakeRedis(server=FakeServer())
    monkeypatch.setattr("mentorship.utils.cache.redis", redis)
    monkeypatch.setattr("mentorship.schemas.user.auth_redis", redis)
    return redis


@pytest.fixture(autouse=True)
def auth_service(monkeypatch: pytest.MonkeyPatch) -> set[str]:
    """Users known to the auth service. Ids starting with `mentor` are mentors, ids starting with `user` exist too."""

    unknown: set[str] = set()

    async def get_userinfo(user_id: str) -> UserInfo | None:
        if user_id in unknown or not user_id.startswith(("mentor", "user")):
            return None
        role = "mentor" if user_id.startswith("mentor") else "user"
        return UserInfo(id=user_id, name=user_id, display_name=user_id.title(), role=role)

    monkeypatch.setattr("mentorship.endpoints.connections.get_userinfo", get_userinfo)
    monkeypatch.setattr("mentorship.endpoints.bookings.get_userinfo", get_userinfo)
    return unknown


@pytest.fixture
def make_token() -> Callable[..., str]:
    def make(user_id: str, role: str = "user", admin: bool = False, rt: str = "session") -> str:
        data = {"uid": user_id, "rt": f"{rt}-{user_id}", "data": {"role": role, "admin": admin}}
        return encode_jwt(data, timedelta(minutes=5))

    return make


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
