import pytest
from fakeredis.aioredis import FakeRedis

from mentorship.settings import settings
from mentorship.utils.cache import clear_cache, redis_cached


calls: list[tuple[str, int]] = []


@redis_cached("test", "key")
async def cached(key: str, other: int = 0) -> dict[str, int]:
    calls.append((key, other))
    return {key: other}


@redis_cached("test", "key")
async def cached_too(key: str) -> str:
    return key.upper()


@pytest.fixture(autouse=True)
def reset_calls() -> None:
    calls.clear()


async def test__redis_cached(fake_redis: FakeRedis) -> None:
    assert await cached("a", 1) == {"a": 1}
    assert await cached("a", 2) == {"a": 1}
    assert await cached(key="b") == {"b": 0}
    assert await cached_too("a") == "A"

    assert calls == [("a", 1), ("b", 0)]
    assert len(await fake_redis.keys("cache:test:*")) == 3


async def test__clear_cache(fake_redis: FakeRedis) -> None:
    await cached("a", 1)
    await fake_redis.set("cache:other:x", "1")

    await clear_cache("test")

    assert await cached("a", 2) == {"a": 2}
    assert calls == [("a", 1), ("a", 2)]
    assert await fake_redis.get("cache:other:x") == b"1"


async def test__redis_cached__disabled(monkeypatch: pytest.MonkeyPatch, fake_redis: FakeRedis) -> None:
    monkeypatch.setattr(settings, "cache_ttl", 0)

    await cached("a", 1)
    await cached("a", 2)

    assert calls == [("a", 1), ("a", 2)]
    assert await fake_redis.keys("*") == []
