import pickle  # noqa: S403
from functools import wraps
from inspect import signature
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

from ..logger import get_logger
from ..redis import redis
from ..settings import settings


T = TypeVar("T")
P = ParamSpec("P")

logger = get_logger(__name__)


def _cache_key(namespace: str, values: list[Any]) -> str:
    return ":".join(["cache", namespace, *map(str, values)])


def redis_cached(namespace: str, *arg_names: str) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Cache the result of a coroutine in redis for `settings.cache_ttl` seconds.

    The cache key is built from `namespace` and the values of the arguments listed in `arg_names`.
    Use :func:`clear_cache` with the same namespace to invalidate all entries at once.
    """

    def deco(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        sig = signature(func)

        @wraps(func)
        async def inner(*args: P.args, **kwargs: P.kwargs) -> T:
            if settings.cache_ttl <= 0:
                return await func(*args, **kwargs)

            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()
            key = _cache_key(namespace, [func.__qualname__, *(bound.arguments[name] for name in arg_names)])

            if (value := await redis.get(key)) is not None:
                return pickle.loads(value)  # noqa: S301

            result = await func(*args, **kwargs)
            await redis.setex(key, settings.cache_ttl, pickle.dumps(result))
            return result

        return inner

    return deco


async def clear_cache(namespace: str) -> None:
    logger.debug(f"clearing cache namespace {namespace}")
    async for key in redis.scan_iter(match=_cache_key(namespace, ["*"])):
        await redis.delete(key)
