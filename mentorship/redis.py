from redis.asyncio import Redis

from .settings import settings


redis: Redis = Redis.from_url(settings.redis_url)
auth_redis: Redis = Redis.from_url(settings.auth_redis_url)
