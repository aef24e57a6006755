"""Redis store for distributed locks.

Handles:
- Client construction from REDIS_URL
- Per-key locks (collapse concurrent cache misses for the same profile)

Lock TTL outlives the upstream timeout (240s) so a crashed holder cannot
block a key for longer than one analysis run.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from xgifts.settings import Settings

TTL_SUGGEST_LOCK = 300  # 5 minutes

PREFIX_LOCK = "lock:"

logger = logging.getLogger("uvicorn.error")


async def init_redis(settings: Settings) -> redis.Redis:
    """Create Redis client and validate connectivity."""
    client = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await client.ping()
    logger.info("Redis connected")
    return client


async def close_redis(client: redis.Redis | None) -> None:
    """Close Redis connection."""
    if client is not None:
        await client.aclose()


class KeyLock:
    """SET NX based lock keyed by arbitrary strings.

    Redis failures never fail the caller: acquire reports success so the
    request proceeds unlocked, and release only logs.
    """

    def __init__(self, client: redis.Redis, ttl: int = TTL_SUGGEST_LOCK):
        self._client = client
        self.ttl = ttl

    async def acquire(self, key: str) -> bool:
        """Acquire a lock.

        Returns:
            True if lock acquired (or Redis unavailable), False if already locked.
        """
        try:
            result = await self._client.set(f"{PREFIX_LOCK}{key}", "1", nx=True, ex=self.ttl)
        except RedisError as e:
            logger.warning(f"Redis lock acquire failed for {key}, proceeding unlocked: {e}")
            return True
        return result is not None

    async def release(self, key: str) -> None:
        try:
            await self._client.delete(f"{PREFIX_LOCK}{key}")
        except RedisError as e:
            logger.warning(f"Redis lock release failed for {key}: {e}")
