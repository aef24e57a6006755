"""Gift suggestion workflow.

Flow per request:
1. Look up newest cached row for (profile_url, platform)
2. Fresh hit (expires_at > now) -> respond with cached=True, no upstream call
3. Miss or stale -> call Purch, transform gifts, persist row (now + 24h), respond

Failure policy:
- Purch success=False or client error -> request fails, nothing is cached
- Cache write failure fails the whole request (no serve-without-cache path)

Single-flight (optional):
- With a KeyLock configured, only one request per key calls Purch at a time
- Others poll the cache and retry the lock until a fresh row appears or they
  take the lock over; once the wait budget runs out they call Purch themselves
- The wait budget plus the upstream timeout stays inside the x402 deadline
"""

import asyncio
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Protocol
from urllib.parse import urlparse
from uuid import uuid4

from xgifts.errors import UpstreamError
from xgifts.models import GiftSearch
from xgifts.schemas import GiftItem, GiftSuggestResponse
from xgifts.services.gift_transform import X_PURCH_CHECKOUT, transform_gifts
from xgifts.services.purch_client import PurchGiftResponse

logger = logging.getLogger("uvicorn.error")

CACHE_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchCache(Protocol):
    async def lookup(self, profile_url: str, platform: str) -> GiftSearch | None: ...

    async def insert(self, record: GiftSearch) -> None: ...


class GiftProvider(Protocol):
    async def fetch_suggestions(self, profile_url: str, platform: str) -> PurchGiftResponse: ...


class Lock(Protocol):
    async def acquire(self, key: str) -> bool: ...

    async def release(self, key: str) -> None: ...


def username_from_url(profile_url: str) -> str:
    """Last path segment of a profile URL, without a leading '@'."""
    path = urlparse(profile_url).path.strip("/")
    if not path:
        return ""
    return path.split("/")[-1].lstrip("@")


def response_from_cache(record: GiftSearch) -> GiftSuggestResponse:
    """Build a cached=True response from a stored row."""
    return GiftSuggestResponse(
        username=record.username,
        profile_pic_url=record.profile_pic_url,
        gifts=[GiftItem.model_validate(g) for g in record.gifts or []],
        interests=record.interests,
        themes=record.themes,
        cached=True,
    )


class GiftSuggestionService:
    """Cache-first gift suggestion workflow."""

    def __init__(
        self,
        store: SearchCache,
        provider: GiftProvider,
        *,
        lock: Lock | None = None,
        checkout_url: str = X_PURCH_CHECKOUT,
        cache_ttl: timedelta = CACHE_TTL,
        lock_wait_seconds: float = 60.0,
        lock_poll_seconds: float = 2.0,
        now: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._provider = provider
        self._lock = lock
        self._checkout_url = checkout_url
        self._cache_ttl = cache_ttl
        self._lock_wait_seconds = lock_wait_seconds
        self._lock_poll_seconds = lock_poll_seconds
        self._now = now

    async def suggest(self, profile_url: str, platform: str) -> GiftSuggestResponse:
        """Get gift suggestions for a profile, from cache when fresh."""
        cached = await self._fresh_from_cache(profile_url, platform)
        if cached is not None:
            return cached

        logger.info(f"Gift cache MISS for platform={platform}, profile={profile_url}")

        if self._lock is None:
            return await self._generate(profile_url, platform)

        key = f"suggest:{platform}:{profile_url}"
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._lock_wait_seconds
        while True:
            if await self._lock.acquire(key):
                try:
                    # Another request may have finished between our miss and the lock.
                    cached = await self._fresh_from_cache(profile_url, platform)
                    if cached is not None:
                        return cached
                    return await self._generate(profile_url, platform)
                finally:
                    await self._lock.release(key)

            if loop.time() >= deadline:
                break
            await asyncio.sleep(self._lock_poll_seconds)
            cached = await self._fresh_from_cache(profile_url, platform)
            if cached is not None:
                return cached

        logger.warning(f"Lock wait exhausted for {key}, calling Purch anyway")
        return await self._generate(profile_url, platform)

    async def _fresh_from_cache(self, profile_url: str, platform: str) -> GiftSuggestResponse | None:
        record = await self._store.lookup(profile_url, platform)
        if record is None or not record.is_fresh(self._now()):
            return None
        logger.info(f"Gift cache HIT for platform={platform}, profile={profile_url}")
        return response_from_cache(record)

    async def _generate(self, profile_url: str, platform: str) -> GiftSuggestResponse:
        result = await self._provider.fetch_suggestions(profile_url, platform)
        if not result.success:
            raise UpstreamError("Purch backend reported failure")

        gifts = transform_gifts(result.gifts, checkout_url=self._checkout_url)
        profile = result.profile_data
        interests = list(profile.interests) if profile else []
        themes = list(profile.themes) if profile else []
        username = result.username or username_from_url(profile_url)

        now = self._now()
        record = GiftSearch(
            id=uuid4(),
            platform=platform,
            username=username,
            profile_url=profile_url,
            profile_pic_url=result.profile_pic_url,
            profile_data={
                "bio": profile.bio if profile else None,
                "interests": interests,
                "themes": themes,
            },
            gifts=[g.model_dump(by_alias=True, exclude_none=True) for g in gifts],
            created_at=now,
            expires_at=now + self._cache_ttl,
        )
        await self._store.insert(record)
        logger.info(f"Cached {len(gifts)} gifts for platform={platform}, profile={profile_url}")

        return GiftSuggestResponse(
            username=username,
            profile_pic_url=result.profile_pic_url,
            gifts=gifts,
            interests=interests,
            themes=themes,
            cached=False,
        )
