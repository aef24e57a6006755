"""Search cache repository over the gift_searches table.

The store does not filter by expiry; callers compare `expires_at` themselves.
Database failures surface as StoreError, without retries.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from xgifts.errors import StoreError
from xgifts.models import GiftSearch
from xgifts.services.trending import TRENDING_SAMPLE_LIMIT


class SearchCacheStore:
    """Insert-only cache of gift suggestion results."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def lookup(self, profile_url: str, platform: str) -> GiftSearch | None:
        """Get the newest row for (profile_url, platform), fresh or not."""
        query = (
            select(GiftSearch)
            .where(GiftSearch.profile_url == profile_url)
            .where(GiftSearch.platform == platform)
            .order_by(GiftSearch.created_at.desc())
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Search cache lookup failed: {e}") from e

    async def insert(self, record: GiftSearch) -> None:
        """Append a new row. Existing rows are never updated."""
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Search cache insert failed: {e}") from e

    async def recent_since(self, since: datetime, limit: int = TRENDING_SAMPLE_LIMIT) -> list[GiftSearch]:
        """Get rows created after `since`, newest first, at most `limit`."""
        query = (
            select(GiftSearch)
            .where(GiftSearch.created_at > since)
            .order_by(GiftSearch.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Search cache scan failed: {e}") from e
