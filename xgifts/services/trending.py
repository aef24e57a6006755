"""Trending gifts and interests over a rolling window.

Aggregation:
1. Take cached searches created in the last 7 days (at most 100 rows, so this
   is a sample, not a census)
2. Count gifts by ASIN; the first occurrence seen is the snapshot returned
3. Rank by count DESC (ties keep encounter order), keep Top-10
4. Count profile interests the same way, keep Top-10 strings

Nothing is cached; every call recomputes.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Protocol

from xgifts.models import GiftSearch
from xgifts.schemas import TrendingGift, TrendingSummary
from xgifts.services.gift_transform import UNKNOWN_ASIN
from xgifts.services.suggestions import utcnow

TRENDING_WINDOW = timedelta(days=7)
TRENDING_SAMPLE_LIMIT = 100
TOP_N = 10
PERIOD_LABEL = "7_days"


class RecentSearches(Protocol):
    async def recent_since(self, since: datetime, limit: int = TRENDING_SAMPLE_LIMIT) -> list[GiftSearch]: ...


def aggregate_trending(records: Iterable[GiftSearch], period: str = PERIOD_LABEL) -> TrendingSummary:
    """Rank gifts and interests across records by occurrence count."""
    records = list(records)

    snapshots: dict[str, dict[str, Any]] = {}
    gift_counts: dict[str, int] = {}
    interest_counts: Counter[str] = Counter()

    for record in records:
        for gift in record.gifts or []:
            asin = gift.get("asin") or UNKNOWN_ASIN
            if asin not in snapshots:
                snapshots[asin] = gift
                gift_counts[asin] = 0
            gift_counts[asin] += 1
        interest_counts.update(record.interests)

    ranked = sorted(gift_counts.items(), key=lambda kv: kv[1], reverse=True)[:TOP_N]
    gifts = [
        TrendingGift.model_validate({**snapshots[asin], "trendingScore": count})
        for asin, count in ranked
    ]
    interests = [interest for interest, _ in interest_counts.most_common(TOP_N)]

    return TrendingSummary(
        gifts=gifts,
        interests=interests,
        period=period,
        sample_size=len(records),
    )


class TrendingService:
    """Computes trending data from the search cache."""

    def __init__(
        self,
        store: RecentSearches,
        *,
        window: timedelta = TRENDING_WINDOW,
        sample_limit: int = TRENDING_SAMPLE_LIMIT,
        now: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._window = window
        self._sample_limit = sample_limit
        self._now = now

    async def get_trending(self) -> TrendingSummary:
        since = self._now() - self._window
        records = await self._store.recent_since(since, limit=self._sample_limit)
        period = PERIOD_LABEL if self._window == TRENDING_WINDOW else f"{self._window.days}_days"
        return aggregate_trending(records, period=period)
