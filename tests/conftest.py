"""Shared fakes and fixtures (no network, no Postgres, no Redis)."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest

from xgifts.errors import StoreError
from xgifts.models import GiftSearch
from xgifts.services.purch_client import PurchGift, PurchGiftResponse, PurchProfileData

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def fixed_now() -> datetime:
    return NOW


def gift_dict(asin: str, title: str | None = None, **extra: Any) -> dict[str, Any]:
    """Stored GiftItem in public (camelCase) shape."""
    data = {
        "title": title or f"Gift {asin}",
        "price": 19.99,
        "image": f"https://images.example.com/{asin}.jpg",
        "reason": "Based on profile interests",
        "asin": asin,
        "productUrl": f"https://www.amazon.com/dp/{asin}",
        "checkoutUrl": "https://x-purch-741433844771.us-east1.run.app/orders/solana",
    }
    data.update(extra)
    return data


def make_record(
    profile_url: str = "https://instagram.com/foo",
    platform: str = "instagram",
    *,
    created_at: datetime = NOW - timedelta(hours=1),
    expires_at: datetime | None = None,
    gifts: list[dict[str, Any]] | None = None,
    interests: list[str] | None = None,
    themes: list[str] | None = None,
    username: str = "foo",
    profile_pic_url: str | None = None,
) -> GiftSearch:
    return GiftSearch(
        id=uuid4(),
        platform=platform,
        username=username,
        profile_url=profile_url,
        profile_pic_url=profile_pic_url,
        profile_data={"bio": None, "interests": interests or [], "themes": themes or []},
        gifts=gifts if gifts is not None else [gift_dict("B000000001")],
        created_at=created_at,
        expires_at=expires_at or created_at + timedelta(hours=24),
    )


def purch_response(*gifts: PurchGift, success: bool = True, interests: list[str] | None = None) -> PurchGiftResponse:
    return PurchGiftResponse(
        success=success,
        username="foo",
        gifts=list(gifts),
        profile_pic_url="https://cdn.example.com/foo.jpg",
        profile_data=PurchProfileData(bio="hi", interests=interests or ["coffee"], themes=["minimalist"]),
    )


class FakeStore:
    """In-memory search cache."""

    def __init__(self, records: list[GiftSearch] | None = None):
        self.records = list(records or [])
        self.inserted: list[GiftSearch] = []
        self.lookups = 0
        self.fail_insert = False
        self.recent_calls: list[tuple[datetime, int]] = []

    async def lookup(self, profile_url: str, platform: str) -> GiftSearch | None:
        self.lookups += 1
        matches = [r for r in self.records if r.profile_url == profile_url and r.platform == platform]
        if not matches:
            return None
        return max(matches, key=lambda r: r.created_at)

    async def insert(self, record: GiftSearch) -> None:
        if self.fail_insert:
            raise StoreError("insert failed")
        self.records.append(record)
        self.inserted.append(record)

    async def recent_since(self, since: datetime, limit: int = 100) -> list[GiftSearch]:
        self.recent_calls.append((since, limit))
        rows = [r for r in self.records if r.created_at > since]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[:limit]


class FakeProvider:
    """Records calls; returns a canned response or raises."""

    def __init__(self, response: PurchGiftResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def fetch_suggestions(self, profile_url: str, platform: str) -> PurchGiftResponse:
        self.calls.append((profile_url, platform))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
