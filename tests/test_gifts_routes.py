"""HTTP tests for /gifts/* with fake services wired through dependency overrides."""

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import NOW, FakeProvider, FakeStore, fixed_now, gift_dict, make_record, purch_response
from xgifts.dependencies import get_suggestion_service, get_trending_service
from xgifts.errors import StoreError, UpstreamError, UpstreamTimeout
from xgifts.main import create_app
from xgifts.services.purch_client import PurchGift
from xgifts.services.suggestions import GiftSuggestionService
from xgifts.services.trending import TrendingService
from xgifts.settings import Settings

SUGGEST_BODY = {"profileUrl": "https://instagram.com/foo", "platform": "instagram"}

GIFT = PurchGift(
    title="Kettle",
    price=39.5,
    image="https://img.example.com/k.jpg",
    purch_link="https://app.purch.xyz/product/B000000001",
)


class BrokenTrending:
    def __init__(self, error: Exception):
        self.error = error

    async def get_trending(self):
        raise self.error


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(purch_response(GIFT))


@pytest.fixture
def app(store: FakeStore, provider: FakeProvider):
    app = create_app(Settings(X402_ENABLED=False, SUGGEST_LOCK_ENABLED=False))
    app.dependency_overrides[get_suggestion_service] = lambda: GiftSuggestionService(store, provider, now=fixed_now)
    app.dependency_overrides[get_trending_service] = lambda: TrendingService(store, now=fixed_now)
    return app


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_suggest_miss_end_to_end(client: AsyncClient, store: FakeStore, provider: FakeProvider) -> None:
    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["cached"] is False
    assert data["username"] == "foo"
    assert data["profilePicUrl"] == "https://cdn.example.com/foo.jpg"
    assert len(data["gifts"]) == 1
    gift = data["gifts"][0]
    assert gift["asin"] == "B000000001"
    assert gift["productUrl"] == "https://www.amazon.com/dp/B000000001"
    assert gift["checkoutUrl"] == "https://x-purch-741433844771.us-east1.run.app/orders/solana"
    assert "confidence" not in gift
    assert data["interests"] == ["coffee"]
    assert data["themes"] == ["minimalist"]

    assert provider.calls == [("https://instagram.com/foo", "instagram")]
    [row] = store.inserted
    assert row.expires_at - NOW == timedelta(hours=24)


@pytest.mark.asyncio
async def test_suggest_fresh_hit(client: AsyncClient, store: FakeStore, provider: FakeProvider) -> None:
    store.records.append(make_record("https://instagram.com/foo", gifts=[gift_dict("B0BSHV8MRZ")]))

    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 200
    data = response.json()
    assert data["cached"] is True
    assert data["gifts"][0]["asin"] == "B0BSHV8MRZ"
    assert "profilePicUrl" not in data
    assert provider.calls == []


@pytest.mark.asyncio
async def test_suggest_rejects_unknown_platform(client: AsyncClient) -> None:
    response = await client.post("/gifts/suggest", json={"profileUrl": "https://myspace.com/foo", "platform": "myspace"})

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "VALIDATION_ERROR"
    assert "platform" in data["error"]


@pytest.mark.asyncio
async def test_suggest_rejects_invalid_url(client: AsyncClient, provider: FakeProvider) -> None:
    response = await client.post("/gifts/suggest", json={"profileUrl": "not a url", "platform": "x"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert provider.calls == []


@pytest.mark.asyncio
async def test_suggest_timeout_has_distinct_message(client: AsyncClient, provider: FakeProvider) -> None:
    provider.error = UpstreamTimeout(240)

    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "UPSTREAM_TIMEOUT"
    assert "too much content to analyze" in data["error"]


@pytest.mark.asyncio
async def test_suggest_upstream_error_is_generic(client: AsyncClient, provider: FakeProvider, store: FakeStore) -> None:
    provider.error = UpstreamError("Purch backend returned 502: Bad Gateway", status_code=502, reason="Bad Gateway")

    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 500
    data = response.json()
    assert data == {
        "success": False,
        "error": "Failed to generate gift suggestions",
        "code": "UPSTREAM_ERROR",
    }
    assert store.inserted == []


@pytest.mark.asyncio
async def test_suggest_store_failure(client: AsyncClient, store: FakeStore) -> None:
    store.fail_insert = True

    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 500
    assert response.json()["code"] == "STORE_ERROR"


@pytest.mark.asyncio
async def test_suggest_unexpected_error(client: AsyncClient, provider: FakeProvider) -> None:
    provider.error = KeyError("surprise")

    response = await client.post("/gifts/suggest", json=SUGGEST_BODY)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to generate gift suggestions",
        "code": "INTERNAL_ERROR",
    }


@pytest.mark.asyncio
async def test_trending(client: AsyncClient, store: FakeStore) -> None:
    store.records.extend(
        [
            make_record(gifts=[gift_dict("B000000001"), gift_dict("B000000002")], interests=["coffee"]),
            make_record(gifts=[gift_dict("B000000002")], interests=["coffee", "tea"]),
        ]
    )

    response = await client.get("/gifts/trending")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["cached"] is False
    trending = data["trending"]
    assert trending["period"] == "7_days"
    assert trending["sampleSize"] == 2
    assert [g["asin"] for g in trending["gifts"]] == ["B000000002", "B000000001"]
    assert [g["trendingScore"] for g in trending["gifts"]] == [2, 1]
    assert trending["interests"] == ["coffee", "tea"]


@pytest.mark.asyncio
async def test_trending_store_failure(app, client: AsyncClient) -> None:
    app.dependency_overrides[get_trending_service] = lambda: BrokenTrending(StoreError("db down"))

    response = await client.get("/gifts/trending")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to fetch trending gifts",
        "code": "STORE_ERROR",
    }


@pytest.mark.asyncio
async def test_trending_unexpected_failure(app, client: AsyncClient) -> None:
    app.dependency_overrides[get_trending_service] = lambda: BrokenTrending(ValueError("bad row"))

    response = await client.get("/gifts/trending")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
    assert response.json()["error"] == "Failed to fetch trending gifts"


@pytest.mark.asyncio
async def test_trending_failure_leaves_raised_error_untouched(app, client: AsyncClient) -> None:
    error = StoreError("db down")
    app.dependency_overrides[get_trending_service] = lambda: BrokenTrending(error)

    first = await client.get("/gifts/trending")
    second = await client.get("/gifts/trending")

    assert first.json() == second.json()
    assert first.json()["error"] == "Failed to fetch trending gifts"
    assert error.public_message == StoreError.public_message == "Failed to generate gift suggestions"
    assert "public_message" not in vars(error)
