"""Purch gift hunter client.

The Purch backend:
1. Scrapes the social media profile (30-60s)
2. Analyzes it with AI agents to extract interests (10-20s)
3. Searches for real Amazon products (30-60s)

Total time is 2-3 minutes, so the client timeout is 4 minutes (x402 allows 5).
The timeout bounds the whole call, body included, not each httpx phase.

Rules:
- Single attempt per call, no retries
- Timeout -> UpstreamTimeout, non-2xx / transport / malformed body -> UpstreamError
- Gifts without title, image or a positive price are malformed
- No cache writes here; the suggestion workflow owns persistence
"""

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any

import httpx

from xgifts.errors import UpstreamError, UpstreamTimeout

logger = logging.getLogger("uvicorn.error")

DEFAULT_PURCH_API_URL = "https://api.purch.xyz/api/gifts"
DEFAULT_TIMEOUT_SECONDS = 240.0


@dataclass
class PurchGift:
    """Gift record as returned by Purch."""

    title: str
    price: float
    image: str
    reason: str | None = None
    purch_link: str | None = None
    product_link: str | None = None
    category: str | None = None


@dataclass
class PurchProfileData:
    bio: str | None = None
    interests: list[str] = field(default_factory=list)
    themes: list[str] = field(default_factory=list)


@dataclass
class PurchGiftResponse:
    """Parsed Purch response."""

    success: bool
    username: str
    gifts: list[PurchGift]
    profile_pic_url: str | None = None
    profile_data: PurchProfileData | None = None


class PurchClient:
    """Client for the Purch gift hunter API."""

    def __init__(
        self,
        api_url: str = DEFAULT_PURCH_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_suggestions(self, profile_url: str, platform: str) -> PurchGiftResponse:
        """Get gift suggestions for a social media profile.

        This is a long-running call (2-3 minutes).

        Args:
            profile_url: Profile URL (e.g. "https://instagram.com/username").
            platform: "instagram", "x" or "tiktok".

        Returns:
            Parsed Purch response.

        Raises:
            UpstreamTimeout: No answer within timeout_seconds.
            UpstreamError: Non-2xx status, transport failure or malformed body.
        """
        logger.info(f"Calling Purch backend for {platform} profile {profile_url} (may take 2-3 minutes)")

        client = await self._get_client()
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await client.post(
                    self.api_url,
                    json={"profileUrl": profile_url, "platform": platform},
                    timeout=self.timeout_seconds,
                )
                data = self._json_body(response)
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Purch backend timed out after {self.timeout_seconds}s for {profile_url}")
            raise UpstreamTimeout(self.timeout_seconds) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Purch backend request failed: {e}") from e

        result = parse_purch_response(data)
        logger.info(f"Received {len(result.gifts)} gift suggestions from Purch")
        return result

    @staticmethod
    def _json_body(response: httpx.Response) -> Any:
        if not response.is_success:
            logger.warning(f"Purch backend returned {response.status_code}: {response.reason_phrase}")
            raise UpstreamError(
                f"Purch backend returned {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Purch backend returned invalid JSON") from e


def _parse_gift(item: Any) -> PurchGift:
    if not isinstance(item, dict):
        raise UpstreamError("Purch response contains a non-object gift")

    title = item.get("title")
    image = item.get("image")
    raw_price = item.get("price")
    if not title or not image or raw_price is None or isinstance(raw_price, bool):
        raise UpstreamError("Purch gift record is missing title, price or image")
    try:
        price = float(raw_price)
    except (TypeError, ValueError) as e:
        raise UpstreamError(f"Invalid gift price from Purch: {raw_price!r}") from e
    if not price > 0:
        raise UpstreamError(f"Invalid gift price from Purch: {raw_price!r}")

    return PurchGift(
        title=str(title),
        price=price,
        image=str(image),
        reason=item.get("reason") or None,
        purch_link=item.get("purchLink") or None,
        product_link=item.get("productLink") or None,
        category=item.get("category") or None,
    )


def parse_purch_response(data: Any) -> PurchGiftResponse:
    """Parse a Purch JSON body into dataclasses."""
    if not isinstance(data, dict):
        raise UpstreamError("Unexpected response from Purch backend")

    gifts_raw = data.get("gifts") or []
    if not isinstance(gifts_raw, list):
        raise UpstreamError("Purch response 'gifts' is not a list")

    gifts = [_parse_gift(item) for item in gifts_raw]

    profile_data = None
    profile_raw = data.get("profileData")
    if isinstance(profile_raw, dict):
        profile_data = PurchProfileData(
            bio=profile_raw.get("bio"),
            interests=[str(x) for x in profile_raw.get("interests") or []],
            themes=[str(x) for x in profile_raw.get("themes") or []],
        )

    return PurchGiftResponse(
        success=bool(data.get("success")),
        username=str(data.get("username") or ""),
        gifts=gifts,
        profile_pic_url=data.get("profilePicUrl") or None,
        profile_data=profile_data,
    )
