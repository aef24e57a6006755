"""Schemas for the gift endpoints (/gifts/suggest, /gifts/trending)."""

from enum import Enum

from pydantic import BaseModel, Field, HttpUrl


class Platform(str, Enum):
    """Supported social media platforms."""

    INSTAGRAM = "instagram"
    X = "x"
    TIKTOK = "tiktok"


class GiftSuggestRequest(BaseModel):
    """Request body for POST /gifts/suggest."""

    profile_url: HttpUrl = Field(alias="profileUrl", description="Social media profile URL")
    platform: Platform = Field(description="Social media platform")

    model_config = {"populate_by_name": True}


class GiftItem(BaseModel):
    """A single recommended product."""

    title: str
    price: float = Field(description="Price in USD")
    image: str
    reason: str
    asin: str = Field(description="Amazon Standard Identification Number")
    product_url: str = Field(alias="productUrl", description="Direct Amazon product URL")
    checkout_url: str = Field(alias="checkoutUrl", description="x-purch checkout URL for this product")
    confidence: float | None = Field(
        default=None,
        ge=0,
        le=1,
        description="Confidence score for this recommendation",
    )
    category: str | None = None

    model_config = {"populate_by_name": True}


class GiftSuggestResponse(BaseModel):
    """Response payload for POST /gifts/suggest."""

    success: bool = True
    username: str
    profile_pic_url: str | None = Field(alias="profilePicUrl", default=None)
    gifts: list[GiftItem]
    interests: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    cached: bool = False

    model_config = {"populate_by_name": True}


class TrendingGift(GiftItem):
    """Gift snapshot annotated with its occurrence count."""

    trending_score: int = Field(alias="trendingScore", ge=1)


class TrendingSummary(BaseModel):
    """Aggregated trending data over the rolling window."""

    gifts: list[TrendingGift] = Field(max_length=10)
    interests: list[str] = Field(max_length=10)
    period: str
    sample_size: int = Field(alias="sampleSize", ge=0)

    model_config = {"populate_by_name": True}


class TrendingResponse(BaseModel):
    """Response payload for GET /gifts/trending."""

    success: bool = True
    trending: TrendingSummary
    cached: bool = False
