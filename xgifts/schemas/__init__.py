"""Pydantic schemas for API request/response validation."""

from xgifts.schemas.common import ErrorResponse
from xgifts.schemas.gifts import (
    GiftItem,
    GiftSuggestRequest,
    GiftSuggestResponse,
    Platform,
    TrendingGift,
    TrendingResponse,
    TrendingSummary,
)

__all__ = [
    "ErrorResponse",
    "GiftItem",
    "GiftSuggestRequest",
    "GiftSuggestResponse",
    "Platform",
    "TrendingGift",
    "TrendingResponse",
    "TrendingSummary",
]
