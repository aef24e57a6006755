"""Gift endpoints (x402 metered).

POST /gifts/suggest  - gift suggestions for a social media profile ($0.10)
GET  /gifts/trending - trending gifts and interests, last 7 days ($0.02)

Routers are thin: call services for business logic. Known failures propagate
as GiftsError; anything else is logged and wrapped in UnexpectedError.
"""

import logging

from fastapi import APIRouter, Depends

from xgifts.dependencies import get_suggestion_service, get_trending_service
from xgifts.errors import GiftsError, TrendingUnavailable, UnexpectedError
from xgifts.schemas import ErrorResponse, GiftSuggestRequest, GiftSuggestResponse, TrendingResponse
from xgifts.services.suggestions import GiftSuggestionService
from xgifts.services.trending import TrendingService

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    402: {"description": "x402 payment required"},
    500: {"model": ErrorResponse, "description": "Gift provider or cache failure"},
}


@router.post(
    "/suggest",
    response_model=GiftSuggestResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def suggest_gifts(
    body: GiftSuggestRequest,
    service: GiftSuggestionService = Depends(get_suggestion_service),
) -> GiftSuggestResponse:
    """Get gift suggestions for a social media profile.

    Results are cached per (profileUrl, platform) for 24 hours; a cache miss
    takes 2-3 minutes while the profile is scraped and analyzed.
    """
    profile_url = str(body.profile_url)
    platform = body.platform.value
    logger.info(f"[Gifts] Processing suggest request platform={platform}, profile={profile_url}")

    try:
        return await service.suggest(profile_url, platform)
    except GiftsError as e:
        logger.warning(f"[Gifts] Suggest failed ({e.code}) for {profile_url}: {e}")
        raise
    except Exception as e:
        logger.exception(f"[Gifts] Unexpected error for {profile_url}")
        raise UnexpectedError() from e


@router.get(
    "/trending",
    response_model=TrendingResponse,
    response_model_exclude_none=True,
    responses={500: _ERROR_RESPONSES[500], 402: _ERROR_RESPONSES[402]},
)
async def get_trending_gifts(
    service: TrendingService = Depends(get_trending_service),
) -> TrendingResponse:
    """Get trending gifts and interests from the last 7 days of searches."""
    try:
        summary = await service.get_trending()
    except GiftsError as e:
        logger.warning(f"[Gifts] Trending failed ({e.code}): {e}")
        raise TrendingUnavailable(e) from e
    except Exception as e:
        logger.exception("[Gifts] Unexpected error computing trending")
        raise TrendingUnavailable() from e

    return TrendingResponse(trending=summary, cached=False)
