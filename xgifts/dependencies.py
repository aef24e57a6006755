"""FastAPI dependency providers.

Services are built once in the app lifespan and stored on `app.state`.
Tests replace them through `app.dependency_overrides`.
"""

from fastapi import Request

from xgifts.services.suggestions import GiftSuggestionService
from xgifts.services.trending import TrendingService


def get_suggestion_service(request: Request) -> GiftSuggestionService:
    return request.app.state.suggestion_service


def get_trending_service(request: Request) -> TrendingService:
    return request.app.state.trending_service
