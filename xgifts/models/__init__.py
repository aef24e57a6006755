"""SQLAlchemy ORM models.

Models represent database tables:
- gift_searches: Cached gift suggestions per (profile_url, platform)
"""

from xgifts.models.gift_search import GiftSearch

__all__ = ["GiftSearch"]
