"""GiftSearch model.

One row per cache miss: the transformed gift list for a (profile_url, platform)
pair plus the profile analysis that produced it. Rows are insert-only; expiry
is logical (`expires_at` compared at read time), stale rows stay queryable for
trending.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from xgifts.stores.postgres import Base

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _as_utc(value: datetime) -> datetime:
    # sqlite drops tzinfo on round-trip; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class GiftSearch(Base):
    """Cached gift suggestion result."""

    __tablename__ = "gift_searches"
    __table_args__ = (
        Index("ix_gift_searches_profile_url_platform", "profile_url", "platform"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    platform: Mapped[str] = mapped_column(String(50))
    username: Mapped[str] = mapped_column(String(255))
    profile_url: Mapped[str] = mapped_column(Text)
    profile_pic_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # {bio, interests, themes}
    profile_data: Mapped[dict[str, Any]] = mapped_column(JSONType)
    # GiftItem dicts in public (camelCase) shape
    gifts: Mapped[list[dict[str, Any]]] = mapped_column(JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def is_fresh(self, now: datetime) -> bool:
        """True while the row has not expired."""
        return _as_utc(self.expires_at) > now

    @property
    def interests(self) -> list[str]:
        return list((self.profile_data or {}).get("interests") or [])

    @property
    def themes(self) -> list[str]:
        return list((self.profile_data or {}).get("themes") or [])
