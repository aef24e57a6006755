"""create_gift_searches

Revision ID: 3f8e2b7c1a90
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f8e2b7c1a90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "gift_searches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("platform", sa.String(length=50), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("profile_url", sa.Text(), nullable=False),
        sa.Column("profile_pic_url", sa.Text(), nullable=True),
        sa.Column("profile_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("gifts", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "ix_gift_searches_profile_url_platform",
        "gift_searches",
        ["profile_url", "platform"],
        unique=False,
    )
    op.create_index(op.f("ix_gift_searches_created_at"), "gift_searches", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_gift_searches_created_at"), table_name="gift_searches")
    op.drop_index("ix_gift_searches_profile_url_platform", table_name="gift_searches")
    op.drop_table("gift_searches")
