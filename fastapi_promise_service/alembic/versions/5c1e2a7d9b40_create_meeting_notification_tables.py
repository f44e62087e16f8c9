"""create_meeting_notification_tables

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2025-08-18 10:12:41.203114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e2a7d9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "user_identities",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("provider", sa.String(length=20), nullable=False),
        sa.Column("provider_user_id", sa.String(length=64), nullable=True),
        sa.Column("access_token_enc", sa.LargeBinary(), nullable=True),
        sa.Column("token_expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "provider", name="uq_user_identity_provider"),
    )
    op.create_table(
        "user_consents",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("talk_message_consent", sa.Boolean(), nullable=False),
        sa.Column("friends_consent", sa.Boolean(), nullable=False),
        sa.Column("marketing_consent", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "meetings",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("host_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("meeting_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("location_name", sa.String(length=500), nullable=True),
        sa.Column("location_address", sa.String(length=500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_meeting_host_status", "meetings", ["host_id", "status"])
    op.create_table(
        "meeting_participants",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "meeting_id",
            sa.BigInteger(),
            sa.ForeignKey("meetings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("response", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("meeting_id", "user_id", name="uq_meeting_participant"),
    )


def downgrade() -> None:
    op.drop_table("meeting_participants")
    op.drop_index("ix_meeting_host_status", table_name="meetings")
    op.drop_table("meetings")
    op.drop_table("user_consents")
    op.drop_table("user_identities")
    op.drop_table("users")
