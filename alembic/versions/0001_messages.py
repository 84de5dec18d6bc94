"""messages

Revision ID: 0001_messages
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_messages"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "messages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("to", sa.String(length=320), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("NOT sent OR (sent_at IS NOT NULL AND sent_at >= created_at)", name="ck_messages_sent_at"),
    )
    op.create_index("ix_messages_sent_created_at", "messages", ["sent", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_messages_sent_created_at", table_name="messages")
    op.drop_table("messages")
