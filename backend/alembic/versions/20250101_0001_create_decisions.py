"""create decisions table

Revision ID: 20250101_0001
Revises:
Create Date: 2025-01-01

This migration adds:
1. decisions table, one row per ordered (actor, recipient) pair
2. uq_decisions_actor_recipient: target of the decision upsert and of the
   mutual-like and new-liker existence probes
3. ix_decisions_recipient_liked_created: keyset scans for liker pages
"""

from alembic import op
import sqlalchemy as sa


revision = "20250101_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "decisions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("actor_user_id", sa.String(length=255), nullable=False),
        sa.Column("recipient_user_id", sa.String(length=255), nullable=False),
        sa.Column("liked_recipient", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "actor_user_id", "recipient_user_id", name="uq_decisions_actor_recipient"
        ),
    )

    op.create_index(
        "ix_decisions_recipient_liked_created",
        "decisions",
        ["recipient_user_id", "liked_recipient", sa.text("created_at DESC")],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_decisions_recipient_liked_created", table_name="decisions")
    op.drop_table("decisions")
