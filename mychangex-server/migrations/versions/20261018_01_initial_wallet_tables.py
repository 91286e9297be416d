"""create profiles, transactions, incidents and revoked tokens

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(12, 2)


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("pin_hash", sa.String(length=255), nullable=False),
        sa.Column("balance", MONEY, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("balance >= 0", name="ck_profiles_balance_non_negative"),
    )
    op.create_index("ix_profiles_phone", "profiles", ["phone"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("receiver_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False, server_default="transfer"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="completed"),
        sa.Column("notes", sa.String(length=255)),
        sa.Column("request_id", sa.String(length=64), unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        sa.CheckConstraint("sender_id <> receiver_id", name="ck_transactions_distinct_parties"),
    )
    op.create_index("ix_transactions_sender_id", "transactions", ["sender_id"])
    op.create_index("ix_transactions_receiver_id", "transactions", ["receiver_id"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "transfer_incidents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("receiver_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("stage", sa.String(length=20), nullable=False),
        sa.Column("detail", sa.Text()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_transfer_incidents_sender_id", "transfer_incidents", ["sender_id"])

    op.create_table(
        "revoked_tokens",
        sa.Column("jti", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("revoked_tokens")
    op.drop_index("ix_transfer_incidents_sender_id", table_name="transfer_incidents")
    op.drop_table("transfer_incidents")
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_receiver_id", table_name="transactions")
    op.drop_index("ix_transactions_sender_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_profiles_phone", table_name="profiles")
    op.drop_table("profiles")
