"""Ledger schema: transactions and subscribers.

Revision ID: 20260301_000001
Revises: 
Create Date: 2026-03-01 00:00:01.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20260301_000001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


transaction_type_enum = postgresql.ENUM(
    "income",
    "expense",
    "transfer",
    name="transactiontype",
    create_type=False,
)
account_enum = postgresql.ENUM("cash", "bank", name="account", create_type=False)
transfer_direction_enum = postgresql.ENUM(
    "bank_to_cash",
    "cash_to_bank",
    name="transferdirection",
    create_type=False,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    transaction_type_enum.create(bind, checkfirst=True)
    account_enum.create(bind, checkfirst=True)
    transfer_direction_enum.create(bind, checkfirst=True)

    op.create_table(
        "transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("type", transaction_type_enum, nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("account", account_enum, nullable=True),
        sa.Column("direction", transfer_direction_enum, nullable=True),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_type", "transactions", ["type"])

    op.create_table(
        "subscribers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_subscribers_chat_id", "subscribers", ["chat_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_subscribers_chat_id", table_name="subscribers")
    op.drop_table("subscribers")
    op.drop_index("ix_transactions_type", table_name="transactions")
    op.drop_table("transactions")
    bind = op.get_bind()
    transfer_direction_enum.drop(bind, checkfirst=True)
    account_enum.drop(bind, checkfirst=True)
    transaction_type_enum.drop(bind, checkfirst=True)
