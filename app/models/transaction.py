from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Enum as SqlEnum, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class Account(str, Enum):
    CASH = "cash"
    BANK = "bank"


class TransferDirection(str, Enum):
    BANK_TO_CASH = "bank_to_cash"
    CASH_TO_BANK = "cash_to_bank"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Transaction(Base):
    """Append-only ledger entry; rows are never updated or deleted."""

    __tablename__ = "transactions"

    type: Mapped[TransactionType] = mapped_column(
        SqlEnum(TransactionType, name="transactiontype", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    account: Mapped[Optional[Account]] = mapped_column(
        SqlEnum(Account, name="account", values_callable=_enum_values), nullable=True
    )
    direction: Mapped[Optional[TransferDirection]] = mapped_column(
        SqlEnum(TransferDirection, name="transferdirection", values_callable=_enum_values),
        nullable=True,
    )
    occurred_at: Mapped[datetime] = mapped_column(
        "date", DateTime(timezone=True), default=utcnow, nullable=False
    )
