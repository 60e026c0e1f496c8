from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import Row, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.transaction import Transaction, TransactionType
from ..schemas.transaction import TransactionCreate
from .errors import InvalidRecord


def ensure_valid_record(payload: TransactionCreate) -> None:
    """Reject records that would break the ledger invariants."""
    if payload.amount <= 0:
        raise InvalidRecord(f"Amount must be positive, got {payload.amount}")


async def append_transaction(
    session: AsyncSession,
    payload: TransactionCreate,
) -> Transaction:
    """Persist a new ledger entry."""
    ensure_valid_record(payload)
    transaction = Transaction(
        type=payload.type,
        amount=payload.amount,
        reason=payload.reason,
        account=payload.account,
        direction=payload.direction,
        occurred_at=payload.occurred_at or utcnow(),
    )
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)
    return transaction


async def list_transactions(
    session: AsyncSession,
    *,
    limit: int = 50,
    offset: int = 0,
    transaction_type: Optional[TransactionType] = None,
) -> Sequence[Transaction]:
    """Retrieve ledger entries, newest first, with an optional type filter."""
    stmt: Select[tuple[Transaction]] = select(Transaction).order_by(
        Transaction.occurred_at.desc(), Transaction.created_at.desc()
    )
    if transaction_type:
        stmt = stmt.where(Transaction.type == transaction_type)
    result = await session.execute(stmt.limit(limit).offset(offset))
    return result.scalars().all()


async def get_transaction(session: AsyncSession, transaction_id: UUID) -> Optional[Transaction]:
    return await session.get(Transaction, transaction_id)


async def aggregate_totals(session: AsyncSession) -> Sequence[Row[Any]]:
    """Sum and count the ledger per (type, account, direction) in one query."""
    stmt = select(
        Transaction.type,
        Transaction.account,
        Transaction.direction,
        func.coalesce(func.sum(Transaction.amount), 0),
        func.count(Transaction.id),
    ).group_by(Transaction.type, Transaction.account, Transaction.direction)
    result = await session.execute(stmt)
    return result.all()


async def list_top_expenses(session: AsyncSession, *, limit: int = 3) -> Sequence[Transaction]:
    """Largest expenses first; ties keep insertion order."""
    stmt = (
        select(Transaction)
        .where(Transaction.type == TransactionType.EXPENSE)
        .order_by(Transaction.amount.desc(), Transaction.created_at.asc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return result.scalars().all()
