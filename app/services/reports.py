"""Report aggregation over the ledger.

The snapshot is computed from per-(type, account, direction) totals so the
database does the summing in a single grouped query; ``summarise`` combines
those totals into balances.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.transaction import Account, TransactionType, TransferDirection
from ..schemas.report import ReportSnapshot, TopExpense
from .transactions import aggregate_totals, list_top_expenses

TOP_EXPENSE_LIMIT = 3


@dataclass(frozen=True)
class TotalsRow:
    """Sum and count of ledger entries sharing a type, account and direction."""

    type: TransactionType
    account: Optional[Account]
    direction: Optional[TransferDirection]
    total: int
    count: int


def _account_or_cash(account: Optional[Account | str]) -> Account:
    return Account(account) if account else Account.CASH


def summarise(rows: Iterable[TotalsRow], top_expenses: Sequence[TopExpense] = ()) -> ReportSnapshot:
    """Fold grouped totals into a report snapshot.

    ``total_balance`` always equals ``income - expense``: each transfer adds to
    one account exactly what it removes from the other.
    """
    income = 0
    expense = 0
    transaction_count = 0
    account_balances: dict[Account, int] = defaultdict(int)
    transfers: dict[TransferDirection, int] = defaultdict(int)

    for row in rows:
        transaction_count += row.count
        if row.type is TransactionType.INCOME:
            income += row.total
            account_balances[_account_or_cash(row.account)] += row.total
        elif row.type is TransactionType.EXPENSE:
            expense += row.total
            account_balances[_account_or_cash(row.account)] -= row.total
        elif row.type is TransactionType.TRANSFER and row.direction is not None:
            transfers[row.direction] += row.total

    bank_to_cash = transfers[TransferDirection.BANK_TO_CASH]
    cash_to_bank = transfers[TransferDirection.CASH_TO_BANK]
    cash_balance = account_balances[Account.CASH] + bank_to_cash - cash_to_bank
    bank_balance = account_balances[Account.BANK] - bank_to_cash + cash_to_bank

    return ReportSnapshot(
        income=income,
        expense=expense,
        cash_balance=cash_balance,
        bank_balance=bank_balance,
        total_balance=cash_balance + bank_balance,
        transaction_count=transaction_count,
        top_expenses=list(top_expenses)[:TOP_EXPENSE_LIMIT],
    )


async def build_report(session: AsyncSession) -> ReportSnapshot:
    """Aggregate the persisted ledger; read-only and safe on an empty database."""
    grouped = await aggregate_totals(session)
    top = await list_top_expenses(session, limit=TOP_EXPENSE_LIMIT)
    rows = [
        TotalsRow(
            type=TransactionType(tx_type),
            account=Account(account) if account else None,
            direction=TransferDirection(direction) if direction else None,
            total=int(total or 0),
            count=int(count or 0),
        )
        for tx_type, account, direction, total, count in grouped
    ]
    return summarise(
        rows,
        [
            TopExpense(
                amount=record.amount,
                reason=record.reason or "",
                account=_account_or_cash(record.account),
            )
            for record in top
        ],
    )
