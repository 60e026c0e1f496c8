from __future__ import annotations

from pydantic import BaseModel, Field

from ..models.transaction import Account


class TopExpense(BaseModel):
    amount: int
    reason: str
    account: Account = Account.CASH


class ReportSnapshot(BaseModel):
    """Derived view of the whole ledger; never persisted."""

    income: int = 0
    expense: int = 0
    cash_balance: int = 0
    bank_balance: int = 0
    total_balance: int = 0
    transaction_count: int = 0
    top_expenses: list[TopExpense] = Field(default_factory=list)
