from .report import ReportSnapshot, TopExpense
from .transaction import (
    DEFAULT_TRANSFER_REASONS,
    TransactionCreate,
    TransactionRead,
)

__all__ = [
    "DEFAULT_TRANSFER_REASONS",
    "ReportSnapshot",
    "TopExpense",
    "TransactionCreate",
    "TransactionRead",
]
