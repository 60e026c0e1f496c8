from .errors import (
    DeliveryFailure,
    InvalidAccountToken,
    InvalidAmount,
    InvalidRecord,
    MissingReason,
    MoneyBuddyError,
    StorageFailure,
)
from .ledger import LedgerStore
from .reports import build_report, summarise
from .subscribers import list_subscribers, upsert_subscriber
from .transactions import append_transaction, get_transaction, list_transactions

__all__ = [
    "DeliveryFailure",
    "InvalidAccountToken",
    "InvalidAmount",
    "InvalidRecord",
    "MissingReason",
    "MoneyBuddyError",
    "StorageFailure",
    "LedgerStore",
    "build_report",
    "summarise",
    "list_subscribers",
    "upsert_subscriber",
    "append_transaction",
    "get_transaction",
    "list_transactions",
]
