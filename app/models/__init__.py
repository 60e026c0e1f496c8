from .base import Base
from .subscriber import Subscriber
from .transaction import Account, Transaction, TransactionType, TransferDirection

__all__ = [
    "Base",
    "Account",
    "Subscriber",
    "Transaction",
    "TransactionType",
    "TransferDirection",
]
