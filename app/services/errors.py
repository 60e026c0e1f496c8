"""Error taxonomy shared by the ledger, the conversation flows and the bot."""


class MoneyBuddyError(Exception):
    """Base class for errors raised by the application."""


class InvalidAmount(MoneyBuddyError, ValueError):
    """Raised when an amount is unparseable or not positive."""


class InvalidAccountToken(MoneyBuddyError, ValueError):
    """Raised when an account selector matches neither cash nor bank."""


class MissingReason(MoneyBuddyError, ValueError):
    """Raised when a mandatory reason is empty or skipped."""


class InvalidRecord(MoneyBuddyError, ValueError):
    """Raised when a record violates the ledger invariants before being written."""


class StorageFailure(MoneyBuddyError):
    """Raised when the ledger could not complete a read or write."""


class DeliveryFailure(MoneyBuddyError):
    """Raised when a message could not be delivered to a chat."""
