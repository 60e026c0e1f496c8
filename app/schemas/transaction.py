from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.transaction import Account, TransactionType, TransferDirection

DEFAULT_TRANSFER_REASONS: dict[TransferDirection, str] = {
    TransferDirection.BANK_TO_CASH: "Rút tiền",
    TransferDirection.CASH_TO_BANK: "Nạp tiền",
}


class TransactionCreate(BaseModel):
    """Internal payload for appending a ledger entry.

    Defaults are resolved here, at write time, so readers never have to:
    income/expense records without an account land on cash, and transfers
    without a reason get the reason of their direction.
    """

    type: TransactionType
    amount: int
    reason: str = ""
    account: Optional[Account] = None
    direction: Optional[TransferDirection] = None
    occurred_at: Optional[datetime] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: TransactionType | str) -> TransactionType:
        """Allow case-insensitive transaction types from external clients."""
        if isinstance(value, TransactionType):
            return value
        if isinstance(value, str):
            try:
                return TransactionType(value.lower())
            except ValueError as exc:
                raise ValueError("Unsupported transaction type") from exc
        raise TypeError("Transaction type must be a string or TransactionType instance")

    @field_validator("reason", mode="before")
    @classmethod
    def _strip_reason(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @model_validator(mode="after")
    def _apply_write_defaults(self) -> "TransactionCreate":
        if self.type is TransactionType.TRANSFER:
            if self.direction is None:
                raise ValueError("Transfers require a direction")
            self.account = None
            if not self.reason:
                self.reason = DEFAULT_TRANSFER_REASONS[self.direction]
            return self

        if self.direction is not None:
            raise ValueError("Only transfers carry a direction")
        if not self.reason:
            raise ValueError("Income and expense records require a reason")
        if self.account is None:
            self.account = Account.CASH
        return self


class TransactionRead(BaseModel):
    """API response shape for ledger entries."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: TransactionType
    amount: int
    reason: str
    account: Optional[Account] = None
    direction: Optional[TransferDirection] = None
    occurred_at: datetime = Field(
        validation_alias=AliasChoices("occurred_at", "date"),
        serialization_alias="date",
    )
    created_at: datetime
