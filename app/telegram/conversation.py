"""Per-chat conversation flows: amount → (account) → reason.

``advance`` is a pure transition function. It never touches storage or the
network: it returns the next session (``None`` once the flow is over), the
reply to send, and on completion the record the caller must append. Inline
commands reuse the same validation through ``build_inline_record``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..models.transaction import Account, TransactionType, TransferDirection
from ..schemas.transaction import TransactionCreate
from ..services.errors import InvalidAccountToken, InvalidAmount, MissingReason
from . import messages
from .helpers import (
    parse_inline_income_expense_input,
    parse_inline_transfer_input,
    require_account,
    require_amount,
)

SKIP_PHRASES = frozenset({"bo qua", "skip"})


class Flow(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"

    @property
    def is_transfer(self) -> bool:
        return self in (Flow.WITHDRAW, Flow.DEPOSIT)


class Step(str, Enum):
    AMOUNT = "amount"
    ACCOUNT = "account"
    REASON = "reason"


FLOW_TRANSACTION_TYPES: dict[Flow, TransactionType] = {
    Flow.INCOME: TransactionType.INCOME,
    Flow.EXPENSE: TransactionType.EXPENSE,
    Flow.WITHDRAW: TransactionType.TRANSFER,
    Flow.DEPOSIT: TransactionType.TRANSFER,
}

FLOW_DIRECTIONS: dict[Flow, TransferDirection] = {
    Flow.WITHDRAW: TransferDirection.BANK_TO_CASH,
    Flow.DEPOSIT: TransferDirection.CASH_TO_BANK,
}


@dataclass(frozen=True)
class ConversationSession:
    flow: Flow
    step: Step = Step.AMOUNT
    amount: Optional[int] = None
    account: Optional[Account] = None


@dataclass(frozen=True)
class StepResult:
    reply: str
    session: Optional[ConversationSession]
    record: Optional[TransactionCreate] = None

    @property
    def completed(self) -> bool:
        return self.record is not None


def start_session(flow: Flow) -> ConversationSession:
    return ConversationSession(flow=flow)


def is_skip_phrase(text: str) -> bool:
    return text.strip().lower() in SKIP_PHRASES


def validate_reason(flow: Flow, text: str) -> str:
    """Return the reason to store; an empty string lets transfers use their default."""
    reason = text.strip()
    if not reason or is_skip_phrase(reason):
        if flow.is_transfer:
            return ""
        raise MissingReason("Income and expense need a reason.")
    return reason


def build_record(
    flow: Flow,
    amount: int,
    reason: str,
    account: Optional[Account] = None,
) -> TransactionCreate:
    if flow.is_transfer:
        return TransactionCreate(
            type=FLOW_TRANSACTION_TYPES[flow],
            amount=amount,
            reason=reason,
            direction=FLOW_DIRECTIONS[flow],
        )
    return TransactionCreate(
        type=FLOW_TRANSACTION_TYPES[flow],
        amount=amount,
        reason=reason,
        account=account or Account.CASH,
    )


def build_inline_record(flow: Flow, args: str) -> TransactionCreate:
    """Validate a single-line command such as ``100k tm lương``.

    Raises ``InvalidAmount`` or ``MissingReason``; an unrecognised account
    token is not an error here, it simply becomes part of the reason.
    """
    if flow.is_transfer:
        entry = parse_inline_transfer_input(args)
    else:
        entry = parse_inline_income_expense_input(args)
    if entry.amount is None or entry.amount <= 0:
        raise InvalidAmount(f"Invalid amount in '{args}'.")
    reason = validate_reason(flow, entry.reason)
    return build_record(flow, entry.amount, reason, entry.account)


def advance(session: ConversationSession, text: str) -> StepResult:
    text = text.strip()

    if session.step is Step.AMOUNT:
        try:
            amount = require_amount(text)
        except InvalidAmount:
            return StepResult(messages.INVALID_AMOUNT_REPROMPT, session)
        if session.flow.is_transfer:
            return StepResult(
                messages.TRANSFER_REASON_PROMPT,
                replace(session, amount=amount, step=Step.REASON),
            )
        return StepResult(
            messages.ACCOUNT_PROMPT,
            replace(session, amount=amount, step=Step.ACCOUNT),
        )

    if session.step is Step.ACCOUNT:
        try:
            account = require_account(text)
        except InvalidAccountToken:
            return StepResult(messages.INVALID_ACCOUNT_REPROMPT, session)
        return StepResult(
            messages.REASON_PROMPT,
            replace(session, account=account, step=Step.REASON),
        )

    try:
        reason = validate_reason(session.flow, text)
    except MissingReason:
        return StepResult(messages.MISSING_REASON_REPROMPT, session)
    if session.amount is None:
        raise InvalidAmount("Session reached the reason step without an amount.")
    record = build_record(session.flow, session.amount, reason, session.account)
    return StepResult(messages.format_saved_record(record), None, record)
