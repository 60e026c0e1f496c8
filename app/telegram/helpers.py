from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..models.transaction import Account
from ..services.errors import InvalidAccountToken, InvalidAmount

THOUSAND = 1_000
MILLION = 1_000_000

ACCOUNT_SYNONYMS: dict[Account, frozenset[str]] = {
    Account.CASH: frozenset({"tm", "tienmat", "cash", "tiền mặt"}),
    Account.BANK: frozenset({"tk", "taikhoan", "bank", "tài khoản"}),
}

ACCOUNT_LABELS: dict[Account, str] = {
    Account.CASH: "Tiền mặt",
    Account.BANK: "Tài khoản",
}

_LEADING_INTEGER_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class InlineEntry:
    """Fields extracted from a single-line command, before validation."""

    amount: Optional[int]
    reason: str
    account: Optional[Account] = None


def _leading_integer(text: str) -> Optional[int]:
    match = _LEADING_INTEGER_RE.match(text)
    return int(match.group(1)) if match else None


def parse_money(text: str) -> Optional[int]:
    """Turn ``100k`` / ``2tr`` / ``5000`` into an integer amount.

    The unit is detected by containment anywhere in the token, not as a
    suffix, so ``"5tra"`` reads as five million. Returns ``None`` when the
    token does not start with an integer.
    """
    lowered = text.lower()
    value = _leading_integer(lowered)
    if value is None:
        return None
    if "k" in lowered:
        return value * THOUSAND
    if "tr" in lowered:
        return value * MILLION
    return value


def require_amount(text: str) -> int:
    amount = parse_money(text)
    if amount is None or amount <= 0:
        raise InvalidAmount(f"Invalid amount '{text}'.")
    return amount


def parse_account_token(text: str) -> Optional[Account]:
    token = text.strip().lower()
    for account, synonyms in ACCOUNT_SYNONYMS.items():
        if token in synonyms:
            return account
    return None


def require_account(text: str) -> Account:
    account = parse_account_token(text)
    if account is None:
        raise InvalidAccountToken(f"Unknown account '{text}'.")
    return account


def parse_inline_income_expense_input(raw: str) -> InlineEntry:
    tokens = raw.split()
    amount = parse_money(tokens[0]) if tokens else None
    rest = tokens[1:]
    account = Account.CASH
    if rest:
        matched = parse_account_token(rest[0])
        if matched is not None:
            account = matched
            rest = rest[1:]
    return InlineEntry(amount=amount, reason=" ".join(rest), account=account)


def parse_inline_transfer_input(raw: str) -> InlineEntry:
    tokens = raw.split()
    amount = parse_money(tokens[0]) if tokens else None
    return InlineEntry(amount=amount, reason=" ".join(tokens[1:]))


def format_money(amount: int) -> str:
    return f"{amount:,}đ"


def account_label(account: Optional[Account | str]) -> str:
    return ACCOUNT_LABELS[Account.BANK] if account == Account.BANK else ACCOUNT_LABELS[Account.CASH]
