from __future__ import annotations

import tempfile
from pathlib import Path
from unittest import IsolatedAsyncioTestCase

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.models import Base, Transaction
from app.models.transaction import Account, TransactionType, TransferDirection
from app.schemas.transaction import TransactionCreate
from app.services.errors import InvalidRecord, StorageFailure
from app.services.ledger import LedgerStore


class LedgerStoreTests(IsolatedAsyncioTestCase):
    """Runs the storage boundary against a throwaway SQLite database."""

    async def asyncSetUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tmpdir.name) / "ledger.db"
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )
        self.ledger = LedgerStore(self.session_factory)

    async def asyncTearDown(self) -> None:
        await self.engine.dispose()
        self._tmpdir.cleanup()

    async def test_append_persists_record_with_defaults(self) -> None:
        stored = await self.ledger.append(
            TransactionCreate(type=TransactionType.EXPENSE, amount=45_000, reason="cafe")
        )
        self.assertIsNotNone(stored.id)
        self.assertIs(stored.account, Account.CASH)
        self.assertIsNone(stored.direction)
        self.assertIsNotNone(stored.occurred_at)

        transfer = await self.ledger.append(
            TransactionCreate(
                type=TransactionType.TRANSFER,
                amount=200_000,
                direction=TransferDirection.CASH_TO_BANK,
            )
        )
        self.assertEqual(transfer.reason, "Nạp tiền")
        self.assertIsNone(transfer.account)

    async def test_append_rejects_non_positive_amount(self) -> None:
        with self.assertRaises(InvalidRecord):
            await self.ledger.append(
                TransactionCreate(type=TransactionType.INCOME, amount=0, reason="zero")
            )
        report = await self.ledger.aggregate()
        self.assertEqual(report.transaction_count, 0)

    async def test_aggregate_empty_ledger(self) -> None:
        report = await self.ledger.aggregate()
        self.assertEqual(report.income, 0)
        self.assertEqual(report.total_balance, 0)
        self.assertEqual(report.top_expenses, [])

    async def test_aggregate_combines_accounts_and_transfers(self) -> None:
        records = [
            TransactionCreate(type="INCOME", amount=100_000, reason="lương", account=Account.BANK),
            TransactionCreate(type="expense", amount=40_000, reason="ăn", account=Account.BANK),
            TransactionCreate(type="expense", amount=15_000, reason="gửi xe"),
            TransactionCreate(type="expense", amount=25_000, reason="sách"),
            TransactionCreate(type="expense", amount=5_000, reason="trà đá"),
            TransactionCreate(
                type="transfer", amount=30_000, direction=TransferDirection.BANK_TO_CASH
            ),
        ]
        for record in records:
            await self.ledger.append(record)

        report = await self.ledger.aggregate()

        self.assertEqual(report.income, 100_000)
        self.assertEqual(report.expense, 85_000)
        self.assertEqual(report.bank_balance, 100_000 - 40_000 - 30_000)
        self.assertEqual(report.cash_balance, -45_000 + 30_000)
        self.assertEqual(report.total_balance, report.income - report.expense)
        self.assertEqual(report.transaction_count, 6)
        self.assertEqual(
            [(item.amount, item.reason) for item in report.top_expenses],
            [(40_000, "ăn"), (25_000, "sách"), (15_000, "gửi xe")],
        )
        self.assertIs(report.top_expenses[0].account, Account.BANK)

    async def test_aggregate_treats_missing_account_as_cash(self) -> None:
        async with self.session_factory() as session:
            session.add_all(
                [
                    Transaction(type=TransactionType.INCOME, amount=80_000, reason="cũ", account=None),
                    Transaction(type=TransactionType.EXPENSE, amount=30_000, reason="cũ", account=None),
                ]
            )
            await session.commit()

        report = await self.ledger.aggregate()

        self.assertEqual(report.cash_balance, 50_000)
        self.assertEqual(report.bank_balance, 0)
        self.assertEqual(report.top_expenses[0].account, Account.CASH)

    async def test_append_keeps_long_reason(self) -> None:
        reason = "z" * 1_000
        stored = await self.ledger.append(
            TransactionCreate(type=TransactionType.EXPENSE, amount=50_000, reason=reason)
        )
        self.assertEqual(stored.reason, reason)

    async def test_upsert_subscriber_is_idempotent(self) -> None:
        first = await self.ledger.upsert_subscriber(1001)
        second = await self.ledger.upsert_subscriber(1001)
        await self.ledger.upsert_subscriber(2002)

        self.assertEqual(first.id, second.id)
        subscribers = await self.ledger.list_subscribers()
        self.assertEqual(sorted(sub.chat_id for sub in subscribers), [1001, 2002])

    async def test_database_errors_become_storage_failures(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        with self.assertRaises(StorageFailure):
            await self.ledger.append(
                TransactionCreate(type=TransactionType.INCOME, amount=1_000, reason="x")
            )
        with self.assertRaises(StorageFailure):
            await self.ledger.aggregate()
        with self.assertRaises(StorageFailure):
            await self.ledger.upsert_subscriber(1)
        with self.assertRaises(StorageFailure):
            await self.ledger.list_subscribers()
