from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.subscriber import Subscriber
from ..models.transaction import Transaction
from ..schemas.report import ReportSnapshot
from ..schemas.transaction import TransactionCreate
from .errors import StorageFailure
from .reports import build_report
from .subscribers import list_subscribers, upsert_subscriber
from .transactions import append_transaction, ensure_valid_record

logger = logging.getLogger(__name__)


class LedgerStore:
    """Storage boundary used by the bot: append-only records plus subscribers.

    Each call runs in its own session. Database errors surface as
    ``StorageFailure``; there is deliberately no update or delete.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, record: TransactionCreate) -> Transaction:
        ensure_valid_record(record)
        try:
            async with self._session_factory() as session:
                return await append_transaction(session, record)
        except SQLAlchemyError as exc:
            logger.exception("Failed to append %s record", record.type.value)
            raise StorageFailure("Could not store the transaction") from exc

    async def aggregate(self) -> ReportSnapshot:
        try:
            async with self._session_factory() as session:
                return await build_report(session)
        except SQLAlchemyError as exc:
            logger.exception("Failed to aggregate the ledger")
            raise StorageFailure("Could not build the report") from exc

    async def upsert_subscriber(self, chat_id: int) -> Subscriber:
        try:
            async with self._session_factory() as session:
                return await upsert_subscriber(session, chat_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to register subscriber %s", chat_id)
            raise StorageFailure("Could not register the chat") from exc

    async def list_subscribers(self) -> Sequence[Subscriber]:
        try:
            async with self._session_factory() as session:
                return await list_subscribers(session)
        except SQLAlchemyError as exc:
            logger.exception("Failed to list subscribers")
            raise StorageFailure("Could not list subscribers") from exc
