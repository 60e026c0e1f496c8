from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.subscriber import Subscriber


async def upsert_subscriber(session: AsyncSession, chat_id: int) -> Subscriber:
    """Register a chat, or refresh ``updated_at`` when it is already known."""
    existing = await get_subscriber_by_chat_id(session, chat_id)
    if existing:
        existing.updated_at = utcnow()
        await session.commit()
        await session.refresh(existing)
        return existing

    subscriber = Subscriber(chat_id=chat_id)
    session.add(subscriber)
    try:
        await session.commit()
    except IntegrityError:
        # Another worker registered the same chat between our read and write.
        await session.rollback()
        existing = await get_subscriber_by_chat_id(session, chat_id)
        if existing is None:
            raise
        return existing
    await session.refresh(subscriber)
    return subscriber


async def list_subscribers(session: AsyncSession) -> Sequence[Subscriber]:
    result = await session.execute(select(Subscriber).order_by(Subscriber.created_at))
    return result.scalars().all()


async def get_subscriber_by_chat_id(session: AsyncSession, chat_id: int) -> Optional[Subscriber]:
    result = await session.execute(select(Subscriber).where(Subscriber.chat_id == chat_id))
    return result.scalars().first()
