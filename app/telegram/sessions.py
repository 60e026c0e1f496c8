from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from .conversation import ConversationSession, Flow, start_session

ChatId = int


class SessionStore:
    """Conversation sessions keyed by chat, with one lock per chat.

    Callers hold ``locked(chat_id)`` across read, transition and write of a
    session. Locks are weakly referenced and disappear once no handler is
    waiting on them; chats never share a lock.
    """

    def __init__(self) -> None:
        self._sessions: dict[ChatId, ConversationSession] = {}
        self._locks: weakref.WeakValueDictionary[ChatId, asyncio.Lock] = weakref.WeakValueDictionary()

    @asynccontextmanager
    async def locked(self, chat_id: ChatId) -> AsyncIterator[None]:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        async with lock:
            yield

    def get(self, chat_id: ChatId) -> Optional[ConversationSession]:
        return self._sessions.get(chat_id)

    def start(self, chat_id: ChatId, flow: Flow) -> ConversationSession:
        session = start_session(flow)
        self._sessions[chat_id] = session
        return session

    def save(self, chat_id: ChatId, session: ConversationSession) -> None:
        self._sessions[chat_id] = session

    def clear(self, chat_id: ChatId) -> None:
        self._sessions.pop(chat_id, None)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
