"""Transport-independent message handling.

``ChatHandler`` only needs a ``Messenger`` that can send text to a chat and a
ledger with the ``LedgerStore`` interface, so it can be driven by Telegram
updates, tests, or any other chat transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Protocol

from ..schemas.transaction import TransactionCreate
from ..services.errors import DeliveryFailure, InvalidAmount, MissingReason, StorageFailure
from . import messages
from .commands import Action, Command, InputKind, ParsedInput, parse_input
from .conversation import Flow, advance, build_inline_record
from .messages import Keyboard
from .sessions import SessionStore

if TYPE_CHECKING:
    from ..services.ledger import LedgerStore

logger = logging.getLogger(__name__)


class Messenger(Protocol):
    async def send(self, chat_id: int, text: str, *, keyboard: Optional[Keyboard] = None) -> None:
        """Deliver ``text``; raise ``DeliveryFailure`` when the transport fails."""


class ChatHandler:
    def __init__(
        self,
        ledger: "LedgerStore",
        messenger: Messenger,
        sessions: Optional[SessionStore] = None,
    ) -> None:
        self.ledger = ledger
        self.messenger = messenger
        self.sessions = sessions or SessionStore()

    async def handle_message(self, chat_id: int, text: Optional[str]) -> None:
        """Entry point for one inbound message; never raises."""
        if text is None:
            return
        parsed = parse_input(text)
        async with self.sessions.locked(chat_id):
            try:
                await self._dispatch(chat_id, parsed)
            except Exception:
                logger.exception("Unhandled error while processing message from chat %s", chat_id)
                self.sessions.clear(chat_id)
                await self._send(chat_id, messages.CONVERSATION_ERROR, keyboard=Keyboard.MAIN)

    async def _dispatch(self, chat_id: int, parsed: ParsedInput) -> None:
        if parsed.is_cancel:
            self.sessions.clear(chat_id)
            await self._send(chat_id, messages.CANCELLED, keyboard=Keyboard.MAIN)
            return

        await self._register(chat_id)

        session = self.sessions.get(chat_id)
        if session is not None:
            if parsed.kind is InputKind.COMMAND:
                # Pending input wins: other commands are dropped until the flow ends or is cancelled.
                return
            if parsed.kind is InputKind.BUTTON:
                await self._send(chat_id, messages.PENDING_FLOW_NOTICE, keyboard=Keyboard.CONVERSATION)
                return
            await self._continue_flow(chat_id, parsed.text)
            return

        if parsed.command is None:
            return
        await self._run_command(chat_id, parsed.command, parsed.args)

    async def _run_command(self, chat_id: int, command: Command, args: str) -> None:
        if command.action is Action.FLOW and command.flow is not None:
            if args:
                await self._record_inline(chat_id, command, args)
            else:
                await self._start_flow(chat_id, command.flow)
        elif command.action is Action.REPORT:
            await self._send_overview(chat_id)
        elif command.action is Action.HELP:
            await self._send(chat_id, messages.HELP_TEXT, keyboard=Keyboard.MAIN)
        elif command.action is Action.MENU:
            self.sessions.clear(chat_id)
            await self._send(chat_id, messages.MENU_RESET_PROMPT, keyboard=Keyboard.MAIN)

    async def _start_flow(self, chat_id: int, flow: Flow) -> None:
        self.sessions.start(chat_id, flow)
        await self._send(chat_id, messages.AMOUNT_PROMPTS[flow.value], keyboard=Keyboard.CONVERSATION)

    async def _continue_flow(self, chat_id: int, text: str) -> None:
        session = self.sessions.get(chat_id)
        if session is None:
            return
        result = advance(session, text)
        if not result.completed:
            self.sessions.save(chat_id, result.session)
            await self._send(chat_id, result.reply, keyboard=Keyboard.CONVERSATION)
            return

        self.sessions.clear(chat_id)
        if await self._save(chat_id, result.record):
            await self._send(chat_id, result.reply)
            await self._send(chat_id, messages.MENU_PROMPT, keyboard=Keyboard.MAIN)

    async def _record_inline(self, chat_id: int, command: Command, args: str) -> None:
        try:
            record = build_inline_record(command.flow, args)
        except InvalidAmount:
            await self._send(chat_id, messages.INLINE_INVALID_AMOUNT[command.name])
            return
        except MissingReason:
            await self._send(chat_id, messages.INLINE_MISSING_REASON[command.name])
            return
        if await self._save(chat_id, record):
            await self._send(chat_id, messages.format_saved_record(record))

    async def _save(self, chat_id: int, record: TransactionCreate) -> bool:
        try:
            await self.ledger.append(record)
        except StorageFailure:
            await self._send(chat_id, messages.SAVE_FAILED, keyboard=Keyboard.MAIN)
            return False
        logger.info("Recorded %s of %s for chat %s", record.type.value, record.amount, chat_id)
        return True

    async def _send_overview(self, chat_id: int) -> None:
        try:
            report = await self.ledger.aggregate()
        except StorageFailure:
            await self._send(chat_id, messages.REPORT_FAILED)
            return
        await self._send(chat_id, messages.format_overview(report), keyboard=Keyboard.MAIN)

    async def _register(self, chat_id: int) -> None:
        try:
            await self.ledger.upsert_subscriber(chat_id)
        except StorageFailure:
            logger.warning("Could not register chat %s as subscriber; continuing", chat_id)

    async def _send(self, chat_id: int, text: str, *, keyboard: Optional[Keyboard] = None) -> None:
        try:
            await self.messenger.send(chat_id, text, keyboard=keyboard)
        except DeliveryFailure:
            logger.warning("Could not deliver message to chat %s", chat_id)
