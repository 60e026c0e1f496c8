from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Optional

import httpx
from telegram import Bot, BotCommand, ReplyKeyboardMarkup, Update
from telegram.error import Conflict, TelegramError
from telegram.ext import AIORateLimiter, Application, ContextTypes, MessageHandler, filters

from ..config import Settings, get_settings
from ..services.errors import DeliveryFailure
from ..services.ledger import LedgerStore
from .handlers import ChatHandler
from .jobs import schedule_jobs
from .messages import BOT_COMMANDS, KEYBOARD_LAYOUTS, Keyboard
from .sessions import SessionStore

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message"]
WEBHOOK_ROUTE = "/api/telegram/webhook"


def build_reply_markup(keyboard: Keyboard) -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(KEYBOARD_LAYOUTS[keyboard], resize_keyboard=True)


class TelegramMessenger:
    """Sends chat messages through the Bot API."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send(self, chat_id: int, text: str, *, keyboard: Optional[Keyboard] = None) -> None:
        reply_markup = build_reply_markup(keyboard) if keyboard else None
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup)
        except TelegramError as exc:
            raise DeliveryFailure(f"Could not send message to chat {chat_id}: {exc}") from exc


_application: Application | None = None
_http_client: httpx.AsyncClient | None = None
_lock = asyncio.Lock()


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    chat = update.effective_chat
    if message is None or chat is None:
        return
    chat_handler: ChatHandler = context.application.bot_data["chat_handler"]
    await chat_handler.handle_message(chat.id, message.text)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Error while processing update %s", update, exc_info=context.error)


def _polling_error(error: TelegramError) -> None:
    if isinstance(error, Conflict):
        logger.critical(
            "Another bot instance is polling with this token; stop the other instance and restart."
        )
        return
    logger.error("Polling error: %s", error)


def _create_application(
    settings: Settings,
    ledger: LedgerStore,
    http_client: httpx.AsyncClient,
) -> Application:
    application = (
        Application.builder()
        .token(settings.telegram_bot_token or "")
        .rate_limiter(AIORateLimiter())
        .concurrent_updates(True)
        .build()
    )
    messenger = TelegramMessenger(application.bot)
    application.bot_data["settings"] = settings
    application.bot_data["ledger"] = ledger
    application.bot_data["messenger"] = messenger
    application.bot_data["http_client"] = http_client
    application.bot_data["chat_handler"] = ChatHandler(ledger, messenger, SessionStore())
    application.add_handler(MessageHandler(filters.TEXT, on_text))
    application.add_error_handler(on_error)
    return application


def webhook_url(settings: Settings) -> str:
    return f"{settings.public_base_url}{WEBHOOK_ROUTE}/{settings.webhook_secret}"


async def _configure_delivery(application: Application, settings: Settings) -> None:
    if settings.is_webhook_mode:
        await application.bot.set_webhook(
            url=webhook_url(settings),
            drop_pending_updates=False,
            allowed_updates=ALLOWED_UPDATES,
        )
        logger.info("Bot running in webhook mode at %s%s/...", settings.public_base_url, WEBHOOK_ROUTE)
        return
    await application.bot.delete_webhook(drop_pending_updates=False)
    logger.info("Bot running in polling mode.")


async def init_bot(ledger: LedgerStore) -> None:
    """Initialise the Telegram bot, pick the delivery mode and schedule jobs."""
    settings = get_settings()
    if not settings.telegram_bot_token:
        logger.info("TELEGRAM_BOT_TOKEN not configured; skipping bot initialisation.")
        return

    async with _lock:
        global _application, _http_client
        if _application is not None:
            return

        http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout=30.0, connect=10.0))
        application = _create_application(settings, ledger, http_client)

        try:
            await application.initialize()
            try:
                await application.bot.set_my_commands(
                    [BotCommand(command, description) for command, description in BOT_COMMANDS]
                )
            except TelegramError:
                logger.exception("Failed to set Telegram command list.")
            await _configure_delivery(application, settings)
            schedule_jobs(application, settings)
            await application.start()
            if not settings.is_webhook_mode and application.updater is not None:
                await application.updater.start_polling(
                    allowed_updates=ALLOWED_UPDATES,
                    error_callback=_polling_error,
                )
        except Exception:
            logger.exception("Failed to initialise the Telegram bot; bot disabled for this run.")
            with contextlib.suppress(Exception):
                await application.stop()
            with contextlib.suppress(Exception):
                await application.shutdown()
            await http_client.aclose()
            return

        _application = application
        _http_client = http_client
        logger.info("Money Buddy bot is running.")


async def handle_update(payload: dict[str, Any]) -> None:
    """Process a Telegram update forwarded by FastAPI."""
    async with _lock:
        if _application is None:
            raise RuntimeError("Telegram bot is not initialised.")
        application = _application
    update = Update.de_json(payload, application.bot)
    await application.process_update(update)


async def shutdown_bot() -> None:
    """Stop polling, the job queue and the HTTP client."""
    async with _lock:
        global _application, _http_client
        if _application is None:
            return
        if _application.updater is not None and _application.updater.running:
            await _application.updater.stop()
        await _application.stop()
        await _application.shutdown()
        if _http_client:
            await _http_client.aclose()
        _application = None
        _http_client = None
