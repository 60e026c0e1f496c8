"""Scheduled jobs: the daily report broadcast and the keep-alive ping.

Each job runs inside its own error boundary and yields a ``JobResult``; the
latest result per job is kept in ``bot_data["job_results"]``. A failing job
never reaches the message handlers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx
from telegram.ext import Application, ContextTypes

from ..config import Settings
from .messages import daily_report_title, format_summary

if TYPE_CHECKING:
    from ..services.ledger import LedgerStore
    from .handlers import Messenger

logger = logging.getLogger(__name__)

DAILY_REPORT_JOB = "daily_report"
KEEP_ALIVE_JOB = "keep_alive"


@dataclass(frozen=True)
class JobResult:
    name: str
    ok: bool
    detail: str = ""
    delivered: int = 0
    failed: int = 0


def is_in_sleep_window(hour: int, start: int, end: int) -> bool:
    """Whether ``hour`` falls in ``[start, end)``, wrapping past midnight when start > end."""
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end


async def broadcast_daily_report(
    ledger: "LedgerStore",
    messenger: "Messenger",
    title: str,
) -> JobResult:
    subscribers = await ledger.list_subscribers()
    if not subscribers:
        return JobResult(DAILY_REPORT_JOB, ok=True, detail="no subscribers")

    report = await ledger.aggregate()
    text = format_summary(report, title)
    outcomes = await asyncio.gather(
        *(messenger.send(subscriber.chat_id, text) for subscriber in subscribers),
        return_exceptions=True,
    )
    failed = 0
    for subscriber, outcome in zip(subscribers, outcomes):
        if isinstance(outcome, Exception):
            failed += 1
            logger.warning("Daily report not delivered to chat %s: %s", subscriber.chat_id, outcome)
    delivered = len(subscribers) - failed
    return JobResult(
        DAILY_REPORT_JOB,
        ok=failed == 0,
        detail=f"delivered to {delivered} of {len(subscribers)} subscribers",
        delivered=delivered,
        failed=failed,
    )


async def ping_keep_alive(
    client: httpx.AsyncClient,
    url: str,
    *,
    now: datetime,
    sleep_start: int,
    sleep_end: int,
) -> JobResult:
    if is_in_sleep_window(now.hour, sleep_start, sleep_end):
        logger.info("Inside the sleep window; skipping keep-alive ping.")
        return JobResult(KEEP_ALIVE_JOB, ok=True, detail="skipped: sleep window")
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("Keep-alive ping to %s failed: %s", url, exc)
        return JobResult(KEEP_ALIVE_JOB, ok=False, detail=str(exc))
    logger.info("Keep-alive ping: %s", response.status_code)
    return JobResult(KEEP_ALIVE_JOB, ok=response.is_success, detail=f"status {response.status_code}")


async def run_isolated(name: str, job: Callable[[], Awaitable[JobResult]]) -> JobResult:
    try:
        return await job()
    except Exception as exc:
        logger.exception("Scheduled job %s failed", name)
        return JobResult(name, ok=False, detail=f"{type(exc).__name__}: {exc}")


def _remember(bot_data: dict[str, Any], result: JobResult) -> None:
    bot_data.setdefault("job_results", {})[result.name] = result


async def daily_report_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    bot_data = context.application.bot_data
    settings: Settings = bot_data["settings"]
    result = await run_isolated(
        DAILY_REPORT_JOB,
        lambda: broadcast_daily_report(
            bot_data["ledger"],
            bot_data["messenger"],
            daily_report_title(settings.daily_reminder_time),
        ),
    )
    _remember(bot_data, result)


async def keep_alive_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    bot_data = context.application.bot_data
    settings: Settings = bot_data["settings"]
    result = await run_isolated(
        KEEP_ALIVE_JOB,
        lambda: ping_keep_alive(
            bot_data["http_client"],
            settings.keep_alive_url or "",
            now=datetime.now(settings.timezone),
            sleep_start=settings.keep_alive_sleep_start,
            sleep_end=settings.keep_alive_sleep_end,
        ),
    )
    _remember(bot_data, result)


def schedule_jobs(application: Application, settings: Settings) -> list[str]:
    """Register the periodic jobs; returns the names of the scheduled jobs."""
    job_queue = application.job_queue
    if job_queue is None:
        logger.warning("JobQueue unavailable; install python-telegram-bot[job-queue] to enable reports.")
        return []

    job_queue.run_daily(daily_report_job, time=settings.report_time, name=DAILY_REPORT_JOB)
    logger.info(
        "Daily report scheduled at %s (%s).",
        settings.daily_reminder_time,
        settings.reminder_timezone,
    )
    scheduled = [DAILY_REPORT_JOB]

    if settings.is_webhook_mode:
        logger.info("Webhook mode active; keep-alive ping disabled.")
    elif not settings.keep_alive_url:
        logger.info("BACKEND_BASE_URL not configured; skipping keep-alive.")
    else:
        interval = timedelta(minutes=settings.keep_alive_interval_minutes)
        job_queue.run_repeating(keep_alive_job, interval=interval, first=interval, name=KEEP_ALIVE_JOB)
        logger.info(
            "Keep-alive enabled: ping every %s minutes, paused %s:00-%s:00 (%s).",
            settings.keep_alive_interval_minutes,
            settings.keep_alive_sleep_start,
            settings.keep_alive_sleep_end,
            settings.reminder_timezone,
        )
        scheduled.append(KEEP_ALIVE_JOB)
    return scheduled
