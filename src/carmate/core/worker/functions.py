"""
Background worker functions for the ARQ task queue.

These functions are thin orchestrators that delegate to service classes
for business logic. This keeps worker functions simple and testable.
"""

import asyncio
import logging
from typing import Any

import structlog
import uvloop
from arq.worker import Worker

from ..config import settings
from ..db.database import local_session
from ..utils.datetime import parse_iso_datetime
from ...services.notification_service import NotificationService, build_sms_provider
from ...services.reminder_processor import ReminderProcessor
from ...services.reminder_service import ReminderService

asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())

logger = logging.getLogger(__name__)


# -------- background tasks --------
async def process_reminders_job(
    ctx: dict[str, Any],
    reference_date: str | None = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """
    Run the reminder batch.

    Triggered daily by the cron schedule, or enqueued on demand with an
    explicit reference date and dry-run flag.

    Args:
        ctx: ARQ worker context, holding the notification service built at startup.
        reference_date: Optional ISO 8601 "today" for the run. Defaults to now.
        dry_run: Log messages without sending them or updating reminders.

    Returns:
        The batch summary as a JSON-serialisable dict.
    """
    async with local_session() as session:
        processor = ReminderProcessor(
            reminder_service=ReminderService(session),
            notification_service=ctx["notification_service"],
            lookahead_days=settings.REMINDER_LOOKAHEAD_DAYS,
        )
        summary = await processor.process_reminders(
            reference_date=parse_iso_datetime(reference_date),
            dry_run=dry_run,
        )

    logger.info("Reminder job completed: %d reminders processed", summary.reminders_processed)
    return summary.model_dump(mode="json", by_alias=True, exclude_none=True)


# -------- base functions --------
async def startup(ctx: Worker) -> None:
    """Called when the worker starts up."""
    ctx["sms_provider"] = build_sms_provider(settings)
    ctx["notification_service"] = NotificationService(
        provider=ctx["sms_provider"],
        brand_name=settings.SMS_BRAND_NAME,
        timezone=settings.REMINDER_TIMEZONE,
    )
    logger.info("Worker started")


async def shutdown(ctx: Worker) -> None:
    """Called when the worker shuts down."""
    provider = ctx.get("sms_provider")
    if provider is not None:
        await provider.close()
    logger.info("Worker shutdown")


async def on_job_start(ctx: dict[str, Any]) -> None:
    """Called at the start of each job."""
    structlog.contextvars.bind_contextvars(job_id=ctx["job_id"])
    logger.info("Job started")


async def on_job_end(ctx: dict[str, Any]) -> None:
    """Called at the end of each job."""
    logger.info("Job completed")
    structlog.contextvars.clear_contextvars()
