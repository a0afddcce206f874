"""
Reminder processing API endpoint.

Runs the reminder batch synchronously, optionally as a dry run against an
injected reference date.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import BadRequestException, CustomException
from ...core.utils.datetime import parse_iso_datetime
from ...schemas.reminder import ProcessRemindersRequest, ProcessRemindersResponse
from ...services.notification_service import NotificationService
from ...services.reminder_processor import ReminderProcessor
from ...services.reminder_service import ReminderService
from ..dependencies import get_notification_service

router = APIRouter(tags=["reminders"])

logger = logging.getLogger(__name__)


async def get_reminder_processor(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
) -> ReminderProcessor:
    """Dependency for ReminderProcessor."""
    return ReminderProcessor(
        reminder_service=ReminderService(db),
        notification_service=notification_service,
        lookahead_days=settings.REMINDER_LOOKAHEAD_DAYS,
    )


@router.post(
    "/process-reminders",
    response_model=ProcessRemindersResponse,
    response_model_exclude_none=True,
)
async def process_reminders(
    processor: Annotated[ReminderProcessor, Depends(get_reminder_processor)],
    payload: ProcessRemindersRequest | None = None,
) -> ProcessRemindersResponse:
    """
    Process due and overdue reminders now.

    ``testMode`` logs the messages instead of sending them; ``testDate``
    replaces the current date for selection and classification.
    """
    payload = payload or ProcessRemindersRequest()

    reference_date = None
    if payload.test_date:
        reference_date = parse_iso_datetime(payload.test_date)
        if reference_date is None:
            raise BadRequestException(f"Invalid testDate: {payload.test_date}")

    try:
        return await processor.process_reminders(reference_date=reference_date, dry_run=payload.test_mode)
    except Exception as e:
        logger.exception("Error in process-reminders endpoint")
        raise CustomException(status_code=500, detail=str(e)) from e
