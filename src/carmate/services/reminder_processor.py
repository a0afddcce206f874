"""Reminder batch processing: pick due reminders, text the customers, record the send."""

import logging
from datetime import UTC, datetime, timedelta

from ..core.utils.datetime import parse_iso_datetime, whole_days_between
from ..models.reminder import Reminder
from ..schemas.reminder import (
    ProcessRemindersResponse,
    ReminderResultEntry,
    ReminderStatus,
    TemplateType,
)
from .notification_service import NotificationService
from .reminder_service import ReminderService

MESSAGE_PREVIEW_LENGTH = 50


class MissingPhoneNumberError(ValueError):
    """Raised when a reminder's customer has no phone number on file."""


def classify_reminder(days_until_due: int, lookahead_days: int = 3) -> TemplateType | None:
    """Template for a reminder due in ``days_until_due`` days, or None when it is not due yet."""
    if days_until_due < 0:
        return TemplateType.FOLLOW_UP
    if days_until_due <= lookahead_days:
        return TemplateType.UPCOMING
    return None


class ReminderProcessor:
    """
    Batch job sending service reminders by SMS.

    Reminders are handled one at a time in ascending due-date order. A failure
    on one reminder is recorded in the results and never stops the batch.
    """

    def __init__(
        self,
        reminder_service: ReminderService,
        notification_service: NotificationService,
        lookahead_days: int = 3,
    ) -> None:
        self._reminders = reminder_service
        self._notifications = notification_service
        self.lookahead_days = lookahead_days
        self._logger = logging.getLogger(self.__class__.__name__)

    async def process_reminders(
        self,
        reference_date: datetime | None = None,
        dry_run: bool = False,
    ) -> ProcessRemindersResponse:
        """
        Send upcoming and follow-up reminders relative to ``reference_date``.

        Args:
            reference_date: The "today" used for selection and classification. Defaults to now.
            dry_run: Log the messages instead of sending them and leave reminders untouched.

        Returns:
            ProcessRemindersResponse with one entry per handled reminder.
        """
        reference_date = parse_iso_datetime(reference_date) or datetime.now(UTC)
        due_before = reference_date + timedelta(days=self.lookahead_days)
        self._logger.info(
            "Processing reminders between %s and %s (dry_run=%s)",
            reference_date.isoformat(),
            due_before.isoformat(),
            dry_run,
        )

        reminders = await self._reminders.get_due_reminders(due_before)

        results: list[ReminderResultEntry] = []
        for reminder in reminders:
            try:
                entry = await self._process_one(reminder, reference_date, dry_run)
            except Exception as e:
                self._logger.exception("Failed to process reminder %s", reminder.id)
                entry = ReminderResultEntry(id=reminder.id, status=ReminderStatus.FAILED, error=str(e))
            if entry is not None:
                results.append(entry)

        self._logger.info("Processed %d of %d selected reminders", len(results), len(reminders))
        return ProcessRemindersResponse(reminders_processed=len(results), results=results)

    async def _process_one(
        self,
        reminder: Reminder,
        reference_date: datetime,
        dry_run: bool,
    ) -> ReminderResultEntry | None:
        days_until_due = whole_days_between(reference_date, reminder.reminder_date)
        template_type = classify_reminder(days_until_due, self.lookahead_days)
        if template_type is None:
            self._logger.debug("Reminder %s is due in %d days, skipping", reminder.id, days_until_due)
            return None

        days_late = -days_until_due if template_type == TemplateType.FOLLOW_UP else 0
        message = self._notifications.render(reminder, template_type, days_late=days_late)

        phone = reminder.user.phone_number if reminder.user is not None else None
        if not phone:
            raise MissingPhoneNumberError("Customer phone number not found")

        if dry_run:
            self._logger.info("[TEST] Would send to %s:\n%s", phone, message)
        else:
            await self._notifications.send_sms(phone, message)
            await self._reminders.mark_notification_sent(reminder, template_type)

        return ReminderResultEntry(
            id=reminder.id,
            status=ReminderStatus.PROCESSED,
            template_type=template_type,
            phone=phone,
            message_preview=message[:MESSAGE_PREVIEW_LENGTH] + "...",
        )
