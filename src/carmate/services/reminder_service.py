"""Reminder service - database access for service reminders."""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from ..models.reminder import Reminder
from ..schemas.reminder import TemplateType
from .base import BaseService


class ReminderService(BaseService):
    """Selects reminders awaiting notification and records sent notifications."""

    async def get_due_reminders(self, due_before: datetime) -> list[Reminder]:
        """
        Reminders not yet notified whose service date is on or before ``due_before``.

        The returned objects are detached from the session, so a failed update on
        one reminder (and the rollback that follows) leaves the others readable.

        Args:
            due_before: Inclusive upper bound on the reminder date.

        Returns:
            Reminders ordered by ascending reminder date, with customer and vehicle loaded.
        """
        query = (
            select(Reminder)
            .options(selectinload(Reminder.user), selectinload(Reminder.vehicle))
            .where(
                Reminder.notification_sent.is_(False),
                Reminder.reminder_date <= due_before,
            )
            .order_by(Reminder.reminder_date.asc())
        )
        result = await self.db.execute(query)
        reminders = list(result.scalars().all())
        self.db.expunge_all()

        self.logger.info("Found %d reminders due before %s", len(reminders), due_before.isoformat())
        return reminders

    async def mark_notification_sent(
        self,
        reminder: Reminder,
        template_type: TemplateType,
        sent_at: datetime | None = None,
    ) -> None:
        """
        Record that a reminder notification went out.

        Args:
            reminder: The Reminder to update.
            template_type: Template used for the message.
            sent_at: Send time, defaults to now.

        Raises:
            SQLAlchemyError: If the update fails; the transaction is rolled back first.
        """
        sent_at = sent_at or datetime.now(UTC)
        values = {
            "notification_sent": True,
            "last_notification_sent_at": sent_at,
            "notification_template_type": template_type.value,
        }
        try:
            await self.db.execute(update(Reminder).where(Reminder.id == reminder.id).values(**values))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        for attribute, value in values.items():
            setattr(reminder, attribute, value)
        self.logger.info("Marked notification as sent for reminder %s", reminder.id)
