import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.db.database import Base
from .profile import Profile
from .vehicle import Vehicle


class Reminder(Base):
    __tablename__ = "reminders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default_factory=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), index=True, kw_only=True)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("vehicles.id"), index=True, kw_only=True)
    service_type: Mapped[str] = mapped_column(String(100), kw_only=True)
    # Target service date
    reminder_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, kw_only=True)

    mileage: Mapped[int | None] = mapped_column(Integer, default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    # Notification tracking
    notification_sent: Mapped[bool] = mapped_column(default=False, index=True)
    last_notification_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    notification_template_type: Mapped[str | None] = mapped_column(String(20), default=None)

    # Loaded explicitly per query with selectinload
    user: Mapped[Profile] = relationship(init=False, lazy="raise")
    vehicle: Mapped[Vehicle] = relationship(init=False, lazy="raise")
