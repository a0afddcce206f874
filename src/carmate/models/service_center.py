import uuid

from sqlalchemy import Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.db.database import Base


class ServiceCenter(Base):
    """Read-only mapping of the registered service centers view."""

    __tablename__ = "service_centers_view"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    service_center_name: Mapped[str] = mapped_column(String(200))
    service_center_address: Mapped[str | None] = mapped_column(Text, default=None)

    service_center_lat: Mapped[float | None] = mapped_column(Float, default=None)
    service_center_lng: Mapped[float | None] = mapped_column(Float, default=None)

    # Google place id, when the center has been linked to its Places listing
    google_place_id: Mapped[str | None] = mapped_column(String(255), default=None, index=True)
    average_rating: Mapped[float | None] = mapped_column(Float, default=None)
