"""Shared fixtures for the CarMate test suite."""

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest
from faker import Faker

from carmate.schemas.service_center import Coordinates, LocationRecord, RegisteredCenterRead

fake = Faker()

# Kuala Lumpur city centre
ORIGIN_LAT = 3.1390
ORIGIN_LNG = 101.6869


@pytest.fixture
def reference_date():
    return datetime(2024, 1, 15, tzinfo=UTC)


@pytest.fixture
def make_center():
    """Factory for registered service centers."""

    def _make(
        name: str = "Speedy Tyres",
        address: str | None = None,
        lat: float | None = ORIGIN_LAT,
        lng: float | None = ORIGIN_LNG,
        place_id: str | None = None,
        rating: float | None = 4.5,
    ) -> RegisteredCenterRead:
        return RegisteredCenterRead(
            id=uuid.uuid4(),
            service_center_name=name,
            service_center_address=address,
            service_center_lat=lat,
            service_center_lng=lng,
            google_place_id=place_id,
            average_rating=rating,
        )

    return _make


@pytest.fixture
def make_candidate():
    """Factory for place-search candidates."""

    def _make(
        place_id: str | None = None,
        name: str = "Speedy Tyres",
        address: str | None = None,
        lat: float | None = ORIGIN_LAT,
        lng: float | None = ORIGIN_LNG,
        rating: float | None = 4.1,
    ) -> LocationRecord:
        location = Coordinates(lat=lat, lng=lng) if lat is not None and lng is not None else None
        return LocationRecord(
            place_id=place_id or f"ChIJ{fake.pystr(min_chars=12, max_chars=12)}",
            name=name,
            address=address,
            location=location,
            rating=rating,
            user_ratings_total=fake.random_int(min=1, max=500),
        )

    return _make


@pytest.fixture
def make_reminder():
    """Factory for reminder objects with customer and vehicle loaded."""

    def _make(
        reminder_date: datetime,
        phone: str | None = "+60123456789",
        service_type: str = "Oil Change",
        mileage: int | None = None,
    ) -> SimpleNamespace:
        return SimpleNamespace(
            id=uuid.uuid4(),
            reminder_date=reminder_date,
            service_type=service_type,
            mileage=mileage,
            notification_sent=False,
            last_notification_sent_at=None,
            notification_template_type=None,
            user=SimpleNamespace(id=uuid.uuid4(), username=fake.user_name(), phone_number=phone),
            vehicle=SimpleNamespace(id=uuid.uuid4(), manufacturer="Perodua", model="Myvi"),
        )

    return _make
