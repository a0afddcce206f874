"""Shared FastAPI dependencies resolving the clients owned by the application lifespan."""

from typing import Annotated

from fastapi import Depends, Request

from ..core.config import settings
from ..services.notification_service import BaseSMSProvider, NotificationService
from ..services.places_service import GooglePlacesClient


def get_places_client(request: Request) -> GooglePlacesClient:
    """Dependency for the Google Places client created at startup."""
    return request.app.state.places_client


def get_sms_provider(request: Request) -> BaseSMSProvider:
    """Dependency for the SMS provider created at startup."""
    return request.app.state.sms_provider


def get_notification_service(
    provider: Annotated[BaseSMSProvider, Depends(get_sms_provider)],
) -> NotificationService:
    """Dependency for NotificationService."""
    return NotificationService(
        provider=provider,
        brand_name=settings.SMS_BRAND_NAME,
        timezone=settings.REMINDER_TIMEZONE,
    )
