"""
Services module - Business logic layer.

Service classes encapsulate the search, matching and reminder logic,
keeping it separate from API endpoints and data access.
"""

from .matcher import ServiceCenterMatcher
from .notification_service import NotificationService
from .places_service import GooglePlacesClient
from .reminder_processor import ReminderProcessor
from .reminder_service import ReminderService
from .service_center_service import ServiceCenterService

__all__ = [
    "GooglePlacesClient",
    "NotificationService",
    "ReminderProcessor",
    "ReminderService",
    "ServiceCenterMatcher",
    "ServiceCenterService",
]
