"""Notification service - reminder SMS rendering and delivery."""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

import httpx

from ..core.utils.datetime import format_day_month_year
from ..schemas.reminder import TemplateType

if TYPE_CHECKING:
    from ..core.config import Settings
    from ..models.reminder import Reminder

TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"


class SMSDeliveryError(RuntimeError):
    """Raised when the messaging gateway rejects or fails to accept a message."""

    def __init__(self, message: str, code: int | str | None = None, more_info: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.more_info = more_info


class SMSProvider(Protocol):
    """Protocol for text message gateways."""

    async def send(self, to: str, body: str, from_: str | None = None) -> str:
        """Send a text message and return the gateway's message id."""
        ...


class BaseSMSProvider(ABC):
    """Base class for SMS providers."""

    def __init__(self, default_sender: str | None = None) -> None:
        self.default_sender = default_sender
        self._logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def send(self, to: str, body: str, from_: str | None = None) -> str:
        """Send a text message and return the gateway's message id."""
        ...

    async def close(self) -> None:
        """Release any held resources."""


class LoggingSMSProvider(BaseSMSProvider):
    """
    Development SMS provider that logs instead of sending.

    Used for local development and whenever Twilio credentials are absent.
    """

    async def send(self, to: str, body: str, from_: str | None = None) -> str:
        message_id = f"log_{uuid.uuid4().hex}"
        self._logger.info("SMS [%s -> %s] (%s): %s", from_ or self.default_sender, to, message_id, body)
        return message_id


class TwilioSMSProvider(BaseSMSProvider):
    """SMS provider backed by the Twilio Programmable Messaging REST API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        default_sender: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(default_sender)
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE_URL}/Accounts/{self._account_sid}/Messages.json"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                auth=(self._account_sid, self._auth_token),
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, body: str, from_: str | None = None) -> str:
        client = await self._get_client()
        try:
            response = await client.post(
                self.messages_url,
                data={"To": to, "From": from_ or self.default_sender, "Body": body},
            )
        except httpx.HTTPError as e:
            raise SMSDeliveryError(f"Twilio request failed: {e}") from e

        if response.status_code >= 400:
            try:
                error = response.json()
            except ValueError:
                error = {}
            raise SMSDeliveryError(
                error.get("message") or f"Twilio returned HTTP {response.status_code}",
                code=error.get("code", response.status_code),
                more_info=error.get("more_info"),
            )

        sid = response.json()["sid"]
        self._logger.info("Twilio accepted message %s for %s", sid, to)
        return sid


def build_sms_provider(settings: "Settings") -> BaseSMSProvider:
    """Pick Twilio when fully configured, the logging provider otherwise."""
    if settings.TWILIO_CONFIGURED:
        return TwilioSMSProvider(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN.get_secret_value(),
            default_sender=settings.TWILIO_PHONE_NUMBER,
        )
    logging.getLogger(__name__).warning("Twilio credentials are missing; SMS will only be logged.")
    return LoggingSMSProvider(default_sender=settings.TWILIO_PHONE_NUMBER)


class NotificationService:
    """
    Service for reminder text messages.

    Renders the reminder templates and hands messages to the SMS provider.
    Delivery errors propagate to the caller.
    """

    def __init__(
        self,
        provider: SMSProvider | None = None,
        brand_name: str = "CarMate",
        timezone: str | ZoneInfo = "UTC",
    ) -> None:
        """
        Initialize the notification service.

        Args:
            provider: SMS provider implementation.
                      Defaults to LoggingSMSProvider for development.
            brand_name: Prefix shown in brackets at the top of every message.
            timezone: Timezone used to print due dates.
        """
        self._provider = provider or LoggingSMSProvider()
        self.brand_name = brand_name
        self.timezone = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self._logger = logging.getLogger(self.__class__.__name__)

    def render_upcoming(self, reminder: "Reminder") -> str:
        vehicle = reminder.vehicle
        message = (
            f"[{self.brand_name}] Service Reminder\n"
            f"Your {vehicle.manufacturer} {vehicle.model} is due for:\n"
            f"Service: {reminder.service_type}\n"
            f"Date: {format_day_month_year(reminder.reminder_date, self.timezone)}\n"
        )
        if reminder.mileage:
            message += f"Recommended Mileage: {reminder.mileage}km\n"
        return message

    def render_follow_up(self, reminder: "Reminder", days_late: int) -> str:
        vehicle = reminder.vehicle
        plural = "" if days_late == 1 else "s"
        return (
            f"[{self.brand_name}] Important Follow-up\n"
            f"We noticed your {vehicle.manufacturer} {vehicle.model} missed its scheduled:\n"
            f"Service: {reminder.service_type}\n"
            f"Original Due Date: {format_day_month_year(reminder.reminder_date, self.timezone)} "
            f"({days_late} day{plural} ago)\n"
            f"\nDelaying service may affect your vehicle's performance and warranty coverage.\n"
        )

    def render(self, reminder: "Reminder", template_type: TemplateType, days_late: int = 0) -> str:
        if template_type == TemplateType.FOLLOW_UP:
            return self.render_follow_up(reminder, days_late)
        return self.render_upcoming(reminder)

    async def send_sms(self, to: str, body: str) -> str:
        """
        Send a text message.

        Returns:
            The gateway message id.

        Raises:
            SMSDeliveryError: If the gateway rejects the message.
        """
        message_id = await self._provider.send(to=to, body=body)
        self._logger.info("SMS %s sent to %s", message_id, to)
        return message_id
