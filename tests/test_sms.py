"""Unit tests for the send-SMS endpoint."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from carmate.api.dependencies import get_notification_service
from carmate.api.v1.sms import send_sms
from carmate.core.exceptions.http_exceptions import BadRequestException, CustomException
from carmate.main import app
from carmate.schemas.sms import SendSMSRequest
from carmate.services.notification_service import NotificationService, SMSDeliveryError


@pytest.fixture
def mock_notification_service():
    service = MagicMock(spec=NotificationService)
    service.send_sms = AsyncMock(return_value="SM123")
    return service


class TestSendSMS:
    """Test calling the endpoint function directly."""

    @pytest.mark.asyncio
    async def test_send_sms_success(self, mock_notification_service):
        result = await send_sms(
            payload=SendSMSRequest(to="+60123456789", message="Your car is ready"),
            notification_service=mock_notification_service,
        )

        assert result.success is True
        assert result.sid == "SM123"
        mock_notification_service.send_sms.assert_awaited_once_with("+60123456789", "Your car is ready")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [SendSMSRequest(message="hi"), SendSMSRequest(to="+60123456789"), SendSMSRequest(to="", message="")],
    )
    async def test_missing_fields(self, mock_notification_service, payload):
        with pytest.raises(BadRequestException) as exc_info:
            await send_sms(payload=payload, notification_service=mock_notification_service)

        assert exc_info.value.detail == "Missing phone number or message"
        mock_notification_service.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gateway_error_is_500(self, mock_notification_service):
        mock_notification_service.send_sms.side_effect = SMSDeliveryError("Authenticate", code=20003)

        with pytest.raises(CustomException) as exc_info:
            await send_sms(
                payload=SendSMSRequest(to="+60123456789", message="hi"),
                notification_service=mock_notification_service,
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Authenticate"


class TestSendSMSHTTP:
    """Test the endpoint through the ASGI app."""

    @pytest.fixture
    async def client(self, mock_notification_service):
        app.dependency_overrides[get_notification_service] = lambda: mock_notification_service
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
        app.dependency_overrides.clear()

    @pytest.mark.asyncio
    async def test_send_sms(self, client):
        response = await client.post("/api/send-sms", json={"to": "+60123456789", "message": "hi"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "sid": "SM123"}

    @pytest.mark.asyncio
    async def test_missing_message_is_400(self, client):
        response = await client.post("/api/send-sms", json={"to": "+60123456789"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Missing phone number or message"}
