import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ...core.exceptions.http_exceptions import BadRequestException, CustomException
from ...schemas.sms import SendSMSRequest, SendSMSResponse
from ...services.notification_service import NotificationService, SMSDeliveryError
from ..dependencies import get_notification_service

router = APIRouter(prefix="/api", tags=["sms"])

logger = logging.getLogger(__name__)


@router.post("/send-sms", response_model=SendSMSResponse)
async def send_sms(
    payload: SendSMSRequest,
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
) -> SendSMSResponse:
    """Send a single text message."""
    if not payload.to or not payload.message:
        raise BadRequestException("Missing phone number or message")

    try:
        sid = await notification_service.send_sms(payload.to, payload.message)
    except SMSDeliveryError as e:
        logger.error("SMS delivery to %s failed (code=%s): %s", payload.to, e.code, e)
        raise CustomException(status_code=500, detail=str(e)) from e

    return SendSMSResponse(success=True, sid=sid)
