from pydantic import BaseModel


class SendSMSRequest(BaseModel):
    to: str | None = None
    message: str | None = None


class SendSMSResponse(BaseModel):
    success: bool
    sid: str
