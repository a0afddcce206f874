import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TemplateType(str, Enum):
    UPCOMING = "upcoming"
    FOLLOW_UP = "follow-up"


class ReminderStatus(str, Enum):
    PROCESSED = "processed"
    FAILED = "failed"


class ProcessRemindersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_mode: bool = Field(default=False, alias="testMode")
    test_date: str | None = Field(default=None, alias="testDate")


class ReminderResultEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    status: ReminderStatus
    template_type: TemplateType | None = Field(default=None, alias="templateType")
    phone: str | None = None
    message_preview: str | None = Field(default=None, alias="messagePreview")
    error: str | None = None


class ProcessRemindersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    reminders_processed: int = Field(alias="remindersProcessed")
    results: list[ReminderResultEntry]
