import uuid
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict

ChannelOutcome = Literal["sent", "failed"] | None


class DueReminder(BaseModel):
    """A reminder joined to its owner's contact details."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str | None = None
    due_date: date
    send_email: bool
    send_sms: bool
    owner_email: str | None = None
    owner_phone: str | None = None


class ReminderDelivery(BaseModel):
    email: ChannelOutcome = None
    sms: ChannelOutcome = None


class SendReminderRequest(BaseModel):
    reminder_id: uuid.UUID


class SendReminderResponse(BaseModel):
    success: bool = True
    results: ReminderDelivery


class ReminderOutcome(BaseModel):
    id: uuid.UUID
    status: Literal["sent", "failed", "error"]
    error: str | None = None


class CheckRemindersResponse(BaseModel):
    success: bool = True
    processed: int
    results: list[ReminderOutcome]
