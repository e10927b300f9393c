"""
General reminder delivery.

POST /reminders/check   - deliver everything due today or earlier
POST /reminders/send    - deliver one reminder {reminder_id}
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rentflow.core.config import Settings
from rentflow.core.database import get_db
from rentflow.core.deps import get_gateway, get_settings, require_service_key
from rentflow.schemas.reminder import (
    CheckRemindersResponse,
    SendReminderRequest,
    SendReminderResponse,
)
from rentflow.services.gateway import NotificationGateway
from rentflow.services.reminders import ReminderNotFound, check_reminders, send_reminder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reminders"], dependencies=[Depends(require_service_key)])


@router.post("/reminders/check", response_model=CheckRemindersResponse)
def check(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
    cfg: Settings = Depends(get_settings),
):
    try:
        outcomes = check_reminders(db, gateway, cfg)
    except Exception as exc:
        logger.exception("Error checking reminders")
        raise HTTPException(status_code=500, detail=f"Failed to fetch reminders: {exc}")
    return CheckRemindersResponse(processed=len(outcomes), results=outcomes)


@router.post("/reminders/send", response_model=SendReminderResponse)
def send(
    body: SendReminderRequest,
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
    cfg: Settings = Depends(get_settings),
):
    try:
        delivery = send_reminder(db, gateway, body.reminder_id, cfg)
    except ReminderNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return SendReminderResponse(results=delivery)
