"""
Rent reminder job trigger - for an external scheduler (cron, Supabase pg_cron).

POST /rent-reminders/process[?date=YYYY-MM-DD]
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from rentflow.core.config import Settings
from rentflow.core.database import get_db
from rentflow.core.deps import get_gateway, get_settings, require_service_key
from rentflow.schemas.rent_reminder import RentReminderRunResponse
from rentflow.services.gateway import NotificationGateway
from rentflow.services.rent_reminders import process_rent_reminders
from rentflow.services.rent_store import RentReminderStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rent-reminders"], dependencies=[Depends(require_service_key)])


@router.post("/rent-reminders/process", response_model=RentReminderRunResponse)
def process(
    day: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
    cfg: Settings = Depends(get_settings),
):
    try:
        results = process_rent_reminders(RentReminderStore(db), gateway, cfg, today=day)
    except Exception as exc:
        logger.exception("Error processing rent reminders")
        raise HTTPException(status_code=500, detail=str(exc))
    return RentReminderRunResponse(results=results)
