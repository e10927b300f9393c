"""
General reminders - user-defined to-dos (inspections, renewals, ...) with
optional email and SMS delivery once the due date arrives.

  check_reminders(...)  - daily: deliver every incomplete reminder due today or earlier
  send_reminder(...)    - deliver one reminder on demand
"""

import logging
import uuid
from datetime import date
from html import escape

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from rentflow.core.config import Settings, settings
from rentflow.core.database import SessionLocal
from rentflow.models.profile import Profile
from rentflow.models.reminder import Reminder
from rentflow.schemas.reminder import DueReminder, ReminderDelivery, ReminderOutcome
from rentflow.services.gateway import NotificationGateway
from rentflow.services.rent_reminders import local_today
from rentflow.worker import celery_app

logger = logging.getLogger(__name__)


class ReminderNotFound(Exception):
    pass


def _reminder_query():
    return (
        select(
            Reminder.id,
            Reminder.title,
            Reminder.description,
            Reminder.due_date,
            Reminder.send_email,
            Reminder.send_sms,
            Profile.email.label("owner_email"),
            Profile.phone.label("owner_phone"),
        )
        .outerjoin(Profile, Reminder.user_id == Profile.id)
    )


def due_reminders(db: Session, today: date) -> list[DueReminder]:
    rows = db.execute(
        _reminder_query().where(
            Reminder.is_completed == False,  # noqa: E712
            Reminder.due_date <= today,
            or_(Reminder.send_email == True, Reminder.send_sms == True),  # noqa: E712
        )
        .order_by(Reminder.due_date)
    ).all()
    return [DueReminder.model_validate(r._mapping) for r in rows]


def _email_html(reminder: DueReminder, cfg: Settings) -> str:
    description = f"<p>{escape(reminder.description)}</p>" if reminder.description else ""
    return (
        "<h2>Rental Reminder</h2>"
        f"<p><strong>{escape(reminder.title)}</strong></p>"
        f"{description}"
        f"<p>Due: {reminder.due_date.isoformat()}</p>"
        f"<p>- {escape(cfg.brand_name)}</p>"
    )


def _sms_text(reminder: DueReminder, cfg: Settings) -> str:
    description = f" - {reminder.description}" if reminder.description else ""
    return (
        f"{cfg.brand_name} Reminder: {reminder.title}{description} "
        f"(Due: {reminder.due_date.isoformat()})"
    )


def deliver(reminder: DueReminder, gateway: NotificationGateway, cfg: Settings) -> ReminderDelivery:
    """Send on each enabled channel. A channel left as None was not attempted."""
    delivery = ReminderDelivery()

    if reminder.send_email and reminder.owner_email and gateway.email_enabled:
        ok = gateway.send_email(
            reminder.owner_email, f"Reminder: {reminder.title}", _email_html(reminder, cfg)
        )
        delivery.email = "sent" if ok else "failed"

    if reminder.send_sms and reminder.owner_phone and gateway.sms_enabled:
        ok = gateway.send_sms(reminder.owner_phone, _sms_text(reminder, cfg))
        delivery.sms = "sent" if ok else "failed"

    return delivery


def send_reminder(
    db: Session,
    gateway: NotificationGateway,
    reminder_id: uuid.UUID,
    cfg: Settings,
) -> ReminderDelivery:
    row = db.execute(_reminder_query().where(Reminder.id == reminder_id)).first()
    if row is None:
        raise ReminderNotFound(f"Reminder not found: {reminder_id}")
    return deliver(DueReminder.model_validate(row._mapping), gateway, cfg)


def check_reminders(
    db: Session,
    gateway: NotificationGateway,
    cfg: Settings,
    today: date | None = None,
) -> list[ReminderOutcome]:
    today = today or local_today(cfg)
    reminders = due_reminders(db, today)
    logger.info("Delivering %d due reminder(s) for %s", len(reminders), today)

    outcomes: list[ReminderOutcome] = []
    for reminder in reminders:
        try:
            delivery = deliver(reminder, gateway, cfg)
        except Exception as exc:
            logger.exception("Reminder %s delivery crashed", reminder.id)
            outcomes.append(ReminderOutcome(id=reminder.id, status="error", error=str(exc)))
            continue
        failed = "failed" in (delivery.email, delivery.sms)
        outcomes.append(ReminderOutcome(id=reminder.id, status="failed" if failed else "sent"))
    return outcomes


@celery_app.task(name="rentflow.services.reminders.run_check_reminders")
def run_check_reminders() -> dict:
    with SessionLocal() as db:
        outcomes = check_reminders(db, NotificationGateway(settings), settings)
    return {
        "processed": len(outcomes),
        "results": [o.model_dump(mode="json") for o in outcomes],
    }
