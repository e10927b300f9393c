"""
Monthly rent reminder job.

Runs once a day (celery beat, or POST /api/v1/rent-reminders/process):

  day 1       - create this month's reminder for every active lease
  day > grace - mark unpaid reminders late
  every day   - text each tenant with an open reminder (due / overdue wording)
  day > grace - text admins and managers a summary of unpaid rent

Store and gateway failures are recorded in the run results; the job itself
never raises for them.  Anything not delivered today is retried tomorrow
because the reminder stays open and tenant_notified_at stays empty.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal

import pytz

from rentflow.core.config import Settings, settings
from rentflow.core.database import SessionLocal
from rentflow.schemas.rent_reminder import LeaseTerms, OpenRentReminder, RentReminderResults
from rentflow.services.gateway import NotificationGateway
from rentflow.services.rent_store import RentReminderStore, StoreError
from rentflow.worker import celery_app

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_today(cfg: Settings) -> date:
    return datetime.now(pytz.timezone(cfg.timezone)).date()


def _local_date(ts: datetime, cfg: Settings) -> date:
    # SQLite hands back naive timestamps; they were written as UTC
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(pytz.timezone(cfg.timezone)).date()


def month_start(day: date) -> date:
    return day.replace(day=1)


# ── Amounts ───────────────────────────────────────────────────────────────────

def utility_charges(lease: LeaseTerms) -> dict[str, Decimal]:
    """Charged amount per utility - 0 when not included or not set."""
    return {
        "gas": (lease.gas_amount or _ZERO) if lease.includes_gas else _ZERO,
        "water": (lease.water_amount or _ZERO) if lease.includes_water else _ZERO,
        "hydro": (lease.hydro_amount or _ZERO) if lease.includes_hydro else _ZERO,
    }


def compute_total(lease: LeaseTerms) -> Decimal:
    return lease.base_rent + sum(utility_charges(lease).values(), _ZERO)


def format_amount(amount: Decimal, currency: str) -> str:
    return f"${amount:.2f} {currency}"


# ── Messages ──────────────────────────────────────────────────────────────────

def _rental_label(reminder: OpenRentReminder) -> str:
    if reminder.property_name and reminder.unit_name:
        return f"{reminder.property_name} - {reminder.unit_name}"
    return reminder.property_name or reminder.unit_name or "your rental"


def tenant_message(reminder: OpenRentReminder, overdue: bool, cfg: Settings) -> str:
    amount = format_amount(reminder.total_amount, cfg.currency)
    rental = _rental_label(reminder)
    if overdue:
        return (
            f"LATE RENT NOTICE: Your rent of {amount} for {rental} is overdue. "
            f"Please pay immediately to avoid further action. - {cfg.brand_name}"
        )
    return (
        f"Rent Reminder: Your rent of {amount} for {rental} is due. "
        f"Please pay by the {_ordinal(cfg.rent_grace_days)} to avoid late fees. - {cfg.brand_name}"
    )


def staff_message(unpaid_count: int, unpaid_total: Decimal, cfg: Settings) -> str:
    return (
        f"{cfg.brand_name} Alert: {unpaid_count} tenant(s) have unpaid rent totaling "
        f"{format_amount(unpaid_total, cfg.currency)}. Please follow up. - {cfg.brand_name}"
    )


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


# ── Phases ────────────────────────────────────────────────────────────────────

def _materialize(store: RentReminderStore, month: date, results: RentReminderResults) -> None:
    try:
        leases = store.active_leases()
    except StoreError as exc:
        results.errors.append(f"Error fetching leases: {exc}")
        return

    for lease in leases:
        try:
            if store.materialize(lease, month, utility_charges(lease), compute_total(lease)):
                results.reminders_created += 1
        except Exception as exc:
            logger.exception("Creating reminder for lease %s failed", lease.id)
            results.errors.append(f"Error creating reminder for lease {lease.id}: {exc}")


def _mark_late(
    store: RentReminderStore,
    reminders: list[OpenRentReminder],
    today: date,
    results: RentReminderResults,
) -> list[OpenRentReminder]:
    """Mark unpaid reminders late. Returns the reminders that are still open."""
    still_open: list[OpenRentReminder] = []
    for reminder in reminders:
        if reminder.status == "late" and reminder.is_late:
            still_open.append(reminder)
            continue
        try:
            marked = store.mark_late(reminder.id, today)
        except Exception as exc:
            logger.exception("Marking reminder %s late failed", reminder.id)
            results.errors.append(f"Error marking reminder {reminder.id} late: {exc}")
            still_open.append(reminder)
            continue
        if not marked:
            # paid after it was read
            logger.info("Reminder %s no longer open, skipping", reminder.id)
            continue
        reminder.status = "late"
        reminder.is_late = True
        reminder.late_since = reminder.late_since or today
        results.marked_late += 1
        still_open.append(reminder)
    return still_open


def _notify_tenants(
    store: RentReminderStore,
    gateway: NotificationGateway,
    reminders: list[OpenRentReminder],
    today: date,
    overdue: bool,
    cfg: Settings,
    clock: Callable[[], datetime],
    results: RentReminderResults,
) -> None:
    for reminder in reminders:
        if not reminder.tenant_phone:
            continue
        notified = reminder.tenant_notified_at
        if notified is not None and _local_date(notified, cfg) == today:
            logger.debug("Reminder %s already notified today, skipping", reminder.id)
            continue

        try:
            delivered = gateway.send_sms(reminder.tenant_phone, tenant_message(reminder, overdue, cfg))
        except Exception as exc:
            logger.exception("Tenant SMS for reminder %s crashed", reminder.id)
            results.errors.append(f"Error notifying tenant for reminder {reminder.id}: {exc}")
            continue
        if not delivered:
            results.errors.append(f"Error notifying tenant for reminder {reminder.id}: SMS not delivered")
            continue

        results.tenant_notifications += 1
        try:
            store.stamp_tenant_notified(reminder.id, clock())
        except Exception as exc:
            logger.exception("Recording notification for reminder %s failed", reminder.id)
            results.errors.append(f"Error recording notification for reminder {reminder.id}: {exc}")


def _notify_staff(
    store: RentReminderStore,
    gateway: NotificationGateway,
    reminders: list[OpenRentReminder],
    cfg: Settings,
    clock: Callable[[], datetime],
    results: RentReminderResults,
) -> None:
    try:
        staff = store.staff_contacts()
    except StoreError as exc:
        results.errors.append(f"Error fetching staff contacts: {exc}")
        return

    unpaid_total = sum((r.total_amount for r in reminders), _ZERO)
    message = staff_message(len(reminders), unpaid_total, cfg)

    sent = 0
    for member in staff:
        if not member.phone:
            continue
        who = member.full_name or member.phone
        try:
            delivered = gateway.send_sms(member.phone, message)
        except Exception as exc:
            logger.exception("Staff SMS to %s crashed", who)
            results.errors.append(f"Error notifying staff member {who}: {exc}")
            continue
        if delivered:
            sent += 1
        else:
            results.errors.append(f"Error notifying staff member {who}: SMS not delivered")
    results.admin_notifications += sent

    if sent:
        try:
            store.stamp_admin_notified([r.id for r in reminders], clock())
        except Exception as exc:
            logger.exception("Recording staff notification failed")
            results.errors.append(f"Error recording staff notification: {exc}")


# ── Entry point ───────────────────────────────────────────────────────────────

def process_rent_reminders(
    store: RentReminderStore,
    gateway: NotificationGateway,
    cfg: Settings,
    today: date | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> RentReminderResults:
    """Bring this month's reminders in line with the calendar, then notify."""
    today = today or local_today(cfg)
    month = month_start(today)
    overdue = today.day > cfg.rent_grace_days
    results = RentReminderResults()

    logger.info("Processing rent reminders for %s (month %s)", today, month)

    if today.day == 1:
        _materialize(store, month, results)

    try:
        reminders = store.open_reminders(month)
    except StoreError as exc:
        results.errors.append(f"Error fetching pending reminders: {exc}")
        return results

    if overdue:
        reminders = _mark_late(store, reminders, today, results)

    _notify_tenants(store, gateway, reminders, today, overdue, cfg, clock, results)

    if overdue and reminders:
        _notify_staff(store, gateway, reminders, cfg, clock, results)

    logger.info(
        "Rent reminders done: created=%d late=%d tenant_sms=%d staff_sms=%d errors=%d",
        results.reminders_created,
        results.marked_late,
        results.tenant_notifications,
        results.admin_notifications,
        len(results.errors),
    )
    return results


@celery_app.task(name="rentflow.services.rent_reminders.run_rent_reminders")
def run_rent_reminders(day: str | None = None) -> dict:
    """Daily beat task. `day` (YYYY-MM-DD) overrides today for manual back-fills."""
    today = date.fromisoformat(day) if day else None
    with SessionLocal() as db:
        results = process_rent_reminders(
            RentReminderStore(db), NotificationGateway(settings), settings, today=today
        )
    return results.model_dump()
