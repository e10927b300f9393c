"""Persistence boundary for the rent reminder job.

Every read returns pydantic records, never ORM rows.  Every write commits on
its own so a later failure in the same run doesn't roll back earlier progress.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentflow.models.lease import Lease
from rentflow.models.profile import STAFF_ROLES, Profile
from rentflow.models.property import Property, Unit
from rentflow.models.rent_reminder import OPEN_STATUSES, RentReminder
from rentflow.schemas.rent_reminder import LeaseTerms, OpenRentReminder, StaffContact

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A query or write against the reminder store failed."""


class RentReminderStore:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        # ON CONFLICT is dialect-specific; Postgres in production, SQLite in tests
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite_insert(RentReminder.__table__)
        return pg_insert(RentReminder.__table__)

    def _commit(self, stmt) -> int:
        try:
            result = self.db.execute(stmt)
            self.db.commit()
            return result.rowcount
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(str(exc)) from exc

    # ── Reads ─────────────────────────────────────────────────────────────────

    def active_leases(self) -> list[LeaseTerms]:
        try:
            rows = self.db.execute(
                select(Lease).where(Lease.is_active == True)  # noqa: E712
            ).scalars().all()
            return [LeaseTerms.model_validate(r) for r in rows]
        except (SQLAlchemyError, ValidationError) as exc:
            self.db.rollback()
            raise StoreError(str(exc)) from exc

    def open_reminders(self, month: date) -> list[OpenRentReminder]:
        """Pending and late reminders for `month` with tenant contact + unit names."""
        try:
            rows = self.db.execute(
                select(
                    RentReminder.id,
                    RentReminder.total_amount,
                    RentReminder.status,
                    RentReminder.is_late,
                    RentReminder.late_since,
                    RentReminder.tenant_notified_at,
                    Profile.phone.label("tenant_phone"),
                    Property.name.label("property_name"),
                    Unit.name.label("unit_name"),
                )
                .join(Lease, RentReminder.lease_id == Lease.id)
                .outerjoin(Profile, Lease.tenant_id == Profile.id)
                .outerjoin(Unit, Lease.unit_id == Unit.id)
                .outerjoin(Property, Unit.property_id == Property.id)
                .where(
                    RentReminder.month == month,
                    RentReminder.status.in_(OPEN_STATUSES),
                )
                .order_by(RentReminder.created_at)
            ).all()
            return [OpenRentReminder.model_validate(r._mapping) for r in rows]
        except (SQLAlchemyError, ValidationError) as exc:
            self.db.rollback()
            raise StoreError(str(exc)) from exc

    def staff_contacts(self) -> list[StaffContact]:
        try:
            rows = self.db.execute(
                select(Profile).where(Profile.role.in_(STAFF_ROLES))
            ).scalars().all()
            return [StaffContact.model_validate(r) for r in rows]
        except (SQLAlchemyError, ValidationError) as exc:
            self.db.rollback()
            raise StoreError(str(exc)) from exc

    # ── Writes ────────────────────────────────────────────────────────────────

    def materialize(
        self,
        lease: LeaseTerms,
        month: date,
        components: dict[str, Decimal],
        total: Decimal,
    ) -> bool:
        """Insert this month's reminder unless one already exists. Returns True if inserted.

        Existing rows are left untouched so a paid or late reminder never
        goes back to pending.
        """
        stmt = (
            self._insert()
            .values(
                id=uuid.uuid4(),
                lease_id=lease.id,
                month=month,
                base_rent=lease.base_rent,
                gas_amount=components["gas"],
                water_amount=components["water"],
                hydro_amount=components["hydro"],
                total_amount=total,
                status="pending",
                is_late=False,
            )
            .on_conflict_do_nothing(index_elements=["lease_id", "month"])
        )
        return self._commit(stmt) > 0

    def mark_late(self, reminder_id: uuid.UUID, today: date) -> bool:
        """Returns False when the reminder was paid since it was read."""
        return self._commit(
            update(RentReminder)
            .where(RentReminder.id == reminder_id, RentReminder.status.in_(OPEN_STATUSES))
            .values(
                status="late",
                is_late=True,
                late_since=func.coalesce(RentReminder.late_since, today),
            )
        ) > 0

    def stamp_tenant_notified(self, reminder_id: uuid.UUID, at: datetime) -> None:
        self._commit(
            update(RentReminder)
            .where(RentReminder.id == reminder_id, RentReminder.status.in_(OPEN_STATUSES))
            .values(tenant_notified_at=at)
        )

    def stamp_admin_notified(self, reminder_ids: Iterable[uuid.UUID], at: datetime) -> None:
        ids = list(reminder_ids)
        if not ids:
            return
        self._commit(
            update(RentReminder)
            .where(RentReminder.id.in_(ids), RentReminder.status.in_(OPEN_STATUSES))
            .values(admin_notified_at=at)
        )

    def mark_paid(self, reminder_id: uuid.UUID, at: datetime) -> None:
        """Payment recorded - terminal for the month."""
        self._commit(
            update(RentReminder)
            .where(RentReminder.id == reminder_id)
            .values(status="paid", paid_at=at)
        )
        logger.info("Rent reminder %s marked paid", reminder_id)
