import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from rentflow.core.database import Base

OPEN_STATUSES = ("pending", "late")


class RentReminder(Base):
    """One row per (lease, month). Created on the 1st, never deleted."""
    __tablename__ = "rent_reminders"
    __table_args__ = (
        UniqueConstraint("lease_id", "month", name="uq_rent_reminder_lease_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    lease_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("leases.id", ondelete="CASCADE"), index=True
    )
    month: Mapped[date] = mapped_column(Date, nullable=False)  # first day of the month
    base_rent: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    gas_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    water_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    hydro_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending | late | paid
    is_late: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    late_since: Mapped[date | None] = mapped_column(Date)
    tenant_notified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    admin_notified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
