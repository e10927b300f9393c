import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column

from rentflow.core.database import Base


class Lease(Base):
    """Rent terms for a tenant in a unit. Utilities are billed only when included."""
    __tablename__ = "leases"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    unit_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("units.id"), index=True)
    tenant_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), index=True)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    base_rent: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    includes_gas: Mapped[bool] = mapped_column(Boolean, default=False)
    includes_water: Mapped[bool] = mapped_column(Boolean, default=False)
    includes_hydro: Mapped[bool] = mapped_column(Boolean, default=False)
    gas_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    water_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    hydro_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
