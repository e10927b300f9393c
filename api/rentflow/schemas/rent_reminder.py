import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# ─── Store records ─────────────────────────────────────────────────────────

class LeaseTerms(BaseModel):
    """Rent components of an active lease, as read from the lease registry."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    base_rent: Decimal
    includes_gas: bool = False
    includes_water: bool = False
    includes_hydro: bool = False
    gas_amount: Decimal | None = None
    water_amount: Decimal | None = None
    hydro_amount: Decimal | None = None


class OpenRentReminder(BaseModel):
    """A pending or late reminder joined to its tenant and unit."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    total_amount: Decimal
    status: str
    is_late: bool
    late_since: date | None = None
    tenant_notified_at: datetime | None = None
    tenant_phone: str | None = None
    property_name: str | None = None
    unit_name: str | None = None


class StaffContact(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: str | None = None
    phone: str | None = None
    email: str | None = None


# ─── Run summary ───────────────────────────────────────────────────────────

class RentReminderResults(BaseModel):
    reminders_created: int = 0
    tenant_notifications: int = 0
    admin_notifications: int = 0
    marked_late: int = 0
    errors: list[str] = Field(default_factory=list)


class RentReminderRunResponse(BaseModel):
    success: bool = True
    message: str = "Rent reminders processed"
    results: RentReminderResults
