"""
Shared fixtures - in-memory SQLite database and a recording gateway.

Run with:
    docker exec rentflow-api-1 bash -c \\
        "export PYTHONPATH=/app && cd /app && python -m pytest tests -v"
"""
import os
import uuid
from datetime import date
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SERVICE_KEY", "test-service-key")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from rentflow.core.config import Settings
from rentflow.core.database import Base
from rentflow.models.lease import Lease
from rentflow.models.profile import Profile
from rentflow.models.property import Property, Unit
from rentflow.models.rent_reminder import RentReminder  # noqa: F401 - registers table
from rentflow.models.reminder import Reminder  # noqa: F401 - registers table


class FakeGateway:
    """Records every message; fails for recipients listed in `fail_for`."""

    def __init__(self, fail_for=(), sms_enabled=True, email_enabled=True):
        self.fail_for = set(fail_for)
        self.sms_enabled = sms_enabled
        self.email_enabled = email_enabled
        self.sms: list[tuple[str, str]] = []
        self.emails: list[tuple[str, str, str]] = []

    def send_sms(self, to, message):
        self.sms.append((to, message))
        return to not in self.fail_for

    def send_email(self, to, subject, html):
        self.emails.append((to, subject, html))
        return to not in self.fail_for

    def sms_to(self, phone):
        return [m for to, m in self.sms if to == phone]


@pytest.fixture
def cfg():
    return Settings(_env_file=None, service_key="test-service-key")


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_profile(db):
    def _make(role="tenant", phone="4165550100", full_name="Pat Tenant", email=None):
        profile = Profile(
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            full_name=full_name,
            phone=phone,
            role=role,
        )
        db.add(profile)
        db.commit()
        return profile
    return _make


@pytest.fixture
def make_lease(db, make_profile):
    def _make(
        base_rent="1200",
        phone="4165550100",
        is_active=True,
        property_name="Maple House",
        unit_name="Main",
        **terms,
    ):
        prop = Property(name=property_name, city="Toronto")
        db.add(prop)
        db.flush()
        unit = Unit(property_id=prop.id, name=unit_name)
        db.add(unit)
        db.flush()
        tenant = make_profile(phone=phone)
        lease = Lease(
            unit_id=unit.id,
            tenant_id=tenant.id,
            start_date=date(2026, 1, 1),
            is_active=is_active,
            base_rent=Decimal(base_rent),
            **terms,
        )
        db.add(lease)
        db.commit()
        return lease
    return _make


@pytest.fixture
def make_gateway():
    return FakeGateway
