"""
Tests for general (non-rent) reminder delivery.
"""
import uuid
from datetime import date

import pytest

from rentflow.models.reminder import Reminder
from rentflow.services.reminders import (
    ReminderNotFound,
    check_reminders,
    due_reminders,
    send_reminder,
)

TODAY = date(2026, 10, 19)


@pytest.fixture
def owner(make_profile):
    return make_profile(role="manager", phone="4165550199", email="owner@example.com")


@pytest.fixture
def make_reminder(db, owner):
    def _make(title="Furnace inspection", due=TODAY, send_email=True, send_sms=True,
              is_completed=False, description=None, user=None):
        reminder = Reminder(
            user_id=(user or owner).id,
            title=title,
            description=description,
            due_date=due,
            send_email=send_email,
            send_sms=send_sms,
            is_completed=is_completed,
        )
        db.add(reminder)
        db.commit()
        return reminder
    return _make


class TestDueReminders:
    def test_filters_on_due_date_completion_and_channels(self, db, make_reminder):
        due_today = make_reminder(title="today")
        overdue = make_reminder(title="overdue", due=date(2026, 10, 1))
        make_reminder(title="future", due=date(2026, 10, 20))
        make_reminder(title="done", is_completed=True)
        make_reminder(title="silent", send_email=False, send_sms=False)

        ids = {r.id for r in due_reminders(db, TODAY)}
        assert ids == {due_today.id, overdue.id}

    def test_carries_owner_contact(self, db, make_reminder):
        make_reminder()
        (reminder,) = due_reminders(db, TODAY)
        assert reminder.owner_email == "owner@example.com"
        assert reminder.owner_phone == "4165550199"


class TestSendReminder:
    def test_sends_both_channels(self, db, gateway, cfg, make_reminder):
        reminder = make_reminder(title="Lease renewal", description="Unit 2 <basement>")

        delivery = send_reminder(db, gateway, reminder.id, cfg)

        assert delivery.email == "sent"
        assert delivery.sms == "sent"
        (to, subject, html) = gateway.emails[0]
        assert to == "owner@example.com"
        assert subject == "Reminder: Lease renewal"
        assert "Unit 2 &lt;basement&gt;" in html
        assert "Due: 2026-10-19" in html
        (phone, text) = gateway.sms[0]
        assert phone == "4165550199"
        assert text == "RentFlow Reminder: Lease renewal - Unit 2 <basement> (Due: 2026-10-19)"

    def test_sms_without_description(self, db, gateway, cfg, make_reminder):
        reminder = make_reminder(title="Smoke detectors", send_email=False)
        delivery = send_reminder(db, gateway, reminder.id, cfg)
        assert delivery.email is None
        assert gateway.sms[0][1] == "RentFlow Reminder: Smoke detectors (Due: 2026-10-19)"

    def test_channel_not_configured_is_not_attempted(self, db, cfg, make_gateway, make_reminder):
        gw = make_gateway(email_enabled=False)
        reminder = make_reminder()
        delivery = send_reminder(db, gw, reminder.id, cfg)
        assert delivery.email is None
        assert delivery.sms == "sent"
        assert gw.emails == []

    def test_owner_without_phone(self, db, gateway, cfg, make_profile, make_reminder):
        no_phone = make_profile(phone=None)
        reminder = make_reminder(user=no_phone)
        delivery = send_reminder(db, gateway, reminder.id, cfg)
        assert delivery.sms is None
        assert delivery.email == "sent"

    def test_failed_channel(self, db, gateway, cfg, make_reminder):
        gateway.fail_for.add("4165550199")
        reminder = make_reminder()
        delivery = send_reminder(db, gateway, reminder.id, cfg)
        assert delivery.sms == "failed"
        assert delivery.email == "sent"

    def test_missing_reminder(self, db, gateway, cfg):
        with pytest.raises(ReminderNotFound):
            send_reminder(db, gateway, uuid.uuid4(), cfg)


class TestCheckReminders:
    def test_reports_each_reminder(self, db, gateway, cfg, make_reminder):
        reminder = make_reminder(title="ok")
        gateway.fail_for.add("owner@example.com")
        outcomes = check_reminders(db, gateway, cfg, today=TODAY)

        assert [o.id for o in outcomes] == [reminder.id]
        assert outcomes[0].status == "failed"

    def test_all_delivered(self, db, gateway, cfg, make_reminder):
        make_reminder(title="a")
        make_reminder(title="b", due=date(2026, 10, 2))
        outcomes = check_reminders(db, gateway, cfg, today=TODAY)
        assert [o.status for o in outcomes] == ["sent", "sent"]
        assert len(gateway.sms) == 2

    def test_nothing_due(self, db, gateway, cfg, make_reminder):
        make_reminder(due=date(2026, 11, 1))
        assert check_reminders(db, gateway, cfg, today=TODAY) == []
        assert gateway.sms == []

    def test_crash_is_reported_as_error(self, db, cfg, make_reminder):
        class Exploding:
            sms_enabled = True
            email_enabled = True

            def send_email(self, to, subject, html):
                raise RuntimeError("boom")

            def send_sms(self, to, message):
                return True

        reminder = make_reminder()
        (outcome,) = check_reminders(db, Exploding(), cfg, today=TODAY)
        assert outcome.id == reminder.id
        assert outcome.status == "error"
        assert outcome.error == "boom"
