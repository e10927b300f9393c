import json

from sqlalchemy.orm import sessionmaker

from rentflow.scripts import run_rent_reminders as script


def test_cli_runs_for_given_date(monkeypatch, engine, cfg, make_lease, capsys):
    make_lease(phone=None)
    monkeypatch.setattr(script, "SessionLocal", sessionmaker(bind=engine))
    monkeypatch.setattr(script, "settings", cfg)

    assert script.main(["--date", "2026-10-01"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["reminders_created"] == 1
    assert out["errors"] == []


def test_cli_exit_code_reflects_errors(monkeypatch, engine, cfg, make_lease, capsys):
    make_lease(phone="4165550100")  # gateway is unconfigured in tests, so the SMS fails
    monkeypatch.setattr(script, "SessionLocal", sessionmaker(bind=engine))
    monkeypatch.setattr(script, "settings", cfg)

    assert script.main(["--date", "2026-10-01"]) == 1

    out = json.loads(capsys.readouterr().out)
    assert out["tenant_notifications"] == 0
    assert len(out["errors"]) == 1
