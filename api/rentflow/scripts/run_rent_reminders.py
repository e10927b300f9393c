"""
Run the rent reminder job once, outside celery beat.

    docker exec rentflow-api-1 bash -c \\
        "export PYTHONPATH=/app && python -m rentflow.scripts.run_rent_reminders --date 2026-10-06"

Safe to re-run: reminders are only created when missing, and tenants already
texted today are skipped.
"""
import argparse
import json
import logging
import sys
from datetime import date

from rentflow.core.config import settings
from rentflow.core.database import SessionLocal
from rentflow.services.gateway import NotificationGateway
from rentflow.services.rent_reminders import process_rent_reminders
from rentflow.services.rent_store import RentReminderStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("run_rent_reminders")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run as if today were this date (YYYY-MM-DD). Defaults to today.",
    )
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        results = process_rent_reminders(
            RentReminderStore(db), NotificationGateway(settings), settings, today=args.date
        )

    print(json.dumps(results.model_dump(), indent=2))
    for err in results.errors:
        logger.warning("  ✗ %s", err)
    return 1 if results.errors else 0


if __name__ == "__main__":
    sys.exit(main())
