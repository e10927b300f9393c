from celery import Celery
from celery.schedules import crontab

from rentflow.core.config import settings

celery_app = Celery(
    "rentflow",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["rentflow.services.rent_reminders", "rentflow.services.reminders"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# ─── Scheduled tasks ──────────────────────────
# 13:00 UTC is 08:00/09:00 in Toronto depending on DST
celery_app.conf.beat_schedule = {
    "process-rent-reminders-daily": {
        "task": "rentflow.services.rent_reminders.run_rent_reminders",
        "schedule": crontab(hour=13, minute=0),
    },
    "check-reminders-daily": {
        "task": "rentflow.services.reminders.run_check_reminders",
        "schedule": crontab(hour=13, minute=5),
    },
}
