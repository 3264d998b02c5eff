"""Celery application and beat schedule for compliance checks."""

import logging

from celery import Celery
from celery.schedules import crontab

from hr_compliance.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

celery_app = Celery(
    "hr_compliance",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["hr_compliance.tasks.compliance"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_max_tasks_per_child=1000,
    result_expires=3600,
    task_always_eager=settings.celery_task_always_eager,
)

celery_app.conf.beat_schedule = {
    "daily-expiration-check": {
        "task": "hr_compliance.tasks.compliance.check_employee_expirations",
        "schedule": crontab(minute=0, hour=6),
    },
    "weekly-compliance-summary": {
        "task": "hr_compliance.tasks.compliance.weekly_compliance_summary",
        "schedule": crontab(minute=0, hour=7, day_of_week=0),
    },
    "clinic-license-expiration-check": {
        "task": "hr_compliance.tasks.compliance.check_clinic_license_expirations",
        "schedule": crontab(minute=30, hour=6),
    },
    "api-key-expiry-check": {
        "task": "hr_compliance.tasks.compliance.check_api_key_expirations",
        "schedule": crontab(minute=0, hour=8),
    },
    "api-key-grace-revocation": {
        "task": "hr_compliance.tasks.compliance.revoke_rotated_api_keys",
        "schedule": crontab(minute=0),
    },
}

logger.debug("Celery broker: %s", settings.celery_broker_url)

if __name__ == "__main__":
    celery_app.start()
