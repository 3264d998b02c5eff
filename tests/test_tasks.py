"""Tests for scheduled compliance checks."""

from datetime import date, timedelta

from celery.schedules import crontab

from hr_compliance.models import StateLicense, User
from hr_compliance.models.base import utcnow
from hr_compliance.services.api_key_service import ApiKeyService
from hr_compliance.tasks.celery_app import celery_app
from hr_compliance.tasks.compliance import (
    run_api_key_expiry_check,
    run_clinic_license_check,
    run_compliance_summary,
    run_expiration_check,
    run_grace_revocation,
)

TODAY = date(2025, 6, 1)


class TestBeatSchedule:
    """Test the fixed cron schedule."""

    def test_schedule_entries(self):
        schedule = celery_app.conf.beat_schedule

        assert schedule["daily-expiration-check"]["schedule"] == crontab(minute=0, hour=6)
        assert schedule["weekly-compliance-summary"]["schedule"] == crontab(
            minute=0, hour=7, day_of_week=0
        )
        assert schedule["clinic-license-expiration-check"]["schedule"] == crontab(
            minute=30, hour=6
        )
        assert schedule["api-key-expiry-check"]["schedule"] == crontab(minute=0, hour=8)
        assert schedule["api-key-grace-revocation"]["schedule"] == crontab(minute=0)

    def test_scheduled_tasks_are_registered(self):
        for entry in celery_app.conf.beat_schedule.values():
            assert entry["task"] in celery_app.tasks

    def test_runs_in_utc(self):
        assert celery_app.conf.timezone == "UTC"


class TestChecks:
    """Test the checks the tasks run."""

    async def test_expiration_check(self, session, employee, caplog):
        session.add(
            StateLicense(
                employee_id=employee.id,
                license_number="RN-55",
                state="TX",
                expiration_date=TODAY + timedelta(days=5),
            )
        )
        await session.flush()

        with caplog.at_level("WARNING", logger="hr_compliance.tasks.compliance"):
            items = await run_expiration_check(session, today=TODAY)

        assert [item["license_number"] for item in items] == ["RN-55"]
        assert "RN-55" in caplog.text

    async def test_compliance_summary(self, session, employee):
        stats = await run_compliance_summary(session, today=TODAY)

        assert stats["total_employees"] == 1

    async def test_clinic_license_check(self, session, add_clinic_license):
        await add_clinic_license("FAC-SOON", TODAY + timedelta(days=60))
        await add_clinic_license("FAC-FAR", TODAY + timedelta(days=200))

        found = await run_clinic_license_check(session, today=TODAY)

        assert [item["license_number"] for item in found] == ["FAC-SOON"]

    async def test_api_key_checks(self, session):
        owner = User(username="ops", password_hash="x", role="admin")
        session.add(owner)
        await session.flush()
        service = ApiKeyService(session)
        soon, _ = await service.create_key(owner.id, "Soon", ["*"], expires_in_days=2)
        old, _ = await service.create_key(owner.id, "Old", ["*"], expires_in_days=30)
        await service.rotate_key(old.id, rotated_by=owner.id, grace_period_hours=0)

        expiring = await run_api_key_expiry_check(session)
        revoked = await run_grace_revocation(session, now=utcnow() + timedelta(minutes=1))

        assert soon.id in [item["id"] for item in expiring]
        assert revoked == [old.id]
