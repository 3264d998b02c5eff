"""Scheduled compliance and API key checks.

Each check is an async function over a session so the API can run it on
demand; the Celery tasks below run them on the beat schedule with a
short-lived engine of their own. Findings are logged, not delivered.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hr_compliance.config import get_settings
from hr_compliance.database import get_engine
from hr_compliance.services.api_key_service import ApiKeyService
from hr_compliance.services.compliance_service import ClinicLicenseService
from hr_compliance.services.report_service import ReportService
from hr_compliance.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

T = TypeVar("T")

CLINIC_LICENSE_WINDOW_DAYS = 90
API_KEY_WINDOW_DAYS = 7


async def run_expiration_check(
    session: AsyncSession, days: int | None = None, today: date | None = None
) -> list[dict[str, Any]]:
    """Employee licences and certifications expiring within the window."""
    days = days or get_settings().expiration_window_days
    items = await ReportService(session).expiring_items(days, today)
    for item in items:
        logger.warning(
            "%s %s for %s expires %s (%d days)",
            item["item_type"],
            item["license_number"],
            item["employee_name"],
            item["expiration_date"].isoformat(),
            item["days_remaining"],
        )
    logger.info("Expiration check found %d items within %d days", len(items), days)
    return items


async def run_compliance_summary(
    session: AsyncSession, today: date | None = None
) -> dict[str, int]:
    stats = await ReportService(session).employee_stats(today)
    logger.info(
        "Weekly summary: %d employees (%d active), %d expiring soon, %d unverified documents",
        stats["total_employees"],
        stats["active_employees"],
        stats["expiring_soon"],
        stats["pending_docs"],
    )
    return stats


async def run_clinic_license_check(
    session: AsyncSession, today: date | None = None
) -> list[dict[str, Any]]:
    licenses = await ClinicLicenseService(session).expiring(CLINIC_LICENSE_WINDOW_DAYS, today)
    for clinic_license in licenses:
        logger.warning(
            "Clinic license %s (location %d) expires %s",
            clinic_license.license_number,
            clinic_license.location_id,
            clinic_license.expiration_date.isoformat(),
        )
    return [
        {
            "id": clinic_license.id,
            "license_number": clinic_license.license_number,
            "location_id": clinic_license.location_id,
            "expiration_date": clinic_license.expiration_date.isoformat(),
        }
        for clinic_license in licenses
    ]


async def run_api_key_expiry_check(
    session: AsyncSession, now: datetime | None = None
) -> list[dict[str, Any]]:
    keys = await ApiKeyService(session).get_expiring_keys(API_KEY_WINDOW_DAYS, now)
    for key in keys:
        logger.warning(
            "API key %s (%s) of user %d expires %s",
            key.key_prefix,
            key.name,
            key.user_id,
            key.expires_at.isoformat(),
        )
    return [
        {"id": key.id, "key_prefix": key.key_prefix, "expires_at": key.expires_at.isoformat()}
        for key in keys
    ]


async def run_grace_revocation(session: AsyncSession, now: datetime | None = None) -> list[int]:
    """Revoke keys whose post-rotation grace window has ended."""
    revoked = await ApiKeyService(session).revoke_expired_grace_keys(now)
    await session.commit()
    if revoked:
        logger.info("Revoked %d rotated API keys", len(revoked))
    return [key.id for key in revoked]


def _run(check: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run ``check`` in a fresh event loop with its own engine."""

    async def runner() -> T:
        engine = get_engine()
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        try:
            async with factory() as session:
                return await check(session)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


@celery_app.task(name="hr_compliance.tasks.compliance.check_employee_expirations", bind=True)
def check_employee_expirations(self) -> int:
    logger.info("Running daily expiration check (task %s)", self.request.id)
    return len(_run(run_expiration_check))


@celery_app.task(name="hr_compliance.tasks.compliance.weekly_compliance_summary", bind=True)
def weekly_compliance_summary(self) -> dict[str, int]:
    return _run(run_compliance_summary)


@celery_app.task(name="hr_compliance.tasks.compliance.check_clinic_license_expirations", bind=True)
def check_clinic_license_expirations(self) -> list[dict[str, Any]]:
    return _run(run_clinic_license_check)


@celery_app.task(name="hr_compliance.tasks.compliance.check_api_key_expirations", bind=True)
def check_api_key_expirations(self) -> list[dict[str, Any]]:
    return _run(run_api_key_expiry_check)


@celery_app.task(name="hr_compliance.tasks.compliance.revoke_rotated_api_keys", bind=True)
def revoke_rotated_api_keys(self) -> list[int]:
    return _run(run_grace_revocation)
