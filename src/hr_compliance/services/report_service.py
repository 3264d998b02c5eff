"""Reports, compliance dashboard and exports."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from sqlalchemy import func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.models import (
    BoardCertification,
    ClinicLicense,
    ComplianceDocument,
    DeaLicense,
    Document,
    Employee,
    LicenseType,
    Location,
    StateLicense,
)
from hr_compliance.services.compliance_service import ClinicLicenseService, today_utc

logger = logging.getLogger(__name__)

EMPLOYEE_EXPORT_FIELDS = (
    ("First Name", "first_name"),
    ("Last Name", "last_name"),
    ("Job Title", "job_title"),
    ("Work Email", "work_email"),
    ("Work Location", "work_location"),
    ("NPI Number", "npi_number"),
    ("Status", "status"),
)

CLINIC_LICENSE_EXPORT_FIELDS = (
    ("License Number", "license_number"),
    ("Location", "location_name"),
    ("License Type", "license_type_name"),
    ("Issue Date", "issue_date"),
    ("Expiration Date", "expiration_date"),
    ("Status", "status"),
    ("Compliance Status", "compliance_status"),
    ("Renewal Status", "renewal_status"),
    ("Issuing Authority", "issuing_authority"),
)

# (model, label, column shown as the item number)
EXPIRING_SOURCES = (
    (StateLicense, "State License", StateLicense.license_number),
    (DeaLicense, "DEA License", DeaLicense.license_number),
    (BoardCertification, "Board Certification", BoardCertification.certification),
)


def to_csv(rows: Iterable[dict[str, Any]], fields: Sequence[tuple[str, str]]) -> str:
    """Render rows as CSV with a header line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow([header for header, _ in fields])
    for row in rows:
        writer.writerow(["" if row.get(key) is None else row.get(key) for _, key in fields])
    return buffer.getvalue()


class ReportService:
    """Read-only aggregate queries over employees and clinic compliance data."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count(self, model, *conditions) -> int:
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        return await self.session.scalar(query) or 0

    async def expiring_items(self, days: int = 30, today: date | None = None) -> list[dict[str, Any]]:
        """Employee licences and certifications expiring within ``days``.

        Items expiring today or earlier are not included.
        """
        today = today or today_utc()
        horizon = today + timedelta(days=days)
        items: list[dict[str, Any]] = []

        for model, label, number_column in EXPIRING_SOURCES:
            result = await self.session.execute(
                select(
                    model.employee_id,
                    Employee.first_name,
                    Employee.last_name,
                    literal(label).label("item_type"),
                    number_column.label("license_number"),
                    model.expiration_date,
                )
                .join(Employee, Employee.id == model.employee_id)
                .where(model.expiration_date > today, model.expiration_date <= horizon)
            )
            for row in result.all():
                items.append(
                    {
                        "employee_id": row.employee_id,
                        "employee_name": f"{row.first_name} {row.last_name}",
                        "item_type": row.item_type,
                        "license_number": row.license_number,
                        "expiration_date": row.expiration_date,
                        "days_remaining": (row.expiration_date - today).days,
                    }
                )

        items.sort(key=lambda item: (item["expiration_date"], item["employee_name"]))
        return items

    async def employee_stats(self, today: date | None = None) -> dict[str, int]:
        """Headline numbers for the HR dashboard."""
        return {
            "total_employees": await self._count(Employee),
            "active_employees": await self._count(Employee, Employee.status == "active"),
            "expiring_soon": len(await self.expiring_items(30, today)),
            "pending_docs": await self._count(Document, Document.is_verified.is_(False)),
        }

    async def compliance_dashboard(self, today: date | None = None) -> dict[str, int]:
        """Counts of locations, licences by expiry bucket and compliance documents."""
        today = today or today_utc()

        def expiring_within(days: int):
            return (
                ClinicLicense.expiration_date >= today,
                ClinicLicense.expiration_date <= today + timedelta(days=days),
            )

        return {
            "total_locations": await self._count(Location),
            "active_locations": await self._count(Location, Location.status == "active"),
            "total_licenses": await self._count(ClinicLicense),
            "active_licenses": await self._count(ClinicLicense, ClinicLicense.status == "active"),
            "expiring_in_30_days": await self._count(ClinicLicense, *expiring_within(30)),
            "expiring_in_60_days": await self._count(ClinicLicense, *expiring_within(60)),
            "expiring_in_90_days": await self._count(ClinicLicense, *expiring_within(90)),
            "expired_licenses": await self._count(
                ClinicLicense, ClinicLicense.expiration_date < today
            ),
            "total_documents": await self._count(ComplianceDocument),
            "non_compliant": await self._count(
                ClinicLicense, ClinicLicense.compliance_status == "non_compliant"
            ),
        }

    async def _licenses_with_locations(self) -> list[tuple[ClinicLicense, Location]]:
        result = await self.session.execute(
            select(ClinicLicense, Location)
            .join(Location, Location.id == ClinicLicense.location_id)
            .order_by(ClinicLicense.expiration_date, ClinicLicense.id)
        )
        return list(result.tuples().all())

    async def compliance_alerts(self, today: date | None = None) -> list[dict[str, Any]]:
        """Expired, soon-expiring and non-compliant clinic licences."""
        today = today or today_utc()
        alerts = []
        for clinic_license, location in await self._licenses_with_locations():
            days_remaining = (clinic_license.expiration_date - today).days
            base = {
                "license_id": clinic_license.id,
                "license_number": clinic_license.license_number,
                "location_id": location.id,
                "location_name": location.name,
                "expiration_date": clinic_license.expiration_date,
                "days_remaining": days_remaining,
            }
            if days_remaining < 0:
                alerts.append(
                    {
                        **base,
                        "type": "expired",
                        "severity": "high",
                        "message": f"License {clinic_license.license_number} at {location.name} "
                        f"expired {-days_remaining} days ago",
                    }
                )
            elif days_remaining <= 30:
                alerts.append(
                    {
                        **base,
                        "type": "expiring",
                        "severity": "medium",
                        "message": f"License {clinic_license.license_number} at {location.name} "
                        f"expires in {days_remaining} days",
                    }
                )
            if clinic_license.compliance_status == "non_compliant":
                alerts.append(
                    {
                        **base,
                        "type": "non_compliant",
                        "severity": "high",
                        "message": f"License {clinic_license.license_number} at {location.name} "
                        "is non-compliant",
                    }
                )
        return alerts

    async def location_summary(self, today: date | None = None) -> list[dict[str, Any]]:
        """Licence counts and derived compliance status for every location."""
        today = today or today_utc()
        result = await self.session.execute(select(Location).order_by(Location.name, Location.id))
        summary = {
            location.id: {
                "location_id": location.id,
                "location_name": location.name,
                "total_licenses": 0,
                "active_licenses": 0,
                "expiring_licenses": 0,
                "expired_licenses": 0,
                "non_compliant_licenses": 0,
            }
            for location in result.scalars().all()
        }

        for clinic_license, location in await self._licenses_with_locations():
            entry = summary[location.id]
            days_remaining = (clinic_license.expiration_date - today).days
            entry["total_licenses"] += 1
            if clinic_license.status == "active":
                entry["active_licenses"] += 1
            if days_remaining < 0:
                entry["expired_licenses"] += 1
            elif days_remaining <= 90:
                entry["expiring_licenses"] += 1
            if clinic_license.compliance_status == "non_compliant":
                entry["non_compliant_licenses"] += 1

        for entry in summary.values():
            if entry["expired_licenses"] or entry["non_compliant_licenses"]:
                entry["compliance_status"] = "non_compliant"
            elif entry["expiring_licenses"]:
                entry["compliance_status"] = "at_risk"
            else:
                entry["compliance_status"] = "compliant"
        return list(summary.values())

    async def employee_export_rows(self) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(Employee).order_by(Employee.last_name, Employee.first_name, Employee.id)
        )
        return [
            {key: getattr(employee, key) for _, key in EMPLOYEE_EXPORT_FIELDS}
            for employee in result.scalars().all()
        ]

    async def clinic_license_export_rows(self) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(ClinicLicense, Location.name, LicenseType.name)
            .join(Location, Location.id == ClinicLicense.location_id)
            .join(LicenseType, LicenseType.id == ClinicLicense.license_type_id)
            .order_by(ClinicLicense.expiration_date, ClinicLicense.id)
        )
        rows = []
        for clinic_license, location_name, type_name in result.all():
            row = {key: getattr(clinic_license, key, None) for _, key in CLINIC_LICENSE_EXPORT_FIELDS}
            row["location_name"] = location_name
            row["license_type_name"] = type_name
            rows.append(row)
        return rows

    async def clinic_license_expirations(self, days: int = 90) -> list[ClinicLicense]:
        return await ClinicLicenseService(self.session).expiring(days)
