"""Clinic compliance services: locations, licence types, clinic licences."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from sqlalchemy import func, select

from hr_compliance.models import (
    ClinicLicense,
    ComplianceDocument,
    Employee,
    LicenseType,
    Location,
    ResponsiblePerson,
)
from hr_compliance.models.base import Base, utcnow
from hr_compliance.services.crud import CrudService
from hr_compliance.services.errors import ServiceError

logger = logging.getLogger(__name__)


def today_utc() -> date:
    return utcnow().date()


async def _require(session, model: type[Base], record_id: int | None, label: str) -> None:
    """Reject references to rows that do not exist."""
    if record_id is not None and await session.get(model, record_id) is None:
        raise ServiceError(f"{label} {record_id} does not exist")


class LocationService(CrudService[Location]):
    """Service for the location tree."""

    model = Location
    entity_name = "Location"
    search_columns = ("name", "code", "city")
    order_columns = ("name", "id")

    async def validate(self, data: dict[str, Any], record: Location | None = None) -> None:
        parent_id = data.get("parent_id")
        if parent_id is None:
            return
        await _require(self.session, Location, parent_id, "Parent location")
        if record is not None:
            await self._check_not_ancestor(record.id, parent_id)

    async def _check_not_ancestor(self, location_id: int, parent_id: int) -> None:
        """Walk up from ``parent_id``; reaching ``location_id`` would close a cycle."""
        seen: set[int] = set()
        current: int | None = parent_id
        while current is not None and current not in seen:
            if current == location_id:
                raise ServiceError("A location cannot be its own ancestor")
            seen.add(current)
            current = await self.session.scalar(
                select(Location.parent_id).where(Location.id == current)
            )

    async def tree(self) -> list[dict[str, Any]]:
        """All locations nested under their parents."""
        locations = await self.list_all()
        nodes = {loc.id: {**loc.to_dict(), "children": []} for loc in locations}
        roots = []
        for loc in locations:
            node = nodes[loc.id]
            parent = nodes.get(loc.parent_id) if loc.parent_id is not None else None
            if parent is None:
                roots.append(node)
            else:
                parent["children"].append(node)
        return roots


class LicenseTypeService(CrudService[LicenseType]):
    """Service for licence type definitions."""

    model = LicenseType
    entity_name = "License type"
    search_columns = ("name", "code", "issuing_authority")
    order_columns = ("sort_order", "name", "id")


class ResponsiblePersonService(CrudService[ResponsiblePerson]):
    """Service for people accountable for licences."""

    model = ResponsiblePerson
    entity_name = "Responsible person"
    search_columns = ("first_name", "last_name", "email")
    order_columns = ("last_name", "first_name", "id")

    async def validate(
        self, data: dict[str, Any], record: ResponsiblePerson | None = None
    ) -> None:
        await _require(self.session, Employee, data.get("employee_id"), "Employee")


class ClinicLicenseService(CrudService[ClinicLicense]):
    """Service for licences held by locations."""

    model = ClinicLicense
    entity_name = "Clinic license"
    search_columns = ("license_number", "issuing_authority")
    order_columns = ("expiration_date", "id")

    async def validate(self, data: dict[str, Any], record: ClinicLicense | None = None) -> None:
        await _require(self.session, Location, data.get("location_id"), "Location")
        await _require(self.session, LicenseType, data.get("license_type_id"), "License type")
        await _require(
            self.session, ResponsiblePerson, data.get("primary_responsible_id"), "Responsible person"
        )
        await _require(
            self.session, ResponsiblePerson, data.get("backup_responsible_id"), "Responsible person"
        )

        issue = data.get("issue_date", record.issue_date if record else None)
        expiration = data.get("expiration_date", record.expiration_date if record else None)
        if issue and expiration and expiration < issue:
            raise ServiceError("Expiration date must be on or after the issue date")

    async def expiring(self, days: int = 90, today: date | None = None) -> list[ClinicLicense]:
        """Licences expiring within ``days``; already-expired ones are excluded."""
        today = today or today_utc()
        result = await self.session.execute(
            select(ClinicLicense)
            .where(
                ClinicLicense.expiration_date >= today,
                ClinicLicense.expiration_date <= today + timedelta(days=days),
                ClinicLicense.status.notin_(("revoked", "suspended")),
            )
            .order_by(ClinicLicense.expiration_date, ClinicLicense.id)
        )
        return list(result.scalars().all())

    async def expired(self, today: date | None = None) -> list[ClinicLicense]:
        today = today or today_utc()
        result = await self.session.execute(
            select(ClinicLicense)
            .where(ClinicLicense.expiration_date < today)
            .order_by(ClinicLicense.expiration_date, ClinicLicense.id)
        )
        return list(result.scalars().all())

    async def stats(self, today: date | None = None) -> dict[str, Any]:
        """Counts by status and compliance status plus expiry buckets."""
        today = today or today_utc()
        by_status = dict(
            (await self.session.execute(
                select(ClinicLicense.status, func.count()).group_by(ClinicLicense.status)
            )).all()
        )
        by_compliance = dict(
            (await self.session.execute(
                select(ClinicLicense.compliance_status, func.count()).group_by(
                    ClinicLicense.compliance_status
                )
            )).all()
        )
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_compliance_status": by_compliance,
            "expiring_30_days": len(await self.expiring(30, today)),
            "expired": len(await self.expired(today)),
        }


class ComplianceDocumentService(CrudService[ComplianceDocument]):
    """Service for documents filed against clinic licences or locations."""

    model = ComplianceDocument
    entity_name = "Compliance document"
    search_columns = ("document_name", "document_number", "file_name")
    order_columns = ("id",)

    async def validate(
        self, data: dict[str, Any], record: ComplianceDocument | None = None
    ) -> None:
        clinic_license_id = data.get(
            "clinic_license_id", record.clinic_license_id if record else None
        )
        location_id = data.get("location_id", record.location_id if record else None)
        if clinic_license_id is None and location_id is None:
            raise ServiceError("A compliance document needs a clinic license or a location")
        await _require(self.session, ClinicLicense, data.get("clinic_license_id"), "Clinic license")
        await _require(self.session, Location, data.get("location_id"), "Location")

    async def stats(self, today: date | None = None) -> dict[str, Any]:
        today = today or today_utc()
        by_type = dict(
            (await self.session.execute(
                select(ComplianceDocument.document_type, func.count()).group_by(
                    ComplianceDocument.document_type
                )
            )).all()
        )
        expiring = await self.session.scalar(
            select(func.count())
            .select_from(ComplianceDocument)
            .where(
                ComplianceDocument.expiration_date >= today,
                ComplianceDocument.expiration_date <= today + timedelta(days=30),
            )
        )
        expired = await self.session.scalar(
            select(func.count())
            .select_from(ComplianceDocument)
            .where(ComplianceDocument.expiration_date < today)
        )
        return {
            "total": sum(by_type.values()),
            "by_type": by_type,
            "expiring_30_days": expiring or 0,
            "expired": expired or 0,
        }
