"""Clinic compliance dashboard, alerts and exports."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.schemas import (
    ComplianceAlert,
    ComplianceDashboard,
    LocationComplianceSummary,
)
from hr_compliance.api.security import Identity, guard
from hr_compliance.services.report_service import (
    CLINIC_LICENSE_EXPORT_FIELDS,
    ReportService,
    to_csv,
)

router = APIRouter(prefix="/api/compliance", tags=["compliance"])

Reader = Annotated[Identity, Depends(guard("read:licenses"))]
ExportFormat = Literal["csv", "json"]


@router.get("/dashboard", response_model=ComplianceDashboard)
async def compliance_dashboard(db: DbSession, _: Reader) -> ComplianceDashboard:
    return ComplianceDashboard(**await ReportService(db).compliance_dashboard())


@router.get("/alerts", response_model=list[ComplianceAlert])
async def compliance_alerts(db: DbSession, _: Reader) -> list[ComplianceAlert]:
    """Expired, soon-expiring and non-compliant clinic licences."""
    return [ComplianceAlert(**alert) for alert in await ReportService(db).compliance_alerts()]


@router.get("/summary", response_model=list[LocationComplianceSummary])
async def compliance_summary(db: DbSession, _: Reader) -> list[LocationComplianceSummary]:
    return [
        LocationComplianceSummary(**entry) for entry in await ReportService(db).location_summary()
    ]


@router.get("/export")
async def export_clinic_licenses(
    db: DbSession,
    _: Reader,
    export_format: Annotated[ExportFormat, Query(alias="format")] = "json",
):
    """Export every clinic licence with its location and type names."""
    rows = await ReportService(db).clinic_license_export_rows()
    if export_format == "csv":
        return Response(
            content=to_csv(rows, CLINIC_LICENSE_EXPORT_FIELDS),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="clinic-licenses.csv"'},
        )
    return rows
