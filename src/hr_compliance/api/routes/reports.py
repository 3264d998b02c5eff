"""Employee reports, exports and the manual expiration check."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.schemas import EmployeeStats, ExpirationCheckResponse, ExpiringItem
from hr_compliance.api.security import Identity, guard, require_session_roles
from hr_compliance.models import User
from hr_compliance.services.report_service import EMPLOYEE_EXPORT_FIELDS, ReportService, to_csv
from hr_compliance.tasks.compliance import run_expiration_check

router = APIRouter(prefix="/api", tags=["reports"])

Reporter = Annotated[Identity, Depends(guard("read:reports"))]
EmployeeReader = Annotated[Identity, Depends(guard("read:employees"))]
CronAdmin = Annotated[User, Depends(require_session_roles("admin"))]


@router.get("/reports/expiring", response_model=list[ExpiringItem])
async def expiring_items(
    db: DbSession,
    _: Reporter,
    days: Annotated[int, Query(ge=1, le=365)] = 30,
) -> list[ExpiringItem]:
    """Employee licences and certifications expiring within ``days``."""
    return [ExpiringItem(**item) for item in await ReportService(db).expiring_items(days)]


@router.get("/reports/stats", response_model=EmployeeStats)
async def employee_stats(db: DbSession, _: Reporter) -> EmployeeStats:
    return EmployeeStats(**await ReportService(db).employee_stats())


@router.get("/export/employees")
async def export_employees(
    db: DbSession,
    _: EmployeeReader,
    export_format: Annotated[Literal["csv", "json"], Query(alias="format")] = "json",
):
    rows = await ReportService(db).employee_export_rows()
    if export_format == "csv":
        return Response(
            content=to_csv(rows, EMPLOYEE_EXPORT_FIELDS),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="employees.csv"'},
        )
    return rows


@router.get("/cron/check-expirations", response_model=ExpirationCheckResponse)
async def check_expirations(db: DbSession, _: CronAdmin) -> ExpirationCheckResponse:
    """Run the daily expiration check now."""
    items = await run_expiration_check(db)
    return ExpirationCheckResponse(
        message="Expiration check completed",
        count=len(items),
        items=[ExpiringItem(**item) for item in items],
    )
