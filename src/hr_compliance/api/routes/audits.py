"""Audit trail endpoints."""

from datetime import date, datetime, time, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.schemas import AuditListResponse, AuditResponse
from hr_compliance.api.security import WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditService

router = APIRouter(prefix="/api/audits", tags=["audits"])

Auditor = Annotated[Identity, Depends(guard("read:audits", WRITERS))]


def _day_bound(day: date | None, bound: time) -> datetime | None:
    return datetime.combine(day, bound, tzinfo=timezone.utc) if day else None


@router.get("", response_model=AuditListResponse)
async def list_audits(
    db: DbSession,
    _: Auditor,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 25,
    table_name: Annotated[str | None, Query(max_length=100)] = None,
    action: Annotated[str | None, Query(max_length=20)] = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> AuditListResponse:
    """List audit records, newest first. Date bounds are inclusive UTC days."""
    result = await AuditService(db).list_audits(
        page=page,
        limit=limit,
        table_name=table_name,
        action=action.upper() if action else None,
        start_date=_day_bound(start_date, time.min),
        end_date=_day_bound(end_date, time.max),
    )
    return AuditListResponse(
        audits=[AuditResponse.model_validate(a) for a in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/{table_name}/{record_id}", response_model=list[AuditResponse])
async def record_history(
    db: DbSession,
    _: Auditor,
    table_name: Annotated[str, Path(max_length=100)],
    record_id: Annotated[int, Path(ge=1)],
) -> list[AuditResponse]:
    """Every change to one record, oldest first."""
    history = await AuditService(db).history(table_name, record_id)
    return [AuditResponse.model_validate(a) for a in history]
