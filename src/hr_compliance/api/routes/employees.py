"""Employee API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeStatus,
    EmployeeUpdate,
    ErrorResponse,
)
from hr_compliance.api.security import ADMINS, WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.employee_service import EmployeeService

router = APIRouter(prefix="/api/employees", tags=["employees"])

EmployeeId = Annotated[int, Path(ge=1)]
Reader = Annotated[Identity, Depends(guard("read:employees"))]
Writer = Annotated[Identity, Depends(guard("write:employees", WRITERS))]
Deleter = Annotated[Identity, Depends(guard("delete:employees", ADMINS))]
Audit = Annotated[AuditContext, Depends(audit_context("employees"))]


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    db: DbSession,
    _: Reader,
    params: PageParams,
    status_filter: Annotated[EmployeeStatus | None, Query(alias="status")] = None,
    department: Annotated[str | None, Query(max_length=100)] = None,
    location: Annotated[str | None, Query(max_length=100)] = None,
) -> EmployeeListResponse:
    """List employees ordered by last then first name."""
    result = await EmployeeService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={"status": status_filter, "department": department, "location": location},
    )
    return EmployeeListResponse(
        employees=[EmployeeResponse.model_validate(e) for e in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(db: DbSession, _: Reader, employee_id: EmployeeId) -> EmployeeResponse:
    """Get a specific employee by ID."""
    employee = await EmployeeService(db).get(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_employee(
    db: DbSession,
    _: Writer,
    audit: Audit,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    """Create an employee."""
    employee = await EmployeeService(db).create(payload.model_dump(exclude_unset=True))
    await AuditService(db).log(audit, employee.id, new_data=employee)
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    _: Writer,
    audit: Audit,
    employee_id: EmployeeId,
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Update an employee's profile."""
    before, employee = await EmployeeService(db).update(
        employee_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, employee.id, old_data=before, new_data=employee)
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(
    db: DbSession,
    _: Deleter,
    audit: Audit,
    employee_id: EmployeeId,
) -> None:
    """Delete an employee and every record they own."""
    before = await EmployeeService(db).delete(employee_id)
    await AuditService(db).log(audit, employee_id, old_data=before)
    await db.commit()
