"""Responsible person endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import (
    ErrorResponse,
    PersonStatus,
    ResponsiblePersonCreate,
    ResponsiblePersonListResponse,
    ResponsiblePersonResponse,
    ResponsiblePersonUpdate,
)
from hr_compliance.api.security import WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.compliance_service import ResponsiblePersonService

router = APIRouter(prefix="/api/responsible-persons", tags=["responsible-persons"])

PersonId = Annotated[int, Path(ge=1)]
Reader = Annotated[Identity, Depends(guard("read:licenses"))]
Writer = Annotated[Identity, Depends(guard("write:licenses", WRITERS))]
Audit = Annotated[AuditContext, Depends(audit_context("responsible_persons"))]


@router.get("", response_model=ResponsiblePersonListResponse)
async def list_responsible_persons(
    db: DbSession,
    _: Reader,
    params: PageParams,
    status_filter: Annotated[PersonStatus | None, Query(alias="status")] = None,
    employee_id: Annotated[int | None, Query(ge=1)] = None,
) -> ResponsiblePersonListResponse:
    result = await ResponsiblePersonService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={"status": status_filter, "employee_id": employee_id},
    )
    return ResponsiblePersonListResponse(
        responsible_persons=[ResponsiblePersonResponse.model_validate(p) for p in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/{person_id}",
    response_model=ResponsiblePersonResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_responsible_person(
    db: DbSession, _: Reader, person_id: PersonId
) -> ResponsiblePersonResponse:
    person = await ResponsiblePersonService(db).get(person_id)
    return ResponsiblePersonResponse.model_validate(person)


@router.post(
    "",
    response_model=ResponsiblePersonResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_responsible_person(
    db: DbSession, _: Writer, audit: Audit, payload: ResponsiblePersonCreate
) -> ResponsiblePersonResponse:
    person = await ResponsiblePersonService(db).create(payload.model_dump(exclude_unset=True))
    await AuditService(db).log(audit, person.id, new_data=person)
    await db.commit()
    return ResponsiblePersonResponse.model_validate(person)


@router.put(
    "/{person_id}",
    response_model=ResponsiblePersonResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_responsible_person(
    db: DbSession,
    _: Writer,
    audit: Audit,
    person_id: PersonId,
    payload: ResponsiblePersonUpdate,
) -> ResponsiblePersonResponse:
    before, person = await ResponsiblePersonService(db).update(
        person_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, person.id, old_data=before, new_data=person)
    await db.commit()
    return ResponsiblePersonResponse.model_validate(person)


@router.delete(
    "/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_responsible_person(
    db: DbSession, _: Writer, audit: Audit, person_id: PersonId
) -> None:
    """Delete a person; licences they were responsible for keep no assignee."""
    before = await ResponsiblePersonService(db).delete(person_id)
    await AuditService(db).log(audit, person_id, old_data=before)
    await db.commit()
