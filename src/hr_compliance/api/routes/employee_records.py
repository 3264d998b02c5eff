"""Endpoints for records owned by an employee.

Every kind of record gets the same four routes::

    GET    /api/employees/{employee_id}/{kind}
    POST   /api/employees/{employee_id}/{kind}
    PUT    /api/{kind}/{record_id}
    DELETE /api/{kind}/{record_id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from pydantic import create_model

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.schemas import (
    RECORD_SCHEMAS,
    DocumentResponse,
    ErrorResponse,
    ORMModel,
)
from hr_compliance.api.security import WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.employee_service import RECORD_KINDS, record_service

router = APIRouter(prefix="/api", tags=["employee-records"])

# Kinds guarded by a scope other than read/write:employees
KIND_PERMISSIONS = {
    "state-licenses": ("read:licenses", "write:licenses"),
    "dea-licenses": ("read:licenses", "write:licenses"),
    "documents": ("read:documents", "write:documents"),
}

EmployeeId = Annotated[int, Path(ge=1)]
RecordId = Annotated[int, Path(ge=1)]


def _response_model(kind: str, schema: type) -> type[ORMModel]:
    if kind == "documents":
        return DocumentResponse
    model, _ = RECORD_KINDS[kind]
    return create_model(
        f"{model.__name__}Response",
        __base__=(ORMModel, schema),
        id=(int, ...),
        employee_id=(int, ...),
    )


def register_kind(kind: str) -> None:
    """Add the list/create/update/delete routes for one kind of record."""
    schema = RECORD_SCHEMAS[kind]
    model, entity_name = RECORD_KINDS[kind]
    response_model = _response_model(kind, schema)
    read_permission, write_permission = KIND_PERMISSIONS.get(
        kind, ("read:employees", "write:employees")
    )

    Reader = Annotated[Identity, Depends(guard(read_permission))]
    Writer = Annotated[Identity, Depends(guard(write_permission, WRITERS))]
    Audit = Annotated[AuditContext, Depends(audit_context(model.__tablename__))]

    async def list_records(db: DbSession, _: Reader, employee_id: EmployeeId):
        records = await record_service(db, kind).list_for_employee(employee_id)
        return [response_model.model_validate(r) for r in records]

    async def create_record(
        db: DbSession, _: Writer, audit: Audit, employee_id: EmployeeId, payload: schema
    ):
        record = await record_service(db, kind).create_for_employee(
            employee_id, payload.model_dump(exclude_unset=True)
        )
        await AuditService(db).log(audit, record.id, new_data=record)
        await db.commit()
        return response_model.model_validate(record)

    async def update_record(
        db: DbSession, _: Writer, audit: Audit, record_id: RecordId, payload: schema
    ):
        before, record = await record_service(db, kind).update(
            record_id, payload.model_dump(exclude_unset=True)
        )
        await AuditService(db).log(audit, record.id, old_data=before, new_data=record)
        await db.commit()
        return response_model.model_validate(record)

    async def delete_record(db: DbSession, _: Writer, audit: Audit, record_id: RecordId):
        before = await record_service(db, kind).delete(record_id)
        await AuditService(db).log(audit, record_id, old_data=before)
        await db.commit()

    table = model.__tablename__
    not_found = {404: {"model": ErrorResponse}}
    router.add_api_route(
        f"/employees/{{employee_id}}/{kind}",
        list_records,
        methods=["GET"],
        response_model=list[response_model],
        name=f"list_{table}",
        summary=f"List {entity_name.lower()} records of an employee",
        responses=not_found,
    )
    router.add_api_route(
        f"/employees/{{employee_id}}/{kind}",
        create_record,
        methods=["POST"],
        response_model=response_model,
        status_code=status.HTTP_201_CREATED,
        name=f"create_{table}",
        summary=f"Add a {entity_name.lower()} record to an employee",
        responses=not_found,
    )
    router.add_api_route(
        f"/{kind}/{{record_id}}",
        update_record,
        methods=["PUT"],
        response_model=response_model,
        name=f"update_{table}",
        summary=f"Update a {entity_name.lower()} record",
        responses=not_found,
    )
    router.add_api_route(
        f"/{kind}/{{record_id}}",
        delete_record,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
        name=f"delete_{table}",
        summary=f"Delete a {entity_name.lower()} record",
        responses=not_found,
    )


for _kind in RECORD_KINDS:
    register_kind(_kind)
