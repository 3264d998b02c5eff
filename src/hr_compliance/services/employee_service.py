"""Employee and employee sub-record services."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, select

from hr_compliance.models import (
    BoardCertification,
    DeaLicense,
    Document,
    Education,
    EmergencyContact,
    Employee,
    Employment,
    IncidentLog,
    PayerEnrollment,
    PeerReference,
    StateLicense,
    TaxForm,
    Training,
)
from hr_compliance.models.base import Base
from hr_compliance.services.crud import CrudService, Page, paginate
from hr_compliance.services.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)


class EmployeeService(CrudService[Employee]):
    """Service for employee profiles."""

    model = Employee
    entity_name = "Employee"
    search_columns = ("first_name", "last_name", "work_email")
    order_columns = ("last_name", "first_name", "id")

    def apply_filters(
        self,
        query: Select[Any],
        search: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> Select[Any]:
        filters = dict(filters or {})
        # Departments are not modelled; match them against the job title
        department = filters.pop("department", None)
        location = filters.pop("location", None)
        query = super().apply_filters(query, search, filters)
        if department:
            query = query.where(Employee.job_title.ilike(f"%{department}%"))
        if location:
            query = query.where(Employee.work_location == location)
        return query


class EmployeeRecordService(CrudService[Base]):
    """CRUD for one kind of record owned by an employee."""

    def __init__(self, session, model: type[Base], entity_name: str):
        super().__init__(session)
        self.model = model
        self.entity_name = entity_name

    async def _require_employee(self, employee_id: int) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def list_for_employee(self, employee_id: int) -> list[Base]:
        await self._require_employee(employee_id)
        return await self.list_all(filters={"employee_id": employee_id})

    async def create_for_employee(self, employee_id: int, data: dict[str, Any]) -> Base:
        await self._require_employee(employee_id)
        return await self.create({**data, "employee_id": employee_id})

    async def validate(self, data: dict[str, Any], record: Base | None = None) -> None:
        if "employee_id" in data and record is not None and data["employee_id"] != record.employee_id:
            raise ServiceError("Records cannot be moved between employees")


class DocumentService(EmployeeRecordService):
    """Employee document metadata, newest first."""

    search_columns = ("document_type", "document_name")
    order_columns = ("id",)

    def __init__(self, session):
        super().__init__(session, Document, "Document")

    async def list_page(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> Page[Document]:
        query = self.apply_filters(select(Document), search, filters)
        query = query.order_by(Document.created_at.desc(), Document.id.desc())
        items, total = await paginate(self.session, query, page, limit)
        return Page(items=items, total=total, page=page, limit=limit)


# URL slug -> (model, entity name)
RECORD_KINDS: dict[str, tuple[type[Base], str]] = {
    "educations": (Education, "Education"),
    "employments": (Employment, "Employment"),
    "peer-references": (PeerReference, "Peer reference"),
    "state-licenses": (StateLicense, "State license"),
    "dea-licenses": (DeaLicense, "DEA license"),
    "board-certifications": (BoardCertification, "Board certification"),
    "emergency-contacts": (EmergencyContact, "Emergency contact"),
    "tax-forms": (TaxForm, "Tax form"),
    "trainings": (Training, "Training"),
    "payer-enrollments": (PayerEnrollment, "Payer enrollment"),
    "incident-logs": (IncidentLog, "Incident log"),
    "documents": (Document, "Document"),
}


def record_service(session, kind: str) -> EmployeeRecordService:
    """Service for the sub-record kind named by its URL slug."""
    if kind == "documents":
        return DocumentService(session)
    try:
        model, entity_name = RECORD_KINDS[kind]
    except KeyError:
        raise NotFoundError("Record type", kind) from None
    return EmployeeRecordService(session, model, entity_name)
