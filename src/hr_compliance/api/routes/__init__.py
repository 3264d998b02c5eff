"""API routes."""

from hr_compliance.api.routes.api_keys import router as api_keys_router
from hr_compliance.api.routes.audits import router as audits_router
from hr_compliance.api.routes.auth import router as auth_router
from hr_compliance.api.routes.clinic_licenses import router as clinic_licenses_router
from hr_compliance.api.routes.compliance import router as compliance_router
from hr_compliance.api.routes.compliance_documents import router as compliance_documents_router
from hr_compliance.api.routes.documents import router as documents_router
from hr_compliance.api.routes.employee_records import router as employee_records_router
from hr_compliance.api.routes.employees import router as employees_router
from hr_compliance.api.routes.health import router as health_router
from hr_compliance.api.routes.locations import router as locations_router
from hr_compliance.api.routes.reports import router as reports_router
from hr_compliance.api.routes.responsible_persons import router as responsible_persons_router

__all__ = [
    "api_keys_router",
    "audits_router",
    "auth_router",
    "clinic_licenses_router",
    "compliance_documents_router",
    "compliance_router",
    "documents_router",
    "employee_records_router",
    "employees_router",
    "health_router",
    "locations_router",
    "reports_router",
    "responsible_persons_router",
]
