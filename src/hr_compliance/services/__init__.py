"""HR compliance services."""

from hr_compliance.services.api_key_service import ApiKeyService
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.compliance_service import (
    ClinicLicenseService,
    ComplianceDocumentService,
    LicenseTypeService,
    LocationService,
    ResponsiblePersonService,
)
from hr_compliance.services.crud import CrudService, Page
from hr_compliance.services.employee_service import (
    DocumentService,
    EmployeeRecordService,
    EmployeeService,
    record_service,
)
from hr_compliance.services.errors import (
    AuthenticationError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ServiceError,
)
from hr_compliance.services.rate_limiter import HourlyRateLimiter, rate_limiter
from hr_compliance.services.report_service import ReportService
from hr_compliance.services.user_service import UserService

__all__ = [
    "ApiKeyService",
    "AuditContext",
    "AuditService",
    "AuthenticationError",
    "ClinicLicenseService",
    "ComplianceDocumentService",
    "ConflictError",
    "CrudService",
    "DocumentService",
    "EmployeeRecordService",
    "EmployeeService",
    "HourlyRateLimiter",
    "InvalidOperationError",
    "LicenseTypeService",
    "LocationService",
    "NotFoundError",
    "Page",
    "PermissionDeniedError",
    "RateLimitExceededError",
    "ReportService",
    "ResponsiblePersonService",
    "ServiceError",
    "UserService",
    "rate_limiter",
    "record_service",
]
