"""ORM models."""

from hr_compliance.models.api_key import ApiKey, ApiKeyRotation
from hr_compliance.models.audit import Audit
from hr_compliance.models.base import Base
from hr_compliance.models.compliance import (
    ClinicLicense,
    ComplianceDocument,
    LicenseType,
    Location,
    ResponsiblePerson,
)
from hr_compliance.models.employee import (
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
from hr_compliance.models.user import User

__all__ = [
    "ApiKey",
    "ApiKeyRotation",
    "Audit",
    "Base",
    "BoardCertification",
    "ClinicLicense",
    "ComplianceDocument",
    "DeaLicense",
    "Document",
    "Education",
    "EmergencyContact",
    "Employee",
    "Employment",
    "IncidentLog",
    "LicenseType",
    "Location",
    "PayerEnrollment",
    "PeerReference",
    "ResponsiblePerson",
    "StateLicense",
    "TaxForm",
    "Training",
    "User",
]
