"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from hr_compliance.services.user_service import MAX_PASSWORD_BYTES

EmployeeStatus = Literal["active", "inactive", "on_leave", "terminated"]
UserRole = Literal["admin", "hr", "viewer"]
LocationType = Literal["main_org", "sub_location"]
LocationStatus = Literal["active", "inactive", "closed"]
LicenseCategory = Literal[
    "medical",
    "facility",
    "pharmacy",
    "laboratory",
    "radiology",
    "environmental",
    "business",
    "other",
]
LicenseStatus = Literal["active", "expired", "pending", "suspended", "revoked"]
ComplianceStatus = Literal["compliant", "non_compliant", "pending_review", "at_risk"]
RenewalStatus = Literal["not_started", "in_progress", "submitted", "approved", "denied"]
ContactMethod = Literal["email", "phone", "sms"]
ReminderFrequency = Literal["daily", "weekly", "monthly"]
PersonStatus = Literal["active", "inactive"]
ComplianceDocumentType = Literal[
    "license",
    "certificate",
    "inspection_report",
    "renewal_application",
    "correspondence",
    "other",
]
ApiKeyEnvironment = Literal["live", "test"]

NameStr = Annotated[str, Field(min_length=1, max_length=50)]


class ORMModel(BaseModel):
    """Base for responses built from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Common schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str


class FieldError(BaseModel):
    """One failed validation rule."""

    field: str
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    """Body returned when request validation fails."""

    error: str = "Validation failed"
    details: list[FieldError]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class PageResponse(BaseModel):
    """Pagination metadata shared by list responses."""

    total: int
    page: int
    total_pages: int


# ============================================================================
# Auth schemas
# ============================================================================


class RegisterRequest(BaseModel):
    """Schema for creating an account."""

    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=8, max_length=72)
    role: UserRole = "hr"

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        # bcrypt only accepts 72 bytes of input
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Schema for username/password login."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class UserResponse(ORMModel):
    """Schema for user response. The password hash is never exposed."""

    id: int
    username: str
    role: str
    created_at: datetime


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeFields(BaseModel):
    """Optional employee profile fields shared by create and update."""

    middle_name: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=20)
    birth_city: str | None = Field(default=None, max_length=50)
    birth_state: str | None = Field(default=None, max_length=50)
    birth_country: str | None = Field(default=None, max_length=50)
    ssn: str | None = Field(default=None, pattern=r"^\d{3}-?\d{2}-?\d{4}$")
    personal_email: EmailStr | None = None
    cell_phone: str | None = Field(default=None, max_length=20)
    work_phone: str | None = Field(default=None, max_length=20)
    home_address1: str | None = Field(default=None, max_length=100)
    home_address2: str | None = Field(default=None, max_length=100)
    home_city: str | None = Field(default=None, max_length=50)
    home_state: str | None = Field(default=None, max_length=50)
    home_zip: str | None = Field(default=None, max_length=10)
    drivers_license_number: str | None = Field(default=None, max_length=50)
    dl_state_issued: str | None = Field(default=None, max_length=50)
    dl_issue_date: date | None = None
    dl_expiration_date: date | None = None
    npi_number: str | None = Field(default=None, pattern=r"^\d{10}$")
    enumeration_date: date | None = None
    job_title: str | None = Field(default=None, max_length=100)
    work_location: str | None = Field(default=None, max_length=100)
    qualification: str | None = None
    medical_license_number: str | None = Field(default=None, max_length=50)
    substance_use_license_number: str | None = Field(default=None, max_length=50)
    substance_use_qualification: str | None = None
    mental_health_license_number: str | None = Field(default=None, max_length=50)
    mental_health_qualification: str | None = None
    medicaid_number: str | None = Field(default=None, max_length=50)
    medicare_ptan_number: str | None = Field(default=None, max_length=50)
    caqh_provider_id: str | None = Field(default=None, max_length=50)
    caqh_issue_date: date | None = None
    caqh_last_attestation_date: date | None = None
    caqh_enabled: bool = False
    caqh_reattestation_due_date: date | None = None
    caqh_login_id: str | None = Field(default=None, max_length=50)
    nppes_login_id: str | None = Field(default=None, max_length=50)

    @field_validator("date_of_birth")
    @classmethod
    def not_in_future(cls, value: date | None) -> date | None:
        if value is not None and value > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


class EmployeeCreate(EmployeeFields):
    """Schema for creating an employee."""

    first_name: NameStr
    last_name: NameStr
    work_email: EmailStr
    status: EmployeeStatus = "active"


class EmployeeUpdate(EmployeeFields):
    """Schema for a partial employee update."""

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    work_email: EmailStr | None = None
    status: EmployeeStatus | None = None


class EmployeeResponse(ORMModel):
    """Schema for employee response. The SSN is never returned."""

    id: int
    first_name: str
    middle_name: str | None = None
    last_name: str
    date_of_birth: date | None = None
    gender: str | None = None
    birth_city: str | None = None
    birth_state: str | None = None
    birth_country: str | None = None
    personal_email: str | None = None
    work_email: str
    cell_phone: str | None = None
    work_phone: str | None = None
    home_address1: str | None = None
    home_address2: str | None = None
    home_city: str | None = None
    home_state: str | None = None
    home_zip: str | None = None
    drivers_license_number: str | None = None
    dl_state_issued: str | None = None
    dl_issue_date: date | None = None
    dl_expiration_date: date | None = None
    npi_number: str | None = None
    enumeration_date: date | None = None
    job_title: str | None = None
    work_location: str | None = None
    qualification: str | None = None
    medical_license_number: str | None = None
    substance_use_license_number: str | None = None
    substance_use_qualification: str | None = None
    mental_health_license_number: str | None = None
    mental_health_qualification: str | None = None
    medicaid_number: str | None = None
    medicare_ptan_number: str | None = None
    caqh_provider_id: str | None = None
    caqh_issue_date: date | None = None
    caqh_last_attestation_date: date | None = None
    caqh_enabled: bool = False
    caqh_reattestation_due_date: date | None = None
    caqh_login_id: str | None = None
    nppes_login_id: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class EmployeeListResponse(PageResponse):
    """Schema for listing employees."""

    employees: list[EmployeeResponse]


# ============================================================================
# Employee sub-record schemas
# ============================================================================


class EducationIn(BaseModel):
    education_type: str | None = Field(default=None, max_length=50)
    school_institution: str | None = Field(default=None, min_length=1, max_length=100)
    degree: str | None = Field(default=None, min_length=1, max_length=50)
    specialty_major: str | None = Field(default=None, max_length=100)
    start_date: date | None = None
    end_date: date | None = None


class EmploymentIn(BaseModel):
    employer: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None

    @model_validator(mode="after")
    def end_after_start(self) -> "EmploymentIn":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after the start date")
        return self


class PeerReferenceIn(BaseModel):
    reference_name: str | None = Field(default=None, max_length=100)
    contact_info: str | None = Field(default=None, max_length=100)
    relationship: str | None = Field(default=None, max_length=100)
    comments: str | None = None


class StateLicenseIn(BaseModel):
    license_number: str = Field(min_length=1, max_length=50)
    state: str = Field(min_length=2, max_length=2)
    issue_date: date | None = None
    expiration_date: date | None = None
    status: str | None = Field(default=None, max_length=50)


class DeaLicenseIn(BaseModel):
    license_number: str = Field(min_length=1, max_length=50)
    issue_date: date | None = None
    expiration_date: date | None = None
    status: str | None = Field(default=None, max_length=50)


class BoardCertificationIn(BaseModel):
    board_name: str | None = Field(default=None, max_length=100)
    certification: str | None = Field(default=None, max_length=100)
    issue_date: date | None = None
    expiration_date: date | None = None
    status: str | None = Field(default=None, max_length=50)


class DocumentIn(BaseModel):
    document_type: str = Field(min_length=1, max_length=100)
    document_name: str | None = Field(default=None, max_length=255)
    file_name: str | None = Field(default=None, max_length=255)
    storage_key: str | None = Field(default=None, max_length=500)
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = Field(default=None, max_length=100)
    signed_date: date | None = None
    expiration_date: date | None = None
    is_verified: bool = False
    verified_by: str | None = Field(default=None, max_length=100)
    verification_date: date | None = None
    notes: str | None = None


class EmergencyContactIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    relationship: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None


class TaxFormIn(BaseModel):
    form_type: str = Field(min_length=1, max_length=50)
    file_path: str | None = Field(default=None, max_length=255)
    submitted_date: date | None = None
    status: str | None = Field(default=None, max_length=50)


class TrainingIn(BaseModel):
    training_type: str | None = Field(default=None, max_length=100)
    provider: str | None = Field(default=None, max_length=100)
    completion_date: date | None = None
    expiration_date: date | None = None
    credits: Decimal | None = Field(default=None, ge=0, max_digits=5, decimal_places=2)
    certificate_path: str | None = Field(default=None, max_length=255)


class PayerEnrollmentIn(BaseModel):
    payer_name: str | None = Field(default=None, max_length=100)
    enrollment_id: str | None = Field(default=None, max_length=50)
    enrollment_date: date | None = None
    status: str | None = Field(default=None, max_length=50)


class IncidentLogIn(BaseModel):
    incident_date: date
    description: str | None = None
    resolution: str | None = None
    reported_by: str | None = Field(default=None, max_length=50)


# URL slug -> request schema for that kind of record
RECORD_SCHEMAS: dict[str, type[BaseModel]] = {
    "educations": EducationIn,
    "employments": EmploymentIn,
    "peer-references": PeerReferenceIn,
    "state-licenses": StateLicenseIn,
    "dea-licenses": DeaLicenseIn,
    "board-certifications": BoardCertificationIn,
    "emergency-contacts": EmergencyContactIn,
    "tax-forms": TaxFormIn,
    "trainings": TrainingIn,
    "payer-enrollments": PayerEnrollmentIn,
    "incident-logs": IncidentLogIn,
    "documents": DocumentIn,
}


class DocumentResponse(ORMModel, DocumentIn):
    """Schema for employee document response."""

    id: int
    employee_id: int
    created_at: datetime


class DocumentListResponse(PageResponse):
    """Schema for listing employee documents."""

    documents: list[DocumentResponse]


# ============================================================================
# Location and licence type schemas
# ============================================================================


class LocationFields(BaseModel):
    code: str | None = Field(default=None, max_length=20)
    parent_id: int | None = Field(default=None, ge=1)
    address1: str | None = Field(default=None, max_length=100)
    address2: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=50)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=10)
    phone: str | None = Field(default=None, max_length=20)
    fax: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    website: str | None = Field(default=None, max_length=255)
    tax_id: str | None = Field(default=None, max_length=20)
    npi_number: str | None = Field(default=None, max_length=20)
    compliance_notes: str | None = None


class LocationCreate(LocationFields):
    name: str = Field(min_length=1, max_length=100)
    type: LocationType = "sub_location"
    country: str = Field(default="USA", max_length=50)
    status: LocationStatus = "active"
    is_compliance_required: bool = True


class LocationUpdate(LocationFields):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: LocationType | None = None
    country: str | None = Field(default=None, max_length=50)
    status: LocationStatus | None = None
    is_compliance_required: bool | None = None


class LocationResponse(ORMModel, LocationFields):
    """Schema for location response."""

    id: int
    name: str
    type: str
    country: str
    status: str
    is_compliance_required: bool
    email: str | None = None
    created_at: datetime
    updated_at: datetime


class LocationListResponse(PageResponse):
    locations: list[LocationResponse]


class LocationNode(LocationResponse):
    """Location with its nested children."""

    children: list["LocationNode"] = []


LocationNode.model_rebuild()


class LicenseTypeFields(BaseModel):
    code: str | None = Field(default=None, max_length=20)
    description: str | None = None
    issuing_authority: str | None = Field(default=None, max_length=100)


class LicenseTypeCreate(LicenseTypeFields):
    name: str = Field(min_length=1, max_length=100)
    category: LicenseCategory = "medical"
    renewal_period_months: int = Field(default=24, ge=1, le=120)
    lead_time_days: int = Field(default=90, ge=0, le=365)
    applies_to_location: bool = False
    applies_to_provider: bool = True
    applies_to_equipment: bool = False
    required_documents: list[str] = []
    requires_inspection: bool = False
    requires_training: bool = False
    is_critical: bool = False
    alert_days_before: int = Field(default=60, ge=0, le=365)
    escalation_days_before: int = Field(default=30, ge=0, le=365)
    is_active: bool = True
    sort_order: int = 0


class LicenseTypeUpdate(LicenseTypeFields):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: LicenseCategory | None = None
    renewal_period_months: int | None = Field(default=None, ge=1, le=120)
    lead_time_days: int | None = Field(default=None, ge=0, le=365)
    applies_to_location: bool | None = None
    applies_to_provider: bool | None = None
    applies_to_equipment: bool | None = None
    required_documents: list[str] | None = None
    requires_inspection: bool | None = None
    requires_training: bool | None = None
    is_critical: bool | None = None
    alert_days_before: int | None = Field(default=None, ge=0, le=365)
    escalation_days_before: int | None = Field(default=None, ge=0, le=365)
    is_active: bool | None = None
    sort_order: int | None = None


class LicenseTypeResponse(ORMModel, LicenseTypeCreate):
    """Schema for licence type response."""

    id: int
    created_at: datetime
    updated_at: datetime


class LicenseTypeListResponse(PageResponse):
    license_types: list[LicenseTypeResponse]


# ============================================================================
# Responsible person schemas
# ============================================================================


class ResponsiblePersonFields(BaseModel):
    employee_id: int | None = Field(default=None, ge=1)
    title: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    department: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class ResponsiblePersonCreate(ResponsiblePersonFields):
    first_name: NameStr
    last_name: NameStr
    email: EmailStr
    is_primary: bool = True
    is_backup: bool = False
    preferred_contact_method: ContactMethod = "email"
    notification_enabled: bool = True
    reminder_frequency: ReminderFrequency = "weekly"
    can_approve: bool = False
    can_submit: bool = True
    status: PersonStatus = "active"


class ResponsiblePersonUpdate(ResponsiblePersonFields):
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    is_primary: bool | None = None
    is_backup: bool | None = None
    preferred_contact_method: ContactMethod | None = None
    notification_enabled: bool | None = None
    reminder_frequency: ReminderFrequency | None = None
    can_approve: bool | None = None
    can_submit: bool | None = None
    status: PersonStatus | None = None


class ResponsiblePersonResponse(ORMModel, ResponsiblePersonFields):
    id: int
    first_name: str
    last_name: str
    email: str
    is_primary: bool
    is_backup: bool
    preferred_contact_method: str
    notification_enabled: bool
    reminder_frequency: str
    can_approve: bool
    can_submit: bool
    status: str
    created_at: datetime
    updated_at: datetime


class ResponsiblePersonListResponse(PageResponse):
    responsible_persons: list[ResponsiblePersonResponse]


# ============================================================================
# Clinic licence schemas
# ============================================================================


class ClinicLicenseFields(BaseModel):
    primary_responsible_id: int | None = Field(default=None, ge=1)
    backup_responsible_id: int | None = Field(default=None, ge=1)
    renewal_status: RenewalStatus | None = None
    issuing_authority: str | None = Field(default=None, max_length=100)
    issuing_state: str | None = Field(default=None, max_length=50)
    renewal_cost: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    notes: str | None = None


class ClinicLicenseCreate(ClinicLicenseFields):
    location_id: int = Field(ge=1)
    license_type_id: int = Field(ge=1)
    license_number: str = Field(min_length=1, max_length=100)
    issue_date: date
    expiration_date: date
    status: LicenseStatus = "active"
    compliance_status: ComplianceStatus = "compliant"

    @model_validator(mode="after")
    def expiration_after_issue(self) -> "ClinicLicenseCreate":
        if self.expiration_date < self.issue_date:
            raise ValueError("Expiration date must be on or after the issue date")
        return self


class ClinicLicenseUpdate(ClinicLicenseFields):
    location_id: int | None = Field(default=None, ge=1)
    license_type_id: int | None = Field(default=None, ge=1)
    license_number: str | None = Field(default=None, min_length=1, max_length=100)
    issue_date: date | None = None
    expiration_date: date | None = None
    status: LicenseStatus | None = None
    compliance_status: ComplianceStatus | None = None


class ClinicLicenseResponse(ORMModel, ClinicLicenseFields):
    id: int
    location_id: int
    license_type_id: int
    license_number: str
    issue_date: date
    expiration_date: date
    status: str
    compliance_status: str
    renewal_status: str | None = None
    created_at: datetime
    updated_at: datetime


class ClinicLicenseListResponse(PageResponse):
    clinic_licenses: list[ClinicLicenseResponse]


# ============================================================================
# Compliance document schemas
# ============================================================================


class ComplianceDocumentFields(BaseModel):
    clinic_license_id: int | None = Field(default=None, ge=1)
    location_id: int | None = Field(default=None, ge=1)
    document_number: str | None = Field(default=None, max_length=100)
    file_name: str | None = Field(default=None, max_length=255)
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = Field(default=None, max_length=100)
    storage_key: str | None = Field(default=None, max_length=500)
    effective_date: date | None = None
    expiration_date: date | None = None
    compliance_category: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class ComplianceDocumentCreate(ComplianceDocumentFields):
    document_type: ComplianceDocumentType = "other"
    document_name: str = Field(min_length=1, max_length=255)
    is_required: bool = False

    @model_validator(mode="after")
    def has_owner(self) -> "ComplianceDocumentCreate":
        if self.clinic_license_id is None and self.location_id is None:
            raise ValueError("Either clinic_license_id or location_id is required")
        return self


class ComplianceDocumentUpload(ComplianceDocumentCreate):
    """Metadata of an uploaded file. The file itself is stored elsewhere."""

    file_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1, max_length=100)
    file_size: int = Field(ge=0)


class ComplianceDocumentUpdate(ComplianceDocumentFields):
    document_type: ComplianceDocumentType | None = None
    document_name: str | None = Field(default=None, min_length=1, max_length=255)
    is_required: bool | None = None


class ComplianceDocumentResponse(ORMModel, ComplianceDocumentFields):
    id: int
    document_type: str
    document_name: str
    is_required: bool
    uploaded_by: int | None = None
    created_at: datetime


class ComplianceDocumentListResponse(PageResponse):
    compliance_documents: list[ComplianceDocumentResponse]


# ============================================================================
# Report schemas
# ============================================================================


class ExpiringItem(BaseModel):
    employee_id: int
    employee_name: str
    item_type: str
    license_number: str | None = None
    expiration_date: date
    days_remaining: int


class EmployeeStats(BaseModel):
    total_employees: int
    active_employees: int
    expiring_soon: int
    pending_docs: int


class ExpirationCheckResponse(BaseModel):
    message: str
    count: int
    items: list[ExpiringItem]


class ComplianceDashboard(BaseModel):
    total_locations: int
    active_locations: int
    total_licenses: int
    active_licenses: int
    expiring_in_30_days: int
    expiring_in_60_days: int
    expiring_in_90_days: int
    expired_licenses: int
    total_documents: int
    non_compliant: int


class ComplianceAlert(BaseModel):
    type: Literal["expired", "expiring", "non_compliant"]
    severity: Literal["high", "medium"]
    message: str
    license_id: int
    license_number: str
    location_id: int
    location_name: str
    expiration_date: date
    days_remaining: int


class LocationComplianceSummary(BaseModel):
    location_id: int
    location_name: str
    total_licenses: int
    active_licenses: int
    expiring_licenses: int
    expired_licenses: int
    non_compliant_licenses: int
    compliance_status: ComplianceStatus


class ClinicLicenseStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_compliance_status: dict[str, int]
    expiring_30_days: int
    expired: int


class ComplianceDocumentStats(BaseModel):
    total: int
    by_type: dict[str, int]
    expiring_30_days: int
    expired: int


# ============================================================================
# Audit schemas
# ============================================================================


class AuditResponse(ORMModel):
    id: int
    table_name: str
    record_id: int
    action: str
    changed_by: int | None = None
    changed_at: datetime
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None


class AuditListResponse(PageResponse):
    audits: list[AuditResponse]


# ============================================================================
# API key schemas
# ============================================================================


class ApiKeyCreate(BaseModel):
    """Schema for issuing an API key."""

    name: str = Field(min_length=1, max_length=100)
    permissions: list[str]
    environment: ApiKeyEnvironment = "live"
    expires_in_days: int = Field(default=90, ge=1, le=365)
    rate_limit_per_hour: int = Field(default=1000, ge=10, le=10000)
    metadata: dict[str, Any] = {}


class ApiKeyRotate(BaseModel):
    """Schema for rotating an API key."""

    grace_period_hours: int | None = Field(default=None, ge=0, le=720)
    reason: str = Field(default="Manual rotation", max_length=500)


class ApiKeyResponse(ORMModel):
    """Stored key details. Neither the hash nor the raw key is included."""

    id: int
    name: str
    key_prefix: str
    permissions: list[str]
    last_used_at: datetime | None = None
    expires_at: datetime
    created_at: datetime
    revoked_at: datetime | None = None
    environment: str
    rate_limit_per_hour: int | None = None


class ApiKeyCreated(BaseModel):
    """Newly issued key. ``key`` is shown only in this response."""

    id: int
    name: str
    key: str
    key_prefix: str
    permissions: list[str]
    expires_at: datetime
    environment: str
    message: str = "IMPORTANT: Save this API key securely. It will not be shown again!"


class ApiKeyRotated(BaseModel):
    id: int
    name: str
    key: str
    key_prefix: str
    grace_period_ends: datetime
    message: str


class RotationEntry(BaseModel):
    rotated_at: datetime
    type: str
    reason: str | None = None


class ApiKeyUsage(BaseModel):
    key_id: int
    name: str
    created: datetime
    last_used: datetime | None = None
    expires_at: datetime
    is_expired: bool
    is_revoked: bool
    rate_limit_per_hour: int | None = None
    remaining_this_hour: int
    rotation_count: int
    rotations: list[RotationEntry]
