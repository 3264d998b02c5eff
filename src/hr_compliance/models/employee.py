"""Employee and employee credential sub-record models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from hr_compliance.encryption import EncryptedString
from hr_compliance.models.base import Base, TimestampMixin, UpdatedAtMixin

EMPLOYEE_STATUSES = ("active", "inactive", "on_leave", "terminated")


class Employee(Base, UpdatedAtMixin):
    """Employee profile for a medical or healthcare professional."""

    __tablename__ = "employees"
    __sensitive__ = frozenset({"ssn"})

    id: Mapped[int] = mapped_column(primary_key=True)

    # Personal
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    birth_city: Mapped[str | None] = mapped_column(String(50), nullable=True)
    birth_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    birth_country: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ssn: Mapped[str | None] = mapped_column(EncryptedString, nullable=True)

    # Contact
    personal_email: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    work_email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    cell_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    work_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    home_address1: Mapped[str | None] = mapped_column(String(100), nullable=True)
    home_address2: Mapped[str | None] = mapped_column(String(100), nullable=True)
    home_city: Mapped[str | None] = mapped_column(String(50), nullable=True)
    home_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    home_zip: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Driver's licence
    drivers_license_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dl_state_issued: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dl_issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    dl_expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    # Provider identifiers
    npi_number: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    enumeration_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    medicaid_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    medicare_ptan_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Employment
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    work_location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    qualification: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Licensing
    medical_license_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    substance_use_license_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    substance_use_qualification: Mapped[str | None] = mapped_column(Text, nullable=True)
    mental_health_license_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mental_health_qualification: Mapped[str | None] = mapped_column(Text, nullable=True)

    # CAQH / NPPES
    caqh_provider_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    caqh_issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    caqh_last_attestation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    caqh_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    caqh_reattestation_due_date: Mapped[date | None] = mapped_column(
        Date, nullable=True, index=True
    )
    caqh_login_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    nppes_login_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'on_leave', 'terminated')",
            name="employees_status_check",
        ),
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class EmployeeRecordMixin:
    """Columns shared by every record owned by an employee."""

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Education(Base, EmployeeRecordMixin):
    """Educational background entry."""

    __tablename__ = "educations"

    education_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    school_institution: Mapped[str | None] = mapped_column(String(100), nullable=True)
    degree: Mapped[str | None] = mapped_column(String(50), nullable=True)
    specialty_major: Mapped[str | None] = mapped_column(String(100), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class Employment(Base, EmployeeRecordMixin):
    """Prior or current employment history entry."""

    __tablename__ = "employments"

    employer: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR start_date IS NULL OR end_date >= start_date",
            name="employments_dates_check",
        ),
    )


class PeerReference(Base, EmployeeRecordMixin):
    """Professional reference."""

    __tablename__ = "peer_references"

    reference_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_info: Mapped[str | None] = mapped_column(String(100), nullable=True)
    relationship: Mapped[str | None] = mapped_column(String(100), nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)


class StateLicense(Base, EmployeeRecordMixin):
    """State-issued professional licence."""

    __tablename__ = "state_licenses"

    license_number: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class DeaLicense(Base, EmployeeRecordMixin):
    """DEA registration."""

    __tablename__ = "dea_licenses"

    license_number: Mapped[str] = mapped_column(String(50), nullable=False)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class BoardCertification(Base, EmployeeRecordMixin):
    """Specialty board certification."""

    __tablename__ = "board_certifications"

    board_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    certification: Mapped[str | None] = mapped_column(String(100), nullable=True)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class Document(Base, EmployeeRecordMixin, TimestampMixin):
    """Employee document metadata."""

    __tablename__ = "documents"

    document_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    document_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    signed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    verification_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class EmergencyContact(Base, EmployeeRecordMixin):
    """Emergency contact."""

    __tablename__ = "emergency_contacts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    relationship: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)


class TaxForm(Base, EmployeeRecordMixin):
    """Tax form on file (W-4, I-9, ...)."""

    __tablename__ = "tax_forms"

    form_type: Mapped[str] = mapped_column(String(50), nullable=False)
    file_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    submitted_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class Training(Base, EmployeeRecordMixin):
    """Completed training or continuing education."""

    __tablename__ = "trainings"

    training_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    provider: Mapped[str | None] = mapped_column(String(100), nullable=True)
    completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    credits: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    certificate_path: Mapped[str | None] = mapped_column(String(255), nullable=True)


class PayerEnrollment(Base, EmployeeRecordMixin):
    """Insurance payer network enrollment."""

    __tablename__ = "payer_enrollments"

    payer_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    enrollment_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    enrollment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class IncidentLog(Base, EmployeeRecordMixin):
    """Incident involving an employee."""

    __tablename__ = "incident_logs"

    incident_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)
    reported_by: Mapped[str | None] = mapped_column(String(50), nullable=True)
