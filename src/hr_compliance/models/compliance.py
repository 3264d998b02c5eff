"""Clinic compliance models: locations, license types, clinic licenses."""

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

from hr_compliance.models.base import Base, JSONType, TimestampMixin, UpdatedAtMixin

LOCATION_TYPES = ("main_org", "sub_location")
LOCATION_STATUSES = ("active", "inactive", "closed")
LICENSE_CATEGORIES = (
    "medical",
    "facility",
    "pharmacy",
    "laboratory",
    "radiology",
    "environmental",
    "business",
    "other",
)
LICENSE_STATUSES = ("active", "expired", "pending", "suspended", "revoked")
COMPLIANCE_STATUSES = ("compliant", "non_compliant", "pending_review", "at_risk")
RENEWAL_STATUSES = ("not_started", "in_progress", "submitted", "approved", "denied")
CONTACT_METHODS = ("email", "phone", "sms")
REMINDER_FREQUENCIES = ("daily", "weekly", "monthly")
PERSON_STATUSES = ("active", "inactive")
COMPLIANCE_DOCUMENT_TYPES = (
    "license",
    "certificate",
    "inspection_report",
    "renewal_application",
    "correspondence",
    "other",
)


def _in(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Location(Base, UpdatedAtMixin):
    """Organisation or clinic site; locations form a parent/child tree."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="sub_location")
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    address1: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address2: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(50), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    country: Mapped[str] = mapped_column(String(50), nullable=False, default="USA")
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    fax: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    npi_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    is_compliance_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    compliance_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(_in("type", LOCATION_TYPES), name="locations_type_check"),
        CheckConstraint(_in("status", LOCATION_STATUSES), name="locations_status_check"),
        CheckConstraint("parent_id IS NULL OR parent_id <> id", name="locations_parent_check"),
    )


class LicenseType(Base, UpdatedAtMixin):
    """Kind of licence a location or provider must hold."""

    __tablename__ = "license_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="medical")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    issuing_authority: Mapped[str | None] = mapped_column(String(100), nullable=True)
    renewal_period_months: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=90)
    applies_to_location: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_to_provider: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_to_equipment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    required_documents: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    requires_inspection: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_training: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_critical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    alert_days_before: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    escalation_days_before: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(_in("category", LICENSE_CATEGORIES), name="license_types_category_check"),
    )


class ResponsiblePerson(Base, UpdatedAtMixin):
    """Person accountable for a licence's renewal and compliance status."""

    __tablename__ = "responsible_persons"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_backup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    preferred_contact_method: Mapped[str] = mapped_column(
        String(20), nullable=False, default="email"
    )
    notification_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reminder_frequency: Mapped[str] = mapped_column(String(20), nullable=False, default="weekly")
    can_approve: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_submit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            _in("preferred_contact_method", CONTACT_METHODS),
            name="responsible_persons_contact_check",
        ),
        CheckConstraint(
            _in("reminder_frequency", REMINDER_FREQUENCIES),
            name="responsible_persons_frequency_check",
        ),
        CheckConstraint(_in("status", PERSON_STATUSES), name="responsible_persons_status_check"),
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class ClinicLicense(Base, UpdatedAtMixin):
    """Licence held by a location."""

    __tablename__ = "clinic_licenses"

    id: Mapped[int] = mapped_column(primary_key=True)
    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    license_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("license_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    primary_responsible_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("responsible_persons.id", ondelete="SET NULL"),
        nullable=True,
    )
    backup_responsible_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("responsible_persons.id", ondelete="SET NULL"),
        nullable=True,
    )
    license_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiration_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    compliance_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="compliant"
    )
    renewal_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    issuing_authority: Mapped[str | None] = mapped_column(String(100), nullable=True)
    issuing_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    renewal_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(_in("status", LICENSE_STATUSES), name="clinic_licenses_status_check"),
        CheckConstraint(
            _in("compliance_status", COMPLIANCE_STATUSES),
            name="clinic_licenses_compliance_check",
        ),
        CheckConstraint(
            "expiration_date >= issue_date",
            name="clinic_licenses_dates_check",
        ),
    )


class ComplianceDocument(Base, TimestampMixin):
    """Regulatory document filed against a clinic licence or location."""

    __tablename__ = "compliance_documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    clinic_license_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("clinic_licenses.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    location_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    document_type: Mapped[str] = mapped_column(String(50), nullable=False, default="other")
    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    document_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    storage_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    effective_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    compliance_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    uploaded_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            _in("document_type", COMPLIANCE_DOCUMENT_TYPES),
            name="compliance_documents_type_check",
        ),
        CheckConstraint(
            "clinic_license_id IS NOT NULL OR location_id IS NOT NULL",
            name="compliance_documents_owner_check",
        ),
    )
