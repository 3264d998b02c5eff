"""Clinic licence endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import (
    ClinicLicenseCreate,
    ClinicLicenseListResponse,
    ClinicLicenseResponse,
    ClinicLicenseStats,
    ClinicLicenseUpdate,
    ComplianceStatus,
    ErrorResponse,
    LicenseStatus,
)
from hr_compliance.api.security import ADMINS, WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.compliance_service import ClinicLicenseService

router = APIRouter(prefix="/api/clinic-licenses", tags=["clinic-licenses"])

LicenseId = Annotated[int, Path(ge=1)]
Reader = Annotated[Identity, Depends(guard("read:licenses"))]
Writer = Annotated[Identity, Depends(guard("write:licenses", WRITERS))]
Admin = Annotated[Identity, Depends(guard("write:licenses", ADMINS))]
Audit = Annotated[AuditContext, Depends(audit_context("clinic_licenses"))]


@router.get("", response_model=ClinicLicenseListResponse)
async def list_clinic_licenses(
    db: DbSession,
    _: Reader,
    params: PageParams,
    location_id: Annotated[int | None, Query(ge=1)] = None,
    license_type_id: Annotated[int | None, Query(ge=1)] = None,
    status_filter: Annotated[LicenseStatus | None, Query(alias="status")] = None,
    compliance_status: ComplianceStatus | None = None,
) -> ClinicLicenseListResponse:
    """List clinic licences, soonest expiry first."""
    result = await ClinicLicenseService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={
            "location_id": location_id,
            "license_type_id": license_type_id,
            "status": status_filter,
            "compliance_status": compliance_status,
        },
    )
    return ClinicLicenseListResponse(
        clinic_licenses=[ClinicLicenseResponse.model_validate(lic) for lic in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/expiring", response_model=list[ClinicLicenseResponse])
async def expiring_clinic_licenses(
    db: DbSession,
    _: Reader,
    days: Annotated[int, Query(ge=1, le=365)] = 90,
) -> list[ClinicLicenseResponse]:
    """Licences expiring within ``days``."""
    licenses = await ClinicLicenseService(db).expiring(days)
    return [ClinicLicenseResponse.model_validate(lic) for lic in licenses]


@router.get("/stats", response_model=ClinicLicenseStats)
async def clinic_license_stats(db: DbSession, _: Reader) -> ClinicLicenseStats:
    return ClinicLicenseStats(**await ClinicLicenseService(db).stats())


@router.get(
    "/{license_id}",
    response_model=ClinicLicenseResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_clinic_license(
    db: DbSession, _: Reader, license_id: LicenseId
) -> ClinicLicenseResponse:
    return ClinicLicenseResponse.model_validate(await ClinicLicenseService(db).get(license_id))


@router.post(
    "",
    response_model=ClinicLicenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_clinic_license(
    db: DbSession, _: Writer, audit: Audit, payload: ClinicLicenseCreate
) -> ClinicLicenseResponse:
    clinic_license = await ClinicLicenseService(db).create(payload.model_dump(exclude_unset=True))
    await AuditService(db).log(audit, clinic_license.id, new_data=clinic_license)
    await db.commit()
    return ClinicLicenseResponse.model_validate(clinic_license)


@router.put(
    "/{license_id}",
    response_model=ClinicLicenseResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_clinic_license(
    db: DbSession,
    _: Writer,
    audit: Audit,
    license_id: LicenseId,
    payload: ClinicLicenseUpdate,
) -> ClinicLicenseResponse:
    before, clinic_license = await ClinicLicenseService(db).update(
        license_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, clinic_license.id, old_data=before, new_data=clinic_license)
    await db.commit()
    return ClinicLicenseResponse.model_validate(clinic_license)


@router.delete(
    "/{license_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_clinic_license(
    db: DbSession, _: Admin, audit: Audit, license_id: LicenseId
) -> None:
    """Delete a licence together with its compliance documents."""
    before = await ClinicLicenseService(db).delete(license_id)
    await AuditService(db).log(audit, license_id, old_data=before)
    await db.commit()
