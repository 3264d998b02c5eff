"""Location and licence type endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import (
    ErrorResponse,
    LicenseCategory,
    LicenseTypeCreate,
    LicenseTypeListResponse,
    LicenseTypeResponse,
    LicenseTypeUpdate,
    LocationCreate,
    LocationListResponse,
    LocationNode,
    LocationResponse,
    LocationStatus,
    LocationType,
    LocationUpdate,
)
from hr_compliance.api.security import ADMINS, WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.compliance_service import LicenseTypeService, LocationService

router = APIRouter(prefix="/api", tags=["locations"])

RecordId = Annotated[int, Path(ge=1)]
Reader = Annotated[Identity, Depends(guard("read:licenses"))]
Writer = Annotated[Identity, Depends(guard("write:licenses", WRITERS))]
Admin = Annotated[Identity, Depends(guard("write:licenses", ADMINS))]
LocationAudit = Annotated[AuditContext, Depends(audit_context("locations"))]
LicenseTypeAudit = Annotated[AuditContext, Depends(audit_context("license_types"))]


# ============================================================================
# Locations
# ============================================================================


@router.get("/locations", response_model=LocationListResponse)
async def list_locations(
    db: DbSession,
    _: Reader,
    params: PageParams,
    location_type: Annotated[LocationType | None, Query(alias="type")] = None,
    status_filter: Annotated[LocationStatus | None, Query(alias="status")] = None,
    parent_id: Annotated[int | None, Query(ge=1)] = None,
) -> LocationListResponse:
    """List locations by name."""
    result = await LocationService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={"type": location_type, "status": status_filter, "parent_id": parent_id},
    )
    return LocationListResponse(
        locations=[LocationResponse.model_validate(loc) for loc in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/locations/tree", response_model=list[LocationNode])
async def location_tree(db: DbSession, _: Reader) -> list[LocationNode]:
    """All locations nested under their parent organisations."""
    return [LocationNode.model_validate(node) for node in await LocationService(db).tree()]


@router.get(
    "/locations/{location_id}",
    response_model=LocationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_location(db: DbSession, _: Reader, location_id: RecordId) -> LocationResponse:
    return LocationResponse.model_validate(await LocationService(db).get(location_id))


@router.post(
    "/locations",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_location(
    db: DbSession, _: Writer, audit: LocationAudit, payload: LocationCreate
) -> LocationResponse:
    location = await LocationService(db).create(payload.model_dump(exclude_unset=True))
    await AuditService(db).log(audit, location.id, new_data=location)
    await db.commit()
    return LocationResponse.model_validate(location)


@router.put(
    "/locations/{location_id}",
    response_model=LocationResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_location(
    db: DbSession,
    _: Writer,
    audit: LocationAudit,
    location_id: RecordId,
    payload: LocationUpdate,
) -> LocationResponse:
    """Update a location. Moving it under one of its own descendants is rejected."""
    before, location = await LocationService(db).update(
        location_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, location.id, old_data=before, new_data=location)
    await db.commit()
    return LocationResponse.model_validate(location)


@router.delete(
    "/locations/{location_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_location(
    db: DbSession, _: Admin, audit: LocationAudit, location_id: RecordId
) -> None:
    """Delete a location; its children become top-level locations."""
    before = await LocationService(db).delete(location_id)
    await AuditService(db).log(audit, location_id, old_data=before)
    await db.commit()


# ============================================================================
# Licence types
# ============================================================================


@router.get("/license-types", response_model=LicenseTypeListResponse)
async def list_license_types(
    db: DbSession,
    _: Reader,
    params: PageParams,
    category: LicenseCategory | None = None,
    is_active: bool | None = None,
) -> LicenseTypeListResponse:
    result = await LicenseTypeService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={"category": category, "is_active": is_active},
    )
    return LicenseTypeListResponse(
        license_types=[LicenseTypeResponse.model_validate(t) for t in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/license-types/{license_type_id}",
    response_model=LicenseTypeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_license_type(
    db: DbSession, _: Reader, license_type_id: RecordId
) -> LicenseTypeResponse:
    return LicenseTypeResponse.model_validate(await LicenseTypeService(db).get(license_type_id))


@router.post(
    "/license-types",
    response_model=LicenseTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_license_type(
    db: DbSession, _: Writer, audit: LicenseTypeAudit, payload: LicenseTypeCreate
) -> LicenseTypeResponse:
    license_type = await LicenseTypeService(db).create(payload.model_dump(exclude_unset=True))
    await AuditService(db).log(audit, license_type.id, new_data=license_type)
    await db.commit()
    return LicenseTypeResponse.model_validate(license_type)


@router.put(
    "/license-types/{license_type_id}",
    response_model=LicenseTypeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_license_type(
    db: DbSession,
    _: Writer,
    audit: LicenseTypeAudit,
    license_type_id: RecordId,
    payload: LicenseTypeUpdate,
) -> LicenseTypeResponse:
    before, license_type = await LicenseTypeService(db).update(
        license_type_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, license_type.id, old_data=before, new_data=license_type)
    await db.commit()
    return LicenseTypeResponse.model_validate(license_type)


@router.delete(
    "/license-types/{license_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_license_type(
    db: DbSession, _: Admin, audit: LicenseTypeAudit, license_type_id: RecordId
) -> None:
    """Delete a licence type. Types still used by clinic licences cannot be deleted."""
    before = await LicenseTypeService(db).delete(license_type_id)
    await AuditService(db).log(audit, license_type_id, old_data=before)
    await db.commit()
