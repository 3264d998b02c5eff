"""Compliance document endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.api.audit import audit_context
from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import (
    ComplianceDocumentCreate,
    ComplianceDocumentListResponse,
    ComplianceDocumentResponse,
    ComplianceDocumentStats,
    ComplianceDocumentType,
    ComplianceDocumentUpdate,
    ComplianceDocumentUpload,
    ErrorResponse,
)
from hr_compliance.api.security import WRITERS, Identity, guard
from hr_compliance.services.audit_service import AuditContext, AuditService
from hr_compliance.services.compliance_service import ComplianceDocumentService

router = APIRouter(prefix="/api/compliance-documents", tags=["compliance-documents"])

DocumentId = Annotated[int, Path(ge=1)]
Reader = Annotated[Identity, Depends(guard("read:documents"))]
Writer = Annotated[Identity, Depends(guard("write:documents", WRITERS))]
Audit = Annotated[AuditContext, Depends(audit_context("compliance_documents"))]


@router.get("", response_model=ComplianceDocumentListResponse)
async def list_compliance_documents(
    db: DbSession,
    _: Reader,
    params: PageParams,
    clinic_license_id: Annotated[int | None, Query(ge=1)] = None,
    location_id: Annotated[int | None, Query(ge=1)] = None,
    document_type: ComplianceDocumentType | None = None,
) -> ComplianceDocumentListResponse:
    result = await ComplianceDocumentService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={
            "clinic_license_id": clinic_license_id,
            "location_id": location_id,
            "document_type": document_type,
        },
    )
    return ComplianceDocumentListResponse(
        compliance_documents=[ComplianceDocumentResponse.model_validate(d) for d in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/stats", response_model=ComplianceDocumentStats)
async def compliance_document_stats(db: DbSession, _: Reader) -> ComplianceDocumentStats:
    return ComplianceDocumentStats(**await ComplianceDocumentService(db).stats())


@router.get(
    "/{document_id}",
    response_model=ComplianceDocumentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_compliance_document(
    db: DbSession, _: Reader, document_id: DocumentId
) -> ComplianceDocumentResponse:
    document = await ComplianceDocumentService(db).get(document_id)
    return ComplianceDocumentResponse.model_validate(document)


async def _create(
    db: AsyncSession, identity: Identity, audit: AuditContext, data: dict[str, Any]
) -> ComplianceDocumentResponse:
    document = await ComplianceDocumentService(db).create({**data, "uploaded_by": identity.user.id})
    await AuditService(db).log(audit, document.id, new_data=document)
    await db.commit()
    return ComplianceDocumentResponse.model_validate(document)


@router.post(
    "",
    response_model=ComplianceDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_compliance_document(
    db: DbSession, identity: Writer, audit: Audit, payload: ComplianceDocumentCreate
) -> ComplianceDocumentResponse:
    return await _create(db, identity, audit, payload.model_dump(exclude_unset=True))


@router.post(
    "/upload",
    response_model=ComplianceDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def upload_compliance_document(
    db: DbSession, identity: Writer, audit: Audit, payload: ComplianceDocumentUpload
) -> ComplianceDocumentResponse:
    """Record an uploaded file's metadata against a licence or location."""
    return await _create(db, identity, audit, payload.model_dump(exclude_unset=True))


@router.put(
    "/{document_id}",
    response_model=ComplianceDocumentResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_compliance_document(
    db: DbSession,
    _: Writer,
    audit: Audit,
    document_id: DocumentId,
    payload: ComplianceDocumentUpdate,
) -> ComplianceDocumentResponse:
    before, document = await ComplianceDocumentService(db).update(
        document_id, payload.model_dump(exclude_unset=True)
    )
    await AuditService(db).log(audit, document.id, old_data=before, new_data=document)
    await db.commit()
    return ComplianceDocumentResponse.model_validate(document)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_compliance_document(
    db: DbSession, _: Writer, audit: Audit, document_id: DocumentId
) -> None:
    before = await ComplianceDocumentService(db).delete(document_id)
    await AuditService(db).log(audit, document_id, old_data=before)
    await db.commit()
