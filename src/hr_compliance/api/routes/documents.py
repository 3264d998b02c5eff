"""Employee document listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from hr_compliance.api.dependencies import DbSession, PageParams
from hr_compliance.api.schemas import DocumentListResponse, DocumentResponse
from hr_compliance.api.security import Identity, guard
from hr_compliance.services.employee_service import DocumentService

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    db: DbSession,
    _: Annotated[Identity, Depends(guard("read:documents"))],
    params: PageParams,
    document_type: Annotated[str | None, Query(alias="type", max_length=100)] = None,
    employee_id: Annotated[int | None, Query(ge=1)] = None,
) -> DocumentListResponse:
    """List employee documents across all employees, newest first."""
    result = await DocumentService(db).list_page(
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters={"document_type": document_type, "employee_id": employee_id},
    )
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )
