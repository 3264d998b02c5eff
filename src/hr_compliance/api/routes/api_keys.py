"""API key management for the logged-in user.

These endpoints accept only session authentication; an API key cannot be
used to mint, rotate or revoke keys. Creation and rotation share a small
per-client hourly budget.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Path, Request, status

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.limits import key_management_limit
from hr_compliance.api.schemas import (
    ApiKeyCreate,
    ApiKeyCreated,
    ApiKeyResponse,
    ApiKeyRotate,
    ApiKeyRotated,
    ApiKeyUsage,
    ErrorResponse,
    MessageResponse,
)
from hr_compliance.api.security import SessionUser
from hr_compliance.services.api_key_service import ApiKeyService

router = APIRouter(prefix="/api/settings/api-keys", tags=["api-keys"])

KeyId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[ApiKeyResponse])
async def list_api_keys(db: DbSession, user: SessionUser) -> list[ApiKeyResponse]:
    """The caller's keys, newest first. Hashes are never returned."""
    keys = await ApiKeyService(db).list_user_keys(user.id)
    return [ApiKeyResponse.model_validate(key) for key in keys]


@router.post(
    "",
    response_model=ApiKeyCreated,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
@key_management_limit
async def create_api_key(
    request: Request, db: DbSession, user: SessionUser, payload: ApiKeyCreate
) -> ApiKeyCreated:
    """Create a key. The raw key appears in this response only."""
    api_key, raw = await ApiKeyService(db).create_key(
        user_id=user.id,
        name=payload.name,
        permissions=payload.permissions,
        environment=payload.environment,
        expires_in_days=payload.expires_in_days,
        rate_limit_per_hour=payload.rate_limit_per_hour,
        metadata=payload.metadata,
    )
    await db.commit()
    return ApiKeyCreated(
        id=api_key.id,
        name=api_key.name,
        key=raw,
        key_prefix=api_key.key_prefix,
        permissions=api_key.permissions,
        expires_at=api_key.expires_at,
        environment=api_key.environment,
    )


@router.delete(
    "/{key_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def revoke_api_key(db: DbSession, user: SessionUser, key_id: KeyId) -> MessageResponse:
    await ApiKeyService(db).revoke_key(user.id, key_id)
    await db.commit()
    return MessageResponse(message="API key revoked successfully")


@router.post(
    "/{key_id}/rotate",
    response_model=ApiKeyRotated,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)
@key_management_limit
async def rotate_api_key(
    request: Request,
    db: DbSession,
    user: SessionUser,
    key_id: KeyId,
    payload: Annotated[ApiKeyRotate | None, Body()] = None,
) -> ApiKeyRotated:
    """Issue a replacement key; the old one keeps working for the grace period."""
    payload = payload or ApiKeyRotate()
    new_key, raw, rotation = await ApiKeyService(db).rotate_key(
        key_id,
        rotated_by=user.id,
        grace_period_hours=payload.grace_period_hours,
        reason=payload.reason,
        user_id=user.id,
    )
    await db.commit()
    grace_period_ends = rotation.grace_period_ends
    return ApiKeyRotated(
        id=new_key.id,
        name=new_key.name,
        key=raw,
        key_prefix=new_key.key_prefix,
        grace_period_ends=grace_period_ends,
        message=(
            f"Key rotated. Old key valid until {grace_period_ends.isoformat()}. "
            "Save the new key securely!"
        ),
    )


@router.get(
    "/{key_id}/usage",
    response_model=ApiKeyUsage,
    responses={404: {"model": ErrorResponse}},
)
async def api_key_usage(db: DbSession, user: SessionUser, key_id: KeyId) -> ApiKeyUsage:
    return ApiKeyUsage(**await ApiKeyService(db).usage_stats(user.id, key_id))
