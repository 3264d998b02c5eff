"""Request authentication: API keys, session users, permissions and roles.

A request is authenticated by an API key when it carries one
(``Authorization: Bearer <key>`` first, then ``X-API-Key``); otherwise the
signed session cookie set by ``/api/login`` is used. Session users are
trusted with every permission and are limited only by their role. API-key
identities are limited by the key's permission list and by the role of the
user that owns the key.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Callable

from fastapi import Depends, Request

from hr_compliance.api.dependencies import DbSession
from hr_compliance.models import ApiKey, User
from hr_compliance.services.api_key_service import ApiKeyService, has_permission
from hr_compliance.services.errors import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


@dataclass
class Identity:
    """The caller of a request."""

    user: User
    api_key: ApiKey | None = None

    @property
    def via_api_key(self) -> bool:
        return self.api_key is not None

    @property
    def permissions(self) -> list[str]:
        return list(self.api_key.permissions or []) if self.api_key else []


def extract_api_key(request: Request) -> str | None:
    """Pull an API key from the Authorization or X-API-Key header."""
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return request.headers.get("x-api-key") or None


async def get_identity(request: Request, db: DbSession) -> Identity | None:
    """Resolve the caller, or None for anonymous requests."""
    token = extract_api_key(request)
    if token:
        client_ip = request.client.host if request.client else None
        api_key, user = await ApiKeyService(db).authenticate(token, client_ip)
        # Persist last_used_at even if the handler only reads
        await db.commit()
        return Identity(user=user, api_key=api_key)

    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is not None:
        user = await db.get(User, user_id)
        if user is not None:
            return Identity(user=user)
        request.session.clear()
    return None


OptionalIdentity = Annotated[Identity | None, Depends(get_identity)]


async def require_any_auth(identity: OptionalIdentity) -> Identity:
    """Accept either a session user or an API key."""
    if identity is None:
        raise AuthenticationError("Authentication required")
    return identity


async def require_session_user(identity: OptionalIdentity) -> User:
    """Accept only a logged-in session user; API keys are refused."""
    if identity is None or identity.via_api_key:
        raise AuthenticationError("Authentication required")
    return identity.user


CurrentIdentity = Annotated[Identity, Depends(require_any_auth)]
SessionUser = Annotated[User, Depends(require_session_user)]


def check_permission(identity: Identity, permission: str) -> None:
    """Raise unless the identity may use ``permission``."""
    if identity.via_api_key and not has_permission(identity.permissions, permission):
        logger.info(
            "API key %s denied %s", identity.api_key.key_prefix, permission
        )
        raise PermissionDeniedError(
            "Insufficient permissions",
            required=permission,
            granted=identity.permissions,
        )


def check_role(identity: Identity, roles: tuple[str, ...]) -> None:
    if identity.user.role not in roles:
        raise PermissionDeniedError("Insufficient permissions")


def guard(
    permission: str | None = None,
    roles: tuple[str, ...] | None = None,
) -> Callable:
    """Build a dependency requiring any auth plus a permission and/or role."""

    async def dependency(identity: CurrentIdentity) -> Identity:
        if permission:
            check_permission(identity, permission)
        if roles:
            check_role(identity, roles)
        return identity

    return dependency


def require_session_roles(*roles: str) -> Callable:
    """Build a dependency requiring a session user with one of ``roles``."""

    async def dependency(user: SessionUser) -> User:
        if user.role not in roles:
            raise PermissionDeniedError("Insufficient permissions")
        return user

    return dependency


WRITERS = ("admin", "hr")
ADMINS = ("admin",)
