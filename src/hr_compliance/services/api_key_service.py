"""API key issuing, verification, rotation and housekeeping."""

from __future__ import annotations

import asyncio
import base64
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.config import Settings, get_settings
from hr_compliance.models import ApiKey, ApiKeyRotation, User
from hr_compliance.models.base import as_utc, utcnow
from hr_compliance.services.audit_service import AuditService
from hr_compliance.services.errors import (
    AuthenticationError,
    InvalidOperationError,
    NotFoundError,
    RateLimitExceededError,
    ServiceError,
)
from hr_compliance.services.rate_limiter import HourlyRateLimiter, rate_limiter

logger = logging.getLogger(__name__)

KEY_PREFIXES = {"live": "hrms_live_", "test": "hrms_test_"}
PREFIX_LENGTH = 16
WILDCARD = "*"

API_KEY_PERMISSIONS = (
    "read:employees",
    "write:employees",
    "delete:employees",
    "read:licenses",
    "write:licenses",
    "read:documents",
    "write:documents",
    "read:reports",
    "read:audits",
    "manage:api_keys",
)


@dataclass(frozen=True)
class GeneratedKey:
    """A freshly minted key. ``raw`` is shown to the caller once and never stored."""

    raw: str
    hashed: str
    prefix: str


def generate_api_key(environment: str = "live", rounds: int = 10) -> GeneratedKey:
    """Mint a random key for ``environment`` and hash it with bcrypt."""
    if environment not in KEY_PREFIXES:
        raise ValueError(f"Unknown API key environment: {environment}")

    token = base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode("ascii")
    raw = f"{KEY_PREFIXES[environment]}{token}"
    hashed = bcrypt.hashpw(raw.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return GeneratedKey(raw=raw, hashed=hashed.decode("utf-8"), prefix=raw[:PREFIX_LENGTH])


def verify_api_key(raw: str, hashed: str) -> bool:
    """Compare a presented key against its stored bcrypt hash."""
    try:
        return bcrypt.checkpw(raw.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def has_valid_format(token: str) -> bool:
    return any(token.startswith(prefix) for prefix in KEY_PREFIXES.values())


def has_permission(granted: Iterable[str] | None, required: str) -> bool:
    """Check whether ``required`` is among ``granted`` or a wildcard is granted."""
    granted = set(granted or ())
    return WILDCARD in granted or required in granted


def invalid_permissions(permissions: Iterable[str]) -> list[str]:
    """Permissions that are neither a known scope nor the wildcard."""
    return [p for p in permissions if p != WILDCARD and p not in API_KEY_PERMISSIONS]


class ApiKeyService:
    """Service for API key lifecycle and request authentication."""

    def __init__(
        self,
        session: AsyncSession,
        limiter: HourlyRateLimiter | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.limiter = limiter or rate_limiter
        self.settings = settings or get_settings()
        self.audit = AuditService(session)

    async def _mint(self, environment: str) -> GeneratedKey:
        # bcrypt is CPU bound; keep it off the event loop
        for _ in range(3):
            generated = await asyncio.to_thread(
                generate_api_key, environment, self.settings.bcrypt_rounds
            )
            if await self.find_by_prefix(generated.prefix) is None:
                return generated
        raise ServiceError("Could not generate a unique API key prefix")

    async def find_by_prefix(self, prefix: str) -> ApiKey | None:
        result = await self.session.execute(select(ApiKey).where(ApiKey.key_prefix == prefix))
        return result.scalar_one_or_none()

    async def authenticate(self, token: str, client_ip: str | None = None) -> tuple[ApiKey, User]:
        """Resolve a raw bearer token to its key and owning user.

        Raises:
            AuthenticationError: On a malformed, unknown, revoked or expired key.
            RateLimitExceededError: When the key's hourly quota is spent.
        """
        if not has_valid_format(token):
            raise AuthenticationError("Invalid API key format")

        prefix = token[:PREFIX_LENGTH]
        api_key = await self.find_by_prefix(prefix)
        if api_key is None:
            logger.warning("API key auth failed: unknown prefix %s from %s", prefix, client_ip)
            raise AuthenticationError("Invalid API key")

        valid = await asyncio.to_thread(verify_api_key, token, api_key.key_hash)
        if not valid:
            logger.warning("API key auth failed: bad secret for %s from %s", prefix, client_ip)
            raise AuthenticationError("Invalid API key")

        if api_key.is_revoked():
            raise AuthenticationError("API key has been revoked")
        if api_key.is_expired():
            raise AuthenticationError("API key has expired")

        limit = api_key.rate_limit_per_hour or self.settings.api_key_default_rate_limit
        if not self.limiter.check(api_key.id, limit):
            logger.info("Rate limit exceeded for API key %s", prefix)
            raise RateLimitExceededError(retry_after=self.limiter.retry_after(api_key.id))

        api_key.last_used_at = utcnow()
        await self.session.flush()

        user = await self.session.get(User, api_key.user_id)
        if user is None:
            raise AuthenticationError("Invalid API key user")

        logger.debug("API key %s authenticated for user %s", prefix, user.id)
        return api_key, user

    async def create_key(
        self,
        user_id: int,
        name: str,
        permissions: list[str],
        environment: str = "live",
        expires_in_days: int = 90,
        rate_limit_per_hour: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[ApiKey, str]:
        """Issue a new key. Returns the stored key and the raw key value."""
        invalid = invalid_permissions(permissions)
        if invalid:
            raise ServiceError(
                "Invalid permissions", invalid=invalid, valid=list(API_KEY_PERMISSIONS)
            )

        generated = await self._mint(environment)
        api_key = ApiKey(
            name=name,
            key_hash=generated.hashed,
            key_prefix=generated.prefix,
            user_id=user_id,
            permissions=list(permissions),
            expires_at=utcnow() + timedelta(days=expires_in_days),
            environment=environment,
            rate_limit_per_hour=rate_limit_per_hour or self.settings.api_key_default_rate_limit,
            key_metadata=metadata or {},
        )
        self.session.add(api_key)
        await self.session.flush()

        await self.audit.record("api_keys", api_key.id, "CREATE", user_id, new_data=api_key)
        logger.info("Created API key %s for user %s", api_key.key_prefix, user_id)
        return api_key, generated.raw

    async def list_user_keys(self, user_id: int) -> list[ApiKey]:
        result = await self.session.execute(
            select(ApiKey).where(ApiKey.user_id == user_id).order_by(ApiKey.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_user_key(self, user_id: int, key_id: int) -> ApiKey:
        """Get one of the user's keys; other users' keys read as missing."""
        api_key = await self.session.get(ApiKey, key_id)
        if api_key is None or api_key.user_id != user_id:
            raise NotFoundError("API key", key_id)
        return api_key

    async def revoke_key(self, user_id: int, key_id: int) -> ApiKey:
        """Soft delete a key by stamping ``revoked_at``."""
        api_key = await self.get_user_key(user_id, key_id)
        before = api_key.snapshot()
        if api_key.revoked_at is None:
            api_key.revoked_at = utcnow()
        await self.session.flush()

        await self.audit.record(
            "api_keys",
            key_id,
            "REVOKE",
            user_id,
            old_data=before,
            new_data={"revoked_by": user_id, "revoked_at": api_key.revoked_at},
        )
        logger.info("Revoked API key %s", api_key.key_prefix)
        return api_key

    async def rotate_key(
        self,
        key_id: int,
        rotated_by: int | None,
        grace_period_hours: int | None = None,
        reason: str = "Manual rotation",
        rotation_type: str = "manual",
        user_id: int | None = None,
    ) -> tuple[ApiKey, str, ApiKeyRotation]:
        """Replace a key with a new one carrying the same grants.

        The old key stays usable until the grace period ends: its expiry is
        pulled in to the grace end, and the hourly grace job revokes it once
        that time has passed.
        """
        if user_id is not None:
            old_key = await self.get_user_key(user_id, key_id)
        else:
            old_key = await self.session.get(ApiKey, key_id)
            if old_key is None:
                raise NotFoundError("API key", key_id)

        if old_key.is_revoked():
            raise InvalidOperationError("Cannot rotate a revoked key")

        if grace_period_hours is None:
            grace_period_hours = self.settings.api_key_grace_period_hours

        before = old_key.snapshot()
        generated = await self._mint(old_key.environment)
        new_key = ApiKey(
            name=f"{old_key.name} (Rotated)",
            key_hash=generated.hashed,
            key_prefix=generated.prefix,
            user_id=old_key.user_id,
            permissions=list(old_key.permissions or []),
            expires_at=old_key.expires_at,
            environment=old_key.environment,
            rate_limit_per_hour=old_key.rate_limit_per_hour,
            key_metadata=dict(old_key.key_metadata or {}),
        )
        self.session.add(new_key)
        await self.session.flush()

        now = utcnow()
        grace_period_ends = now + timedelta(hours=grace_period_hours)
        old_key.expires_at = min(as_utc(old_key.expires_at), grace_period_ends)

        rotation = ApiKeyRotation(
            api_key_id=old_key.id,
            old_key_id=old_key.id,
            new_key_id=new_key.id,
            rotation_type=rotation_type,
            rotated_at=now,
            rotated_by=rotated_by,
            grace_period_ends=grace_period_ends,
            reason=reason,
        )
        self.session.add(rotation)
        await self.session.flush()

        await self.audit.record(
            "api_key_rotations",
            new_key.id,
            "ROTATE",
            rotated_by,
            old_data=before,
            new_data={
                **new_key.snapshot(),
                "grace_period_hours": grace_period_hours,
                "reason": reason,
            },
        )
        logger.info(
            "Rotated API key %s -> %s (%s), grace until %s",
            old_key.key_prefix,
            new_key.key_prefix,
            rotation_type,
            grace_period_ends.isoformat(),
        )
        return new_key, generated.raw, rotation

    async def rotations_for(self, key_id: int) -> list[ApiKeyRotation]:
        result = await self.session.execute(
            select(ApiKeyRotation)
            .where(ApiKeyRotation.api_key_id == key_id)
            .order_by(ApiKeyRotation.rotated_at.desc())
        )
        return list(result.scalars().all())

    async def usage_stats(self, user_id: int, key_id: int) -> dict[str, Any]:
        """Usage summary and rotation history of one of the user's keys."""
        api_key = await self.get_user_key(user_id, key_id)
        rotations = await self.rotations_for(key_id)
        return {
            "key_id": api_key.id,
            "name": api_key.name,
            "created": api_key.created_at,
            "last_used": api_key.last_used_at,
            "expires_at": api_key.expires_at,
            "is_expired": api_key.is_expired(),
            "is_revoked": api_key.is_revoked(),
            "rate_limit_per_hour": api_key.rate_limit_per_hour,
            "remaining_this_hour": self.limiter.remaining(
                api_key.id,
                api_key.rate_limit_per_hour or self.settings.api_key_default_rate_limit,
            ),
            "rotation_count": len(rotations),
            "rotations": [
                {"rotated_at": r.rotated_at, "type": r.rotation_type, "reason": r.reason}
                for r in rotations
            ],
        }

    async def get_active_keys(self, now: datetime | None = None) -> list[ApiKey]:
        """Keys that are neither revoked nor expired."""
        now = now or utcnow()
        result = await self.session.execute(
            select(ApiKey).where(ApiKey.revoked_at.is_(None), ApiKey.expires_at > now)
        )
        return list(result.scalars().all())

    async def get_expiring_keys(self, days: int = 7, now: datetime | None = None) -> list[ApiKey]:
        """Active keys whose expiry falls within ``days``."""
        now = now or utcnow()
        result = await self.session.execute(
            select(ApiKey)
            .where(
                ApiKey.revoked_at.is_(None),
                ApiKey.expires_at > now,
                ApiKey.expires_at <= now + timedelta(days=days),
            )
            .order_by(ApiKey.expires_at)
        )
        return list(result.scalars().all())

    async def revoke_expired_grace_keys(self, now: datetime | None = None) -> list[ApiKey]:
        """Revoke rotated keys whose grace period has ended."""
        now = now or utcnow()
        result = await self.session.execute(
            select(ApiKey)
            .join(ApiKeyRotation, ApiKeyRotation.old_key_id == ApiKey.id)
            .where(
                ApiKey.revoked_at.is_(None),
                ApiKeyRotation.grace_period_ends <= now,
            )
            .distinct()
        )
        revoked = list(result.scalars().all())
        for api_key in revoked:
            before = api_key.snapshot()
            api_key.revoked_at = now
            await self.audit.record(
                "api_keys",
                api_key.id,
                "REVOKE",
                None,
                old_data=before,
                new_data={"revoked_at": now, "reason": "Rotation grace period ended"},
            )
            logger.info("Revoked API key %s after rotation grace period", api_key.key_prefix)
        await self.session.flush()
        return revoked
