"""Tests for API key issuing, authentication and rotation."""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import select

from hr_compliance.models import Audit, User
from hr_compliance.models.base import as_utc, utcnow
from hr_compliance.services.api_key_service import (
    KEY_PREFIXES,
    PREFIX_LENGTH,
    ApiKeyService,
    generate_api_key,
    has_permission,
    invalid_permissions,
    verify_api_key,
)
from hr_compliance.services.errors import (
    AuthenticationError,
    InvalidOperationError,
    NotFoundError,
    RateLimitExceededError,
    ServiceError,
)
from hr_compliance.services.rate_limiter import HourlyRateLimiter


@pytest_asyncio.fixture
async def owner(session) -> User:
    user = User(username="keyowner", password_hash="not-used", role="admin")
    session.add(user)
    await session.flush()
    return user


@pytest.fixture
def service(session) -> ApiKeyService:
    return ApiKeyService(session, limiter=HourlyRateLimiter())


class TestKeyHelpers:
    """Test key generation and permission helpers."""

    def test_generated_key_format(self):
        generated = generate_api_key("test", rounds=4)

        assert generated.raw.startswith(KEY_PREFIXES["test"])
        assert generated.prefix == generated.raw[:PREFIX_LENGTH]
        assert len(generated.prefix) == 16
        assert "=" not in generated.raw
        assert generated.hashed != generated.raw

    def test_verify_api_key(self):
        generated = generate_api_key("live", rounds=4)

        assert verify_api_key(generated.raw, generated.hashed) is True
        assert verify_api_key(generated.raw + "x", generated.hashed) is False
        assert verify_api_key(generated.raw, "not-a-bcrypt-hash") is False

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValueError):
            generate_api_key("staging")

    def test_has_permission(self):
        assert has_permission(["read:employees"], "read:employees") is True
        assert has_permission(["read:employees"], "write:employees") is False
        assert has_permission(["*"], "delete:employees") is True
        assert has_permission(None, "read:employees") is False

    def test_invalid_permissions(self):
        assert invalid_permissions(["read:employees", "*", "fly:rockets"]) == ["fly:rockets"]


class TestApiKeyLifecycle:
    """Test create, authenticate, revoke and rotate against the database."""

    async def test_create_and_authenticate(self, service, owner):
        api_key, raw = await service.create_key(owner.id, "CI", ["read:employees"])

        assert api_key.key_hash != raw
        assert api_key.key_prefix == raw[:16]
        assert api_key.rate_limit_per_hour == 1000

        found, user = await service.authenticate(raw, "10.0.0.1")
        assert found.id == api_key.id
        assert user.id == owner.id
        assert found.last_used_at is not None

    async def test_create_rejects_unknown_permissions(self, service, owner):
        with pytest.raises(ServiceError) as exc_info:
            await service.create_key(owner.id, "Bad", ["read:employees", "launch:missiles"])

        assert exc_info.value.extra["invalid"] == ["launch:missiles"]
        assert "read:employees" in exc_info.value.extra["valid"]

    async def test_create_writes_audit_without_hash(self, service, session, owner):
        api_key, _ = await service.create_key(owner.id, "Audited", ["*"])

        audit = await session.scalar(
            select(Audit).where(Audit.table_name == "api_keys", Audit.record_id == api_key.id)
        )
        assert audit.action == "CREATE"
        assert "key_hash" not in audit.new_data

    async def test_authenticate_rejects_bad_format(self, service):
        with pytest.raises(AuthenticationError, match="Invalid API key format"):
            await service.authenticate("sk_live_whatever")

    async def test_authenticate_rejects_unknown_key(self, service, owner):
        _, raw = await service.create_key(owner.id, "CI", ["*"])
        forged = KEY_PREFIXES["live"] + "A" * 43

        with pytest.raises(AuthenticationError, match="Invalid API key"):
            await service.authenticate(forged)
        with pytest.raises(AuthenticationError, match="Invalid API key"):
            await service.authenticate(raw[:-1] + ("B" if raw[-1] != "B" else "C"))

    async def test_authenticate_rejects_revoked_key(self, service, owner):
        api_key, raw = await service.create_key(owner.id, "CI", ["*"])
        await service.revoke_key(owner.id, api_key.id)

        with pytest.raises(AuthenticationError, match="revoked"):
            await service.authenticate(raw)

    async def test_authenticate_rejects_expired_key(self, service, owner):
        api_key, raw = await service.create_key(owner.id, "CI", ["*"])
        api_key.expires_at = utcnow() - timedelta(minutes=1)

        with pytest.raises(AuthenticationError, match="expired"):
            await service.authenticate(raw)

    async def test_rate_limit(self, service, owner):
        _, raw = await service.create_key(owner.id, "CI", ["*"], rate_limit_per_hour=10)

        for _ in range(10):
            await service.authenticate(raw)
        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.authenticate(raw)

        assert exc_info.value.status_code == 429
        assert 3500 < exc_info.value.retry_after <= 3600
        assert exc_info.value.headers == {"Retry-After": str(exc_info.value.retry_after)}

    async def test_retry_after_counts_down_with_the_window(self, session, owner):
        now = [utcnow()]
        service = ApiKeyService(session, limiter=HourlyRateLimiter(clock=lambda: now[0]))
        _, raw = await service.create_key(owner.id, "CI", ["*"], rate_limit_per_hour=1)

        await service.authenticate(raw)
        now[0] += timedelta(minutes=45)
        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.authenticate(raw)

        assert exc_info.value.retry_after == 15 * 60 + 1
        assert exc_info.value.to_dict() == {"error": "Rate limit exceeded", "retry_after": 901}

    async def test_other_users_keys_read_as_missing(self, service, session, owner):
        api_key, _ = await service.create_key(owner.id, "CI", ["*"])
        stranger = User(username="stranger", password_hash="x", role="hr")
        session.add(stranger)
        await session.flush()

        with pytest.raises(NotFoundError):
            await service.revoke_key(stranger.id, api_key.id)

    async def test_rotate_keeps_grants_and_clamps_old_expiry(self, service, session, owner):
        old_key, old_raw = await service.create_key(
            owner.id, "Billing", ["read:reports"], expires_in_days=90
        )

        new_key, new_raw, rotation = await service.rotate_key(
            old_key.id, rotated_by=owner.id, grace_period_hours=2, user_id=owner.id
        )

        assert new_raw != old_raw
        assert new_key.name == "Billing (Rotated)"
        assert new_key.permissions == ["read:reports"]
        assert rotation.old_key_id == old_key.id
        assert rotation.new_key_id == new_key.id
        assert as_utc(old_key.expires_at) == rotation.grace_period_ends
        assert as_utc(new_key.expires_at) > rotation.grace_period_ends

        # Both keys work during the grace period
        await service.authenticate(old_raw)
        await service.authenticate(new_raw)

        audit = await session.scalar(
            select(Audit).where(Audit.table_name == "api_key_rotations")
        )
        assert audit.action == "ROTATE"
        assert audit.record_id == new_key.id

    async def test_rotate_without_grace_period_expires_old_key(self, service, owner):
        old_key, old_raw = await service.create_key(owner.id, "CI", ["read:employees"])

        new_key, new_raw, _ = await service.rotate_key(
            old_key.id, rotated_by=owner.id, grace_period_hours=0
        )

        assert as_utc(old_key.expires_at) <= utcnow()
        with pytest.raises(AuthenticationError, match="expired"):
            await service.authenticate(old_raw)
        authenticated, user = await service.authenticate(new_raw)
        assert authenticated.id == new_key.id
        assert user.id == owner.id

    async def test_rotate_revoked_key_fails(self, service, owner):
        api_key, _ = await service.create_key(owner.id, "CI", ["*"])
        await service.revoke_key(owner.id, api_key.id)

        with pytest.raises(InvalidOperationError):
            await service.rotate_key(api_key.id, rotated_by=owner.id)

    async def test_grace_revocation(self, service, session, owner):
        old_key, _ = await service.create_key(owner.id, "CI", ["*"])
        new_key, _, rotation = await service.rotate_key(
            old_key.id, rotated_by=owner.id, grace_period_hours=1
        )

        assert await service.revoke_expired_grace_keys(utcnow()) == []

        revoked = await service.revoke_expired_grace_keys(
            rotation.grace_period_ends + timedelta(seconds=1)
        )
        assert [k.id for k in revoked] == [old_key.id]
        assert old_key.revoked_at is not None
        assert new_key.revoked_at is None

    async def test_expiring_and_active_keys(self, service, owner):
        soon, _ = await service.create_key(owner.id, "Soon", ["*"], expires_in_days=3)
        later, _ = await service.create_key(owner.id, "Later", ["*"], expires_in_days=60)
        revoked, _ = await service.create_key(owner.id, "Gone", ["*"], expires_in_days=2)
        await service.revoke_key(owner.id, revoked.id)

        expiring = await service.get_expiring_keys(7)
        active = await service.get_active_keys()

        assert [k.id for k in expiring] == [soon.id]
        assert {k.id for k in active} == {soon.id, later.id}

    async def test_usage_stats(self, service, owner):
        api_key, raw = await service.create_key(
            owner.id, "CI", ["*"], rate_limit_per_hour=50
        )
        await service.authenticate(raw)
        await service.authenticate(raw)
        await service.rotate_key(api_key.id, rotated_by=owner.id, reason="Scheduled")

        usage = await service.usage_stats(owner.id, api_key.id)

        assert usage["remaining_this_hour"] == 48
        assert usage["rotation_count"] == 1
        assert usage["rotations"][0]["reason"] == "Scheduled"
        assert usage["rotations"][0]["type"] == "manual"
        assert usage["is_revoked"] is False
