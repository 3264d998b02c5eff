"""API key and rotation models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hr_compliance.models.base import Base, JSONType, TimestampMixin, as_utc, utcnow

API_KEY_ENVIRONMENTS = ("live", "test")
ROTATION_TYPES = ("manual", "automatic", "emergency")


class ApiKey(Base, TimestampMixin):
    """Bearer credential for programmatic access.

    Only the bcrypt hash of the key is stored. The first 16 characters
    (``key_prefix``) are kept in clear so a presented key can be located
    without scanning every hash.
    """

    __tablename__ = "api_keys"
    __sensitive__ = frozenset({"key_hash"})

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    key_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    key_prefix: Mapped[str] = mapped_column(String(16), unique=True, nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permissions: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    environment: Mapped[str] = mapped_column(String(20), nullable=False, default="live")
    rate_limit_per_hour: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1000)
    key_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSONType, nullable=True
    )

    __table_args__ = (
        CheckConstraint("environment IN ('live', 'test')", name="api_keys_environment_check"),
    )

    def is_revoked(self) -> bool:
        """Check if the key has been revoked."""
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the key is past its expiry."""
        return as_utc(self.expires_at) < (now or utcnow())


class ApiKeyRotation(Base):
    """Link between a rotated key and its successor."""

    __tablename__ = "api_key_rotations"

    id: Mapped[int] = mapped_column(primary_key=True)
    api_key_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("api_keys.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_key_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("api_keys.id"), nullable=True
    )
    new_key_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("api_keys.id"), nullable=True
    )
    rotation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rotated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    rotated_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    grace_period_ends: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "rotation_type IN ('manual', 'automatic', 'emergency')",
            name="api_key_rotations_type_check",
        ),
    )
