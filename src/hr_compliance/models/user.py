"""Application user model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from hr_compliance.models.base import Base, TimestampMixin

USER_ROLES = ("admin", "hr", "viewer")


class User(Base, TimestampMixin):
    """Login account with a role used for RBAC."""

    __tablename__ = "users"
    __sensitive__ = frozenset({"password_hash"})

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="hr")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'hr', 'viewer')", name="users_role_check"),
    )
