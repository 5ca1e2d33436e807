"""
User Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .tenant import Tenant


class User(AuditMixin, Base):
    """
    Represents an administrative user.

    SUPER_ADMIN users live outside any tenant (tenant_id is NULL). Every
    other role belongs to exactly one tenant.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=True, index=True
    )
    email: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)  # SUPER_ADMIN, ADMIN, MANAGER, EDITOR
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # Same email once per tenant...
        UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
        # ...and once at platform level (NULLs never collide in the constraint above)
        Index(
            "uq_user_platform_email",
            "email",
            unique=True,
            sqlite_where=text("tenant_id IS NULL"),
            postgresql_where=text("tenant_id IS NULL"),
        ),
        CheckConstraint(
            "(role = 'SUPER_ADMIN') = (tenant_id IS NULL)",
            name="ck_user_super_admin_without_tenant",
        ),
        Index("ix_user_email", "email"),
    )

    # Relationships
    tenant: Mapped[Optional["Tenant"]] = relationship(back_populates="users")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}', tenant_id={self.tenant_id})>"
