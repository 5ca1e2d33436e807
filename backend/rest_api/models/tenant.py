"""
Multi-Tenancy Model: Tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from shared.config.constants import TenantPlan, TenantStatus
from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .user import User
    from .restaurant import Restaurant


class Tenant(AuditMixin, Base):
    """
    Represents an operator (billing/administrative boundary).
    Every catalog entity belongs to a tenant for complete data isolation.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "tenant"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    plan: Mapped[str] = mapped_column(Text, default=TenantPlan.FREE, nullable=False)
    # {"timezone": ..., "currency": ..., "language": ...}
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    status: Mapped[str] = mapped_column(Text, default=TenantStatus.ACTIVE, nullable=False, index=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(back_populates="tenant")
    restaurants: Mapped[list["Restaurant"]] = relationship(back_populates="tenant")

    @validates("id")
    def _validate_id(self, key: str, value: int) -> int:
        if self.id is not None and value != self.id:
            raise ValueError(f"Tenant id is immutable (was {self.id}, got {value})")
        return value

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', status='{self.status}')>"
