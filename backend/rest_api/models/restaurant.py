"""
Restaurant Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .tenant import Tenant
    from .menu import Menu


class Restaurant(AuditMixin, Base):
    """
    A restaurant owned by a tenant.
    The slug is unique across the whole platform: it is the public URL path.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    timezone: Mapped[str] = mapped_column(Text, default="America/Argentina/Buenos_Aires", nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    website: Mapped[Optional[str]] = mapped_column(Text)
    default_currency: Mapped[str] = mapped_column(String(3), default="ARS", nullable=False)

    # Relationships
    tenant: Mapped["Tenant"] = relationship(back_populates="restaurants")
    menus: Mapped[list["Menu"]] = relationship(back_populates="restaurant", order_by="Menu.sort")

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, slug='{self.slug}', tenant_id={self.tenant_id})>"
