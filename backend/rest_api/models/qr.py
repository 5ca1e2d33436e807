"""
QR Code Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .menu import Menu


class QRCode(AuditMixin, Base):
    """
    Scannable encoding of a menu's public URL.
    One row per menu. Regenerated (delete plus insert) when the URL changes.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "qr_code"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu.id"), unique=True, nullable=False
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    qr_image_url: Mapped[str] = mapped_column(Text, nullable=False)  # PNG data URL

    # Relationships
    menu: Mapped["Menu"] = relationship(back_populates="qr_code")

    def __repr__(self) -> str:
        return f"<QRCode(id={self.id}, menu_id={self.menu_id}, url='{self.url}')>"
