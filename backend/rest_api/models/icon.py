"""
Icon Models: Icon, ItemIcon.

Icons are shared platform-wide and are not tenant-scoped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .menu import MenuItem


class Icon(AuditMixin, Base):
    """
    Descriptive tag attachable to items ("vegano", "picante").
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "icon"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    label_i18n_key: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    item_icons: Mapped[list["ItemIcon"]] = relationship(back_populates="icon")

    def __repr__(self) -> str:
        return f"<Icon(id={self.id}, code='{self.code}')>"


class ItemIcon(Base):
    """Join row between an item and an icon. The pair is the primary key."""

    __tablename__ = "item_icon"

    item_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu_item.id"), primary_key=True
    )
    icon_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("icon.id"), primary_key=True
    )

    # Relationships
    item: Mapped["MenuItem"] = relationship(back_populates="item_icons")
    icon: Mapped["Icon"] = relationship(back_populates="item_icons")
