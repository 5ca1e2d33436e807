"""
Menu Models: Menu, MenuSection, MenuItem, ItemPrice.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import MenuStatus
from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .restaurant import Restaurant
    from .icon import ItemIcon
    from .qr import QRCode


class Menu(AuditMixin, Base):
    """
    A menu of a restaurant.
    The slug is unique within the restaurant only.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "menu"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default=MenuStatus.DRAFT, nullable=False, index=True)
    sort: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "slug", name="uq_menu_restaurant_slug"),
        CheckConstraint("status IN ('DRAFT', 'PUBLISHED', 'ARCHIVED')", name="ck_menu_status"),
    )

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="menus")
    sections: Mapped[list["MenuSection"]] = relationship(
        back_populates="menu", order_by="MenuSection.sort_order"
    )
    items: Mapped[list["MenuItem"]] = relationship(back_populates="menu", order_by="MenuItem.sort")
    qr_code: Mapped[Optional["QRCode"]] = relationship(back_populates="menu", uselist=False)

    @property
    def is_published(self) -> bool:
        return self.status == MenuStatus.PUBLISHED

    def __repr__(self) -> str:
        return f"<Menu(id={self.id}, slug='{self.slug}', status='{self.status}')>"


class MenuSection(AuditMixin, Base):
    """
    Ordered grouping of items inside a menu.
    sort_order is unique per menu and defines the display order.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "menu_section"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("menu_id", "sort_order", name="uq_menu_section_sort_order"),
    )

    # Relationships
    menu: Mapped["Menu"] = relationship(back_populates="sections")
    items: Mapped[list["MenuItem"]] = relationship(back_populates="section", order_by="MenuItem.sort")


class MenuItem(AuditMixin, Base):
    """
    A dish or drink. Bound to exactly one section of its own menu.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu.id"), nullable=False, index=True
    )
    section_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu_section.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    sort: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("ix_menu_item_menu_section", "menu_id", "section_id"),
    )

    # Relationships
    menu: Mapped["Menu"] = relationship(back_populates="items")
    section: Mapped["MenuSection"] = relationship(back_populates="items")
    prices: Mapped[list["ItemPrice"]] = relationship(back_populates="item", order_by="ItemPrice.id")
    item_icons: Mapped[list["ItemIcon"]] = relationship(back_populates="item")

    @property
    def icon_codes(self) -> list[str]:
        return [link.icon.code for link in self.item_icons]


class ItemPrice(AuditMixin, Base):
    """
    A labelled price of an item ("Porción", "500ml").
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "item_price"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("menu_item.id"), nullable=False, index=True
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("item_id", "label", name="uq_item_price_label"),
        CheckConstraint("amount >= 0", name="ck_item_price_amount_non_negative"),
    )

    # Relationships
    item: Mapped["MenuItem"] = relationship(back_populates="prices")
