"""
Translation Model.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntId


class Translation(AuditMixin, Base):
    """
    Localized text for any tenant-scoped entity.
    Loosely references its target by (entity_type, entity_id).
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "translation"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=False, index=True
    )
    locale: Mapped[str] = mapped_column(String(10), nullable=False)  # es-ES, en-US
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # restaurant, menu, section, item
    entity_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "locale", "entity_type", "entity_id", "key",
            name="uq_translation_entry",
        ),
        Index("ix_translation_entity", "entity_type", "entity_id"),
    )
