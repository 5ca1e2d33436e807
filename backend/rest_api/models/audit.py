"""
Audit Log Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Text, event, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntId


class AuditLog(Base):
    """
    Append-only record of an administrative mutation.

    Deliberately does not use AuditMixin: rows are never soft-deleted,
    updated or removed. The mapper events below refuse both.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    # NULL for platform-level actions (super admin bootstrap)
    tenant_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("tenant.id"), nullable=True, index=True
    )
    actor_user_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("app_user.id"), index=True
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)  # CREATE, UPDATE, PUBLISH, ...
    entity: Mapped[str] = mapped_column(Text, nullable=False)  # restaurant, menu, ...
    entity_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    payload: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_audit_log_tenant_entity", "tenant_id", "entity"),
        Index("ix_audit_log_tenant_entity_id", "tenant_id", "entity_id"),
    )


class AuditLogImmutableError(RuntimeError):
    """Raised when code tries to modify or delete an audit row."""


@event.listens_for(AuditLog, "before_update")
def _refuse_update(mapper, connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"AuditLog {target.id} is append-only")


@event.listens_for(AuditLog, "before_delete")
def _refuse_delete(mapper, connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"AuditLog {target.id} is append-only")
