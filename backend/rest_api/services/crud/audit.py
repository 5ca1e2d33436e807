"""
Audit logging service.
Records administrative mutations for traceability.

Audit is best-effort: a failed audit write is logged and swallowed so it
never rolls back the business mutation it describes. QR generation failures,
by contrast, are surfaced to the caller as warnings.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import AuditLog
from shared.config.logging import get_logger

logger = get_logger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def serialize_model(obj: Any, fields: Sequence[str] | None = None, exclude: Sequence[str] = ()) -> dict:
    """
    Serialize a SQLAlchemy model to a dictionary for audit payloads.

    Args:
        obj: SQLAlchemy model instance
        fields: Only these columns (default: all columns)
        exclude: Columns to leave out
    """
    names = fields or [column.name for column in obj.__table__.columns]
    return {name: _jsonable(getattr(obj, name)) for name in names if name not in exclude}


class AuditRecorder:
    """
    Append-only audit trail.

    Usage:
        recorder = AuditRecorder(db)
        recorder.record(
            tenant_id=tenant.id,
            actor_user_id=admin.id,
            action=AuditAction.CREATE,
            entity=EntityType.RESTAURANT,
            entity_id=restaurant.id,
            payload={"name": restaurant.name, "slug": restaurant.slug},
        )
    """

    def __init__(self, db: Session):
        self._db = db

    def record(
        self,
        *,
        tenant_id: Optional[int],
        actor_user_id: Optional[int],
        action: str,
        entity: str,
        entity_id: int,
        payload: Optional[dict] = None,
    ) -> Optional[AuditLog]:
        """
        Append an audit row inside a savepoint.

        Returns:
            The created AuditLog, or None if the write failed.
        """
        entry = AuditLog(
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            payload=_jsonable(payload) if payload else None,
        )
        try:
            with self._db.begin_nested():
                self._db.add(entry)
                self._db.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Audit write failed",
                tenant_id=tenant_id,
                action=action,
                entity=entity,
                entity_id=entity_id,
                error=str(e),
            )
            return None

        logger.debug("Audit recorded", action=action, entity=entity, entity_id=entity_id)
        return entry

    def list_for_tenant(
        self,
        tenant_id: int,
        *,
        entity: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[AuditLog]:
        """Most recent audit entries of a tenant."""
        query = select(AuditLog).where(AuditLog.tenant_id == tenant_id)
        if entity:
            query = query.where(AuditLog.entity == entity)
        query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(offset).limit(limit)
        return self._db.scalars(query).all()
