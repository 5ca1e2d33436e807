"""
Base Service Classes.

Provides abstract base classes for application services that:
- Use Repository for data access (not direct queries)
- Handle business logic and tenant isolation checks
- Integrate with the audit recorder

Services never commit. They add and flush; the caller's unit of work owns
the transaction, so an entity and its mandatory children land together.

Architecture:
    CLI / Router / Provisioning → Service (business logic) → Repository (data access) → Model

Usage:
    from rest_api.services.base_service import BaseCRUDService

    class SectionService(BaseCRUDService[MenuSection]):
        def __init__(self, db: Session):
            super().__init__(db=db, model=MenuSection, entity_name="Sección")
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Sequence, TypeVar, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Base
from rest_api.services.crud.audit import AuditRecorder
from rest_api.services.crud.repository import BaseRepository, TenantRepository
from shared.config.logging import get_logger
from shared.utils.exceptions import ConflictError, NotFoundError, TenantMismatch

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseService(ABC, Generic[ModelT]):
    """
    Abstract base service for domain operations.

    Subclasses implement specific business logic while this class
    provides common infrastructure (repository access, logging).
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        repository: Type[BaseRepository] = TenantRepository,
    ):
        self._db = db
        self._model = model
        self._repo = repository(model, db)

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def repo(self) -> BaseRepository[ModelT]:
        """Repository for data access."""
        return self._repo

    def _flush(self, operation: str, **log_context: Any) -> None:
        """Flush pending changes, turning constraint violations into ConflictError."""
        try:
            self._db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"No se pudo {operation}: viola una restricción de integridad",
                operation=operation,
                error=str(e.orig),
                **log_context,
            ) from e


class BaseCRUDService(BaseService[ModelT], Generic[ModelT]):
    """
    Base service for tenant-scoped entities with CRUD operations.

    Responsibilities:
    - Data access via Repository
    - Cross-tenant checks on every write
    - Soft deactivation through AuditMixin
    - Validation and lifecycle hooks for subclasses
    """

    def __init__(self, db: Session, model: Type[ModelT], entity_name: str):
        super().__init__(db, model)
        self._entity_name = entity_name
        self._audit = AuditRecorder(db)

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_entity(
        self,
        entity_id: int,
        tenant_id: int,
        *,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """Get raw entity within tenant scope."""
        return self._repo.find_by_id(entity_id, tenant_id, include_inactive=include_inactive)

    def get_or_404(
        self,
        entity_id: int,
        tenant_id: int,
        *,
        include_inactive: bool = False,
    ) -> ModelT:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found in the tenant.
        """
        entity = self.get_entity(entity_id, tenant_id, include_inactive=include_inactive)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, tenant_id=tenant_id)
        return entity

    def list_all(
        self,
        tenant_id: int,
        *criteria: Any,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """List entities of a tenant."""
        return self._repo.find_all(
            tenant_id,
            *criteria,
            include_inactive=include_inactive,
            limit=limit,
            offset=offset,
            order_by=order_by,
        )

    def count(self, tenant_id: int, *, include_inactive: bool = False) -> int:
        """Count entities for tenant."""
        return self._repo.count(tenant_id, include_inactive=include_inactive)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(
        self,
        data: dict[str, Any],
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> ModelT:
        """
        Create new entity (flushed, not committed).

        Raises:
            ValidationError: If data is invalid.
            TenantMismatch: If a referenced parent belongs elsewhere.
            ConflictError: If a unique constraint is violated.
        """
        data = dict(data)
        self._validate_create(data, tenant_id)
        data["tenant_id"] = tenant_id

        entity = self._model(**data)
        entity.set_created_by(user_id, user_email)
        self._insert(entity)

        logger.info(f"{self._entity_name} creado", entity_id=entity.id, tenant_id=tenant_id)
        self._after_create(entity, user_id, user_email)
        return entity

    def update(
        self,
        entity_id: int,
        data: dict[str, Any],
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> ModelT:
        """
        Update existing entity (flushed, not committed).

        Raises:
            NotFoundError: If entity not found.
            ValidationError: If data is invalid.
        """
        entity = self.get_or_404(entity_id, tenant_id)
        data = dict(data)
        self._validate_update(entity, data, tenant_id)

        old_values = {k: getattr(entity, k) for k in data.keys() if hasattr(entity, k)}
        self._apply_update(entity, data)
        entity.set_updated_by(user_id, user_email)
        self._flush(f"actualizar {self._entity_name.lower()}", entity_id=entity_id)

        self._after_update(entity, old_values, user_id, user_email)
        return entity

    def deactivate(
        self,
        entity_id: int,
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> ModelT:
        """Soft-deactivate an entity. It stays in the store with is_active=False."""
        entity = self.get_or_404(entity_id, tenant_id)
        self._validate_delete(entity, tenant_id)

        entity.soft_delete(user_id, user_email)
        self._flush(f"desactivar {self._entity_name.lower()}", entity_id=entity_id)

        logger.info(f"{self._entity_name} desactivado", entity_id=entity_id, tenant_id=tenant_id)
        self._after_delete(entity, user_id, user_email)
        return entity

    # =========================================================================
    # Tenant isolation
    # =========================================================================

    def _require_same_tenant(self, parent: Any, tenant_id: int, entity: str) -> None:
        """
        Raise TenantMismatch unless the parent row belongs to tenant_id.

        Raises:
            TenantMismatch
        """
        if parent is None:
            raise TenantMismatch(entity, reason="referencia inexistente", tenant_id=tenant_id)
        if parent.tenant_id != tenant_id:
            raise TenantMismatch(
                entity,
                parent.id,
                expected_tenant_id=tenant_id,
                actual_tenant_id=parent.tenant_id,
            )

    # =========================================================================
    # Persistence Hooks (override in subclasses)
    # =========================================================================

    def _insert(self, entity: ModelT) -> None:
        """Add and flush a new entity. Override when the insert needs a reservation."""
        self._db.add(entity)
        self._flush(f"crear {self._entity_name.lower()}")

    def _apply_update(self, entity: ModelT, data: dict[str, Any]) -> None:
        for field_name, value in data.items():
            if hasattr(entity, field_name):
                setattr(entity, field_name, value)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], tenant_id: int) -> None:
        """
        Validate data before create.

        Raises:
            ValidationError / TenantMismatch: If validation fails.
        """
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any], tenant_id: int) -> None:
        """Validate data before update."""
        pass

    def _validate_delete(self, entity: ModelT, tenant_id: int) -> None:
        """Validate before deactivation."""
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _after_create(self, entity: ModelT, user_id: int | None, user_email: str | None) -> None:
        """Hook called after entity creation. Override for side effects."""
        pass

    def _after_update(
        self,
        entity: ModelT,
        old_values: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        """Hook called after entity update. Override for side effects."""
        pass

    def _after_delete(self, entity: ModelT, user_id: int | None, user_email: str | None) -> None:
        """Hook called after entity deactivation."""
        pass
