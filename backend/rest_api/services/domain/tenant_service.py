"""
Tenant Service.

Handles tenant onboarding and lifecycle. Tenants are never hard-deleted:
they are suspended or cancelled through their status.

Usage:
    from rest_api.services.domain import TenantService

    service = TenantService(db)
    tenant = service.create("Restaurante Demo S.A.", plan="free")
    service.suspend(tenant.id)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Tenant
from rest_api.services.base_service import BaseService
from rest_api.services.crud.repository import BaseRepository
from shared.config.constants import TenantPlan, TenantStatus
from shared.config.logging import get_logger
from shared.config.settings import get_settings
from shared.utils.exceptions import NotFoundError, ValidationError

logger = get_logger(__name__)


def default_tenant_settings() -> dict[str, str]:
    """Settings every new tenant starts with."""
    app_settings = get_settings()
    return {
        "timezone": app_settings.default_timezone,
        "currency": app_settings.default_currency,
        "language": app_settings.default_locale,
    }


class TenantService(BaseService[Tenant]):
    """
    Service for tenant management.

    Business rules:
    - name is required
    - plan and status come from fixed vocabularies
    - settings are merged over the platform defaults
    """

    def __init__(self, db: Session):
        super().__init__(db, Tenant, repository=BaseRepository)

    def get_or_404(self, tenant_id: int, *, include_inactive: bool = False) -> Tenant:
        tenant = self._repo.find_by_id(tenant_id, include_inactive=include_inactive)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    def create(
        self,
        name: str,
        *,
        plan: str = TenantPlan.FREE,
        settings: dict[str, Any] | None = None,
        status: str = TenantStatus.ACTIVE,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Tenant:
        """
        Create a tenant with default settings (flushed, not committed).

        Raises:
            ValidationError: If name, plan or status are invalid.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("El nombre del tenant es requerido", field="name")
        if plan not in TenantPlan.ALL:
            raise ValidationError(f"Plan inválido: {plan}", field="plan")
        if status not in TenantStatus.ALL:
            raise ValidationError(f"Estado inválido: {status}", field="status")

        tenant = Tenant(
            name=name,
            plan=plan,
            settings={**default_tenant_settings(), **(settings or {})},
            status=status,
        )
        tenant.set_created_by(user_id, user_email)
        self._db.add(tenant)
        self._flush("crear tenant")

        logger.info("Tenant creado", tenant_id=tenant.id, plan=plan)
        return tenant

    def set_status(
        self,
        tenant_id: int,
        status: str,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Tenant:
        if status not in TenantStatus.ALL:
            raise ValidationError(f"Estado inválido: {status}", field="status")

        tenant = self.get_or_404(tenant_id, include_inactive=True)
        tenant.status = status
        tenant.set_updated_by(user_id, user_email)
        self._flush("actualizar tenant", tenant_id=tenant_id)

        logger.info("Tenant status changed", tenant_id=tenant_id, status=status)
        return tenant

    def suspend(self, tenant_id: int, user_id: int | None = None, user_email: str | None = None) -> Tenant:
        """Suspend a tenant. Its public pages stop resolving."""
        return self.set_status(tenant_id, TenantStatus.SUSPENDED, user_id, user_email)

    def reactivate(self, tenant_id: int, user_id: int | None = None, user_email: str | None = None) -> Tenant:
        return self.set_status(tenant_id, TenantStatus.ACTIVE, user_id, user_email)
