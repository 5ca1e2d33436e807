"""
Restaurant Service.

Usage:
    from rest_api.services.domain import RestaurantService

    service = RestaurantService(db)
    restaurant = service.create({"name": "La Parrilla del Sur"}, tenant_id, user_id, user_email)
    service.update(restaurant.id, {"slug": "parrilla-sur"}, tenant_id, user_id, user_email)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Restaurant, Tenant
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.audit import serialize_model
from rest_api.services.domain.qr_service import QRCodeService
from rest_api.services.slug_policy import OnConflict, SlugPolicy, SlugScope
from shared.config.constants import AuditAction, EntityType, TenantStatus
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError

logger = get_logger(__name__)


class RestaurantService(BaseCRUDService[Restaurant]):
    """
    Service for restaurant management.

    Business rules:
    - Restaurants belong to an active tenant
    - The slug is unique across the platform (defaults to the name)
    - Changing the slug regenerates the QR codes of all its menus
    - Creation, updates and deactivation are audited
    """

    def __init__(
        self,
        db: Session,
        *,
        on_slug_conflict: OnConflict = OnConflict.FAIL,
        qr_service: QRCodeService | None = None,
    ):
        super().__init__(db=db, model=Restaurant, entity_name="Restaurante")
        self._slugs = SlugPolicy(db)
        self._on_slug_conflict = on_slug_conflict
        self._qr = qr_service or QRCodeService(db)

    def get_by_slug(self, slug: str) -> Restaurant | None:
        """Platform-wide lookup (slugs are global)."""
        return self._repo.find_one(Restaurant.slug == slug, include_inactive=False)

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], tenant_id: int) -> None:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("El nombre del restaurante es requerido", field="name")
        data["name"] = name

        tenant = self._db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)
        if tenant.status != TenantStatus.ACTIVE:
            raise ValidationError(f"El tenant está en estado '{tenant.status}'", tenant_id=tenant_id)

        # Slug candidate: explicit slug or the name, normalized on reservation
        data["slug"] = data.get("slug") or name

        tenant_settings = tenant.settings or {}
        data.setdefault("timezone", tenant_settings.get("timezone") or "America/Argentina/Buenos_Aires")
        data.setdefault("default_currency", tenant_settings.get("currency") or "ARS")

    def _validate_update(self, entity: Restaurant, data: dict[str, Any], tenant_id: int) -> None:
        data.pop("tenant_id", None)
        data.pop("id", None)
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("El nombre del restaurante es requerido", field="name")

    # =========================================================================
    # Persistence Hooks
    # =========================================================================

    def _insert(self, entity: Restaurant) -> None:
        def _add(slug: str) -> None:
            entity.slug = slug
            self._db.add(entity)

        self._slugs.reserve(SlugScope.platform(), entity.slug, _add, self._on_slug_conflict)

    def _apply_update(self, entity: Restaurant, data: dict[str, Any]) -> None:
        new_slug = data.pop("slug", None)
        super()._apply_update(entity, data)

        if new_slug and new_slug != entity.slug:
            self._slugs.reserve(
                SlugScope.platform(),
                new_slug,
                lambda slug: setattr(entity, "slug", slug),
                self._on_slug_conflict,
                exclude_id=entity.id,
            )

    # =========================================================================
    # Lifecycle Hooks
    # =========================================================================

    def _after_create(self, entity: Restaurant, user_id: int | None, user_email: str | None) -> None:
        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.CREATE,
            entity=EntityType.RESTAURANT,
            entity_id=entity.id,
            payload=serialize_model(entity, fields=("name", "slug", "default_currency")),
        )

    def _after_update(
        self,
        entity: Restaurant,
        old_values: dict[str, Any],
        user_id: int | None,
        user_email: str | None,
    ) -> None:
        changes = {
            key: {"old": old, "new": getattr(entity, key)}
            for key, old in old_values.items()
            if old != getattr(entity, key)
        }
        if not changes:
            return

        if "slug" in changes:
            for warning in self._qr.sync_restaurant(entity):
                logger.warning("QR no regenerado tras cambio de slug", restaurant_id=entity.id, reason=warning)

        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.UPDATE,
            entity=EntityType.RESTAURANT,
            entity_id=entity.id,
            payload=changes,
        )

    def _after_delete(self, entity: Restaurant, user_id: int | None, user_email: str | None) -> None:
        # Public URL stops resolving: retire every QR code of the restaurant
        for menu in entity.menus:
            self._qr.deactivate(menu.id)

        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.DEACTIVATE,
            entity=EntityType.RESTAURANT,
            entity_id=entity.id,
        )
