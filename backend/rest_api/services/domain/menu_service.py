"""
Menu Service.

Handles menus and their publication lifecycle:

    DRAFT ──publish──▶ PUBLISHED ──unpublish──▶ DRAFT
      │                    │
      └──────archive───────┴──────▶ ARCHIVED ──unpublish──▶ DRAFT

Publishing generates the menu's QR code. A QR failure never blocks the
publication: it is logged and reported back as a warning.

Usage:
    from rest_api.services.domain import MenuService

    service = MenuService(db)
    menu = service.create({"restaurant_id": 1, "name": "Carta Principal"}, tenant_id, user_id, user_email)
    result = service.publish(menu.id, tenant_id, user_id, user_email)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Menu, Restaurant
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.crud.audit import serialize_model
from rest_api.services.domain.qr_service import QRCodeService
from rest_api.services.slug_policy import OnConflict, SlugPolicy, SlugScope
from shared.config.constants import AuditAction, EntityType, MenuStatus
from shared.config.logging import get_logger
from shared.utils.exceptions import DependencyFailure, InvalidTransitionError, ValidationError

logger = get_logger(__name__)

# Allowed status changes. Re-applying the current status is always allowed.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    MenuStatus.DRAFT: frozenset({MenuStatus.PUBLISHED, MenuStatus.ARCHIVED}),
    MenuStatus.PUBLISHED: frozenset({MenuStatus.DRAFT, MenuStatus.ARCHIVED}),
    MenuStatus.ARCHIVED: frozenset({MenuStatus.DRAFT}),
}


@dataclass
class PublishResult:
    """Outcome of a publication: the menu plus non-fatal warnings."""

    menu: Menu
    warnings: list[str] = field(default_factory=list)

    @property
    def has_qr(self) -> bool:
        return not self.warnings


class MenuService(BaseCRUDService[Menu]):
    """
    Service for menu management.

    Business rules:
    - Menus belong to a restaurant of the same tenant
    - The slug is unique within the restaurant (defaults to the name)
    - Status ∈ {DRAFT, PUBLISHED, ARCHIVED}
    - A slug change regenerates the menu's QR code
    - Deactivating a menu deactivates its QR code
    """

    def __init__(
        self,
        db: Session,
        *,
        on_slug_conflict: OnConflict = OnConflict.FAIL,
        qr_service: QRCodeService | None = None,
    ):
        super().__init__(db=db, model=Menu, entity_name="Menú")
        self._slugs = SlugPolicy(db)
        self._on_slug_conflict = on_slug_conflict
        self._qr = qr_service or QRCodeService(db)

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_for_restaurant(self, restaurant_id: int, tenant_id: int, *, include_inactive: bool = False):
        return self.list_all(
            tenant_id,
            Menu.restaurant_id == restaurant_id,
            include_inactive=include_inactive,
            order_by=Menu.sort,
        )

    def get_next_sort(self, restaurant_id: int) -> int:
        max_sort = self._db.scalar(
            select(func.max(Menu.sort)).where(Menu.restaurant_id == restaurant_id)
        )
        return (max_sort or 0) + 1

    # =========================================================================
    # Command Methods
    # =========================================================================

    def publish(
        self,
        menu_id: int,
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> PublishResult:
        """Publish the menu and generate its QR code (non-fatal)."""
        menu = self._set_status(menu_id, tenant_id, MenuStatus.PUBLISHED, AuditAction.PUBLISH, user_id, user_email)
        result = PublishResult(menu=menu)

        try:
            self._qr.generate(menu.id)
        except DependencyFailure as e:
            logger.warning("Menú publicado sin QR", menu_id=menu.id, reason=str(e))
            result.warnings.append(str(e))

        return result

    def unpublish(
        self,
        menu_id: int,
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Menu:
        """Back to DRAFT. The QR code is kept so reprinting is not needed on republish."""
        return self._set_status(menu_id, tenant_id, MenuStatus.DRAFT, AuditAction.UNPUBLISH, user_id, user_email)

    def archive(
        self,
        menu_id: int,
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Menu:
        return self._set_status(menu_id, tenant_id, MenuStatus.ARCHIVED, AuditAction.UPDATE, user_id, user_email)

    def _set_status(
        self,
        menu_id: int,
        tenant_id: int,
        status: str,
        action: str,
        user_id: int | None,
        user_email: str | None,
    ) -> Menu:
        menu = self.get_or_404(menu_id, tenant_id)
        previous = menu.status
        if status != previous and status not in STATUS_TRANSITIONS.get(previous, frozenset()):
            raise InvalidTransitionError("Menú", previous, status, menu_id=menu_id)
        menu.status = status
        menu.set_updated_by(user_id, user_email)
        self._flush("cambiar estado del menú", menu_id=menu_id)

        logger.info("Menu status changed", menu_id=menu_id, old=previous, new=status)
        self._audit.record(
            tenant_id=tenant_id,
            actor_user_id=user_id,
            action=action,
            entity=EntityType.MENU,
            entity_id=menu.id,
            payload={"status": {"old": previous, "new": status}},
        )
        return menu

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], tenant_id: int) -> None:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("El nombre del menú es requerido", field="name")
        data["name"] = name

        restaurant_id = data.get("restaurant_id")
        if not restaurant_id:
            raise ValidationError("restaurant_id es requerido", field="restaurant_id")
        self._require_same_tenant(self._db.get(Restaurant, restaurant_id), tenant_id, "Restaurante")

        status = data.setdefault("status", MenuStatus.DRAFT)
        if status not in MenuStatus.ALL:
            raise ValidationError(f"Estado inválido: {status}", field="status")

        data["slug"] = data.get("slug") or name
        if data.get("sort") is None:
            data["sort"] = self.get_next_sort(restaurant_id)

    def _validate_update(self, entity: Menu, data: dict[str, Any], tenant_id: int) -> None:
        data.pop("tenant_id", None)
        data.pop("id", None)
        if "restaurant_id" in data and data["restaurant_id"] != entity.restaurant_id:
            raise ValidationError("Un menú no puede cambiar de restaurante", field="restaurant_id")
        if "status" in data and data["status"] not in MenuStatus.ALL:
            raise ValidationError(f"Estado inválido: {data['status']}", field="status")
        if "status" in data and data["status"] != entity.status \
                and data["status"] not in STATUS_TRANSITIONS.get(entity.status, frozenset()):
            raise InvalidTransitionError("Menú", entity.status, data["status"], menu_id=entity.id)
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("El nombre del menú es requerido", field="name")

    # =========================================================================
    # Persistence Hooks
    # =========================================================================

    def _insert(self, entity: Menu) -> None:
        def _add(slug: str) -> None:
            entity.slug = slug
            self._db.add(entity)

        self._slugs.reserve(
            SlugScope.restaurant(entity.restaurant_id),
            entity.slug,
            _add,
            self._on_slug_conflict,
        )

    def _apply_update(self, entity: Menu, data: dict[str, Any]) -> None:
        new_slug = data.pop("slug", None)
        super()._apply_update(entity, data)

        if new_slug and new_slug != entity.slug:
            self._slugs.reserve(
                SlugScope.restaurant(entity.restaurant_id),
                new_slug,
                lambda slug: setattr(entity, "slug", slug),
                self._on_slug_conflict,
                exclude_id=entity.id,
            )

    # =========================================================================
    # Lifecycle Hooks
    # =========================================================================

    def _after_create(self, entity: Menu, user_id: int | None, user_email: str | None) -> None:
        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.CREATE,
            entity=EntityType.MENU,
            entity_id=entity.id,
            payload=serialize_model(entity, fields=("name", "slug", "status", "restaurant_id")),
        )

    def _after_update(
        self,
        entity: Menu,
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

        if "slug" in changes or "status" in changes:
            try:
                self._qr.sync_menu(entity)
            except DependencyFailure as e:
                logger.warning("QR no regenerado tras actualizar menú", menu_id=entity.id, reason=str(e))

        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.UPDATE,
            entity=EntityType.MENU,
            entity_id=entity.id,
            payload=changes,
        )

    def _after_delete(self, entity: Menu, user_id: int | None, user_email: str | None) -> None:
        self._qr.deactivate(entity.id)
        self._audit.record(
            tenant_id=entity.tenant_id,
            actor_user_id=user_id,
            action=AuditAction.DEACTIVATE,
            entity=EntityType.MENU,
            entity_id=entity.id,
        )
