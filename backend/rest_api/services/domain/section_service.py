"""
Section Service.

Sections are ordered inside a menu by sort_order, unique per menu.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Menu, MenuSection
from rest_api.services.base_service import BaseCRUDService
from shared.config.logging import get_logger
from shared.utils.exceptions import ConflictError, TenantMismatch, ValidationError

logger = get_logger(__name__)


class SectionService(BaseCRUDService[MenuSection]):
    """
    Service for menu sections.

    Business rules:
    - Sections belong to a menu of the same tenant
    - sort_order is auto-assigned as max + 1 when not provided
    - Reordering is a two-phase update to avoid transient collisions
    """

    def __init__(self, db: Session):
        super().__init__(db=db, model=MenuSection, entity_name="Sección")

    def list_for_menu(self, menu_id: int, tenant_id: int, *, include_inactive: bool = False) -> Sequence[MenuSection]:
        return self.list_all(
            tenant_id,
            MenuSection.menu_id == menu_id,
            include_inactive=include_inactive,
            order_by=MenuSection.sort_order,
        )

    def get_next_sort_order(self, menu_id: int) -> int:
        """Next free sort_order. Inactive sections still hold theirs."""
        max_order = self._db.scalar(
            select(func.max(MenuSection.sort_order)).where(MenuSection.menu_id == menu_id)
        )
        return (max_order or 0) + 1

    def reorder(
        self,
        menu_id: int,
        section_ids: list[int],
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Sequence[MenuSection]:
        """
        Put the given sections first, in order, as 1..n.
        Sections not listed keep their relative order after them.

        Raises:
            ValidationError: On duplicated ids.
            TenantMismatch: If an id is not a section of this menu and tenant.
        """
        if len(set(section_ids)) != len(section_ids):
            raise ValidationError("IDs de sección duplicados", field="section_ids")

        menu = self._db.get(Menu, menu_id)
        self._require_same_tenant(menu, tenant_id, "Menú")

        sections = self.list_all(
            tenant_id,
            MenuSection.menu_id == menu_id,
            include_inactive=True,
            order_by=MenuSection.sort_order,
        )
        by_id = {s.id: s for s in sections}
        unknown = [sid for sid in section_ids if sid not in by_id]
        if unknown:
            raise TenantMismatch("Sección", unknown[0], reason="no pertenece al menú", menu_id=menu_id)

        listed = set(section_ids)
        ordered = [by_id[sid] for sid in section_ids]
        ordered += [s for s in sections if s.id not in listed]

        # Phase 1: move everything out of the way
        for position, section in enumerate(ordered, start=1):
            section.sort_order = -position
        self._flush("reordenar secciones", menu_id=menu_id)

        # Phase 2: final positions
        for position, section in enumerate(ordered, start=1):
            section.sort_order = position
            section.set_updated_by(user_id, user_email)
        self._flush("reordenar secciones", menu_id=menu_id)

        logger.info("Secciones reordenadas", menu_id=menu_id, order=[s.id for s in ordered])
        return ordered

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], tenant_id: int) -> None:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("El nombre de la sección es requerido", field="name")
        data["name"] = name

        menu_id = data.get("menu_id")
        if not menu_id:
            raise ValidationError("menu_id es requerido", field="menu_id")
        self._require_same_tenant(self._db.get(Menu, menu_id), tenant_id, "Menú")

        sort_order = data.get("sort_order")
        if sort_order is None:
            data["sort_order"] = self.get_next_sort_order(menu_id)
        elif self._repo.exists_where(MenuSection.menu_id == menu_id, MenuSection.sort_order == sort_order):
            raise ConflictError(
                f"El orden {sort_order} ya está en uso en el menú",
                menu_id=menu_id,
                sort_order=sort_order,
            )

    def _validate_update(self, entity: MenuSection, data: dict[str, Any], tenant_id: int) -> None:
        data.pop("tenant_id", None)
        data.pop("id", None)
        if "menu_id" in data and data["menu_id"] != entity.menu_id:
            raise ValidationError("Una sección no puede cambiar de menú", field="menu_id")
        if "sort_order" in data and data["sort_order"] != entity.sort_order:
            raise ValidationError("Use reorder() para cambiar el orden", field="sort_order")
