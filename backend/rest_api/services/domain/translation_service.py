"""
Translation Service.

Translations are keyed by (tenant, locale, entity_type, entity_id, key).
Saving the same key twice updates the value in place.

The keys "name" and "description" override the entity's own text on the
public read path; any other key ("welcome_message", "special_offers") is
passed through as free-form content.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable

from sqlalchemy.orm import Session

from rest_api.models import Menu, MenuItem, MenuSection, Restaurant, Translation
from rest_api.services.base_service import BaseService
from shared.config.constants import EntityType
from shared.config.logging import get_logger
from shared.utils.exceptions import TenantMismatch, ValidationError

logger = get_logger(__name__)

TRANSLATABLE_MODELS: dict[str, type] = {
    EntityType.RESTAURANT: Restaurant,
    EntityType.MENU: Menu,
    EntityType.SECTION: MenuSection,
    EntityType.ITEM: MenuItem,
}


class TranslationService(BaseService[Translation]):
    """Upserts and reads localized texts of catalog entities."""

    def __init__(self, db: Session):
        super().__init__(db, Translation)

    def save(
        self,
        tenant_id: int,
        *,
        locale: str,
        entity_type: str,
        entity_id: int,
        key: str,
        value: str,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> Translation:
        """
        Insert or update one translation.

        Raises:
            ValidationError: Unknown entity type, empty locale/key/value.
            TenantMismatch: The target entity does not exist in the tenant.
        """
        locale = (locale or "").strip()
        key = (key or "").strip()
        if not locale:
            raise ValidationError("El locale es requerido", field="locale")
        if not key:
            raise ValidationError("La clave de traducción es requerida", field="key")
        if value is None or not str(value).strip():
            raise ValidationError(f"La traducción '{key}' está vacía", field="value")

        self._check_target(tenant_id, entity_type, entity_id)

        translation = self._repo.find_one(
            Translation.tenant_id == tenant_id,
            Translation.locale == locale,
            Translation.entity_type == entity_type,
            Translation.entity_id == entity_id,
            Translation.key == key,
        )
        if translation is None:
            translation = Translation(
                tenant_id=tenant_id,
                locale=locale,
                entity_type=entity_type,
                entity_id=entity_id,
                key=key,
                value=value,
            )
            translation.set_created_by(user_id, user_email)
            self._db.add(translation)
        else:
            translation.value = value
            translation.restore(user_id, user_email)

        self._flush("guardar traducción", entity_type=entity_type, entity_id=entity_id, key=key)
        logger.debug("Translation saved", tenant_id=tenant_id, locale=locale, entity_type=entity_type, key=key)
        return translation

    def save_many(
        self,
        tenant_id: int,
        *,
        locale: str,
        entity_type: str,
        entity_id: int,
        values: dict[str, str],
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> list[Translation]:
        return [
            self.save(
                tenant_id,
                locale=locale,
                entity_type=entity_type,
                entity_id=entity_id,
                key=key,
                value=value,
                user_id=user_id,
                user_email=user_email,
            )
            for key, value in values.items()
        ]

    def get(self, tenant_id: int, locale: str, entity_type: str, entity_id: int) -> dict[str, str]:
        """All active translations of one entity as {key: value}."""
        return self.get_many(tenant_id, locale, entity_type, [entity_id]).get(entity_id, {})

    def get_many(
        self,
        tenant_id: int,
        locale: str,
        entity_type: str,
        entity_ids: Iterable[int],
    ) -> dict[int, dict[str, str]]:
        """Batch read: {entity_id: {key: value}} for every id that has translations."""
        ids = list(entity_ids)
        if not ids:
            return {}

        rows = self._repo.find_all(
            tenant_id,
            Translation.locale == locale,
            Translation.entity_type == entity_type,
            Translation.entity_id.in_(ids),
        )
        result: dict[int, dict[str, str]] = defaultdict(dict)
        for row in rows:
            result[row.entity_id][row.key] = row.value
        return dict(result)

    def _check_target(self, tenant_id: int, entity_type: str, entity_id: int) -> Any:
        model = TRANSLATABLE_MODELS.get(entity_type)
        if model is None:
            raise ValidationError(f"Tipo de entidad no traducible: {entity_type}", field="entity_type")

        target = self._db.get(model, entity_id)
        if target is None or target.tenant_id != tenant_id:
            raise TenantMismatch(
                entity_type,
                entity_id,
                reason="la entidad no pertenece al tenant",
                tenant_id=tenant_id,
            )
        return target
