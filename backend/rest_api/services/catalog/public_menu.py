"""
Public menu read model.

Builds what an unauthenticated diner sees after scanning a QR code:

- The tenant must be active (is_active and status "active")
- The restaurant must be active
- Only PUBLISHED and active menus are listed
- Only active sections, items and prices are shown

Anything else is reported as NotFoundError, so a deactivated restaurant
and a misspelled slug look the same from the outside.

Translations for the requested locale override names and descriptions.
The locale defaults to the tenant's language setting.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from rest_api.models import ItemIcon, Menu, MenuItem, MenuSection, Restaurant, Tenant
from rest_api.services.domain.translation_service import TranslationService
from shared.config.constants import EntityType, MenuStatus, TenantStatus
from shared.config.logging import get_logger
from shared.config.settings import get_settings
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import (
    PublicItem,
    PublicMenu,
    PublicMenuSummary,
    PublicPrice,
    PublicRestaurant,
    PublicRestaurantMenu,
    PublicSection,
)

logger = get_logger(__name__)

# Translation keys that replace entity fields
OVERRIDABLE_KEYS = ("name", "description")


def _override(obj, translations: dict[str, str]) -> dict[str, str | None]:
    return {key: translations.get(key) or getattr(obj, key) for key in OVERRIDABLE_KEYS}


class PublicMenuService:
    """Read-only, unauthenticated view of published menus."""

    def __init__(self, db: Session):
        self._db = db
        self._translations = TranslationService(db)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _find_restaurant(self, restaurant_slug: str) -> Restaurant:
        restaurant = self._db.scalar(
            select(Restaurant)
            .join(Tenant, Restaurant.tenant_id == Tenant.id)
            .options(joinedload(Restaurant.tenant))
            .where(
                Restaurant.slug == restaurant_slug,
                Restaurant.is_active.is_(True),
                Tenant.is_active.is_(True),
                Tenant.status == TenantStatus.ACTIVE,
            )
        )
        if restaurant is None:
            raise NotFoundError("Restaurante", restaurant_slug)
        return restaurant

    def _published_menus(self, restaurant: Restaurant) -> list[Menu]:
        return list(
            self._db.scalars(
                select(Menu)
                .where(
                    Menu.restaurant_id == restaurant.id,
                    Menu.is_active.is_(True),
                    Menu.status == MenuStatus.PUBLISHED,
                )
                .order_by(Menu.sort, Menu.id)
            ).all()
        )

    def _locale_for(self, restaurant: Restaurant, locale: str | None) -> str:
        if locale:
            return locale
        tenant_settings = restaurant.tenant.settings or {}
        return tenant_settings.get("language") or get_settings().default_locale

    # =========================================================================
    # Public API
    # =========================================================================

    def get_restaurant(self, restaurant_slug: str, locale: str | None = None) -> PublicRestaurant:
        """
        Restaurant page with its published menus.

        Raises:
            NotFoundError: Unknown slug, inactive restaurant or inactive tenant.
        """
        restaurant = self._find_restaurant(restaurant_slug)
        locale = self._locale_for(restaurant, locale)
        return self._build_restaurant(restaurant, locale, self._published_menus(restaurant))

    def get_menu(
        self,
        restaurant_slug: str,
        menu_slug: str | None = None,
        locale: str | None = None,
    ) -> PublicRestaurantMenu:
        """
        One published menu with its sections, items and prices.

        Without menu_slug the first published menu (by sort) is returned,
        which is what /r/{restaurant_slug} resolves to.

        Raises:
            NotFoundError: No such published, active menu.
        """
        restaurant = self._find_restaurant(restaurant_slug)
        locale = self._locale_for(restaurant, locale)
        menus = self._published_menus(restaurant)

        if menu_slug is None:
            menu = menus[0] if menus else None
        else:
            menu = next((m for m in menus if m.slug == menu_slug), None)
        if menu is None:
            raise NotFoundError("Menú", menu_slug or restaurant_slug)

        logger.debug("Public menu served", restaurant_id=restaurant.id, menu_id=menu.id, locale=locale)
        return PublicRestaurantMenu(
            restaurant=self._build_restaurant(restaurant, locale, menus),
            menu=self._build_menu(menu, locale),
        )

    # =========================================================================
    # Builders
    # =========================================================================

    def _build_restaurant(self, restaurant: Restaurant, locale: str, menus: list[Menu]) -> PublicRestaurant:
        tenant_id = restaurant.tenant_id
        translations = self._translations.get(tenant_id, locale, EntityType.RESTAURANT, restaurant.id)
        menu_translations = self._translations.get_many(
            tenant_id, locale, EntityType.MENU, [m.id for m in menus]
        )

        return PublicRestaurant(
            id=restaurant.id,
            slug=restaurant.slug,
            address=restaurant.address,
            phone=restaurant.phone,
            email=restaurant.email,
            website=restaurant.website,
            locale=locale,
            translations=translations,
            menus=[
                PublicMenuSummary(
                    id=m.id,
                    slug=m.slug,
                    **_override(m, menu_translations.get(m.id, {})),
                )
                for m in menus
            ],
            **_override(restaurant, translations),
        )

    def _build_menu(self, menu: Menu, locale: str) -> PublicMenu:
        tenant_id = menu.tenant_id

        sections = self._db.scalars(
            select(MenuSection)
            .options(
                selectinload(MenuSection.items).selectinload(MenuItem.prices),
                selectinload(MenuSection.items)
                .selectinload(MenuItem.item_icons)
                .joinedload(ItemIcon.icon),
            )
            .where(MenuSection.menu_id == menu.id, MenuSection.is_active.is_(True))
            .order_by(MenuSection.sort_order)
        ).all()

        items_by_section = {
            section.id: [item for item in section.items if item.is_active]
            for section in sections
        }
        item_ids = [item.id for items in items_by_section.values() for item in items]

        menu_tr = self._translations.get(tenant_id, locale, EntityType.MENU, menu.id)
        section_tr = self._translations.get_many(tenant_id, locale, EntityType.SECTION, [s.id for s in sections])
        item_tr = self._translations.get_many(tenant_id, locale, EntityType.ITEM, item_ids)

        qr = menu.qr_code if menu.qr_code is not None and menu.qr_code.is_active else None

        return PublicMenu(
            id=menu.id,
            slug=menu.slug,
            qr_url=qr.url if qr else None,
            qr_image_url=qr.qr_image_url if qr else None,
            translations=menu_tr,
            sections=[
                PublicSection(
                    id=section.id,
                    name=section_tr.get(section.id, {}).get("name") or section.name,
                    sort_order=section.sort_order,
                    items=[
                        PublicItem(
                            id=item.id,
                            prices=[
                                PublicPrice.model_validate(price)
                                for price in item.prices
                                if price.is_active
                            ],
                            icons=[link.icon.code for link in item.item_icons if link.icon.is_active],
                            **_override(item, item_tr.get(item.id, {})),
                        )
                        for item in items_by_section[section.id]
                    ],
                )
                for section in sections
            ],
            **_override(menu, menu_tr),
        )
