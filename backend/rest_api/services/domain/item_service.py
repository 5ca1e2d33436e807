"""
Item Service.

An item is only complete with at least one price. The item, its prices and
its icon tags are written together inside a savepoint, so a failure leaves
no half-built item behind.

Unknown icon codes do not fail the item: they are skipped and reported,
which keeps bulk loads working against a partial icon catalog.

Usage:
    from rest_api.services.domain import ItemService

    service = ItemService(db)
    created = service.create_item(
        {"menu_id": 1, "section_id": 2, "name": "Provoleta"},
        tenant_id,
        prices=[{"label": "Porción", "amount": 1500}],
        icon_codes=["vegetariano"],
    )
    created.item, created.skipped_icon_codes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from rest_api.models import ItemIcon, ItemPrice, Menu, MenuItem, MenuSection
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.domain.icon_service import IconCatalog
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, TenantMismatch, ValidationError

logger = get_logger(__name__)


@dataclass
class ItemCreated:
    """A created item plus the icon codes that could not be resolved."""

    item: MenuItem
    skipped_icon_codes: list[str] = field(default_factory=list)


def normalize_prices(prices: Iterable[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Validate price rows before any write.

    Raises:
        ValidationError: No prices, negative or malformed amount, empty or repeated label.
    """
    rows: list[dict[str, Any]] = []
    labels: set[str] = set()

    for price in prices or []:
        label = (price.get("label") or "").strip()
        if not label:
            raise ValidationError("Cada precio requiere una etiqueta", field="label")
        if label in labels:
            raise ValidationError(f"Etiqueta de precio repetida: {label}", field="label")
        labels.add(label)

        try:
            amount = Decimal(str(price.get("amount")))
        except InvalidOperation as e:
            raise ValidationError(f"Monto inválido para '{label}'", field="amount") from e
        if not amount.is_finite() or amount < 0:
            raise ValidationError(f"El monto de '{label}' no puede ser negativo", field="amount", value=str(amount))

        currency = price.get("currency")
        if currency is not None:
            currency = currency.strip().upper()
            if len(currency) != 3:
                raise ValidationError(f"Moneda inválida: {currency}", field="currency")

        rows.append({"label": label, "amount": amount, "currency": currency})

    if not rows:
        raise ValidationError("El ítem requiere al menos un precio", field="prices")
    return rows


class ItemService(BaseCRUDService[MenuItem]):
    """
    Service for menu items, their prices and icon tags.

    Business rules:
    - The section must belong to the item's menu, and both to the tenant
    - At least one price, amounts ≥ 0, labels unique per item
    - Price currency defaults to the restaurant's currency
    - Unknown icon codes are skipped with a warning
    """

    def __init__(self, db: Session, icon_catalog: IconCatalog | None = None):
        super().__init__(db=db, model=MenuItem, entity_name="Ítem")
        self._catalog = icon_catalog

    @property
    def catalog(self) -> IconCatalog:
        if self._catalog is None:
            self._catalog = IconCatalog.load(self._db)
        return self._catalog

    def list_for_section(self, section_id: int, tenant_id: int, *, include_inactive: bool = False) -> Sequence[MenuItem]:
        return self.list_all(
            tenant_id,
            MenuItem.section_id == section_id,
            include_inactive=include_inactive,
            order_by=MenuItem.sort,
        )

    def get_next_sort(self, section_id: int) -> int:
        max_sort = self._db.scalar(
            select(func.max(MenuItem.sort)).where(MenuItem.section_id == section_id)
        )
        return (max_sort or 0) + 1

    # =========================================================================
    # Command Methods
    # =========================================================================

    def create(
        self,
        data: dict[str, Any],
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> MenuItem:
        """Create an item. `data` must carry "prices" and may carry "icon_codes"."""
        data = dict(data)
        prices = data.pop("prices", None)
        icon_codes = data.pop("icon_codes", ())
        return self.create_item(
            data, tenant_id, user_id, user_email, prices=prices, icon_codes=icon_codes
        ).item

    def create_item(
        self,
        data: dict[str, Any],
        tenant_id: int,
        user_id: int | None = None,
        user_email: str | None = None,
        *,
        prices: Iterable[dict[str, Any]] | None,
        icon_codes: Iterable[str] = (),
    ) -> ItemCreated:
        """
        Create an item with its prices and icon tags.

        Raises:
            ValidationError: Missing name, bad prices.
            TenantMismatch: Section outside the menu, or menu/section outside the tenant.
        """
        price_rows = normalize_prices(prices)

        with self._db.begin_nested():
            item = super().create(data, tenant_id, user_id, user_email)
            currency = item.menu.restaurant.default_currency

            for row in price_rows:
                price = ItemPrice(
                    tenant_id=tenant_id,
                    item_id=item.id,
                    label=row["label"],
                    amount=row["amount"],
                    currency=row["currency"] or currency,
                )
                price.set_created_by(user_id, user_email)
                self._db.add(price)

            icons, skipped = self.catalog.resolve(icon_codes)
            for icon in icons:
                self._db.add(ItemIcon(item_id=item.id, icon_id=icon.id))

            self._flush("crear precios del ítem", item_id=item.id)
        self._db.expire(item, ["prices", "item_icons"])

        if skipped:
            logger.warning("Iconos desconocidos omitidos", item_id=item.id, codes=skipped)
        return ItemCreated(item=item, skipped_icon_codes=skipped)

    def add_price(
        self,
        item_id: int,
        tenant_id: int,
        *,
        label: str,
        amount: Decimal | int | str,
        currency: str | None = None,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> ItemPrice:
        item = self.get_or_404(item_id, tenant_id)
        row = normalize_prices([{"label": label, "amount": amount, "currency": currency}])[0]

        if any(p.label == row["label"] for p in item.prices):
            raise ValidationError(f"Etiqueta de precio repetida: {row['label']}", field="label")

        price = ItemPrice(
            tenant_id=tenant_id,
            item_id=item.id,
            label=row["label"],
            amount=row["amount"],
            currency=row["currency"] or item.menu.restaurant.default_currency,
        )
        price.set_created_by(user_id, user_email)
        self._db.add(price)
        self._flush("agregar precio", item_id=item_id)
        self._db.expire(item, ["prices"])
        return price

    def remove_price(self, item_id: int, price_id: int, tenant_id: int) -> None:
        """Remove a price. The last price of an item cannot be removed."""
        item = self.get_or_404(item_id, tenant_id)
        price = next((p for p in item.prices if p.id == price_id), None)
        if price is None:
            raise NotFoundError("Precio", price_id, item_id=item_id)
        if len(item.prices) <= 1:
            raise ValidationError("El ítem requiere al menos un precio", field="prices")

        self._db.delete(price)
        self._flush("eliminar precio", item_id=item_id)
        self._db.expire(item, ["prices"])

    def set_icons(self, item_id: int, icon_codes: Iterable[str], tenant_id: int) -> list[str]:
        """
        Replace the icon tags of an item.

        Returns:
            Codes that were skipped because they are unknown.
        """
        item = self.get_or_404(item_id, tenant_id)
        icons, skipped = self.catalog.resolve(icon_codes)

        self._db.execute(delete(ItemIcon).where(ItemIcon.item_id == item.id))
        for icon in icons:
            self._db.add(ItemIcon(item_id=item.id, icon_id=icon.id))
        self._flush("actualizar iconos", item_id=item_id)
        self._db.expire(item, ["item_icons"])

        if skipped:
            logger.warning("Iconos desconocidos omitidos", item_id=item.id, codes=skipped)
        return skipped

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], tenant_id: int) -> None:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("El nombre del ítem es requerido", field="name")
        data["name"] = name

        menu_id = data.get("menu_id")
        section_id = data.get("section_id")
        if not menu_id or not section_id:
            raise ValidationError("menu_id y section_id son requeridos", field="section_id")

        menu = self._db.get(Menu, menu_id)
        self._require_same_tenant(menu, tenant_id, "Menú")
        self._check_section(section_id, menu, tenant_id)

        if data.get("sort") is None:
            data["sort"] = self.get_next_sort(section_id)

    def _validate_update(self, entity: MenuItem, data: dict[str, Any], tenant_id: int) -> None:
        data.pop("tenant_id", None)
        data.pop("id", None)
        data.pop("prices", None)
        data.pop("icon_codes", None)
        if "menu_id" in data and data["menu_id"] != entity.menu_id:
            raise ValidationError("Un ítem no puede cambiar de menú", field="menu_id")
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("El nombre del ítem es requerido", field="name")
        if "section_id" in data and data["section_id"] != entity.section_id:
            self._check_section(data["section_id"], entity.menu, tenant_id)

    def _check_section(self, section_id: int, menu: Menu, tenant_id: int) -> MenuSection:
        section = self._db.get(MenuSection, section_id)
        self._require_same_tenant(section, tenant_id, "Sección")
        if section.menu_id != menu.id:
            raise TenantMismatch(
                "Sección",
                section.id,
                reason=f"pertenece al menú {section.menu_id}, no al menú {menu.id}",
                tenant_id=tenant_id,
            )
        return section
