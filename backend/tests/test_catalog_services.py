"""
Tests for tenant, menu status, section, item and translation services.

Tests cover:
- Section ordering and two-phase reorder
- Items with mandatory prices and icon tags
- Price rules (non-negative, unique labels, default currency)
- Translation upserts
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from rest_api.models import ItemPrice, MenuItem, MenuSection, Translation
from rest_api.services.domain import ItemService, MenuService, SectionService, TenantService, TranslationService
from shared.config.constants import EntityType, MenuStatus, TenantStatus
from shared.utils.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError


class TestTenantService:

    def test_create_merges_default_settings(self, db_session):
        tenant = TenantService(db_session).create("  Bodegón Norte  ", settings={"currency": "CLP"})

        assert tenant.id is not None
        assert tenant.name == "Bodegón Norte"
        assert tenant.settings["currency"] == "CLP"
        assert {"timezone", "language"} <= set(tenant.settings)

    def test_blank_name_rejected(self, db_session):
        with pytest.raises(ValidationError):
            TenantService(db_session).create("   ")

    def test_suspend_and_reactivate(self, db_session, seed_tenant):
        service = TenantService(db_session)

        assert service.suspend(seed_tenant.id).status == TenantStatus.SUSPENDED
        assert service.reactivate(seed_tenant.id).status == TenantStatus.ACTIVE

    def test_unknown_tenant(self, db_session):
        with pytest.raises(NotFoundError):
            TenantService(db_session).get_or_404(999)


class TestMenuStatus:

    @pytest.fixture
    def service(self, db_session, qr_service):
        return MenuService(db_session, qr_service=qr_service)

    def test_archived_menu_cannot_be_published(self, service, seed_tenant, seed_menu):
        service.archive(seed_menu.id, seed_tenant.id)

        with pytest.raises(InvalidTransitionError):
            service.publish(seed_menu.id, seed_tenant.id)

    def test_archived_menu_back_to_draft(self, service, seed_tenant, seed_menu):
        service.archive(seed_menu.id, seed_tenant.id)

        assert service.unpublish(seed_menu.id, seed_tenant.id).status == MenuStatus.DRAFT


class TestSectionService:

    @pytest.fixture
    def service(self, db_session):
        return SectionService(db_session)

    def test_sort_order_auto_assigned(self, db_session, service, seed_tenant, seed_menu, seed_section):
        second = service.create({"menu_id": seed_menu.id, "name": "Postres"}, seed_tenant.id)

        assert seed_section.sort_order == 1
        assert second.sort_order == 2

    def test_taken_sort_order_conflicts(self, service, seed_tenant, seed_menu, seed_section):
        with pytest.raises(ConflictError):
            service.create({"menu_id": seed_menu.id, "name": "Otra", "sort_order": 1}, seed_tenant.id)

    def test_reorder_two_phase(self, db_session, service, seed_tenant, seed_menu, seed_section):
        mains = service.create({"menu_id": seed_menu.id, "name": "Principales"}, seed_tenant.id)
        desserts = service.create({"menu_id": seed_menu.id, "name": "Postres"}, seed_tenant.id)

        service.reorder(seed_menu.id, [desserts.id, seed_section.id], seed_tenant.id)

        ordered = service.list_for_menu(seed_menu.id, seed_tenant.id)
        assert [s.id for s in ordered] == [desserts.id, seed_section.id, mains.id]
        assert [s.sort_order for s in ordered] == [1, 2, 3]

    def test_reorder_rejects_duplicates(self, service, seed_tenant, seed_menu, seed_section):
        with pytest.raises(ValidationError):
            service.reorder(seed_menu.id, [seed_section.id, seed_section.id], seed_tenant.id)

    def test_sort_order_not_editable_directly(self, service, seed_tenant, seed_section):
        with pytest.raises(ValidationError):
            service.update(seed_section.id, {"sort_order": 5}, seed_tenant.id)

    def test_deactivate_is_soft(self, db_session, service, seed_tenant, seed_section):
        service.deactivate(seed_section.id, seed_tenant.id)

        row = db_session.get(MenuSection, seed_section.id)
        assert row is not None
        assert row.is_active is False
        assert service.list_for_menu(seed_section.menu_id, seed_tenant.id) == []


class TestItemService:

    @pytest.fixture
    def service(self, db_session, seed_icons):
        return ItemService(db_session)

    def _create(self, service, tenant, menu, section, **overrides):
        data = {"menu_id": menu.id, "section_id": section.id, "name": "Provoleta"}
        prices = overrides.pop("prices", [{"label": "Porción", "amount": "1500"}])
        icons = overrides.pop("icon_codes", [])
        data.update(overrides)
        return service.create_item(data, tenant.id, prices=prices, icon_codes=icons)

    def test_create_with_price_and_icons(self, service, seed_tenant, seed_menu, seed_section):
        created = self._create(
            service, seed_tenant, seed_menu, seed_section, icon_codes=["vegetariano", "celiaco"]
        )
        item = created.item

        assert item.id is not None
        assert item.sort == 1
        assert len(item.prices) == 1
        assert item.prices[0].amount == Decimal("1500")
        assert item.prices[0].currency == "ARS"  # restaurant default
        assert sorted(item.icon_codes) == ["celiaco", "vegetariano"]
        assert created.skipped_icon_codes == []

    def test_unknown_icons_are_skipped(self, service, seed_tenant, seed_menu, seed_section):
        created = self._create(
            service, seed_tenant, seed_menu, seed_section, icon_codes=["vegano", "kosher"]
        )

        assert created.item.icon_codes == ["vegano"]
        assert created.skipped_icon_codes == ["kosher"]

    def test_price_is_mandatory(self, db_session, service, seed_tenant, seed_menu, seed_section):
        with pytest.raises(ValidationError):
            self._create(service, seed_tenant, seed_menu, seed_section, prices=[])
        assert db_session.query(MenuItem).count() == 0

    def test_negative_amount_rejected(self, db_session, service, seed_tenant, seed_menu, seed_section):
        with pytest.raises(ValidationError):
            self._create(
                service, seed_tenant, seed_menu, seed_section,
                prices=[{"label": "Porción", "amount": -1}],
            )
        assert db_session.query(MenuItem).count() == 0

    def test_repeated_label_rejected(self, service, seed_tenant, seed_menu, seed_section):
        with pytest.raises(ValidationError):
            self._create(
                service, seed_tenant, seed_menu, seed_section,
                prices=[{"label": "Copa", "amount": 1}, {"label": "Copa", "amount": 2}],
            )

    def test_multiple_prices(self, service, seed_tenant, seed_menu, seed_section):
        created = self._create(
            service, seed_tenant, seed_menu, seed_section,
            prices=[
                {"label": "Copa", "amount": "900.50"},
                {"label": "Botella", "amount": 4200, "currency": "usd"},
            ],
        )

        labels = {p.label: p for p in created.item.prices}
        assert labels["Copa"].amount == Decimal("900.50")
        assert labels["Botella"].currency == "USD"

    def test_remove_last_price_refused(self, service, seed_tenant, seed_menu, seed_section):
        item = self._create(service, seed_tenant, seed_menu, seed_section).item

        with pytest.raises(ValidationError):
            service.remove_price(item.id, item.prices[0].id, seed_tenant.id)

    def test_add_and_remove_price(self, db_session, service, seed_tenant, seed_menu, seed_section):
        item = self._create(service, seed_tenant, seed_menu, seed_section).item
        extra = service.add_price(item.id, seed_tenant.id, label="Doble", amount=2500)

        service.remove_price(item.id, extra.id, seed_tenant.id)

        assert [p.label for p in item.prices] == ["Porción"]
        with pytest.raises(NotFoundError):
            service.remove_price(item.id, 9999, seed_tenant.id)

    def test_set_icons_replaces_tags(self, service, seed_tenant, seed_menu, seed_section):
        item = self._create(service, seed_tenant, seed_menu, seed_section, icon_codes=["vegano"]).item

        skipped = service.set_icons(item.id, ["picante", "sin-sal"], seed_tenant.id)

        assert item.icon_codes == ["picante"]
        assert skipped == ["sin-sal"]

    def test_database_rejects_negative_amount(self, db_session, service, seed_tenant, seed_menu, seed_section):
        item = self._create(service, seed_tenant, seed_menu, seed_section).item
        db_session.add(ItemPrice(
            tenant_id=seed_tenant.id, item_id=item.id, label="Mal", amount=Decimal("-1"), currency="ARS"
        ))
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()


class TestTranslationService:

    @pytest.fixture
    def service(self, db_session):
        return TranslationService(db_session)

    def test_save_is_upsert(self, db_session, service, seed_tenant, seed_restaurant):
        kwargs = dict(
            locale="es-ES",
            entity_type=EntityType.RESTAURANT,
            entity_id=seed_restaurant.id,
            key="welcome_message",
        )
        service.save(seed_tenant.id, value="Hola", **kwargs)
        service.save(seed_tenant.id, value="Bienvenidos", **kwargs)

        assert db_session.query(Translation).count() == 1
        assert service.get(seed_tenant.id, "es-ES", EntityType.RESTAURANT, seed_restaurant.id) == {
            "welcome_message": "Bienvenidos"
        }

    def test_locales_are_independent(self, service, seed_tenant, seed_menu):
        service.save_many(
            seed_tenant.id, locale="es-ES", entity_type=EntityType.MENU, entity_id=seed_menu.id,
            values={"name": "Carta"},
        )
        service.save_many(
            seed_tenant.id, locale="en-US", entity_type=EntityType.MENU, entity_id=seed_menu.id,
            values={"name": "Menu"},
        )

        result = service.get_many(seed_tenant.id, "en-US", EntityType.MENU, [seed_menu.id, 404])
        assert result == {seed_menu.id: {"name": "Menu"}}

    def test_unknown_entity_type(self, service, seed_tenant):
        with pytest.raises(ValidationError):
            service.save(
                seed_tenant.id, locale="es-ES", entity_type="tenant", entity_id=1, key="k", value="v"
            )
