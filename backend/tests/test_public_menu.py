"""
Tests for the public menu endpoints.
"""

from decimal import Decimal

import pytest

from rest_api.models import MenuItem
from rest_api.seed import DEMO_LOCALE, DEMO_RESTAURANT_SLUG, seed
from rest_api.services.domain import TenantService, TranslationService
from shared.config.constants import EntityType


@pytest.fixture
def demo(db_session, qr_service):
    return seed(db_session, qr_service=qr_service)


class TestPublicMenu:

    def test_restaurant_menu(self, client, demo):
        response = client.get(f"/api/public/r/{DEMO_RESTAURANT_SLUG}")

        assert response.status_code == 200
        data = response.json()
        assert data["restaurant"]["slug"] == DEMO_RESTAURANT_SLUG
        assert data["restaurant"]["locale"] == DEMO_LOCALE
        assert data["restaurant"]["translations"]["welcome_message"] == "¡Bienvenidos a La Parrilla del Sur!"

        menu = data["menu"]
        assert menu["slug"] == "carta-principal"
        assert menu["qr_url"] == f"https://menu.example.com/r/{DEMO_RESTAURANT_SLUG}"
        assert [s["name"] for s in menu["sections"]] == ["Entradas", "Platos Principales", "Postres", "Bebidas"]
        assert sum(len(s["items"]) for s in menu["sections"]) == 9

        water = menu["sections"][3]["items"][0]
        assert water["name"] == "Agua Mineral"
        assert sorted(water["icons"]) == ["celiaco", "vegano"]
        assert water["prices"][0]["label"] == "500ml"
        assert Decimal(str(water["prices"][0]["amount"])) == Decimal("300")

    def test_menu_by_slug(self, client, demo):
        response = client.get(f"/api/public/r/{DEMO_RESTAURANT_SLUG}/carta-principal")

        assert response.status_code == 200
        assert response.json()["menu"]["translations"] == {"special_offers": "Ofertas especiales todos los martes"}

    def test_restaurant_summary(self, client, demo):
        response = client.get(f"/api/public/restaurants/{DEMO_RESTAURANT_SLUG}")

        assert response.status_code == 200
        assert [m["slug"] for m in response.json()["menus"]] == ["carta-principal"]

    @pytest.mark.parametrize("path", [
        "/api/public/r/no-existe",
        f"/api/public/r/{DEMO_RESTAURANT_SLUG}/no-existe",
        "/api/public/restaurants/no-existe",
    ])
    def test_not_found(self, client, demo, path):
        response = client.get(path)

        assert response.status_code == 404
        assert "detail" in response.json()

    def test_draft_menu_hidden(self, client, seed_menu):
        assert client.get("/api/public/r/la-esquina").status_code == 404
        assert client.get("/api/public/r/la-esquina/carta").status_code == 404

    def test_inactive_item_hidden(self, client, db_session, demo):
        item = db_session.query(MenuItem).filter(MenuItem.name == "Provoleta").one()
        item.is_active = False
        db_session.commit()

        menu = client.get(f"/api/public/r/{DEMO_RESTAURANT_SLUG}").json()["menu"]
        names = [i["name"] for s in menu["sections"] for i in s["items"]]
        assert "Provoleta" not in names
        assert len(names) == 8

    def test_suspended_tenant_hidden(self, client, db_session, demo):
        TenantService(db_session).suspend(demo.tenant_id)
        db_session.commit()

        assert client.get(f"/api/public/r/{DEMO_RESTAURANT_SLUG}").status_code == 404

    def test_locale_override(self, client, db_session, demo):
        item = db_session.query(MenuItem).filter(MenuItem.name == "Flan Casero").one()
        TranslationService(db_session).save(
            demo.tenant_id,
            locale="en-US",
            entity_type=EntityType.ITEM,
            entity_id=item.id,
            key="name",
            value="Homemade Flan",
        )
        db_session.commit()

        menu = client.get(f"/api/public/r/{DEMO_RESTAURANT_SLUG}", params={"locale": "en-US"}).json()["menu"]
        names = [i["name"] for s in menu["sections"] for i in s["items"]]
        assert "Homemade Flan" in names
        assert "Provoleta" in names
