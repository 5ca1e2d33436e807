"""
Seed data for development and testing.
Creates the demo graph: platform admin, one tenant with its admin, one
restaurant with a published menu of four sections and nine items.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Restaurant
from rest_api.services.domain import QRCodeService
from rest_api.services.provisioning import (
    PlatformAdminBlueprint,
    ProvisioningOrchestrator,
    ProvisioningResult,
    TenantBlueprint,
)
from shared.config.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Demo constants
# =============================================================================

DEMO_RESTAURANT_SLUG = "la-parrilla-del-sur"
DEMO_LOCALE = "es-ES"
DEMO_CURRENCY = "ARS"

SUPER_ADMIN_EMAIL = "superadmin@menuqr.com"
SUPER_ADMIN_PASSWORD = "SuperAdmin123!"
DEMO_ADMIN_EMAIL = "admin@demo.com"
DEMO_ADMIN_PASSWORD = "Admin123!"


def _item(name: str, description: str, icons: list[str], label: str, amount: int) -> dict:
    return {
        "name": name,
        "description": description,
        "icons": icons,
        "prices": [{"label": label, "amount": amount, "currency": DEMO_CURRENCY}],
    }


def demo_platform_admin() -> PlatformAdminBlueprint:
    return PlatformAdminBlueprint(
        email=SUPER_ADMIN_EMAIL,
        password=SUPER_ADMIN_PASSWORD,
        first_name="Super",
        last_name="Admin",
    )


def demo_blueprint() -> TenantBlueprint:
    """The demo tenant: La Parrilla del Sur and its Carta Principal."""
    return TenantBlueprint.model_validate({
        "name": "Restaurante Demo S.A.",
        "plan": "free",
        "settings": {
            "timezone": "America/Argentina/Buenos_Aires",
            "currency": DEMO_CURRENCY,
            "language": DEMO_LOCALE,
        },
        "users": [
            {
                "email": DEMO_ADMIN_EMAIL,
                "password": DEMO_ADMIN_PASSWORD,
                "role": "ADMIN",
                "first_name": "Juan",
                "last_name": "Pérez",
            },
        ],
        "actor_email": DEMO_ADMIN_EMAIL,
        "restaurants": [
            {
                "name": "La Parrilla del Sur",
                "slug": DEMO_RESTAURANT_SLUG,
                "description": "El mejor asado argentino en la ciudad",
                "address": "Av. Corrientes 1234, Buenos Aires",
                "phone": "+54 11 1234-5678",
                "email": "info@laparrilla.com",
                "website": "https://laparrilla.com",
                "default_currency": DEMO_CURRENCY,
                "translations": {
                    DEMO_LOCALE: {
                        "welcome_message": "¡Bienvenidos a La Parrilla del Sur!",
                        "about_us": "Somos especialistas en asado argentino desde 1995",
                    },
                },
                "menus": [
                    {
                        "name": "Carta Principal",
                        "slug": "carta-principal",
                        "description": "Nuestra selección de platos tradicionales argentinos",
                        "status": "PUBLISHED",
                        "translations": {
                            DEMO_LOCALE: {"special_offers": "Ofertas especiales todos los martes"},
                        },
                        "sections": [
                            {
                                "name": "Entradas",
                                "items": [
                                    _item("Empanadas de Carne", "Tres empanadas de carne vacuna con cebolla y especias", ["celiaco"], "Porción", 1200),
                                    _item("Provoleta", "Queso provolone gratinado con hierbas y aceite de oliva", ["vegetariano"], "Porción", 1500),
                                ],
                            },
                            {
                                "name": "Platos Principales",
                                "items": [
                                    _item("Asado de Tira", "Asado de tira con chimichurri y papas fritas", ["celiaco"], "Porción", 3500),
                                    _item("Milanesa a la Napolitana", "Milanesa de ternera con salsa de tomate, jamón y queso gratinado", ["celiaco"], "Porción", 2800),
                                    _item("Pollo al Disco", "Pollo cocinado al disco con verduras y hierbas", ["celiaco"], "Porción", 3200),
                                ],
                            },
                            {
                                "name": "Postres",
                                "items": [
                                    _item("Flan Casero", "Flan casero con dulce de leche y crema", ["vegetariano"], "Porción", 800),
                                    _item("Helado Artesanal", "Helado artesanal de vainilla con frutos rojos", ["vegetariano"], "Porción", 600),
                                ],
                            },
                            {
                                "name": "Bebidas",
                                "items": [
                                    _item("Agua Mineral", "Agua mineral con o sin gas", ["vegano", "celiaco"], "500ml", 300),
                                    _item("Cerveza Artesanal", "Cerveza artesanal de la casa", ["vegano", "celiaco"], "500ml", 800),
                                ],
                            },
                        ],
                    },
                ],
            },
        ],
    })


def seed(db: Session, *, qr_service: QRCodeService | None = None) -> ProvisioningResult | None:
    """
    Seed the database with the demo graph.
    Skipped when the demo restaurant already exists; otherwise all-or-nothing.
    """
    if db.scalar(select(Restaurant.id).where(Restaurant.slug == DEMO_RESTAURANT_SLUG)):
        logger.info("Database already seeded, skipping")
        return None

    logger.info("Seeding database")
    result = ProvisioningOrchestrator(db, qr_service=qr_service).provision(
        demo_blueprint(),
        platform_admin=demo_platform_admin(),
    )
    logger.info("Seed complete", **result.summary())
    return result
