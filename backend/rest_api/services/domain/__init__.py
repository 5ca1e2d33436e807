"""
Domain Services - Application Layer.

Services contain the business rules of the catalog. They use Repositories
for data access, flush but never commit, and record audit entries.

Structure:
    CLI / Router / Provisioning
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import MenuService

    service = MenuService(db)
    result = service.publish(menu_id, tenant_id, user_id, user_email)
"""

from .tenant_service import TenantService, default_tenant_settings
from .user_service import UserService, normalize_email, validate_password
from .restaurant_service import RestaurantService
from .menu_service import MenuService, PublishResult
from .section_service import SectionService
from .item_service import ItemCreated, ItemService, normalize_prices
from .icon_service import DEFAULT_ICONS, IconCatalog, IconService
from .translation_service import TranslationService
from .qr_service import QRCodeService, public_menu_url

__all__ = [
    # Tenancy and identity
    "TenantService",
    "default_tenant_settings",
    "UserService",
    "normalize_email",
    "validate_password",
    # Catalog
    "RestaurantService",
    "MenuService",
    "PublishResult",
    "SectionService",
    "ItemService",
    "ItemCreated",
    "normalize_prices",
    "IconService",
    "IconCatalog",
    "DEFAULT_ICONS",
    "TranslationService",
    # Derived artifacts
    "QRCodeService",
    "public_menu_url",
]
