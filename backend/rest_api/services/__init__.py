"""
Services module for business logic.

ARCHITECTURE:
- domain/: Application services (business logic) - USE THESE
- crud/: Repository pattern and audit recorder
- catalog/: Public read model of published menus
- provisioning/: Blueprint-driven creation of tenant graphs

Usage:
    from rest_api.services.domain import RestaurantService
    service = RestaurantService(db)
    restaurant = service.create({"name": "La Parrilla del Sur"}, tenant_id)

    from rest_api.services.provisioning import ProvisioningOrchestrator
    result = ProvisioningOrchestrator(db).provision(blueprint)
"""

# Base service classes for creating new domain services
from .base_service import BaseService, BaseCRUDService

# Slugs
from .slug_policy import OnConflict, SlugPolicy, SlugScope

# CRUD utilities
from .crud import AuditRecorder, BaseRepository, TenantRepository

# Domain Services (PREFERRED)
from .domain import (
    IconCatalog,
    IconService,
    ItemService,
    MenuService,
    QRCodeService,
    RestaurantService,
    SectionService,
    TenantService,
    TranslationService,
    UserService,
)

# Public read model
from .catalog import PublicMenuService

# Provisioning
from .provisioning import ProvisioningOrchestrator, ProvisioningResult

__all__ = [
    # Base service classes
    "BaseService",
    "BaseCRUDService",
    # Slugs
    "OnConflict",
    "SlugPolicy",
    "SlugScope",
    # CRUD
    "AuditRecorder",
    "BaseRepository",
    "TenantRepository",
    # Domain Services
    "TenantService",
    "UserService",
    "RestaurantService",
    "MenuService",
    "SectionService",
    "ItemService",
    "IconService",
    "IconCatalog",
    "TranslationService",
    "QRCodeService",
    # Catalog
    "PublicMenuService",
    # Provisioning
    "ProvisioningOrchestrator",
    "ProvisioningResult",
]
