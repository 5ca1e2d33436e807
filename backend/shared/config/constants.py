"""
Centralized constants for the backend application.
Avoids magic strings for roles, statuses and audit vocabulary.

Usage:
    from shared.config.constants import Roles, MenuStatus

    if user.role == Roles.SUPER_ADMIN:
        ...

    if menu.status == MenuStatus.PUBLISHED:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    SUPER_ADMIN: Final[str] = "SUPER_ADMIN"
    ADMIN: Final[str] = "ADMIN"
    MANAGER: Final[str] = "MANAGER"
    EDITOR: Final[str] = "EDITOR"

    ALL: Final[list[str]] = [SUPER_ADMIN, ADMIN, MANAGER, EDITOR]
    # Roles that must belong to a tenant
    TENANT_ROLES: Final[list[str]] = [ADMIN, MANAGER, EDITOR]


# =============================================================================
# Entity Status Constants
# =============================================================================


class TenantStatus:
    """Tenant lifecycle status constants."""

    ACTIVE: Final[str] = "active"
    SUSPENDED: Final[str] = "suspended"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [ACTIVE, SUSPENDED, CANCELLED]


class TenantPlan:
    """Tenant subscription plan names."""

    FREE: Final[str] = "free"
    PRO: Final[str] = "pro"
    PREMIUM: Final[str] = "premium"

    ALL: Final[list[str]] = [FREE, PRO, PREMIUM]


class MenuStatus:
    """Menu publication status constants."""

    DRAFT: Final[str] = "DRAFT"
    PUBLISHED: Final[str] = "PUBLISHED"
    ARCHIVED: Final[str] = "ARCHIVED"

    ALL: Final[list[str]] = [DRAFT, PUBLISHED, ARCHIVED]


# =============================================================================
# Audit Vocabulary
# =============================================================================


class AuditAction:
    """Actions recorded in the audit trail."""

    CREATE: Final[str] = "CREATE"
    UPDATE: Final[str] = "UPDATE"
    PUBLISH: Final[str] = "PUBLISH"
    UNPUBLISH: Final[str] = "UNPUBLISH"
    DEACTIVATE: Final[str] = "DEACTIVATE"


class EntityType:
    """Entity type names used by translations and audit entries."""

    TENANT: Final[str] = "tenant"
    USER: Final[str] = "user"
    RESTAURANT: Final[str] = "restaurant"
    MENU: Final[str] = "menu"
    SECTION: Final[str] = "section"
    ITEM: Final[str] = "item"

    # Entities that may carry translations
    TRANSLATABLE: Final[list[str]] = [RESTAURANT, MENU, SECTION, ITEM]


# Sentinel returned by the country resolver when the country is not known
UNKNOWN_COUNTRY: Final[str] = "unknown"

# Values sent by edge proxies when they could not geolocate the client
GEO_HEADER_SENTINELS: Final[frozenset[str]] = frozenset({"XX", "T1", "UNKNOWN"})
