"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- tenant: Tenant
- user: User
- restaurant: Restaurant
- menu: Menu, MenuSection, MenuItem, ItemPrice
- icon: Icon, ItemIcon
- translation: Translation
- qr: QRCode
- audit: AuditLog
"""

# Base classes
from .base import Base, AuditMixin

# Core tenant models
from .tenant import Tenant

# Users
from .user import User

# Catalog
from .restaurant import Restaurant
from .menu import Menu, MenuSection, MenuItem, ItemPrice
from .icon import Icon, ItemIcon

# Localization
from .translation import Translation

# Derived artifacts
from .qr import QRCode

# Audit
from .audit import AuditLog, AuditLogImmutableError

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    # Tenant
    "Tenant",
    # User
    "User",
    # Catalog
    "Restaurant",
    "Menu",
    "MenuSection",
    "MenuItem",
    "ItemPrice",
    "Icon",
    "ItemIcon",
    # Localization
    "Translation",
    # QR
    "QRCode",
    # Audit
    "AuditLog",
    "AuditLogImmutableError",
]
