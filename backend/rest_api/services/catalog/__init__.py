"""
Catalog Services - Public read model.

Provides:
- PublicMenuService: published menus as seen by diners
"""

from .public_menu import PublicMenuService

__all__ = ["PublicMenuService"]
