"""
Icon Service and IconCatalog.

Icons are a small platform-wide vocabulary ("vegano", "picante") shared by
every tenant. IconCatalog maps stable codes to Icon rows and is loaded once
per provisioning run.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Icon
from rest_api.services.crud.repository import BaseRepository
from shared.config.logging import get_logger

logger = get_logger(__name__)


# code -> i18n key of the label
DEFAULT_ICONS: tuple[tuple[str, str], ...] = (
    ("celiaco", "icons.celiac"),
    ("picante", "icons.spicy"),
    ("vegano", "icons.vegan"),
    ("vegetariano", "icons.vegetarian"),
    ("sin-gluten", "icons.gluten-free"),
    ("sin-lactosa", "icons.lactose-free"),
)


class IconCatalog:
    """
    Read-only mapping from icon code to Icon.

    Usage:
        catalog = IconCatalog.load(db)
        icon = catalog.lookup("vegano")   # None when unknown
    """

    def __init__(self, icons: Iterable[Icon]):
        self._by_code = {icon.code: icon for icon in icons}

    @classmethod
    def load(cls, db: Session) -> "IconCatalog":
        icons = db.scalars(select(Icon).where(Icon.is_active.is_(True))).all()
        return cls(icons)

    def lookup(self, code: str) -> Icon | None:
        return self._by_code.get(code)

    def resolve(self, codes: Iterable[str]) -> tuple[list[Icon], list[str]]:
        """Split codes into known icons (deduplicated, in order) and unknown codes."""
        found: list[Icon] = []
        missing: list[str] = []
        seen: set[str] = set()
        for code in codes:
            if code in seen:
                continue
            seen.add(code)
            icon = self.lookup(code)
            if icon is None:
                missing.append(code)
            else:
                found.append(icon)
        return found, missing

    @property
    def codes(self) -> list[str]:
        return sorted(self._by_code)

    def __contains__(self, code: str) -> bool:
        return code in self._by_code

    def __len__(self) -> int:
        return len(self._by_code)


class IconService:
    """Maintains the shared icon vocabulary."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = BaseRepository(Icon, db)

    def list_all(self) -> Sequence[Icon]:
        return self._repo.find_all(order_by=Icon.code)

    def ensure_catalog(self, icons: Iterable[tuple[str, str]] = DEFAULT_ICONS) -> list[Icon]:
        """
        Create missing icons. Idempotent: existing codes are left untouched.

        Returns:
            The Icon rows for the requested codes.
        """
        result: list[Icon] = []
        created = 0
        for code, label_key in icons:
            icon = self._repo.find_one(Icon.code == code)
            if icon is None:
                icon = Icon(code=code, label_i18n_key=label_key)
                self._db.add(icon)
                created += 1
            result.append(icon)

        if created:
            self._db.flush()
            logger.info("Icon catalog extended", created=created)
        return result

    def catalog(self) -> IconCatalog:
        return IconCatalog.load(self._db)
