"""
QR Code Service.

Each menu has at most one QR code row. Its url always equals the menu's
current public URL; when the URL changes the row is regenerated (deleted
and inserted again), never patched in place.

Encoding is delegated to a black-box encoder. An encoder failure leaves
the menu valid but without an active QR code, and is raised as
DependencyFailure for the caller to report as a warning.

Usage:
    service = QRCodeService(db)
    qr = service.generate(menu.id)
    service.sync_menu(menu)        # after a slug change
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from rest_api.models import Menu, QRCode, Restaurant
from shared.config.logging import get_logger
from shared.config.settings import get_settings
from shared.infrastructure.qr_encoder import Encoder, QREncoder, QROptions
from shared.utils.exceptions import DependencyFailure, NotFoundError

logger = get_logger(__name__)


def public_menu_url(restaurant_slug: str, menu_slug: str | None = None) -> str:
    """
    Canonical public URL of a restaurant (or of one of its menus).

        {public_base_url}/r/{restaurant_slug}
        {public_base_url}/r/{restaurant_slug}/{menu_slug}
    """
    base = get_settings().public_base_url.rstrip("/")
    url = f"{base}/r/{restaurant_slug}"
    if menu_slug:
        url = f"{url}/{menu_slug}"
    return url


class QRCodeService:
    """Generates, synchronizes and deactivates menu QR codes."""

    def __init__(
        self,
        db: Session,
        encoder: Encoder | None = None,
        options: QROptions | None = None,
    ):
        self._db = db
        self._encoder = encoder or QREncoder()
        self._options = options or QROptions.from_settings()

    # =========================================================================
    # Query Methods
    # =========================================================================

    def url_for(self, menu: Menu) -> str:
        """Public URL that the menu's QR code must encode."""
        menu_slug = menu.slug if get_settings().qr_url_includes_menu_slug else None
        return public_menu_url(menu.restaurant.slug, menu_slug)

    def get_for_menu(self, menu_id: int, *, include_inactive: bool = False) -> QRCode | None:
        query = select(QRCode).where(QRCode.menu_id == menu_id)
        if not include_inactive:
            query = query.where(QRCode.is_active.is_(True))
        return self._db.scalar(query)

    # =========================================================================
    # Command Methods
    # =========================================================================

    def generate(self, menu_id: int, public_url: str | None = None) -> QRCode:
        """
        Encode the menu's public URL and store it as the menu's only QR row.

        Raises:
            NotFoundError: If the menu does not exist.
            DependencyFailure: If the encoder fails. Any stale row is deactivated.
        """
        menu = self._db.get(Menu, menu_id)
        if menu is None:
            raise NotFoundError("Menú", menu_id)

        url = public_url or self.url_for(menu)

        try:
            image = self._encoder.encode(url, self._options)
        except Exception as e:
            self.deactivate(menu_id)
            raise DependencyFailure("codificador QR", str(e), menu_id=menu_id, url=url) from e

        with self._db.begin_nested():
            existing = self.get_for_menu(menu_id, include_inactive=True)
            if existing is not None:
                self._db.delete(existing)
                self._db.flush()

            qr = QRCode(
                tenant_id=menu.tenant_id,
                menu_id=menu.id,
                url=url,
                qr_image_url=image,
                is_active=True,
            )
            self._db.add(qr)
            self._db.flush()

        self._db.expire(menu, ["qr_code"])
        logger.info("QR generado", menu_id=menu_id, qr_id=qr.id, url=url)
        return qr

    def sync_menu(self, menu: Menu) -> QRCode | None:
        """
        Regenerate the QR code if it no longer matches the menu's public URL.

        Menus that never had a QR code (drafts) are left alone.

        Raises:
            DependencyFailure: If regeneration fails.
        """
        existing = self.get_for_menu(menu.id, include_inactive=True)
        if existing is None and not menu.is_published:
            return None

        url = self.url_for(menu)
        if existing is not None and existing.is_active and existing.url == url:
            return existing

        logger.info("QR desactualizado, regenerando", menu_id=menu.id, old_url=existing.url if existing else None)
        return self.generate(menu.id, url)

    def sync_restaurant(self, restaurant: Restaurant) -> list[str]:
        """
        Sync every menu of a restaurant after its slug changed.

        Returns:
            Warning messages for menus whose QR could not be regenerated.
        """
        warnings: list[str] = []
        for menu in restaurant.menus:
            if not menu.is_active:
                continue
            try:
                self.sync_menu(menu)
            except DependencyFailure as e:
                warnings.append(str(e))
        return warnings

    def deactivate(self, menu_id: int) -> None:
        """Deactivate the menu's QR code, if any."""
        self._db.execute(
            update(QRCode).where(QRCode.menu_id == menu_id).values(is_active=False)
        )
        self._db.flush()
        logger.info("QR desactivado", menu_id=menu_id)
