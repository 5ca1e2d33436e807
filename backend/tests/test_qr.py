"""
Tests for QR code generation and synchronization.
"""

import base64
import io

import pytest
from PIL import Image

from rest_api.models import QRCode
from rest_api.services.domain import MenuService, QRCodeService, RestaurantService
from shared.config.constants import MenuStatus
from shared.config.settings import get_settings
from shared.infrastructure.qr_encoder import QREncoder, QROptions
from shared.utils.exceptions import DependencyFailure, NotFoundError


class TestQREncoder:

    def test_encodes_png_data_url(self):
        data_url = QREncoder().encode("https://menu.example.com/r/la-esquina", QROptions())

        prefix = "data:image/png;base64,"
        assert data_url.startswith(prefix)
        image = Image.open(io.BytesIO(base64.b64decode(data_url[len(prefix):])))
        assert image.format == "PNG"
        assert image.size == (300, 300)

    def test_empty_text_rejected(self):
        with pytest.raises(ValueError):
            QREncoder().encode("", QROptions())

    def test_invalid_options_rejected(self):
        with pytest.raises(ValueError):
            QREncoder().encode("https://menu.example.com", QROptions(size=0))

    def test_error_correction_from_settings(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "qr_error_correction", "h")

        options = QROptions.from_settings()

        assert options.error_correction == "H"
        assert QREncoder().encode("https://menu.example.com/r/la-esquina", options).startswith("data:image/png")

    def test_unknown_error_correction_rejected(self):
        with pytest.raises(ValueError):
            QREncoder().encode("https://menu.example.com", QROptions(error_correction="Z"))


class TestPublish:

    def test_publish_generates_qr(self, db_session, seed_tenant, seed_menu, qr_service, recording_encoder):
        result = MenuService(db_session, qr_service=qr_service).publish(seed_menu.id, seed_tenant.id)

        assert result.menu.status == MenuStatus.PUBLISHED
        assert result.warnings == []
        qr = qr_service.get_for_menu(seed_menu.id)
        assert qr.url == "https://menu.example.com/r/la-esquina"
        assert qr.qr_image_url.startswith("data:image/png;base64,")
        assert recording_encoder.encoded == ["https://menu.example.com/r/la-esquina"]

    def test_draft_menu_has_no_qr(self, seed_menu, qr_service):
        assert qr_service.get_for_menu(seed_menu.id) is None

    def test_encoder_failure_is_a_warning(self, db_session, seed_tenant, seed_menu, failing_encoder):
        qr_service = QRCodeService(db_session, encoder=failing_encoder)

        result = MenuService(db_session, qr_service=qr_service).publish(seed_menu.id, seed_tenant.id)

        assert result.menu.status == MenuStatus.PUBLISHED
        assert not result.has_qr
        assert "codificador QR" in result.warnings[0]
        assert qr_service.get_for_menu(seed_menu.id) is None

    def test_url_with_menu_slug(self, db_session, seed_tenant, seed_menu, qr_service, monkeypatch):
        monkeypatch.setattr(get_settings(), "qr_url_includes_menu_slug", True)

        MenuService(db_session, qr_service=qr_service).publish(seed_menu.id, seed_tenant.id)

        assert qr_service.get_for_menu(seed_menu.id).url == "https://menu.example.com/r/la-esquina/carta"


class TestRegeneration:

    @pytest.fixture
    def published(self, db_session, seed_tenant, seed_menu, qr_service):
        MenuService(db_session, qr_service=qr_service).publish(seed_menu.id, seed_tenant.id)
        db_session.commit()
        return seed_menu

    def test_restaurant_slug_change_regenerates(
        self, db_session, seed_tenant, seed_restaurant, published, qr_service
    ):
        RestaurantService(db_session, qr_service=qr_service).update(
            seed_restaurant.id, {"slug": "la-nueva-esquina"}, seed_tenant.id
        )

        rows = db_session.query(QRCode).filter(QRCode.menu_id == published.id).all()
        assert len(rows) == 1
        assert rows[0].url == "https://menu.example.com/r/la-nueva-esquina"
        assert rows[0].is_active is True

    def test_unchanged_url_is_not_reencoded(self, published, qr_service, recording_encoder):
        qr_service.sync_menu(published)

        assert len(recording_encoder.encoded) == 1

    def test_failed_regeneration_deactivates_stale_qr(self, db_session, published, failing_encoder):
        service = QRCodeService(db_session, encoder=failing_encoder)

        with pytest.raises(DependencyFailure):
            service.generate(published.id)

        assert service.get_for_menu(published.id) is None
        assert service.get_for_menu(published.id, include_inactive=True) is not None

    def test_deactivating_menu_retires_qr(self, db_session, seed_tenant, published, qr_service):
        MenuService(db_session, qr_service=qr_service).deactivate(published.id, seed_tenant.id)

        assert qr_service.get_for_menu(published.id) is None

    def test_unknown_menu(self, qr_service):
        with pytest.raises(NotFoundError):
            qr_service.generate(999)
