"""
Tests for tenant provisioning and the demo seed.

Tests cover:
- Demo graph counts and platform admin placement
- All-or-nothing rollback on a fatal step
- Non-fatal QR failures reported as warnings
- Step failure policies
"""

import pytest

from rest_api.models import (
    AuditLog,
    ItemPrice,
    Menu,
    MenuItem,
    MenuSection,
    QRCode,
    Restaurant,
    Tenant,
    Translation,
    User,
)
from rest_api.seed import DEMO_RESTAURANT_SLUG, SUPER_ADMIN_EMAIL, seed
from rest_api.services.domain import QRCodeService
from rest_api.services.provisioning import (
    FailurePolicy,
    ProvisioningOrchestrator,
    ProvisioningResult,
    StepRunner,
    TenantBlueprint,
)
from shared.config.constants import Roles
from shared.utils.exceptions import SlugConflict, TenantMismatch, ValidationError


def _blueprint(**overrides) -> TenantBlueprint:
    data = {
        "name": "Bodegón Norte",
        "users": [{"email": "duenio@bodegon.com", "password": "bodegon123", "role": "ADMIN"}],
        "restaurants": [
            {
                "name": "Bodegón Norte",
                "menus": [
                    {
                        "name": "Carta",
                        "status": "PUBLISHED",
                        "sections": [
                            {
                                "name": "Minutas",
                                "items": [
                                    {
                                        "name": "Milanesa",
                                        "icons": ["celiaco", "kosher"],
                                        "prices": [{"label": "Porción", "amount": 4200}],
                                    },
                                ],
                            },
                        ],
                    },
                ],
            },
        ],
    }
    data.update(overrides)
    return TenantBlueprint.model_validate(data)


class TestSeed:

    def test_demo_graph(self, db_session, qr_service):
        result = seed(db_session, qr_service=qr_service)

        assert result.ok
        assert db_session.query(Tenant).count() == 1
        assert db_session.query(User).count() == 2
        assert db_session.query(Restaurant).one().slug == DEMO_RESTAURANT_SLUG
        assert db_session.query(Menu).one().status == "PUBLISHED"
        assert db_session.query(MenuSection).count() == 4
        assert db_session.query(MenuItem).count() == 9
        assert db_session.query(ItemPrice).count() == 9
        assert db_session.query(QRCode).count() == 1
        assert db_session.query(Translation).count() == 3
        assert db_session.query(AuditLog).count() == 2

        counts = result.counts
        assert (counts["sections"], counts["items"], counts["qr_codes"]) == (4, 9, 1)

    def test_super_admin_has_no_tenant(self, db_session, qr_service):
        seed(db_session, qr_service=qr_service)

        admin = db_session.query(User).filter(User.email == SUPER_ADMIN_EMAIL).one()
        assert admin.role == Roles.SUPER_ADMIN
        assert admin.tenant_id is None

    def test_sections_ordered(self, db_session, qr_service):
        seed(db_session, qr_service=qr_service)

        sections = db_session.query(MenuSection).order_by(MenuSection.sort_order).all()
        assert [(s.sort_order, s.name) for s in sections] == [
            (1, "Entradas"),
            (2, "Platos Principales"),
            (3, "Postres"),
            (4, "Bebidas"),
        ]

    def test_second_run_skipped(self, db_session, qr_service):
        seed(db_session, qr_service=qr_service)

        assert seed(db_session, qr_service=qr_service) is None
        assert db_session.query(Tenant).count() == 1

    def test_qr_failure_keeps_seed(self, db_session, failing_encoder):
        result = seed(db_session, qr_service=QRCodeService(db_session, encoder=failing_encoder))

        assert not result.ok
        assert len(result.warnings) == 1
        assert db_session.query(Menu).one().status == "PUBLISHED"
        assert db_session.query(QRCode).count() == 0


class TestProvision:

    def test_unknown_icon_is_warning(self, db_session, qr_service):
        result = ProvisioningOrchestrator(db_session, qr_service=qr_service).provision(_blueprint())

        assert any("kosher" in w for w in result.warnings)
        item = db_session.query(MenuItem).one()
        assert item.icon_codes == ["celiaco"]
        assert item.prices[0].currency == "ARS"

    def test_actor_is_first_admin(self, db_session, qr_service):
        result = ProvisioningOrchestrator(db_session, qr_service=qr_service).provision(_blueprint())

        restaurant = db_session.query(Restaurant).one()
        assert restaurant.created_by_id == result.user_ids["duenio@bodegon.com"]

    def test_duplicate_slug_rolls_back_everything(self, db_session, qr_service):
        blueprint = _blueprint(restaurants=[
            {"name": "Bodegón Norte"},
            {"name": "Bodegon  Norte"},
        ])

        with pytest.raises(SlugConflict):
            ProvisioningOrchestrator(db_session, qr_service=qr_service).provision(blueprint)

        assert db_session.query(Tenant).count() == 0
        assert db_session.query(User).count() == 0
        assert db_session.query(Restaurant).count() == 0

    def test_existing_slug_rolls_back(self, db_session, qr_service, seed_restaurant):
        blueprint = _blueprint(restaurants=[{"name": "Otro", "slug": "la-esquina"}])

        with pytest.raises(SlugConflict):
            ProvisioningOrchestrator(db_session, qr_service=qr_service).provision(blueprint)

        assert db_session.query(Tenant).count() == 1

    def test_blueprint_rejects_unknown_actor(self):
        with pytest.raises(ValueError):
            _blueprint(actor_email="nadie@bodegon.com")

    def test_blueprint_rejects_item_without_price(self):
        with pytest.raises(ValueError):
            _blueprint(restaurants=[{
                "name": "X",
                "menus": [{"name": "M", "sections": [{"name": "S", "items": [{"name": "I", "prices": []}]}]}],
            }])


class TestStepRunner:

    @pytest.fixture
    def result(self):
        return ProvisioningResult()

    @pytest.fixture
    def runner(self, db_session, result):
        return StepRunner(db_session, result)

    def _fail(self, exc):
        def action():
            raise exc
        return action

    def test_fatal_propagates(self, runner):
        with pytest.raises(ValidationError):
            runner("paso", self._fail(ValidationError("mal")))

    def test_warn_records_warning(self, runner, result):
        assert runner("paso", self._fail(ValidationError("mal")), FailurePolicy.WARN) is None
        [warning] = result.warnings
        assert warning.startswith("paso: ")
        assert "mal" in warning

    def test_best_effort_is_silent(self, runner, result):
        assert runner("paso", self._fail(ValidationError("mal")), FailurePolicy.BEST_EFFORT) is None
        assert result.warnings == []

    def test_tenant_mismatch_always_fatal(self, runner):
        with pytest.raises(TenantMismatch):
            runner("paso", self._fail(TenantMismatch("Menú", 1)), FailurePolicy.BEST_EFFORT)

    def test_failed_step_leaves_no_rows(self, db_session, runner, seed_tenant):
        def action():
            db_session.add(Tenant(name="Fantasma", plan="free", settings={}, status="active"))
            db_session.flush()
            raise ValidationError("mal")

        runner("paso", action, FailurePolicy.WARN)

        assert db_session.query(Tenant).count() == 1

    def test_returns_action_value(self, runner):
        assert runner("paso", lambda: 42, FailurePolicy.WARN) == 42
