"""
Tests for UserService.

Tests cover:
- SUPER_ADMIN lives at platform level only
- Tenant roles require a tenant
- Email uniqueness per tenant and at platform level
- Password hashing and minimum length
"""

import pytest
from sqlalchemy.exc import IntegrityError

from rest_api.models import User
from rest_api.services.domain import UserService
from shared.config.constants import Roles
from shared.security.password import verify_password
from shared.utils.exceptions import DuplicateIdentity, NotFoundError, ValidationError


class TestRoleTenantRule:
    """SUPER_ADMIN ⇔ tenant_id IS NULL."""

    def test_super_admin_with_tenant_rejected(self, db_session, seed_tenant):
        with pytest.raises(ValidationError):
            UserService(db_session).create(
                email="root@menuqr.com",
                password="longenough",
                role=Roles.SUPER_ADMIN,
                tenant_id=seed_tenant.id,
            )
        assert db_session.query(User).count() == 0

    def test_tenant_role_without_tenant_rejected(self, db_session):
        with pytest.raises(ValidationError):
            UserService(db_session).create(email="ed@menuqr.com", password="longenough", role=Roles.EDITOR)

    def test_unknown_role_rejected(self, db_session, seed_tenant):
        with pytest.raises(ValidationError):
            UserService(db_session).create(
                email="x@menuqr.com", password="longenough", role="WAITER", tenant_id=seed_tenant.id
            )

    def test_database_enforces_rule(self, db_session, seed_tenant):
        """The check constraint backs up the service rule."""
        db_session.add(User(
            tenant_id=seed_tenant.id,
            email="bad@menuqr.com",
            password_hash="x",
            role=Roles.SUPER_ADMIN,
        ))
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

    def test_platform_admin(self, db_session):
        admin = UserService(db_session).create_platform_admin("Root@MenuQR.com", "longenough")

        assert admin.tenant_id is None
        assert admin.role == Roles.SUPER_ADMIN
        assert admin.email == "root@menuqr.com"
        assert admin.first_name == "Admin"
        assert admin.last_name == "Sistema"


class TestEmailUniqueness:

    def test_duplicate_platform_email(self, db_session):
        service = UserService(db_session)
        service.create_platform_admin("root@menuqr.com", "longenough")

        with pytest.raises(DuplicateIdentity) as exc_info:
            service.create_platform_admin("ROOT@menuqr.com", "otherpass1")

        assert exc_info.value.identifier == "root@menuqr.com"
        assert exc_info.value.status_code == 409

    def test_duplicate_in_tenant(self, db_session, seed_admin_user, seed_tenant):
        with pytest.raises(DuplicateIdentity):
            UserService(db_session).create(
                email=seed_admin_user.email,
                password="longenough",
                role=Roles.EDITOR,
                tenant_id=seed_tenant.id,
            )

    def test_same_email_in_other_scopes(self, db_session, seed_admin_user, other_tenant):
        service = UserService(db_session)

        in_other_tenant = service.create(
            email=seed_admin_user.email,
            password="longenough",
            role=Roles.ADMIN,
            tenant_id=other_tenant.id,
        )
        platform = service.create_platform_admin(seed_admin_user.email, "longenough")

        assert in_other_tenant.id != seed_admin_user.id
        assert platform.tenant_id is None

    def test_unknown_tenant(self, db_session):
        with pytest.raises(NotFoundError):
            UserService(db_session).create(
                email="a@menuqr.com", password="longenough", role=Roles.ADMIN, tenant_id=404
            )


class TestCredentials:

    def test_password_is_hashed(self, db_session, seed_admin_user):
        assert seed_admin_user.password_hash != "testpass123"
        assert verify_password("testpass123", seed_admin_user.password_hash)

    def test_short_password_rejected(self, db_session):
        with pytest.raises(ValidationError):
            UserService(db_session).create_platform_admin("root@menuqr.com", "short")

    def test_invalid_email_rejected(self, db_session):
        with pytest.raises(ValidationError):
            UserService(db_session).create_platform_admin("not-an-email", "longenough")
