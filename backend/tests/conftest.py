"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before any application module reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SEED_DEMO_ON_STARTUP"] = "false"
os.environ["PUBLIC_BASE_URL"] = "https://menu.example.com"

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base
from rest_api.services.domain import (
    IconService,
    MenuService,
    QRCodeService,
    RestaurantService,
    SectionService,
    TenantService,
    UserService,
)
from shared.config.constants import Roles
from shared.infrastructure.db import enable_sqlite_savepoints, get_db


# SQLite in-memory database shared by every session of a test
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# =============================================================================
# QR encoders
# =============================================================================


class RecordingEncoder:
    """Encoder double that remembers what it encoded."""

    def __init__(self):
        self.encoded: list[str] = []

    def encode(self, text, options):
        self.encoded.append(text)
        return f"data:image/png;base64,{len(self.encoded)}"


class FailingEncoder:
    """Encoder double that always fails."""

    def encode(self, text, options):
        raise RuntimeError("encoder offline")


@pytest.fixture
def recording_encoder():
    return RecordingEncoder()


@pytest.fixture
def failing_encoder():
    return FailingEncoder()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def cli_session(db_session, monkeypatch):
    """Make CLI commands run against the test session."""
    import cli

    @contextmanager
    def _scope():
        yield db_session

    monkeypatch.setattr(cli, "session_scope", _scope)
    return db_session


# =============================================================================
# Catalog
# =============================================================================


@pytest.fixture
def qr_service(db_session, recording_encoder):
    return QRCodeService(db_session, encoder=recording_encoder)


@pytest.fixture
def seed_tenant(db_session):
    """Create a test tenant."""
    tenant = TenantService(db_session).create("Tenant Uno")
    db_session.commit()
    return tenant


@pytest.fixture
def other_tenant(db_session):
    tenant = TenantService(db_session).create("Tenant Dos")
    db_session.commit()
    return tenant


@pytest.fixture
def seed_admin_user(db_session, seed_tenant):
    user = UserService(db_session).create(
        email="admin@tenant-uno.com",
        password="testpass123",
        role=Roles.ADMIN,
        tenant_id=seed_tenant.id,
        first_name="Test",
        last_name="Admin",
    )
    db_session.commit()
    return user


@pytest.fixture
def seed_icons(db_session):
    icons = IconService(db_session).ensure_catalog()
    db_session.commit()
    return icons


@pytest.fixture
def seed_restaurant(db_session, seed_tenant, qr_service):
    restaurant = RestaurantService(db_session, qr_service=qr_service).create(
        {"name": "La Esquina"}, seed_tenant.id
    )
    db_session.commit()
    return restaurant


@pytest.fixture
def seed_menu(db_session, seed_tenant, seed_restaurant, qr_service):
    menu = MenuService(db_session, qr_service=qr_service).create(
        {"restaurant_id": seed_restaurant.id, "name": "Carta"}, seed_tenant.id
    )
    db_session.commit()
    return menu


@pytest.fixture
def seed_section(db_session, seed_tenant, seed_menu):
    section = SectionService(db_session).create(
        {"menu_id": seed_menu.id, "name": "Entradas"}, seed_tenant.id
    )
    db_session.commit()
    return section
