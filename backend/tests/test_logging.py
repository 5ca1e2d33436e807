"""
Tests for structured logging, correlation ids and the unit of work.
"""

import json
import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from rest_api.models import Tenant
from rest_api.services.domain import TenantService
from shared.config.logging import (
    REDACTED,
    DevelopmentFormatter,
    StructuredFormatter,
    mask_email,
    redact,
)
from shared.infrastructure.correlation import correlation_scope, get_request_id
from shared.infrastructure.db import unit_of_work
from shared.utils.exceptions import DatabaseError


def _record(**extra_data):
    record = logging.LogRecord(
        name="rest_api.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="User created",
        args=(),
        exc_info=None,
    )
    record.extra_data = extra_data or None
    record.request_id = "prov-abc123"
    return record


class TestRedaction:
    def test_secret_keys_are_hidden(self):
        data = redact({"password": "hunter2", "Password_Hash": "$2b$", "user_id": 7})
        assert data == {"password": REDACTED, "Password_Hash": REDACTED, "user_id": 7}

    def test_empty_data(self):
        assert redact({}) is None
        assert redact(None) is None

    def test_json_formatter_redacts(self):
        line = StructuredFormatter().format(_record(password="hunter2", email="us***@x.com"))
        payload = json.loads(line)
        assert payload["message"] == "User created"
        assert payload["request_id"] == "prov-abc123"
        assert payload["data"] == {"password": REDACTED, "email": "us***@x.com"}
        assert "hunter2" not in line

    def test_text_formatter_redacts(self):
        line = DevelopmentFormatter(use_color=False).format(_record(token="abc", menu_id=3))
        assert "token=***" in line
        assert "menu_id=3" in line
        assert "\033[" not in line


class TestMaskEmail:
    @pytest.mark.parametrize(
        "email,expected",
        [
            ("admin@demo.com", "ad***@demo.com"),
            ("jo@demo.com", "j***@demo.com"),
            ("", "<no-email>"),
            (None, "<no-email>"),
            ("no-at-sign", "***@invalid"),
        ],
    )
    def test_mask(self, email, expected):
        assert mask_email(email) == expected


class TestCorrelation:
    def test_scope_binds_and_resets(self):
        assert get_request_id() == ""
        with correlation_scope(prefix="prov") as outer:
            assert outer.startswith("prov-")
            assert get_request_id() == outer
        assert get_request_id() == ""

    def test_nested_scope_keeps_outer_id(self):
        with correlation_scope("req-1") as outer:
            with correlation_scope(prefix="prov") as inner:
                assert inner == outer == "req-1"

    def test_middleware_echoes_valid_header(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "lb-42.a:b"})
        assert response.headers["X-Request-ID"] == "lb-42.a:b"

    def test_middleware_replaces_malformed_header(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "bad id\twith spaces"})
        assert response.headers["X-Request-ID"].startswith("req-")

    def test_middleware_generates_id(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Request-ID"].startswith("req-")


class TestUnitOfWork:
    def test_commits(self, db_session):
        with unit_of_work(db_session):
            TenantService(db_session).create("Tenant Commit")
        db_session.rollback()
        assert db_session.scalar(select(func.count(Tenant.id))) == 1

    def test_domain_error_rolls_back_and_propagates(self, db_session):
        with pytest.raises(ValueError):
            with unit_of_work(db_session):
                TenantService(db_session).create("Tenant Rollback")
                raise ValueError("boom")
        assert db_session.scalar(select(func.count(Tenant.id))) == 0

    def test_driver_error_becomes_database_error(self, db_session):
        with pytest.raises(DatabaseError) as exc:
            with unit_of_work(db_session):
                TenantService(db_session).create("Tenant Driver")
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        assert exc.value.status_code == 500
        assert "base de datos" in exc.value.detail
        assert db_session.scalar(select(func.count(Tenant.id))) == 0
