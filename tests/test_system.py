"""Health, demo-data cleanup, alert emails and the global error handler."""

from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.services import email_alerts, error_handler, mailer
from app.services.data_cleanup import cleanup_demo_data, validate_clean_state


class TestHealth:
    def test_health_reports_database(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"


class TestCleanup:
    """Cleanup empties business tables and is safe to repeat."""

    def test_second_run_removes_nothing(self, client, auth_headers, employee, db):
        first = client.post("/api/system/cleanup", headers=auth_headers).json()
        assert first["success"] is True
        assert first["records_removed"] >= 3
        assert first["tables"]["employees"] == 1

        second = cleanup_demo_data(db)
        assert second["records_removed"] == 0
        assert validate_clean_state(db) == {"clean": True, "remaining": {}}

    def test_users_survive_cleanup(self, client, auth_headers, employee):
        client.post("/api/system/cleanup", headers=auth_headers)
        assert client.get("/auth/me", headers=auth_headers).status_code == 200

    def test_validate_reports_leftovers(self, client, auth_headers, employee):
        body = client.get("/api/system/validate-clean-state", headers=auth_headers).json()
        assert body["clean"] is False
        assert body["remaining"]["employees"] == 1
        assert body["remaining"]["time_cards"] == 1

    def test_requires_admin(self, client, employee_headers):
        assert client.post("/api/system/cleanup", headers=employee_headers).status_code == 403


class FakeSMTP:
    sent = []

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, msg):
        FakeSMTP.sent.append(msg)


@pytest.fixture
def smtp(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.district.org")
    monkeypatch.setattr(settings, "smtp_port", 587)
    monkeypatch.setattr(settings, "smtp_username", "alerts")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    monkeypatch.setattr(settings, "admin_emails_raw", "it@district.org, hr@district.org")
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    FakeSMTP.sent = []
    return FakeSMTP


class TestEmailAlerts:
    def test_html_uses_severity_colour(self):
        html = email_alerts.build_alert_html(
            "Payroll batch failed", "critical", datetime.now(timezone.utc), endpoint="POST /api/payroll"
        )
        assert "#dc3545" in html
        assert "Severity: CRITICAL" in html
        assert "POST /api/payroll" in html

    def test_disabled_without_smtp(self):
        assert email_alerts.alerts_enabled() is False
        assert email_alerts.send_error_alert(RuntimeError("boom"), "low") is False

    def test_unknown_severity_raises(self):
        with pytest.raises(ValueError):
            email_alerts.send_error_alert(RuntimeError("boom"), "urgent")

    def test_sends_to_every_admin(self, smtp):
        assert email_alerts.send_error_alert(RuntimeError("boom"), "high", endpoint="GET /x") is True
        assert len(smtp.sent) == 1
        msg = smtp.sent[0]
        assert msg["Subject"] == "HR Payroll System Error - HIGH"
        assert msg["To"] == "it@district.org, hr@district.org"

    def test_test_alert_endpoint(self, client, auth_headers, smtp):
        resp = client.post("/api/system/test-alert", params={"severity": "medium"}, headers=auth_headers)
        assert resp.json() == {"enabled": True, "sent": True}
        assert client.post("/api/system/test-alert", params={"severity": "bogus"}, headers=auth_headers).status_code == 400


class TestErrorHandler:
    def test_classify_error(self):
        assert error_handler.classify_error(OperationalError("SELECT 1", {}, Exception("down"))) == "database"
        assert error_handler.classify_error(RuntimeError("Connection reset")) == "database"
        assert error_handler.classify_error(RuntimeError("auth token missing")) == "authentication"
        assert error_handler.classify_error(RuntimeError("payroll run failed")) == "payroll"
        assert error_handler.classify_error(KeyError("x")) == "api"

    def test_unhandled_error_becomes_json_500(self, monkeypatch):
        dispatched = []
        monkeypatch.setattr(
            error_handler, "dispatch_alert", lambda exc, endpoint, user_id=None: dispatched.append(endpoint) or False
        )
        app = FastAPI()
        error_handler.register_error_handlers(app)

        @app.get("/explode")
        def explode():
            raise RuntimeError("something broke")

        resp = TestClient(app, raise_server_exceptions=False).get("/explode")
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Internal Server Error"
        assert body["path"] == "/explode"
        assert "timestamp" in body
        assert dispatched == ["GET /explode"]

    def test_client_errors_pass_through(self, client, auth_headers):
        resp = client.get("/api/employees/12345", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Employee not found"}
