"""API tests for coterie_nominations/main.py.

The dispatcher dependency is overridden with one wired to FakeTransport.
"""

import pytest

from coterie_nominations import main as main_module
from coterie_nominations.dispatcher import NotificationDispatcher, get_dispatcher
from coterie_nominations.main import app
from conftest import ADMIN_EMAIL, FakeTransport, peer_payload, self_payload


def test_root_reports_status(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "The Coterie Nomination API"
    assert "/submit" in body["message"]


def test_wake_up(client):
    response = client.get("/wake-up")

    assert response.status_code == 200
    assert response.json() == {"message": "Server is awake and ready."}


def test_health_reports_transport(client, monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_123")
    monkeypatch.delenv("EMAIL_TRANSPORT", raising=False)

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["transport"] == {"backend": "resend", "status": "configured"}


class TestSubmit:
    def test_self_nomination_example(self, client, transport):
        response = client.post("/submit", json=self_payload())

        assert response.status_code == 200
        assert response.json() == {"message": "Nomination submitted successfully."}

        assert len(transport.sent) == 2
        admin = next(m for m in transport.sent if m.to == ADMIN_EMAIL)
        assert admin.subject == "New Coterie Nomination (Self): Ada Lovelace"
        acknowledgments = [m for m in transport.sent if m.to != ADMIN_EMAIL]
        assert [m.to for m in acknowledgments] == ["ada@example.com"]

    def test_peer_nomination_sends_three(self, client, transport):
        response = client.post("/submit", json=peer_payload())

        assert response.status_code == 200
        assert sorted(m.to for m in transport.sent) == sorted(
            [ADMIN_EMAIL, "ada@example.com", "charles@example.com"]
        )

    @pytest.mark.parametrize("field", ["name", "email", "qualification"])
    def test_missing_nominee_field_is_rejected(self, client, transport, field):
        payload = self_payload()
        del payload[field]

        response = client.post("/submit", json=payload)

        assert response.status_code == 400
        assert response.json() == {"message": "Please fill out all required fields."}
        assert transport.attempted == []

    def test_peer_missing_nominator_email_is_rejected(self, client, transport):
        payload = peer_payload()
        del payload["nominatorEmail"]

        response = client.post("/submit", json=payload)

        assert response.status_code == 400
        assert transport.attempted == []

    def test_malformed_body_is_rejected(self, client, transport):
        response = client.post(
            "/submit",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Please fill out all required fields."}
        assert transport.attempted == []

    def test_transport_rejection_returns_500(self, client):
        failing = NotificationDispatcher(
            FakeTransport(fail_for={"ada@example.com"}), admin_email=ADMIN_EMAIL
        )
        app.dependency_overrides[get_dispatcher] = lambda: failing

        response = client.post("/submit", json=self_payload())

        assert response.status_code == 500
        assert response.json() == {"message": "An internal server error occurred."}
        # The diagnostic stays in the logs
        assert "rejected" not in response.text

    def test_unexpected_error_returns_500(self, client, monkeypatch, dispatcher):
        async def explode(submission):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(dispatcher, "dispatch", explode)

        response = client.post("/submit", json=self_payload())

        assert response.status_code == 500
        assert response.json() == {"message": "An internal server error occurred."}

    def test_validation_disabled_sends_incomplete_submission(self, client, transport, monkeypatch):
        monkeypatch.setattr(main_module, "VALIDATE_SUBMISSIONS", False)
        payload = self_payload()
        del payload["company"]

        response = client.post("/submit", json=payload)

        assert response.status_code == 200
        admin = next(m for m in transport.sent if m.to == ADMIN_EMAIL)
        assert "<li><strong>Company:</strong> </li>" in admin.html_body

    def test_user_html_passes_through_unescaped(self, client, transport):
        response = client.post("/submit", json=self_payload(qualification="<em>Pioneer</em>"))

        assert response.status_code == 200
        admin = next(m for m in transport.sent if m.to == ADMIN_EMAIL)
        assert "<em>Pioneer</em>" in admin.html_body


def test_health_reports_unparseable_smtp_port(client, monkeypatch):
    monkeypatch.setenv("SMTP_PORT", "")

    response = client.get("/health")

    assert response.status_code == 200
    status = response.json()["transport"]["status"]
    assert status.startswith("not configured")
    assert "SMTP_PORT" in status
