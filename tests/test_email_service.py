import pytest

from app.errors import ConfigurationError, UpstreamError, ValidationError
from app.services import email_service
from app.services.secret_service import SecretStore


def payload(**overrides):
    body = {
        "name": "Ana <b>Silva</b>",
        "email": "ana@example.com",
        "phone": "11999999999",
        "steamId": "76561198000000000",
        "amount": 1234.5,
        "description": "Doação Setor 7 Hardcore PVE",
        "qrCodeBase64": "iVBORw0KGgo=",
        "qrCode": "00020126PIX123",
        "createdAt": "2025-06-15T14:30:00Z",
    }
    body.update(overrides)
    return body


@pytest.fixture
def sent(monkeypatch):
    outbox = []

    def fake_send(**kwargs):
        outbox.append(kwargs)
        return "resend", "msg-1"

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return outbox


def test_renders_template_with_brazilian_formatting(test_app):
    with test_app.app_context():
        message = email_service.render_donation_email(payload())

    assert message["subject"] == "Detalhes da sua doação - Setor 7"
    html = message["html"]
    assert "R$ 1.234,50" in html
    assert "15/06/2025 14:30" in html
    assert "(11) 99999-9999" in html
    assert "data:image/png;base64,iVBORw0KGgo=" in html
    assert "00020126PIX123" in html
    # donor input is escaped
    assert "Ana &lt;b&gt;Silva&lt;/b&gt;" in html


def test_sends_through_provider_with_secret_key(test_app, sent, monkeypatch):
    monkeypatch.setenv("EMAIL_PROVIDER", "resend")
    with test_app.app_context():
        result = email_service.resend_donation_email(
            payload(), secrets=SecretStore({"RESEND_API_KEY": "re_123"})
        )

    assert result == {"success": True, "provider": "resend", "id": "msg-1"}
    assert sent[0]["api_key"] == "re_123"
    assert sent[0]["to_email"] == "ana@example.com"


def test_missing_provider_key(test_app, sent, monkeypatch):
    monkeypatch.setenv("EMAIL_PROVIDER", "resend")
    with test_app.app_context(), pytest.raises(ConfigurationError):
        email_service.resend_donation_email(payload(), secrets=SecretStore({}))
    assert sent == []


def test_provider_failure_is_upstream_error(test_app, monkeypatch):
    monkeypatch.setenv("EMAIL_PROVIDER", "resend")
    monkeypatch.setattr(
        email_service, "send_email", lambda **kw: (None, "Resend API error: 422")
    )
    with test_app.app_context(), pytest.raises(UpstreamError) as exc:
        email_service.resend_donation_email(
            payload(), secrets=SecretStore({"RESEND_API_KEY": "re_123"})
        )
    assert exc.value.provider == "resend"


def test_qr_code_is_required(test_app, sent):
    with test_app.app_context(), pytest.raises(ValidationError):
        email_service.render_donation_email(payload(qrCode=""))
