from decimal import Decimal

import pytest

from app.errors import ConfigurationError, NotFoundError, ValidationError
from app.services import secret_service
from app.services.secret_service import SecretStore, list_masked_secrets, update_secret


def test_blank_values_count_as_missing():
    store = SecretStore({"A": "  ", "B": None, "C": " x "})
    assert store.get("A") is None
    assert store.get("B", "fallback") == "fallback"
    assert store.get("C") == "x"
    with pytest.raises(ConfigurationError):
        store.require("A")


def test_get_decimal():
    store = SecretStore({"MIN": "10,50", "BAD": "ten"})
    assert store.get_decimal("MIN") == Decimal("10.50")
    assert store.get_decimal("MISSING", Decimal("3")) == Decimal("3")
    with pytest.raises(ConfigurationError):
        store.get_decimal("BAD")


def test_listing_masks_values(monkeypatch):
    monkeypatch.setattr(
        secret_service,
        "list_secrets",
        lambda: [
            {"key": "MERCADO_PAGO_ACCESS_TOKEN", "value": "APP_USR-1234567890abcd"},
            {"key": "RESEND_API_KEY", "value": None},
        ],
    )
    rows = list_masked_secrets()
    assert rows[0]["value"].endswith("abcd")
    assert "1234567890" not in rows[0]["value"]
    assert rows[0]["is_set"] is True
    assert rows[1] == {"key": "RESEND_API_KEY", "value": "", "is_set": False}


def test_update_secret(monkeypatch):
    monkeypatch.setattr(
        secret_service,
        "update_secret_value",
        lambda key, value: {"key": key, "value": value} if key == "KNOWN" else None,
    )
    assert update_secret("KNOWN", " re_abcdef ")["value"] == "*****cdef"
    with pytest.raises(ValidationError):
        update_secret("KNOWN", "")
    with pytest.raises(NotFoundError):
        update_secret("OTHER", "value")
