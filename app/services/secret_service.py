from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from app.errors import ConfigurationError, NotFoundError, ValidationError
from app.models.app_secret import list_secrets, load_secret_values, update_secret_value

MERCADO_PAGO_ACCESS_TOKEN = "MERCADO_PAGO_ACCESS_TOKEN"
RESEND_API_KEY = "RESEND_API_KEY"
SENDGRID_API_KEY = "SENDGRID_API_KEY"
COUPON_MIN_AMOUNT = "COUPON_MIN_AMOUNT"
PIX_MARKUP_PERCENT = "PIX_MARKUP_PERCENT"


class SecretStore:
    """
    Snapshot of the app_secrets table. Handlers load one per invocation
    (or get one injected) instead of reading process-wide state.
    """

    def __init__(self, values: Mapping[str, Optional[str]]):
        self._values = dict(values)

    @classmethod
    def load(cls) -> "SecretStore":
        return cls(load_secret_values())

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key)
        if value is None or not str(value).strip():
            return default
        return str(value).strip()

    def require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigurationError(f"{key} is not configured")
        return value

    def get_decimal(self, key: str, default: Decimal = Decimal("0")) -> Decimal:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return Decimal(raw.replace(",", "."))
        except InvalidOperation:
            raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def _mask(value: Optional[str]) -> str:
    if not value:
        return ""
    if len(value) <= 4:
        return "****"
    return "*" * min(len(value) - 4, 12) + value[-4:]


def list_masked_secrets() -> List[Dict[str, Any]]:
    out = []
    for s in list_secrets():
        out.append({**s, "value": _mask(s.get("value")), "is_set": bool(s.get("value"))})
    return out


def update_secret(key: str, value: Any) -> Dict[str, Any]:
    if value is None or not str(value).strip():
        raise ValidationError("value is required")
    row = update_secret_value(key, str(value).strip())
    if not row:
        raise NotFoundError(f"secret {key} not found")
    return {**row, "value": _mask(row.get("value")), "is_set": True}
