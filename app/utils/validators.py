from __future__ import annotations
import re
from decimal import Decimal
from typing import Any, Dict, Optional

from app.errors import ValidationError
from app.utils.formatting import parse_brl_amount, parse_datetime

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def clean_str(
    body: Dict[str, Any],
    key: str,
    *,
    required: bool = False,
    max_len: int = 255,
    label: Optional[str] = None,
) -> Optional[str]:
    label = label or key
    raw = body.get(key)
    if raw is not None and not isinstance(raw, (str, int, float)):
        raise ValidationError(f"{label} must be a string")
    value = ("" if raw is None else str(raw)).strip()
    if not value:
        if required:
            raise ValidationError(f"{label} is required")
        return None
    if len(value) > max_len:
        raise ValidationError(f"{label} must be at most {max_len} characters")
    return value


def clean_email(body: Dict[str, Any], key: str = "email", required: bool = True):
    value = clean_str(body, key, required=required, max_len=254)
    if value is None:
        return None
    value = value.lower()
    if not EMAIL_RE.match(value):
        raise ValidationError("Invalid email format")
    return value


def clean_amount(
    body: Dict[str, Any],
    key: str,
    *,
    required: bool = True,
    allow_zero: bool = False,
    max_value: Optional[Decimal] = None,
    label: Optional[str] = None,
) -> Optional[Decimal]:
    label = label or key
    raw = body.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise ValidationError(f"{label} is required")
        return None
    try:
        value = parse_brl_amount(raw)
    except ValueError:
        raise ValidationError(f"{label} must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(f"{label} must be greater than zero")
    if max_value is not None and value > max_value:
        raise ValidationError(f"{label} must be at most {max_value}")
    return value


def clean_percentage(body: Dict[str, Any], key: str, *, required: bool = True):
    value = clean_amount(body, key, required=required)
    if value is not None and value > 100:
        raise ValidationError(f"{key} must be between 0 and 100")
    return value


def clean_datetime(body: Dict[str, Any], key: str, *, required: bool = True):
    raw = body.get(key)
    if raw in (None, ""):
        if required:
            raise ValidationError(f"{key} is required")
        return None
    try:
        return parse_datetime(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an ISO-8601 date")


def clean_bool(body: Dict[str, Any], key: str, default: bool = True) -> bool:
    raw = body.get(key, default)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return bool(raw)
