"""
Formatting and parsing helpers for Brazilian currency, phones and dates.

Donor input arrives the way the intake form shows it ("1.234,56",
"(11) 99999-9999"), so parsing accepts both that and plain numbers.
"""

from __future__ import annotations
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Tuple

CENT = Decimal("0.01")
_non_digit = re.compile(r"\D")


def to_money(value: Any) -> Decimal:
    """Decimal rounded to cents (half up). Raises ValueError on garbage."""
    if isinstance(value, bool):
        raise ValueError("not a number")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    else:
        raise ValueError("not a number")
    if not d.is_finite():
        raise ValueError("not a number")
    try:
        return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError("amount out of range") from e


def parse_brl_amount(value: Any) -> Decimal:
    """
    Accept 50, 50.5, "50.00", "50,00" and "1.234,56".
    With a comma present, dots are thousands separators.
    """
    if isinstance(value, str):
        s = value.strip().replace("R$", "").replace(" ", "")
        if not s:
            raise ValueError("empty amount")
        if "," in s:
            s = s.replace(".", "").replace(",", ".")
        try:
            return to_money(Decimal(s))
        except InvalidOperation as e:
            raise ValueError(f"invalid amount: {value!r}") from e
    return to_money(value)


def format_brl(value: Any) -> str:
    """Decimal("1234.5") -> "R$ 1.234,50"."""
    d = to_money(value)
    sign = "-" if d < 0 else ""
    whole, _, frac = f"{abs(d):.2f}".partition(".")
    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    return f"{sign}R$ {'.'.join(groups)},{frac}"


def only_digits(value: Optional[str]) -> str:
    return _non_digit.sub("", value or "")


def format_phone(value: Optional[str]) -> str:
    """10 digits -> (11) 3333-4444, 11 digits -> (11) 99999-9999."""
    n = only_digits(value)
    if len(n) <= 10:
        m = re.match(r"(\d{2})(\d{4})(\d{0,4})", n)
    else:
        m = re.match(r"(\d{2})(\d{5})(\d{0,4})", n)
    if not m:
        return n
    return f"({m.group(1)}) {m.group(2)}-{m.group(3)}".strip().rstrip("-")


def split_phone(value: Optional[str]) -> Tuple[str, str]:
    """(area_code, number) as the gateway's additional_info expects."""
    n = only_digits(value)
    return n[:2], n[2:]


def split_name(name: str) -> Tuple[str, str]:
    parts = (name or "").split()
    if not parts:
        return "", ""
    first = parts[0]
    last = " ".join(parts[1:]) or first
    return first, last


def mask_email(e: Optional[str]) -> Optional[str]:
    if not e:
        return None
    local, _, domain = e.partition("@")
    if not domain:
        return e
    if len(local) <= 2:
        masked = local[0:1] + "***"
    else:
        masked = local[0] + "***" + local[-1]
    return masked + "@" + domain


def parse_datetime(value: Any) -> datetime:
    """ISO-8601 string (a trailing Z is accepted) or datetime; naive means UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"invalid datetime: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime_br(value: Any) -> str:
    return parse_datetime(value).strftime("%d/%m/%Y %H:%M")
