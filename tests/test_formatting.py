from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.errors import ValidationError
from app.utils.formatting import (
    format_brl,
    format_datetime_br,
    format_phone,
    mask_email,
    parse_brl_amount,
    parse_datetime,
    split_name,
    split_phone,
)
from app.utils.validators import clean_amount, clean_email, clean_str


@pytest.mark.parametrize(
    "raw, expected",
    [
        (50, "50.00"),
        (50.5, "50.50"),
        ("50.00", "50.00"),
        ("50,00", "50.00"),
        ("1.234,56", "1234.56"),
        ("R$ 1.234,56", "1234.56"),
        ("0.005", "0.01"),
    ],
)
def test_parse_brl_amount(raw, expected):
    assert parse_brl_amount(raw) == Decimal(expected)


@pytest.mark.parametrize(
    "raw", ["", "abc", True, None, float("nan"), 10**30, 1e300, "1e40"]
)
def test_parse_brl_amount_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_brl_amount(raw)


def test_format_brl():
    assert format_brl(Decimal("1234.5")) == "R$ 1.234,50"
    assert format_brl(Decimal("0.99")) == "R$ 0,99"
    assert format_brl(1234567) == "R$ 1.234.567,00"


def test_format_phone():
    assert format_phone("11999999999") == "(11) 99999-9999"
    assert format_phone("(11) 3333-4444") == "(11) 3333-4444"


def test_split_phone_and_name():
    assert split_phone("(11) 99999-9999") == ("11", "999999999")
    assert split_name("Ana Maria Silva") == ("Ana", "Maria Silva")
    assert split_name("Ana") == ("Ana", "Ana")


def test_mask_email():
    assert mask_email("ana.silva@example.com") == "a***a@example.com"
    assert mask_email("ab@example.com") == "a***@example.com"
    assert mask_email(None) is None


def test_datetime_helpers():
    dt = parse_datetime("2025-06-15T14:30:00Z")
    assert dt == datetime(2025, 6, 15, 14, 30, tzinfo=timezone.utc)
    assert parse_datetime("2025-06-15T14:30:00").tzinfo is not None
    assert format_datetime_br(dt) == "15/06/2025 14:30"


def test_clean_str_limits():
    assert clean_str({"a": "  x  "}, "a") == "x"
    assert clean_str({}, "a") is None
    with pytest.raises(ValidationError):
        clean_str({}, "a", required=True)
    with pytest.raises(ValidationError):
        clean_str({"a": "xyz"}, "a", max_len=2)
    with pytest.raises(ValidationError):
        clean_str({"a": {"nested": 1}}, "a")


def test_clean_email_lowercases():
    assert clean_email({"email": " Ana@Example.COM "}) == "ana@example.com"
    with pytest.raises(ValidationError):
        clean_email({"email": "ana@"})


def test_clean_amount_bounds():
    assert clean_amount({"v": "10,5"}, "v") == Decimal("10.50")
    assert clean_amount({"v": 0}, "v", allow_zero=True) == Decimal("0.00")
    with pytest.raises(ValidationError):
        clean_amount({"v": 0}, "v")
    with pytest.raises(ValidationError):
        clean_amount({"v": 11}, "v", max_value=Decimal("10"))
