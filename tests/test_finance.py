from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.errors import ValidationError
from app.services import finance_service
from app.services.finance_service import compute_monthly_summary, month_bounds

UTC = timezone.utc


def d(amount, status, day=10, month=6):
    return {
        "amount": Decimal(amount),
        "status": status,
        "created_at": datetime(2025, month, day, 12, tzinfo=UTC),
    }


def test_month_bounds_rolls_over_december():
    start, end = month_bounds(2025, 12)
    assert start == datetime(2025, 12, 1, tzinfo=UTC)
    assert end == datetime(2026, 1, 1, tzinfo=UTC)
    with pytest.raises(ValidationError):
        month_bounds(2025, 13)
    with pytest.raises(ValidationError):
        month_bounds(2025, 0)
    with pytest.raises(ValidationError):
        month_bounds(0, 6)


def test_monthly_summary_balance():
    start, end = month_bounds(2025, 6)
    summary = compute_monthly_summary(
        donations=[
            d("50.00", "approved"),
            d("30.00", "approved"),
            d("20.00", "pending"),
            d("10.00", "cancelled"),
            d("999.00", "approved", month=5),  # previous month
        ],
        servers=[{"valor_mensal": Decimal("40.00")}],
        mods=[{"valor_mensal": Decimal("5.00")}, {"valor_mensal": Decimal("5.00")}],
        campaigns=[
            {
                "valor": Decimal("15.00"),
                "data_inicio": datetime(2025, 6, 1, tzinfo=UTC),
                "data_fim": datetime(2025, 6, 30, tzinfo=UTC),
            },
            {
                "valor": Decimal("100.00"),
                "data_inicio": datetime(2025, 5, 20, tzinfo=UTC),
                "data_fim": datetime(2025, 6, 20, tzinfo=UTC),
            },
        ],
        start=start,
        end=end,
        now=datetime(2025, 6, 25, tzinfo=UTC),
    )

    assert summary["donation_count"] == 4
    assert summary["approved_count"] == 2
    assert summary["pending_count"] == 1
    assert summary["received_total"] == Decimal("80.00")
    assert summary["pending_total"] == Decimal("20.00")
    assert summary["server_cost"] == Decimal("50.00")
    assert summary["campaign_total"] == Decimal("15.00")
    assert summary["active_campaigns"] == 1
    assert summary["balance"] == Decimal("15.00")


def test_monthly_summary_uses_cache_when_present(monkeypatch):
    cached = {
        "year": 2025,
        "month": 6,
        "donation_count": 1,
        "approved_count": 1,
        "pending_count": 0,
        "received_total": "10.00",
        "pending_total": "0",
        "server_cost": "0",
        "campaign_total": "0",
        "active_campaigns": 0,
        "balance": "10.00",
    }
    monkeypatch.setattr(finance_service, "get_json", lambda key: cached)

    def no_db(*a, **kw):
        raise AssertionError("database should not be read")

    monkeypatch.setattr(finance_service, "list_donations", no_db)

    summary = finance_service.monthly_summary(2025, 6)
    assert summary["received_total"] == Decimal("10.00")


def test_monthly_summary_loads_rows_and_caches(monkeypatch):
    stored = {}
    monkeypatch.setattr(finance_service, "get_json", lambda key: None)
    monkeypatch.setattr(
        finance_service, "set_json", lambda key, value, ttl: stored.update({key: (value, ttl)})
    )
    monkeypatch.setattr(
        finance_service, "list_donations", lambda **kw: [d("25.00", "approved")]
    )
    monkeypatch.setattr(finance_service, "list_servers", lambda: [])
    monkeypatch.setattr(finance_service, "list_mods", lambda: [])
    monkeypatch.setattr(finance_service, "list_campaigns", lambda: [])

    summary = finance_service.monthly_summary(
        2025, 6, now=datetime(2025, 6, 20, tzinfo=UTC)
    )

    assert summary["balance"] == Decimal("25.00")
    value, ttl = stored["finance:summary:2025-06"]
    assert ttl == 30
