"""
Monthly financial summary for the admin dashboard.

compute_monthly_summary is a pure function over rows; monthly_summary loads
the rows and caches the result in Redis for SUMMARY_TTL seconds (same
pattern as campaign progress caching). Any donation status change drops
the cached summaries.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.errors import ValidationError
from app.models.donation import list_donations
from app.models.server import list_mods, list_servers
from app.models.streamer_campaign import list_campaigns
from app.utils.cache import get_json, invalidate_prefix, set_json
from app.utils.formatting import parse_datetime

logger = logging.getLogger(__name__)

SUMMARY_CACHE_PREFIX = "finance:summary:"
SUMMARY_TTL = 30
ZERO = Decimal("0")
MONEY_FIELDS = (
    "received_total",
    "pending_total",
    "server_cost",
    "campaign_total",
    "balance",
)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """[first instant of month, first instant of next month) in UTC."""
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= year < 9999:
        raise ValidationError("year out of range")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def _money(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


def _aware(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return parse_datetime(value)


def compute_monthly_summary(
    *,
    donations: Iterable[Dict[str, Any]],
    servers: Iterable[Dict[str, Any]],
    mods: Iterable[Dict[str, Any]],
    campaigns: Iterable[Dict[str, Any]],
    start: datetime,
    end: datetime,
    now: datetime,
) -> Dict[str, Any]:
    donations = [
        d for d in donations if start <= _aware(d["created_at"]) < end
    ]
    approved = [d for d in donations if d["status"] == "approved"]
    pending = [d for d in donations if d["status"] == "pending"]

    received = sum((_money(d["amount"]) for d in approved), ZERO)
    pending_total = sum((_money(d["amount"]) for d in pending), ZERO)
    server_cost = sum((_money(s["valor_mensal"]) for s in servers), ZERO) + sum(
        (_money(m["valor_mensal"]) for m in mods), ZERO
    )

    campaign_total = ZERO
    active = 0
    for c in campaigns:
        inicio, fim = _aware(c["data_inicio"]), _aware(c["data_fim"])
        if start <= inicio < end:
            campaign_total += _money(c["valor"])
        if inicio <= now <= fim:
            active += 1

    return {
        "year": start.year,
        "month": start.month,
        "donation_count": len(donations),
        "approved_count": len(approved),
        "pending_count": len(pending),
        "received_total": received,
        "pending_total": pending_total,
        "server_cost": server_cost,
        "campaign_total": campaign_total,
        "active_campaigns": active,
        "balance": received - server_cost - campaign_total,
    }


def _from_cache(cached: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(cached)
    for k in MONEY_FIELDS:
        out[k] = Decimal(str(out[k]))
    return out


def monthly_summary(
    year: Optional[int] = None, month: Optional[int] = None, *, now=None
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    year = now.year if year is None else year
    month = now.month if month is None else month
    start, end = month_bounds(year, month)

    key = f"{SUMMARY_CACHE_PREFIX}{year:04d}-{month:02d}"
    cached = get_json(key)
    if cached:
        return _from_cache(cached)

    donations: List[Dict[str, Any]] = list_donations(
        created_from=start, created_to=end, limit=100000
    )
    summary = compute_monthly_summary(
        donations=donations,
        servers=list_servers(),
        mods=list_mods(),
        campaigns=list_campaigns(),
        start=start,
        end=end,
        now=now,
    )
    set_json(key, summary, ttl=SUMMARY_TTL)
    return summary


def invalidate_summary_cache() -> None:
    removed = invalidate_prefix(SUMMARY_CACHE_PREFIX)
    if removed:
        logger.debug("[finance] dropped %d cached summaries", removed)
