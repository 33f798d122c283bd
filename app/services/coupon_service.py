"""
Coupon lookup and discount math, plus admin CRUD for both coupon kinds.

Resolution order for a code typed by the donor:
  1. streamer coupon whose [data_inicio, data_fim] window contains now
  2. active global discount coupon
  3. nothing (the amount is charged unchanged)
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from psycopg2.errors import UniqueViolation

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.discount_coupon import (
    create_coupon,
    delete_coupon,
    get_active_coupon_by_code,
    list_coupons,
    update_coupon,
)
from app.models.streamer import get_streamer
from app.models.streamer_coupon import (
    create_streamer_coupon,
    delete_streamer_coupon,
    get_streamer_coupon,
    get_valid_streamer_coupon,
    list_coupons_for_streamer,
    update_streamer_coupon,
)
from app.utils.validators import (
    clean_amount,
    clean_bool,
    clean_datetime,
    clean_percentage,
    clean_str,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PercentageDiscount:
    percent: Decimal

    def apply(self, amount: Decimal) -> Decimal:
        return max(ZERO, amount * (1 - self.percent / HUNDRED)).quantize(
            CENT, rounding=ROUND_HALF_UP
        )

    def describe(self) -> Dict[str, Any]:
        return {"type": "percentage", "value": self.percent}


@dataclass(frozen=True)
class FixedDiscount:
    amount: Decimal

    def apply(self, amount: Decimal) -> Decimal:
        return max(ZERO, amount - self.amount).quantize(CENT, rounding=ROUND_HALF_UP)

    def describe(self) -> Dict[str, Any]:
        return {"type": "fixed", "value": self.amount}


Discount = Union[PercentageDiscount, FixedDiscount]


def discount_from_row(row: Dict[str, Any]) -> Discount:
    """streamer_coupons row -> Discount; exactly one of valor / porcentagem."""
    valor, pct = row.get("valor"), row.get("porcentagem")
    if (valor is None) == (pct is None):
        raise ValueError(
            f"streamer coupon {row.get('codigo')!r} must set exactly one of valor/porcentagem"
        )
    if pct is not None:
        return PercentageDiscount(Decimal(str(pct)))
    return FixedDiscount(Decimal(str(valor)))


@dataclass(frozen=True)
class AppliedCoupon:
    code: str
    kind: str  # "streamer" | "global"
    discount: Discount
    streamer_id: Optional[str] = None
    streamer_name: Optional[str] = None
    streamer_steam_id: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        out = {"code": self.code, "kind": self.kind, **self.discount.describe()}
        if self.streamer_id:
            out["streamer_id"] = self.streamer_id
            out["streamer_name"] = self.streamer_name
        return out


@dataclass(frozen=True)
class PriceQuote:
    original_amount: Decimal
    final_amount: Decimal
    coupon: Optional[AppliedCoupon] = None


def find_coupon(code: str, now: datetime) -> Optional[AppliedCoupon]:
    row = get_valid_streamer_coupon(code, now)
    if row:
        return AppliedCoupon(
            code=row["codigo"],
            kind="streamer",
            discount=discount_from_row(row),
            streamer_id=str(row["streamer_id"]),
            streamer_name=row.get("streamer_nome"),
            streamer_steam_id=row.get("streamer_steam_id"),
        )
    row = get_active_coupon_by_code(code)
    if row:
        return AppliedCoupon(
            code=row["code"],
            kind="global",
            discount=PercentageDiscount(Decimal(str(row["discount_percentage"]))),
        )
    return None


def resolve_discount(
    code: Optional[str],
    amount: Decimal,
    *,
    now: datetime,
    min_amount: Decimal = ZERO,
) -> PriceQuote:
    """
    Price for `amount` after the coupon `code`, if one matches.
    A matching coupon on an amount below min_amount is refused.
    """
    code = (code or "").strip()
    if not code:
        return PriceQuote(amount, amount)
    coupon = find_coupon(code, now)
    if coupon is None:
        return PriceQuote(amount, amount)
    if min_amount > 0 and amount < min_amount:
        raise ValidationError(
            f"Coupon {coupon.code} requires a minimum donation of {min_amount:.2f}",
            code="coupon_minimum_not_met",
        )
    return PriceQuote(amount, coupon.discount.apply(amount), coupon)


# --- admin: global discount coupons ---


def _global_coupon_fields(body: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if not partial or "code" in body:
        out["code"] = clean_str(body, "code", required=True, max_len=50).upper()
    if not partial or "discount_percentage" in body:
        out["discount_percentage"] = clean_percentage(body, "discount_percentage")
    if not partial or "active" in body:
        out["active"] = clean_bool(body, "active", default=True)
    return out


def admin_list_coupons() -> List[Dict[str, Any]]:
    return list_coupons()


def admin_create_coupon(body: Dict[str, Any]) -> Dict[str, Any]:
    fields = _global_coupon_fields(body, partial=False)
    try:
        return create_coupon(**fields)
    except UniqueViolation:
        raise ConflictError(f"coupon {fields['code']} already exists")


def admin_update_coupon(coupon_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    fields = _global_coupon_fields(body, partial=True)
    try:
        row = update_coupon(coupon_id, **fields)
    except UniqueViolation:
        raise ConflictError(f"coupon {fields.get('code')} already exists")
    if not row:
        raise NotFoundError("coupon not found")
    return row


def admin_delete_coupon(coupon_id: str) -> None:
    if not delete_coupon(coupon_id):
        raise NotFoundError("coupon not found")


# --- admin: streamer coupons ---


def _streamer_coupon_fields(
    body: Dict[str, Any], current: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Validate a full coupon; on update, missing keys come from `current`."""
    merged = {**(current or {}), **body}
    valor = clean_amount(merged, "valor", required=False)
    pct = clean_percentage(merged, "porcentagem", required=False)
    if "valor" in body and body.get("valor") not in (None, ""):
        if "porcentagem" not in body:
            pct = None
    if "porcentagem" in body and body.get("porcentagem") not in (None, ""):
        if "valor" not in body:
            valor = None
    if valor is None and pct is None:
        raise ValidationError("Fill in either valor or porcentagem")
    if valor is not None and pct is not None:
        raise ValidationError("Fill in only valor OR porcentagem, not both")

    inicio = clean_datetime(merged, "data_inicio")
    fim = clean_datetime(merged, "data_fim")
    if fim < inicio:
        raise ValidationError("data_fim must not be before data_inicio")

    return {
        "nome": clean_str(merged, "nome", required=True, max_len=120),
        "codigo": clean_str(merged, "codigo", required=True, max_len=50).upper(),
        "descricao": clean_str(merged, "descricao", max_len=500),
        "data_inicio": inicio,
        "data_fim": fim,
        "valor": valor,
        "porcentagem": pct,
    }


def admin_list_streamer_coupons(streamer_id: str) -> List[Dict[str, Any]]:
    if not get_streamer(streamer_id):
        raise NotFoundError("streamer not found")
    return list_coupons_for_streamer(streamer_id)


def admin_create_streamer_coupon(streamer_id: str, body: Dict[str, Any]):
    if not get_streamer(streamer_id):
        raise NotFoundError("streamer not found")
    fields = _streamer_coupon_fields(body)
    try:
        return create_streamer_coupon(streamer_id=streamer_id, **fields)
    except UniqueViolation:
        raise ConflictError(f"coupon {fields['codigo']} already exists")


def admin_update_streamer_coupon(coupon_id: str, body: Dict[str, Any]):
    current = get_streamer_coupon(coupon_id)
    if not current:
        raise NotFoundError("coupon not found")
    fields = _streamer_coupon_fields(body, current)
    try:
        return update_streamer_coupon(coupon_id, **fields)
    except UniqueViolation:
        raise ConflictError(f"coupon {fields['codigo']} already exists")


def admin_delete_streamer_coupon(coupon_id: str) -> None:
    if not delete_streamer_coupon(coupon_id):
        raise NotFoundError("coupon not found")
