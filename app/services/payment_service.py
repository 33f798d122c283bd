"""
PIX donation lifecycle against Mercado Pago.

    create_pix_payment       validate -> price (coupon, markup) -> charge -> store row
    fetch_payment_status     gateway status -> overwrite donations.status
    cancel_payment           gateway cancel -> force donations.status = cancelled
    reconcile_pending_donations   fetch_payment_status for every pending row

The gateway is authoritative. Local writes that fail after a successful
gateway call are logged as PersistenceWarning and never fail the request.
"""

from __future__ import annotations
import logging
import os
import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

import psycopg2

from app.errors import ConfigurationError, PersistenceWarning, UpstreamError, ValidationError
from app.models.donation import insert_donation, list_donations_by_status, set_status_by_id
from app.services.coupon_service import PriceQuote, resolve_discount
from app.services.finance_service import invalidate_summary_cache
from app.services.secret_service import (
    COUPON_MIN_AMOUNT,
    MERCADO_PAGO_ACCESS_TOKEN,
    PIX_MARKUP_PERCENT,
    SecretStore,
)
from app.utils.formatting import format_phone, mask_email, only_digits, split_name, split_phone
from app.utils.mercadopago import MercadoPagoClient, make_idempotency_key, qr_fields
from app.utils.metrics import (
    DONATION_STATUS_UPDATES,
    GATEWAY_ERRORS,
    PERSIST_FAILURES,
    PIX_PAYMENTS_CREATED,
)
from app.utils.validators import clean_amount, clean_email, clean_str

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = os.getenv(
    "DEFAULT_DONATION_DESCRIPTION", "Doação Setor 7 Hardcore PVE"
)
MAX_DONATION_AMOUNT = Decimal(os.getenv("MAX_DONATION_AMOUNT", "100000"))
CENT = Decimal("0.01")


class DonationStatus:
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class DonationRequest:
    name: str
    email: str
    phone: str
    steam_id: Optional[str]
    amount: Decimal
    description: Optional[str]
    coupon_code: Optional[str]
    package_name: Optional[str]


def parse_donation_request(body: Dict[str, Any]) -> DonationRequest:
    name = clean_str(body, "name", required=True, max_len=120)
    email = clean_email(body, "email")
    phone = clean_str(body, "phone", required=True, max_len=20)
    if not 10 <= len(only_digits(phone)) <= 11:
        raise ValidationError("phone must have 10 or 11 digits")
    return DonationRequest(
        name=name,
        email=email,
        phone=phone,
        steam_id=clean_str(body, "steamId", max_len=64),
        amount=clean_amount(body, "amount", max_value=MAX_DONATION_AMOUNT),
        description=clean_str(body, "description", max_len=500),
        coupon_code=clean_str(body, "discountCoupon", max_len=50),
        package_name=clean_str(body, "packageName", max_len=120),
    )


def gateway_from_secrets(secrets: SecretStore) -> MercadoPagoClient:
    return MercadoPagoClient(secrets.require(MERCADO_PAGO_ACCESS_TOKEN))


def _apply_markup(amount: Decimal, secrets: SecretStore) -> Decimal:
    markup = secrets.get_decimal(PIX_MARKUP_PERCENT, Decimal("0"))
    if markup < 0:
        raise ConfigurationError(f"{PIX_MARKUP_PERCENT} must not be negative")
    if markup == 0:
        return amount
    return (amount * (1 + markup / 100)).quantize(CENT, rounding=ROUND_HALF_UP)


def _description_for(req: DonationRequest) -> str:
    if req.description:
        return req.description
    if req.package_name:
        return f"Pacote VIP: {req.package_name}"
    return DEFAULT_DESCRIPTION


def build_payment_payload(
    req: DonationRequest, quote: PriceQuote, final_amount: Decimal, description: str
) -> Dict[str, Any]:
    first, last = split_name(req.name)
    area_code, number = split_phone(req.phone)
    metadata: Dict[str, Any] = {
        "steam_id": req.steam_id or "",
        "phone": req.phone,
        "original_amount": float(quote.original_amount),
    }
    if req.package_name:
        metadata["package"] = req.package_name
    if quote.coupon:
        metadata["coupon_code"] = quote.coupon.code
        metadata["coupon_kind"] = quote.coupon.kind
        if quote.coupon.streamer_id:
            metadata["streamer_id"] = quote.coupon.streamer_id
            metadata["streamer_steam_id"] = quote.coupon.streamer_steam_id or ""

    return {
        "transaction_amount": float(final_amount),
        "description": description,
        "payment_method_id": "pix",
        "payer": {
            "email": req.email,
            "first_name": first,
            "last_name": last,
            "identification": {"type": "other", "number": req.steam_id or ""},
        },
        "additional_info": {
            "payer": {
                "first_name": first,
                "last_name": last,
                "phone": {"area_code": area_code, "number": number},
            },
            "items": [
                {
                    "id": "donation",
                    "title": description,
                    "description": f"Doação de {req.name} - Steam ID: {req.steam_id or ''}",
                    "quantity": 1,
                    "unit_price": float(final_amount),
                }
            ],
        },
        "metadata": metadata,
    }


def _persistence_warning(operation: str, message: str) -> None:
    PERSIST_FAILURES.labels(operation).inc()
    logger.error("[persist] %s", message)
    warnings.warn(message, PersistenceWarning, stacklevel=3)


def create_pix_payment(
    body: Dict[str, Any],
    *,
    secrets: Optional[SecretStore] = None,
    gateway: Optional[MercadoPagoClient] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    req = parse_donation_request(body)
    if secrets is None:
        secrets = SecretStore.load()
    if gateway is None:
        gateway = gateway_from_secrets(secrets)
    now = now or datetime.now(timezone.utc)

    quote = resolve_discount(
        req.coupon_code,
        req.amount,
        now=now,
        min_amount=secrets.get_decimal(COUPON_MIN_AMOUNT, Decimal("0")),
    )
    final_amount = _apply_markup(quote.final_amount, secrets)
    if final_amount <= 0:
        raise ValidationError(
            "Amount after discount must be greater than zero",
            code="amount_not_positive",
        )

    description = _description_for(req)
    payload = build_payment_payload(req, quote, final_amount, description)
    logger.info(
        "[pix] creating payment email=%s amount=%s coupon=%s",
        mask_email(req.email),
        final_amount,
        quote.coupon.code if quote.coupon else None,
    )
    try:
        payment = gateway.create_payment(payload, make_idempotency_key())
    except UpstreamError:
        GATEWAY_ERRORS.labels("create").inc()
        raise

    payment_id = str(payment.get("id"))
    status = payment.get("status") or DonationStatus.PENDING
    qr = qr_fields(payment)
    PIX_PAYMENTS_CREATED.labels(quote.coupon.kind if quote.coupon else "none").inc()
    logger.info("[pix] payment %s created status=%s", payment_id, status)

    row = dict(
        payment_id=payment_id,
        name=req.name,
        email=req.email,
        phone=format_phone(req.phone),
        steam_id=req.steam_id,
        amount=final_amount,
        description=description,
        status=status,
        discount_coupon=quote.coupon.code if quote.coupon else None,
        **qr,
    )
    donation = None
    try:
        donation = insert_donation(**row)
        invalidate_summary_cache()
    except psycopg2.Error as e:
        _persistence_warning(
            "create",
            f"donation for payment {payment_id} not saved ({e}); "
            f"row={ {k: v for k, v in row.items() if k != 'qr_code_base64'} }",
        )

    return {
        **qr,
        "payment_id": payment_id,
        "status": status,
        "donation_id": str(donation["id"]) if donation else None,
        "amount": final_amount,
        "original_amount": quote.original_amount,
        "discount": quote.coupon.summary() if quote.coupon else None,
    }


def _overwrite_status(donation_id: str, status: str, operation: str) -> bool:
    try:
        set_status_by_id(donation_id, status)
    except psycopg2.Error as e:
        _persistence_warning(
            operation, f"status {status} for donation {donation_id} not saved ({e})"
        )
        return False
    DONATION_STATUS_UPDATES.labels(status).inc()
    invalidate_summary_cache()
    return True


def fetch_payment_status(
    order_id: Any,
    donation_id: Optional[str] = None,
    *,
    secrets: Optional[SecretStore] = None,
    gateway: Optional[MercadoPagoClient] = None,
) -> Dict[str, Any]:
    """Raw gateway payload; a settled status is copied onto the donation."""
    if order_id in (None, ""):
        raise ValidationError("orderId is required")
    if gateway is None:
        gateway = gateway_from_secrets(secrets or SecretStore.load())

    payment, _ = _sync_status(gateway, order_id, donation_id)
    return payment


def _sync_status(
    gateway: MercadoPagoClient, order_id: Any, donation_id: Optional[str]
) -> Tuple[Dict[str, Any], Optional[bool]]:
    """
    Gateway payload plus the local write result: None when nothing needed
    writing, otherwise whether the settled status was saved.
    """
    try:
        payment = gateway.get_payment(str(order_id))
    except UpstreamError:
        GATEWAY_ERRORS.labels("get").inc()
        raise

    status = payment.get("status")
    if status and status != DonationStatus.PENDING and donation_id:
        return payment, _overwrite_status(donation_id, status, "fetch")
    return payment, None


def cancel_payment(
    order_id: Any,
    donation_id: Optional[str],
    *,
    secrets: Optional[SecretStore] = None,
    gateway: Optional[MercadoPagoClient] = None,
) -> Dict[str, Any]:
    if order_id in (None, ""):
        raise ValidationError("orderId is required")
    if not donation_id:
        raise ValidationError("donationId is required")
    if gateway is None:
        gateway = gateway_from_secrets(secrets or SecretStore.load())

    try:
        gateway.cancel_payment(str(order_id))
    except UpstreamError:
        GATEWAY_ERRORS.labels("cancel").inc()
        raise

    logger.info("[pix] payment %s cancelled at gateway", order_id)
    _overwrite_status(donation_id, DonationStatus.CANCELLED, "cancel")
    return {"success": True, "status": DonationStatus.CANCELLED}


def reconcile_pending_donations(
    *,
    secrets: Optional[SecretStore] = None,
    gateway: Optional[MercadoPagoClient] = None,
) -> Dict[str, int]:
    """
    Poll the gateway for every pending donation. One failing donation is
    logged and skipped; the next sweep tries it again.
    """
    pending = list_donations_by_status(DonationStatus.PENDING)
    result = {"checked": 0, "updated": 0, "failed": 0}
    if not pending:
        return result
    if gateway is None:
        gateway = gateway_from_secrets(secrets or SecretStore.load())

    for d in pending:
        result["checked"] += 1
        try:
            _, written = _sync_status(gateway, d["payment_id"], str(d["id"]))
        except UpstreamError as e:
            result["failed"] += 1
            logger.warning(
                "[sweep] donation %s (payment %s): %s", d["id"], d["payment_id"], e
            )
            continue
        if written:
            result["updated"] += 1
        elif written is False:
            result["failed"] += 1

    logger.info("[sweep] %s", result)
    return result
