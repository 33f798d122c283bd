from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import render_template

from app.errors import UpstreamError, ValidationError
from app.services.secret_service import SecretStore
from app.utils.email_sender import SECRET_KEYS, current_provider, send_email
from app.utils.formatting import (
    format_brl,
    format_datetime_br,
    format_phone,
    mask_email,
)
from app.utils.metrics import EMAILS_SENT
from app.utils.validators import clean_amount, clean_email, clean_str

logger = logging.getLogger(__name__)

SUBJECT = "Detalhes da sua doação - Setor 7"
TEMPLATE = "emails/donation_details.html"


def _context(body: Dict[str, Any]) -> Dict[str, Any]:
    amount = clean_amount(body, "amount")
    created = body.get("createdAt")
    try:
        created_at = format_datetime_br(created) if created else None
    except ValueError:
        raise ValidationError("createdAt must be an ISO-8601 date")
    phone = clean_str(body, "phone", max_len=20)
    return {
        "name": clean_str(body, "name", required=True, max_len=120),
        "email": clean_email(body, "email"),
        "phone": format_phone(phone) if phone else None,
        "steam_id": clean_str(body, "steamId", max_len=64),
        "description": clean_str(body, "description", max_len=500),
        "amount": format_brl(amount),
        "created_at": created_at
        or format_datetime_br(datetime.now(timezone.utc)),
        "qr_code": clean_str(body, "qrCode", required=True, max_len=4096),
        "qr_code_base64": clean_str(
            body, "qrCodeBase64", required=True, max_len=200_000
        ),
    }


def render_donation_email(body: Dict[str, Any]) -> Dict[str, str]:
    ctx = _context(body)
    return {"to": ctx["email"], "subject": SUBJECT, "html": render_template(TEMPLATE, **ctx)}


def resend_donation_email(
    body: Dict[str, Any], *, secrets: Optional[SecretStore] = None
) -> Dict[str, Any]:
    """Re-send the PIX details (QR image + copy-paste code) to the donor."""
    message = render_donation_email(body)
    provider = current_provider()
    if secrets is None:
        secrets = SecretStore.load()
    api_key = secrets.require(SECRET_KEYS.get(provider, "RESEND_API_KEY"))

    sent_by, result = send_email(
        api_key=api_key,
        to_email=message["to"],
        subject=message["subject"],
        body_html=message["html"],
        provider=provider,
    )
    if not sent_by:
        logger.error("[email] send to %s failed: %s", mask_email(message["to"]), result)
        raise UpstreamError(result or "email send failed", provider=provider)

    EMAILS_SENT.labels(sent_by).inc()
    logger.info("[email] sent via %s to %s id=%s", sent_by, mask_email(message["to"]), result)
    return {"success": True, "provider": sent_by, "id": result}
