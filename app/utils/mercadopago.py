"""
Thin Mercado Pago REST client (payments API only).

    POST /v1/payments        create a PIX charge (X-Idempotency-Key header)
    GET  /v1/payments/{id}   current status
    PUT  /v1/payments/{id}   {"status": "cancelled"}

Configure via env:
- MERCADOPAGO_API_BASE (default https://api.mercadopago.com)
- MERCADOPAGO_TIMEOUT seconds (default 15)

The access token is not read here; callers take it from the secret store.
"""

from __future__ import annotations
import logging
import os
import time
import uuid
from typing import Any, Dict, Optional

import requests

from app.errors import UpstreamError

logger = logging.getLogger(__name__)

API_BASE = os.getenv("MERCADOPAGO_API_BASE", "https://api.mercadopago.com")
TIMEOUT = float(os.getenv("MERCADOPAGO_TIMEOUT", "15"))
PROVIDER = "mercadopago"


def make_idempotency_key() -> str:
    """Fresh per call: epoch millis plus a random uuid."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}"


def qr_fields(payment: Dict[str, Any]) -> Dict[str, str]:
    data = (payment.get("point_of_interaction") or {}).get("transaction_data") or {}
    return {
        "qr_code": data.get("qr_code") or "",
        "qr_code_base64": data.get("qr_code_base64") or "",
        "ticket_url": data.get("ticket_url") or "",
    }


class MercadoPagoClient:
    def __init__(
        self,
        access_token: str,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or API_BASE).rstrip("/")
        self.timeout = timeout or TIMEOUT
        self.session = session or requests.Session()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        h = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if extra:
            h.update(extra)
        return h

    def _request(
        self,
        method: str,
        path: str,
        *,
        fallback_message: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("[gateway] %s %s failed: %s", method, path, e)
            raise UpstreamError(fallback_message, provider=PROVIDER) from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        if not resp.ok:
            logger.error(
                "[gateway] %s %s -> %s %s", method, path, resp.status_code, data
            )
            raise UpstreamError(
                data.get("message") or f"{fallback_message}: {resp.status_code}",
                provider=PROVIDER,
                upstream_status=resp.status_code,
            )
        return data

    def create_payment(
        self, payment: Dict[str, Any], idempotency_key: Optional[str] = None
    ) -> Dict[str, Any]:
        key = idempotency_key or make_idempotency_key()
        return self._request(
            "POST",
            "/v1/payments",
            json=payment,
            headers={"X-Idempotency-Key": key},
            fallback_message="Error creating PIX payment",
        )

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return self._request(
            "GET",
            f"/v1/payments/{payment_id}",
            fallback_message="Error fetching payment",
        )

    def cancel_payment(self, payment_id: str) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"/v1/payments/{payment_id}",
            json={"status": "cancelled"},
            fallback_message="Error cancelling payment",
        )
