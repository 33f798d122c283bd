"""
Resend / SendGrid email sending wrapper.

Configure via env:
- EMAIL_PROVIDER: "resend" (default) | "sendgrid"
- RESEND_API_BASE: default https://api.resend.com
- FROM_EMAIL, FROM_NAME: sender

The provider API key is passed in by the caller (it lives in app_secrets).
"""

from __future__ import annotations
import logging
import os
from typing import Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_FROM_EMAIL = os.getenv("FROM_EMAIL", "onboarding@resend.dev")
DEFAULT_FROM_NAME = os.getenv("FROM_NAME", "Setor 7")
RESEND_API_BASE = os.getenv("RESEND_API_BASE", "https://api.resend.com")
TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "15"))

SECRET_KEYS = {"resend": "RESEND_API_KEY", "sendgrid": "SENDGRID_API_KEY"}


def current_provider() -> str:
    return os.getenv("EMAIL_PROVIDER", "resend").strip().lower() or "resend"


def send_email(
    *,
    api_key: str,
    to_email: str,
    subject: str,
    body_html: str,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
    provider: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Send an HTML email.
    Returns (provider, provider_msg_id) or (None, error_message) on failure.
    """
    from_addr = from_email or DEFAULT_FROM_EMAIL
    from_display = from_name or DEFAULT_FROM_NAME
    provider = provider or current_provider()

    if provider == "resend":
        return _send_via_resend(
            api_key=api_key,
            to_email=to_email,
            subject=subject,
            body_html=body_html,
            from_email=from_addr,
            from_name=from_display,
        )
    if provider == "sendgrid":
        return _send_via_sendgrid(
            api_key=api_key,
            to_email=to_email,
            subject=subject,
            body_html=body_html,
            from_email=from_addr,
            from_name=from_display,
        )
    return None, f"Unknown EMAIL_PROVIDER: {provider}"


def _send_via_resend(
    *,
    api_key: str,
    to_email: str,
    subject: str,
    body_html: str,
    from_email: str,
    from_name: str,
) -> Tuple[Optional[str], Optional[str]]:
    try:
        resp = requests.post(
            f"{RESEND_API_BASE.rstrip('/')}/emails",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "from": f"{from_name} <{from_email}>",
                "to": [to_email],
                "subject": subject,
                "html": body_html,
            },
            timeout=TIMEOUT,
        )
    except requests.RequestException as e:
        return None, str(e)

    if not resp.ok:
        return None, f"Resend API error: {resp.status_code} {resp.text}"
    try:
        msg_id = (resp.json() or {}).get("id")
    except ValueError:
        msg_id = None
    return "resend", msg_id or str(resp.status_code)


def _send_via_sendgrid(
    *,
    api_key: str,
    to_email: str,
    subject: str,
    body_html: str,
    from_email: str,
    from_name: str,
) -> Tuple[Optional[str], Optional[str]]:
    try:
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Mail, Email, To, Content

        message = Mail(
            from_email=Email(from_email, from_name),
            to_emails=To(to_email),
            subject=subject,
            html_content=Content("text/html", body_html),
        )
        response = SendGridAPIClient(api_key).send(message)

        msg_id = None
        if response.headers:
            msg_id = response.headers.get("X-Message-Id")
        return "sendgrid", msg_id or str(response.status_code)
    except Exception as e:
        logger.warning("[email] sendgrid send failed: %s", e)
        return None, str(e)
