"""
Endpoints the donor form and the admin dashboard call by function name.
Paths are kept at /functions/v1/<name> so the existing frontend works as is.
"""

from flask import Blueprint, jsonify, request

from app.services.email_service import resend_donation_email
from app.services.payment_service import (
    cancel_payment,
    create_pix_payment,
    fetch_payment_status,
)
from app.utils.authz import require_admin
from app.utils.rate_limit import rate_limited

functions_bp = Blueprint("functions", __name__, url_prefix="/functions/v1")


@functions_bp.post("/create-pix-payment")
@rate_limited("pix", "RATE_LIMIT_PIX_PER_MINUTE", 10)
def create_pix():
    body = request.get_json(force=True, silent=True) or {}
    return jsonify(create_pix_payment(body)), 200


@functions_bp.post("/get-mercadopago-order")
def get_order():
    body = request.get_json(force=True, silent=True) or {}
    payment = fetch_payment_status(body.get("orderId"), body.get("donationId"))
    return jsonify(payment), 200


@functions_bp.post("/cancel-mercadopago-order")
@require_admin
def cancel_order():
    body = request.get_json(force=True, silent=True) or {}
    return jsonify(cancel_payment(body.get("orderId"), body.get("donationId"))), 200


@functions_bp.post("/resend-donation-email")
@require_admin
def resend_email():
    body = request.get_json(force=True, silent=True) or {}
    return jsonify(resend_donation_email(body)), 200
