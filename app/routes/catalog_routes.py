"""Global coupons, VIP packages and app secrets (admin)."""

from flask import Blueprint, jsonify, request

from app.services.coupon_service import (
    admin_create_coupon,
    admin_delete_coupon,
    admin_list_coupons,
    admin_update_coupon,
)
from app.services.secret_service import list_masked_secrets, update_secret
from app.services.vip_service import (
    create_package,
    delete_package,
    list_packages,
    update_package,
)
from app.utils.authz import require_admin

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/admin")


@catalog_bp.get("/coupons")
@require_admin
def coupons():
    return jsonify(admin_list_coupons()), 200


@catalog_bp.post("/coupons")
@require_admin
def create_coupon():
    body = request.get_json(silent=True) or {}
    return jsonify(admin_create_coupon(body)), 201


@catalog_bp.patch("/coupons/<coupon_id>")
@require_admin
def update_coupon(coupon_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_update_coupon(coupon_id, body)), 200


@catalog_bp.delete("/coupons/<coupon_id>")
@require_admin
def delete_coupon(coupon_id):
    admin_delete_coupon(coupon_id)
    return "", 204


@catalog_bp.get("/vip-packages")
@require_admin
def vip_packages():
    return jsonify(list_packages()), 200


@catalog_bp.post("/vip-packages")
@require_admin
def create_vip():
    body = request.get_json(silent=True) or {}
    return jsonify(create_package(body)), 201


@catalog_bp.patch("/vip-packages/<vip_id>")
@require_admin
def update_vip(vip_id):
    body = request.get_json(silent=True) or {}
    return jsonify(update_package(vip_id, body)), 200


@catalog_bp.delete("/vip-packages/<vip_id>")
@require_admin
def delete_vip(vip_id):
    delete_package(vip_id)
    return "", 204


@catalog_bp.get("/secrets")
@require_admin
def secrets():
    return jsonify(list_masked_secrets()), 200


@catalog_bp.put("/secrets/<key>")
@require_admin
def set_secret(key):
    body = request.get_json(silent=True) or {}
    return jsonify(update_secret(key, body.get("value"))), 200
