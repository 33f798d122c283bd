from flask import Blueprint, jsonify, request

from app.services.coupon_service import (
    admin_create_streamer_coupon,
    admin_delete_streamer_coupon,
    admin_list_streamer_coupons,
    admin_update_streamer_coupon,
)
from app.services.streamer_service import (
    admin_create_campaign,
    admin_create_streamer,
    admin_delete_campaign,
    admin_delete_streamer,
    admin_get_streamer,
    admin_list_campaigns,
    admin_list_streamers,
    admin_update_campaign,
    admin_update_streamer,
)
from app.utils.authz import require_admin

streamers_bp = Blueprint("streamers", __name__, url_prefix="/api/admin")


@streamers_bp.get("/streamers")
@require_admin
def list_all():
    return jsonify(admin_list_streamers()), 200


@streamers_bp.post("/streamers")
@require_admin
def create():
    body = request.get_json(silent=True) or {}
    return jsonify(admin_create_streamer(body)), 201


@streamers_bp.get("/streamers/<streamer_id>")
@require_admin
def get_one(streamer_id):
    return jsonify(admin_get_streamer(streamer_id)), 200


@streamers_bp.patch("/streamers/<streamer_id>")
@require_admin
def update(streamer_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_update_streamer(streamer_id, body)), 200


@streamers_bp.delete("/streamers/<streamer_id>")
@require_admin
def delete(streamer_id):
    admin_delete_streamer(streamer_id)
    return "", 204


# coupons


@streamers_bp.get("/streamers/<streamer_id>/coupons")
@require_admin
def list_coupons(streamer_id):
    return jsonify(admin_list_streamer_coupons(streamer_id)), 200


@streamers_bp.post("/streamers/<streamer_id>/coupons")
@require_admin
def create_coupon(streamer_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_create_streamer_coupon(streamer_id, body)), 201


@streamers_bp.patch("/streamer-coupons/<coupon_id>")
@require_admin
def update_coupon(coupon_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_update_streamer_coupon(coupon_id, body)), 200


@streamers_bp.delete("/streamer-coupons/<coupon_id>")
@require_admin
def delete_coupon(coupon_id):
    admin_delete_streamer_coupon(coupon_id)
    return "", 204


# campaigns


@streamers_bp.get("/campaigns")
@require_admin
def list_all_campaigns():
    return jsonify(admin_list_campaigns()), 200


@streamers_bp.get("/streamers/<streamer_id>/campaigns")
@require_admin
def list_campaigns(streamer_id):
    return jsonify(admin_list_campaigns(streamer_id)), 200


@streamers_bp.post("/streamers/<streamer_id>/campaigns")
@require_admin
def create_campaign(streamer_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_create_campaign(streamer_id, body)), 201


@streamers_bp.patch("/campaigns/<campaign_id>")
@require_admin
def update_campaign(campaign_id):
    body = request.get_json(silent=True) or {}
    return jsonify(admin_update_campaign(campaign_id, body)), 200


@streamers_bp.delete("/campaigns/<campaign_id>")
@require_admin
def delete_campaign(campaign_id):
    admin_delete_campaign(campaign_id)
    return "", 204
