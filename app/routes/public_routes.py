from flask import Blueprint, jsonify

from app.services.vip_service import list_packages

public = Blueprint("public", __name__)


@public.get("/api/vip-packages")
def vip_packages():
    """VIP packages shown on the donation form, cheapest first."""
    return jsonify(list_packages()), 200
