from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt

core = Blueprint("core", __name__)


@core.get("/")
def root():
    return jsonify({"service": "setor7-donations", "ok": True})


@core.get("/api")
def api_index():
    return jsonify(
        {
            "endpoints": {
                "functions": [
                    "/functions/v1/create-pix-payment (POST)",
                    "/functions/v1/get-mercadopago-order (POST)",
                    "/functions/v1/cancel-mercadopago-order (POST, admin)",
                    "/functions/v1/resend-donation-email (POST, admin)",
                ],
                "auth": ["/api/auth/login (POST)", "/api/auth/refresh (POST)"],
                "public": ["/api/vip-packages (GET)"],
                "admin": ["/api/admin/..."],
            }
        }
    )


@core.get("/api/me")
@jwt_required()
def me():
    claims = get_jwt()
    return jsonify({"user_id": get_jwt_identity(), "role": claims.get("role")})
