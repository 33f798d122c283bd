from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required

from app.services.auth_service import login_user

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
def login():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        data = {}
    resp = login_user(data)
    return jsonify(resp), (200 if "access_token" in resp else 401)


@auth_bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    user_id = get_jwt_identity()
    role = get_jwt().get("role")
    new_access = create_access_token(identity=user_id, additional_claims={"role": role})
    return jsonify({"access_token": new_access}), 200
