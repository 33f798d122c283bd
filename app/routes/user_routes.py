from flask import Blueprint, request, jsonify
from flask_jwt_extended import get_jwt_identity

from app.services.user_service import (
    add_user,
    change_role,
    edit_user,
    fetch_users,
    get_user_by_id,
    remove_user,
)
from app.utils.authz import require_admin

user = Blueprint("user", __name__)


@user.route("/users", methods=["GET"])
@require_admin
def list_users():
    return jsonify(fetch_users()), 200


@user.route("/users", methods=["POST"])
@require_admin
def register_user():
    data = request.get_json(silent=True) or {}
    return jsonify(add_user(data)), 201


@user.route("/users/<user_id>", methods=["GET"])
@require_admin
def fetch_user(user_id):
    return jsonify(get_user_by_id(user_id)), 200


@user.route("/users/<user_id>", methods=["PATCH", "PUT"])
@require_admin
def update_user(user_id):
    data = request.get_json(silent=True) or {}
    return jsonify(edit_user(user_id, data)), 200


@user.route("/users/<user_id>/role", methods=["PUT"])
@require_admin
def set_role(user_id):
    data = request.get_json(silent=True) or {}
    return jsonify(change_role(user_id, data)), 200


@user.route("/users/<user_id>", methods=["DELETE"])
@require_admin
def delete_user(user_id):
    remove_user(user_id, get_jwt_identity())
    return "", 204
