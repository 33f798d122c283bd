from flask import Blueprint, jsonify, request

from app.services.server_service import (
    add_mod,
    create_server,
    edit_mod,
    edit_server,
    get_server_with_mods,
    list_servers_with_mods,
    remove_mod,
    remove_server,
)
from app.utils.authz import require_admin

servers_bp = Blueprint("servers", __name__, url_prefix="/api/admin")


@servers_bp.get("/servers")
@require_admin
def list_all():
    return jsonify(list_servers_with_mods()), 200


@servers_bp.post("/servers")
@require_admin
def create():
    body = request.get_json(silent=True) or {}
    return jsonify(create_server(body)), 201


@servers_bp.get("/servers/<server_id>")
@require_admin
def get_one(server_id):
    return jsonify(get_server_with_mods(server_id)), 200


@servers_bp.patch("/servers/<server_id>")
@require_admin
def update(server_id):
    body = request.get_json(silent=True) or {}
    return jsonify(edit_server(server_id, body)), 200


@servers_bp.delete("/servers/<server_id>")
@require_admin
def delete(server_id):
    remove_server(server_id)
    return "", 204


@servers_bp.post("/servers/<server_id>/mods")
@require_admin
def create_mod(server_id):
    body = request.get_json(silent=True) or {}
    return jsonify(add_mod(server_id, body)), 201


@servers_bp.patch("/mods/<mod_id>")
@require_admin
def update_mod(mod_id):
    body = request.get_json(silent=True) or {}
    return jsonify(edit_mod(mod_id, body)), 200


@servers_bp.delete("/mods/<mod_id>")
@require_admin
def delete_mod(mod_id):
    remove_mod(mod_id)
    return "", 204
