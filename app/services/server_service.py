from __future__ import annotations
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List

from app.errors import NotFoundError, ValidationError
from app.models.server import (
    create_mod,
    create_server_with_mods,
    delete_mod,
    delete_server,
    get_server,
    list_mods,
    list_servers,
    update_mod,
    update_server,
)
from app.utils.validators import clean_amount, clean_str


def _mod_fields(body: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if not partial or "nome_mod" in body:
        out["nome_mod"] = clean_str(body, "nome_mod", required=True, max_len=120)
    for key in ("discord", "loja_steam"):
        if not partial or key in body:
            out[key] = clean_str(body, key, max_len=255)
    if not partial or "valor_mensal" in body:
        out["valor_mensal"] = clean_amount(body, "valor_mensal", allow_zero=True)
    return out


def _with_totals(server: Dict[str, Any], mods: List[Dict[str, Any]]) -> Dict[str, Any]:
    total = Decimal(str(server["valor_mensal"])) + sum(
        (Decimal(str(m["valor_mensal"])) for m in mods), Decimal("0")
    )
    return {**server, "mods": mods, "total_mensal": total}


def list_servers_with_mods() -> List[Dict[str, Any]]:
    by_server = defaultdict(list)
    for m in list_mods():
        by_server[str(m["servidor_id"])].append(m)
    return [_with_totals(s, by_server[str(s["id"])]) for s in list_servers()]


def get_server_with_mods(server_id: str) -> Dict[str, Any]:
    server = get_server(server_id)
    if not server:
        raise NotFoundError("server not found")
    return _with_totals(server, list_mods(server_id))


def create_server(body: Dict[str, Any]) -> Dict[str, Any]:
    mods = body.get("mods") or []
    if not isinstance(mods, list):
        raise ValidationError("mods must be a list")
    server = create_server_with_mods(
        nome=clean_str(body, "nome", required=True, max_len=120),
        host=clean_str(body, "host", required=True, max_len=255),
        valor_mensal=clean_amount(body, "valor_mensal", allow_zero=True),
        mods=[_mod_fields(m if isinstance(m, dict) else {}) for m in mods],
    )
    return _with_totals(server, server.pop("mods"))


def edit_server(server_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if "nome" in body:
        fields["nome"] = clean_str(body, "nome", required=True, max_len=120)
    if "host" in body:
        fields["host"] = clean_str(body, "host", required=True, max_len=255)
    if "valor_mensal" in body:
        fields["valor_mensal"] = clean_amount(body, "valor_mensal", allow_zero=True)
    if not update_server(server_id, **fields):
        raise NotFoundError("server not found")
    return get_server_with_mods(server_id)


def remove_server(server_id: str) -> None:
    """Mods go first, then the server."""
    if not delete_server(server_id):
        raise NotFoundError("server not found")


def add_mod(server_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    if not get_server(server_id):
        raise NotFoundError("server not found")
    return create_mod(server_id=server_id, **_mod_fields(body))


def edit_mod(mod_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    row = update_mod(mod_id, **_mod_fields(body, partial=True))
    if not row:
        raise NotFoundError("mod not found")
    return row


def remove_mod(mod_id: str) -> None:
    if not delete_mod(mod_id):
        raise NotFoundError("mod not found")
