from __future__ import annotations
from typing import Any, Dict, List, Optional

from psycopg2.errors import UniqueViolation

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.streamer import (
    create_streamer,
    delete_streamer,
    get_streamer,
    list_streamers,
    update_streamer,
)
from app.models.streamer_campaign import (
    create_campaign,
    delete_campaign,
    get_campaign,
    list_campaigns,
    update_campaign,
)
from app.utils.validators import clean_amount, clean_datetime, clean_email, clean_str

OPTIONAL_TEXT = ("telefone", "steam_id", "youtube", "instagram", "facebook")


def _streamer_fields(body: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if not partial or "nome" in body:
        out["nome"] = clean_str(body, "nome", required=True, max_len=120)
    if not partial or "email" in body:
        out["email"] = clean_email(body, "email", required=False)
    for key in OPTIONAL_TEXT:
        if not partial or key in body:
            out[key] = clean_str(body, key, max_len=255)
    return out


def admin_list_streamers() -> List[Dict[str, Any]]:
    return list_streamers()


def admin_get_streamer(streamer_id: str) -> Dict[str, Any]:
    row = get_streamer(streamer_id)
    if not row:
        raise NotFoundError("streamer not found")
    return row


def admin_create_streamer(body: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return create_streamer(**_streamer_fields(body, partial=False))
    except UniqueViolation:
        raise ConflictError("streamer already exists")


def admin_update_streamer(streamer_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    try:
        row = update_streamer(streamer_id, **_streamer_fields(body, partial=True))
    except UniqueViolation:
        raise ConflictError("streamer already exists")
    if not row:
        raise NotFoundError("streamer not found")
    return row


def admin_delete_streamer(streamer_id: str) -> None:
    """Coupons and campaigns of the streamer are removed with it."""
    if not delete_streamer(streamer_id):
        raise NotFoundError("streamer not found")


# --- campaigns ---


def _campaign_fields(
    body: Dict[str, Any], current: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    merged = {**(current or {}), **body}
    inicio = clean_datetime(merged, "data_inicio")
    fim = clean_datetime(merged, "data_fim")
    if fim <= inicio:
        raise ValidationError("data_fim must be after data_inicio")
    return {
        "nome": clean_str(merged, "nome", required=True, max_len=120),
        "descricao": clean_str(merged, "descricao", max_len=500),
        "data_inicio": inicio,
        "data_fim": fim,
        "valor": clean_amount(merged, "valor"),
    }


def admin_list_campaigns(streamer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    if streamer_id and not get_streamer(streamer_id):
        raise NotFoundError("streamer not found")
    return list_campaigns(streamer_id)


def admin_create_campaign(streamer_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    if not get_streamer(streamer_id):
        raise NotFoundError("streamer not found")
    return create_campaign(streamer_id=streamer_id, **_campaign_fields(body))


def admin_update_campaign(campaign_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    current = get_campaign(campaign_id)
    if not current:
        raise NotFoundError("campaign not found")
    return update_campaign(campaign_id, **_campaign_fields(body, current))


def admin_delete_campaign(campaign_id: str) -> None:
    if not delete_campaign(campaign_id):
        raise NotFoundError("campaign not found")
