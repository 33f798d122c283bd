from typing import Any, Dict, List

from app.errors import NotFoundError
from app.models.vip_package import (
    create_vip_package,
    delete_vip_package,
    list_vip_packages,
    update_vip_package,
)
from app.utils.validators import clean_amount, clean_str


def list_packages() -> List[Dict[str, Any]]:
    return list_vip_packages()


def create_package(body: Dict[str, Any]) -> Dict[str, Any]:
    return create_vip_package(
        nome=clean_str(body, "nome", required=True, max_len=120),
        descricao=clean_str(body, "descricao", max_len=1000),
        valor=clean_amount(body, "valor"),
    )


def update_package(vip_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if "nome" in body:
        fields["nome"] = clean_str(body, "nome", required=True, max_len=120)
    if "descricao" in body:
        fields["descricao"] = clean_str(body, "descricao", max_len=1000)
    if "valor" in body:
        fields["valor"] = clean_amount(body, "valor")
    row = update_vip_package(vip_id, **fields)
    if not row:
        raise NotFoundError("vip package not found")
    return row


def delete_package(vip_id: str) -> None:
    if not delete_vip_package(vip_id):
        raise NotFoundError("vip package not found")
