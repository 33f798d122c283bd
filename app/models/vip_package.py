from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

COLS = ["id", "nome", "descricao", "valor", "created_at", "updated_at"]
UPDATABLE = ("nome", "descricao", "valor")


def list_vip_packages() -> List[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {', '.join(COLS)} FROM vip_packages ORDER BY valor ASC")
        return rows_to_dicts(COLS, cur.fetchall())


def get_vip_package(vip_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM vip_packages WHERE id = %s", (vip_id,)
        )
        return row_to_dict(COLS, cur.fetchone())


def create_vip_package(nome: str, descricao: Optional[str], valor) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO vip_packages (nome, descricao, valor)
    VALUES (%s, %s, %s)
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (nome, descricao, valor))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def update_vip_package(vip_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("vip_packages", COLS, updates, UPDATABLE)
    if sql is None:
        return get_vip_package(vip_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, vip_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def delete_vip_package(vip_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM vip_packages WHERE id = %s", (vip_id,))
        conn.commit()
        return cur.rowcount > 0
