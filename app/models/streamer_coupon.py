from datetime import datetime
from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

COLS = [
    "id",
    "streamer_id",
    "nome",
    "codigo",
    "descricao",
    "data_inicio",
    "data_fim",
    "valor",
    "porcentagem",
    "created_at",
    "updated_at",
]
UPDATABLE = (
    "nome",
    "codigo",
    "descricao",
    "data_inicio",
    "data_fim",
    "valor",
    "porcentagem",
)


def get_valid_streamer_coupon(code: str, now: datetime) -> Optional[Dict[str, Any]]:
    """
    Streamer coupon by code whose [data_inicio, data_fim] window contains now,
    joined with the owning streamer's identifiers.
    """
    cols = [f"sc.{c}" for c in COLS]
    sql = f"""
    SELECT {', '.join(cols)}, s.nome, s.steam_id
    FROM streamer_coupons sc
    JOIN streamers s ON s.id = sc.streamer_id
    WHERE UPPER(sc.codigo) = UPPER(%s)
      AND sc.data_inicio <= %s
      AND sc.data_fim >= %s
    LIMIT 1
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (code, now, now))
        row = cur.fetchone()
        if not row:
            return None
        out = dict(zip(COLS, row))
        out["streamer_nome"] = row[len(COLS)]
        out["streamer_steam_id"] = row[len(COLS) + 1]
        return out


def list_coupons_for_streamer(streamer_id: str) -> List[Dict[str, Any]]:
    sql = f"""
    SELECT {', '.join(COLS)} FROM streamer_coupons
    WHERE streamer_id = %s
    ORDER BY created_at DESC
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (streamer_id,))
        return rows_to_dicts(COLS, cur.fetchall())


def create_streamer_coupon(*, streamer_id: str, **fields) -> Dict[str, Any]:
    data = {k: fields.get(k) for k in UPDATABLE}
    sql = f"""
    INSERT INTO streamer_coupons (streamer_id, {', '.join(UPDATABLE)})
    VALUES (%s, {', '.join(['%s'] * len(UPDATABLE))})
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (streamer_id, *[data[k] for k in UPDATABLE]))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def get_streamer_coupon(coupon_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM streamer_coupons WHERE id = %s",
            (coupon_id,),
        )
        return row_to_dict(COLS, cur.fetchone())


def update_streamer_coupon(coupon_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("streamer_coupons", COLS, updates, UPDATABLE)
    if sql is None:
        return get_streamer_coupon(coupon_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, coupon_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def delete_streamer_coupon(coupon_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM streamer_coupons WHERE id = %s", (coupon_id,))
        conn.commit()
        return cur.rowcount > 0
