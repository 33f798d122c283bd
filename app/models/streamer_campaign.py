from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

COLS = [
    "id",
    "streamer_id",
    "nome",
    "descricao",
    "data_inicio",
    "data_fim",
    "valor",
    "created_at",
    "updated_at",
]
UPDATABLE = ("nome", "descricao", "data_inicio", "data_fim", "valor")


def list_campaigns(streamer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = f"SELECT {', '.join(COLS)} FROM streamer_campanhas"
    params: tuple = ()
    if streamer_id:
        sql += " WHERE streamer_id = %s"
        params = (streamer_id,)
    sql += " ORDER BY data_inicio DESC"
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return rows_to_dicts(COLS, cur.fetchall())


def get_campaign(campaign_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM streamer_campanhas WHERE id = %s",
            (campaign_id,),
        )
        return row_to_dict(COLS, cur.fetchone())


def create_campaign(*, streamer_id: str, **fields) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO streamer_campanhas (streamer_id, {', '.join(UPDATABLE)})
    VALUES (%s, {', '.join(['%s'] * len(UPDATABLE))})
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (streamer_id, *[fields.get(k) for k in UPDATABLE]))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def update_campaign(campaign_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("streamer_campanhas", COLS, updates, UPDATABLE)
    if sql is None:
        return get_campaign(campaign_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, campaign_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def delete_campaign(campaign_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM streamer_campanhas WHERE id = %s", (campaign_id,))
        conn.commit()
        return cur.rowcount > 0
