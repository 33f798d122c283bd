from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

COLS = [
    "id",
    "nome",
    "email",
    "telefone",
    "steam_id",
    "youtube",
    "instagram",
    "facebook",
    "created_at",
    "updated_at",
]
UPDATABLE = ("nome", "email", "telefone", "steam_id", "youtube", "instagram", "facebook")


def list_streamers() -> List[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {', '.join(COLS)} FROM streamers ORDER BY nome")
        return rows_to_dicts(COLS, cur.fetchall())


def get_streamer(streamer_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM streamers WHERE id = %s", (streamer_id,)
        )
        return row_to_dict(COLS, cur.fetchone())


def create_streamer(**fields) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO streamers ({', '.join(UPDATABLE)})
    VALUES ({', '.join(['%s'] * len(UPDATABLE))})
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, tuple(fields.get(k) for k in UPDATABLE))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def update_streamer(streamer_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("streamers", COLS, updates, UPDATABLE)
    if sql is None:
        return get_streamer(streamer_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, streamer_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def delete_streamer(streamer_id: str) -> bool:
    """Coupons and campaigns go with it (ON DELETE CASCADE)."""
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM streamers WHERE id = %s", (streamer_id,))
        conn.commit()
        return cur.rowcount > 0
