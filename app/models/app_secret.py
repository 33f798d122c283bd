from typing import Any, Dict, List, Optional

from app.utils.db import get_db_connection, row_to_dict, rows_to_dicts

COLS = ["id", "key", "value", "description", "created_at", "updated_at"]


def list_secrets() -> List[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {', '.join(COLS)} FROM app_secrets ORDER BY key")
        return rows_to_dicts(COLS, cur.fetchall())


def load_secret_values() -> Dict[str, str]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("SELECT key, value FROM app_secrets")
        return {k: v for k, v in cur.fetchall()}


def update_secret_value(key: str, value: str) -> Optional[Dict[str, Any]]:
    sql = f"""
    UPDATE app_secrets SET value = %s, updated_at = now()
    WHERE key = %s
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (value, key))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def upsert_secret(key: str, value: str, description: Optional[str] = None) -> None:
    sql = """
    INSERT INTO app_secrets (key, value, description)
    VALUES (%s, %s, %s)
    ON CONFLICT (key) DO UPDATE SET
      value = EXCLUDED.value,
      description = COALESCE(EXCLUDED.description, app_secrets.description),
      updated_at = now()
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (key, value, description))
        conn.commit()
