import os
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote_plus

import psycopg2
from dotenv import load_dotenv

load_dotenv()

CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))


def get_db_connection():
    """
    Connect to PostgreSQL. DATABASE_URL wins when set; otherwise the
    DB_HOST, DB_NAME, DB_USER, DB_PASSWORD, DB_PORT variables are used.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return psycopg2.connect(
            url, connect_timeout=CONNECT_TIMEOUT, application_name="setor7-api"
        )
    return psycopg2.connect(
        host=os.getenv("DB_HOST", "127.0.0.1"),
        database=os.getenv("DB_NAME", "setor7_dev"),
        user=os.getenv("DB_USER", "dev"),
        password=os.getenv("DB_PASSWORD", "dev"),
        port=os.getenv("DB_PORT", "5432"),
        connect_timeout=CONNECT_TIMEOUT,
        application_name="setor7-api",
    )


def row_to_dict(cols: Sequence[str], row) -> Optional[Dict[str, Any]]:
    return dict(zip(cols, row)) if row else None


def rows_to_dicts(cols: Sequence[str], rows: Iterable) -> List[Dict[str, Any]]:
    return [dict(zip(cols, r)) for r in rows]


def build_update(
    table: str, cols: Sequence[str], updates: Dict[str, Any], allowed: Iterable[str]
):
    """
    Build "UPDATE <table> SET a = %s, ... WHERE id = %s RETURNING <cols>" from
    the keys of `updates` that are in `allowed`. Returns (sql, params) or
    (None, None) when nothing is left to update.
    """
    sets, params = [], []
    for key in allowed:
        if key in updates:
            sets.append(f"{key} = %s")
            params.append(updates[key])
    if not sets:
        return None, None
    sets.append("updated_at = now()")
    sql = f"UPDATE {table} SET {', '.join(sets)} WHERE id = %s RETURNING {', '.join(cols)}"
    return sql, params


def sqlalchemy_url() -> str:
    """The database get_db_connection targets, as a SQLAlchemy URL (Alembic)."""
    url = os.getenv("DATABASE_URL")
    if url:
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    user = quote_plus(os.getenv("DB_USER", "dev"))
    pwd = quote_plus(os.getenv("DB_PASSWORD", "dev"))
    host = os.getenv("DB_HOST", "127.0.0.1")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "setor7_dev")
    return f"postgresql+psycopg2://{user}:{pwd}@{host}:{port}/{name}"
