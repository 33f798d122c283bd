from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

SERVER_COLS = ["id", "nome", "host", "valor_mensal", "created_at", "updated_at"]
SERVER_UPDATABLE = ("nome", "host", "valor_mensal")

MOD_COLS = [
    "id",
    "servidor_id",
    "nome_mod",
    "discord",
    "loja_steam",
    "valor_mensal",
    "created_at",
    "updated_at",
]
MOD_UPDATABLE = ("nome_mod", "discord", "loja_steam", "valor_mensal")


def list_servers() -> List[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(SERVER_COLS)} FROM servidores ORDER BY created_at DESC"
        )
        return rows_to_dicts(SERVER_COLS, cur.fetchall())


def get_server(server_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(SERVER_COLS)} FROM servidores WHERE id = %s",
            (server_id,),
        )
        return row_to_dict(SERVER_COLS, cur.fetchone())


def create_server_with_mods(
    *, nome: str, host: str, valor_mensal: Decimal, mods: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Server and its mods in one transaction."""
    server_sql = f"""
    INSERT INTO servidores (nome, host, valor_mensal)
    VALUES (%s, %s, %s)
    RETURNING {', '.join(SERVER_COLS)}
    """
    mod_sql = f"""
    INSERT INTO servidores_mods (servidor_id, nome_mod, discord, loja_steam, valor_mensal)
    VALUES (%s, %s, %s, %s, %s)
    RETURNING {', '.join(MOD_COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(server_sql, (nome, host, valor_mensal))
        server = row_to_dict(SERVER_COLS, cur.fetchone())
        created = []
        for m in mods:
            cur.execute(
                mod_sql,
                (
                    server["id"],
                    m["nome_mod"],
                    m.get("discord"),
                    m.get("loja_steam"),
                    m["valor_mensal"],
                ),
            )
            created.append(row_to_dict(MOD_COLS, cur.fetchone()))
        conn.commit()
        server["mods"] = created
        return server


def update_server(server_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("servidores", SERVER_COLS, updates, SERVER_UPDATABLE)
    if sql is None:
        return get_server(server_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, server_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(SERVER_COLS, row)


def delete_server(server_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM servidores_mods WHERE servidor_id = %s", (server_id,))
        cur.execute("DELETE FROM servidores WHERE id = %s", (server_id,))
        deleted = cur.rowcount > 0
        conn.commit()
        return deleted


def list_mods(server_id: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = f"SELECT {', '.join(MOD_COLS)} FROM servidores_mods"
    params: tuple = ()
    if server_id:
        sql += " WHERE servidor_id = %s"
        params = (server_id,)
    sql += " ORDER BY created_at"
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return rows_to_dicts(MOD_COLS, cur.fetchall())


def get_mod(mod_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(MOD_COLS)} FROM servidores_mods WHERE id = %s",
            (mod_id,),
        )
        return row_to_dict(MOD_COLS, cur.fetchone())


def create_mod(*, server_id: str, **fields) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO servidores_mods (servidor_id, {', '.join(MOD_UPDATABLE)})
    VALUES (%s, {', '.join(['%s'] * len(MOD_UPDATABLE))})
    RETURNING {', '.join(MOD_COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (server_id, *[fields.get(k) for k in MOD_UPDATABLE]))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(MOD_COLS, row)


def update_mod(mod_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("servidores_mods", MOD_COLS, updates, MOD_UPDATABLE)
    if sql is None:
        return get_mod(mod_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, mod_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(MOD_COLS, row)


def delete_mod(mod_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM servidores_mods WHERE id = %s", (mod_id,))
        conn.commit()
        return cur.rowcount > 0
