from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

PUBLIC_COLS = ["id", "email", "full_name", "created_at", "updated_at"]


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    sql = "SELECT id, email, password_hash, full_name FROM profiles WHERE email = %s"
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (email,))
        row = cur.fetchone()
        if not row:
            return None
        return {"id": row[0], "email": row[1], "password_hash": row[2], "full_name": row[3]}


def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    sql = f"SELECT {', '.join(PUBLIC_COLS)} FROM profiles WHERE id = %s"
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (user_id,))
        return row_to_dict(PUBLIC_COLS, cur.fetchone())


def list_users_with_roles() -> List[Dict[str, Any]]:
    cols = [f"p.{c}" for c in PUBLIC_COLS]
    sql = f"""
    SELECT {', '.join(cols)}, COALESCE(ur.role::text, 'user') AS role
    FROM profiles p
    LEFT JOIN user_roles ur ON ur.user_id = p.id
    ORDER BY p.created_at DESC
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql)
        return rows_to_dicts([*PUBLIC_COLS, "role"], cur.fetchall())


def create_user(
    email: str, password_hash: str, full_name: Optional[str] = None, role: str = "user"
) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO profiles (email, password_hash, full_name)
    VALUES (%s, %s, %s)
    RETURNING {', '.join(PUBLIC_COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (email, password_hash, full_name))
        user = row_to_dict(PUBLIC_COLS, cur.fetchone())
        cur.execute(
            "INSERT INTO user_roles (user_id, role) VALUES (%s, %s)",
            (user["id"], role),
        )
        conn.commit()
        user["role"] = role
        return user


def update_user(user_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update(
        "profiles", PUBLIC_COLS, updates, ("email", "full_name", "password_hash")
    )
    if sql is None:
        return get_user(user_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, user_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(PUBLIC_COLS, row)


def delete_user(user_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM user_roles WHERE user_id = %s", (user_id,))
        cur.execute("DELETE FROM profiles WHERE id = %s", (user_id,))
        deleted = cur.rowcount > 0
        conn.commit()
        return deleted


def get_user_role(user_id: str) -> Optional[str]:
    sql = "SELECT role::text FROM user_roles WHERE user_id = %s"
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (user_id,))
        row = cur.fetchone()
        return row[0] if row else None


def set_user_role(user_id: str, role: str) -> None:
    sql = """
    INSERT INTO user_roles (user_id, role)
    VALUES (%s, %s)
    ON CONFLICT (user_id) DO UPDATE SET role = EXCLUDED.role
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (user_id, role))
        conn.commit()
