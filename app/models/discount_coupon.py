from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.utils.db import build_update, get_db_connection, row_to_dict, rows_to_dicts

COLS = ["id", "code", "discount_percentage", "active", "created_at", "updated_at"]
UPDATABLE = ("code", "discount_percentage", "active")


def get_active_coupon_by_code(code: str) -> Optional[Dict[str, Any]]:
    sql = f"""
    SELECT {', '.join(COLS)} FROM discount_coupons
    WHERE UPPER(code) = UPPER(%s) AND active = true
    LIMIT 1
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (code,))
        return row_to_dict(COLS, cur.fetchone())


def list_coupons() -> List[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM discount_coupons ORDER BY created_at DESC"
        )
        return rows_to_dicts(COLS, cur.fetchall())


def create_coupon(code: str, discount_percentage: Decimal, active: bool = True):
    sql = f"""
    INSERT INTO discount_coupons (code, discount_percentage, active)
    VALUES (%s, %s, %s)
    RETURNING {', '.join(COLS)}
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (code, discount_percentage, active))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def get_coupon(coupon_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(COLS)} FROM discount_coupons WHERE id = %s",
            (coupon_id,),
        )
        return row_to_dict(COLS, cur.fetchone())


def update_coupon(coupon_id: str, **updates) -> Optional[Dict[str, Any]]:
    sql, params = build_update("discount_coupons", COLS, updates, UPDATABLE)
    if sql is None:
        return get_coupon(coupon_id)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (*params, coupon_id))
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def delete_coupon(coupon_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM discount_coupons WHERE id = %s", (coupon_id,))
        conn.commit()
        return cur.rowcount > 0
