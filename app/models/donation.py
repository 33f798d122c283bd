from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.utils.db import get_db_connection, row_to_dict, rows_to_dicts

COLS = [
    "id",
    "payment_id",
    "name",
    "email",
    "phone",
    "steam_id",
    "amount",
    "description",
    "status",
    "discount_coupon",
    "qr_code",
    "qr_code_base64",
    "ticket_url",
    "created_at",
    "updated_at",
]
_SELECT = f"SELECT {', '.join(COLS)} FROM donations"


def insert_donation(
    *,
    payment_id: str,
    name: str,
    email: str,
    phone: Optional[str],
    steam_id: Optional[str],
    amount: Decimal,
    description: Optional[str],
    status: str,
    discount_coupon: Optional[str] = None,
    qr_code: Optional[str] = None,
    qr_code_base64: Optional[str] = None,
    ticket_url: Optional[str] = None,
) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO donations (
      payment_id, name, email, phone, steam_id, amount, description, status,
      discount_coupon, qr_code, qr_code_base64, ticket_url
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    RETURNING {', '.join(COLS)}
    """
    params = (
        payment_id,
        name,
        email,
        phone,
        steam_id,
        amount,
        description,
        status,
        discount_coupon,
        qr_code,
        qr_code_base64,
        ticket_url,
    )
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        row = cur.fetchone()
        conn.commit()
        return row_to_dict(COLS, row)


def get_donation(donation_id: str) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(f"{_SELECT} WHERE id = %s", (donation_id,))
        return row_to_dict(COLS, cur.fetchone())


def set_status_by_id(donation_id: str, status: str) -> bool:
    """Plain overwrite; writing the same value twice is harmless."""
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            "UPDATE donations SET status = %s, updated_at = now() WHERE id = %s",
            (status, donation_id),
        )
        conn.commit()
        return cur.rowcount > 0


def list_donations(
    *,
    status: Optional[str] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    limit: int = 500,
) -> List[Dict[str, Any]]:
    where, params = [], []
    if status:
        where.append("status = %s")
        params.append(status)
    if created_from:
        where.append("created_at >= %s")
        params.append(created_from)
    if created_to:
        where.append("created_at < %s")
        params.append(created_to)
    sql = _SELECT
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY created_at DESC LIMIT %s"
    params.append(limit)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, tuple(params))
        return rows_to_dicts(COLS, cur.fetchall())


def list_donations_by_status(status: str) -> List[Dict[str, Any]]:
    """Oldest first."""
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(f"{_SELECT} WHERE status = %s ORDER BY created_at ASC", (status,))
        return rows_to_dicts(COLS, cur.fetchall())
