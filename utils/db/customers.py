"""
Customer (users table) Operations.

Functions take an open connection; callers choose read() or transaction()
on the Database to get one.
"""

import sqlite3
import uuid
from datetime import UTC, datetime


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _row_to_customer(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "email": row["email"],
        "firstName": row["first_name"],
        "lastName": row["last_name"],
        "phone": row["phone"],
        "notes": row["notes"],
        "marketingConsent": bool(row["marketing_consent"]),
        "smsConsent": bool(row["sms_consent"]),
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def fetch_customer_by_email(conn: sqlite3.Connection, email: str) -> dict | None:
    row = conn.execute("SELECT * FROM users WHERE email = ? LIMIT 1", (email,)).fetchone()
    return _row_to_customer(row) if row else None


def customer_exists(conn: sqlite3.Connection, email: str) -> bool:
    row = conn.execute("SELECT 1 FROM users WHERE email = ? LIMIT 1", (email,)).fetchone()
    return row is not None


def fetch_all_customers(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute("SELECT * FROM users ORDER BY created_at DESC").fetchall()
    return [_row_to_customer(r) for r in rows]


def upsert_customer_by_email(
    conn: sqlite3.Connection,
    email: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
    notes: str | None = None,
    marketing_consent: bool = False,
    sms_consent: bool = False,
) -> tuple[dict, bool]:
    """
    Creates a customer or updates the existing one with the same email.

    Returns:
        (customer, is_new_customer)
    """
    now = _now_iso()
    existing = conn.execute(
        "SELECT id FROM users WHERE email = ? LIMIT 1", (email,)
    ).fetchone()

    if existing:
        conn.execute(
            """
            UPDATE users
            SET first_name = ?, last_name = ?, phone = ?, notes = ?,
                marketing_consent = ?, sms_consent = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                first_name,
                last_name,
                phone,
                notes,
                int(marketing_consent),
                int(sms_consent),
                now,
                existing["id"],
            ),
        )
        is_new = False
    else:
        conn.execute(
            """
            INSERT INTO users (
                id, email, first_name, last_name, phone, notes,
                marketing_consent, sms_consent, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                uuid.uuid4().hex,
                email,
                first_name,
                last_name,
                phone,
                notes,
                int(marketing_consent),
                int(sms_consent),
                now,
                now,
            ),
        )
        is_new = True

    return fetch_customer_by_email(conn, email), is_new


def insert_beta_user(conn: sqlite3.Connection, email: str) -> str:
    """Inserts a placeholder 'Beta User' record and returns its id."""
    user_id = uuid.uuid4().hex
    now = _now_iso()
    conn.execute(
        """
        INSERT INTO users (id, email, first_name, last_name, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (user_id, email, "Beta", "User", now, now),
    )
    return user_id


def fetch_user_count(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]


def fetch_user_count_since(conn: sqlite3.Connection, since_iso: str) -> int:
    return conn.execute(
        "SELECT COUNT(*) FROM users WHERE created_at >= ?", (since_iso,)
    ).fetchone()[0]


def fetch_users_for_export(conn: sqlite3.Connection) -> list[tuple[str, str]]:
    """Returns (email, created_at) pairs, newest first."""
    rows = conn.execute(
        "SELECT email, created_at FROM users ORDER BY created_at DESC"
    ).fetchall()
    return [(r["email"], r["created_at"]) for r in rows]
