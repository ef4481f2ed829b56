"""
Waitlist Operations.
"""

import sqlite3


def add_waitlist_email(conn: sqlite3.Connection, email: str) -> bool:
    """
    Adds an email to the waitlist.

    Returns:
        True if the email was added, False if it was already on the list.
    """
    try:
        conn.execute("INSERT INTO waitlist (email) VALUES (?)", (email,))
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            return False
        raise
    return True


def fetch_waitlist(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute(
        "SELECT email, created_at FROM waitlist ORDER BY created_at DESC, id DESC"
    ).fetchall()
    return [{"email": r["email"], "created_at": r["created_at"]} for r in rows]
