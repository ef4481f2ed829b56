"""
Customer Service - Web Layer Service for Signup, Waitlist and User Export.

Thin wrapper over core.customers_core; resolves the live Database from the
Flask app.
"""

from flask import current_app

from core import customers_core
from core.customers_core import SignupValidationError, UnauthorizedError

EXTENSION_KEY = "database"

__all__ = [
    "SignupValidationError",
    "UnauthorizedError",
    "init_app",
    "signup_customer",
    "list_customers",
    "check_customer",
    "add_beta_user",
    "join_waitlist",
    "list_waitlist",
    "get_admin_summary",
    "export_users",
]


def init_app(app, database) -> None:
    """Registers the live Database on the app."""
    app.extensions[EXTENSION_KEY] = database


def _database():
    return current_app.extensions[EXTENSION_KEY]


def signup_customer(data: dict) -> tuple[dict, bool]:
    return customers_core.signup_customer(_database(), data)


def list_customers() -> list[dict]:
    return customers_core.list_customers(_database())


def check_customer(email: str | None) -> tuple[bool, str]:
    return customers_core.check_customer(_database(), email)


def add_beta_user(email: str | None, secret: str | None) -> dict:
    return customers_core.add_beta_user(_database(), email, secret)


def join_waitlist(email: str | None) -> tuple[bool, str]:
    return customers_core.join_waitlist(_database(), email)


def list_waitlist() -> list[dict]:
    return customers_core.list_waitlist(_database())


def get_admin_summary() -> dict:
    """User totals shown on the admin dashboard."""
    database = _database()
    return {
        "totalUsers": customers_core.get_user_count(database),
        "recentSignups": customers_core.get_recent_signup_count(database),
    }


def export_users(file_format: str = "csv") -> bytes | None:
    """CSV export bytes, or None when there are no users."""
    users = customers_core.get_users_for_export(_database())
    if not users:
        return None
    return customers_core.build_users_export(users, file_format)
