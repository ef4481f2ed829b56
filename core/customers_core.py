"""
Customers Core - Business Logic for Beta Signup, Waitlist and User Export.

All functions receive the live Database explicitly. Welcome and waitlist
emails are sent in the background; their failure never affects the signup.
"""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from config import get_config
from core import email_templates
from utils.db import (
    Database,
    add_waitlist_email,
    customer_exists,
    fetch_all_customers,
    fetch_user_count,
    fetch_user_count_since,
    fetch_users_for_export,
    fetch_waitlist,
    insert_beta_user,
    upsert_customer_by_email,
)
from utils.email_sender import send_email_async
from utils.user_export import generate_csv, generate_excel_csv

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class SignupValidationError(ValueError):
    """Raised for missing or malformed signup input."""


class UnauthorizedError(Exception):
    """Raised when an admin secret does not match."""


@dataclass
class SignupPayload:
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    notes: str | None = None
    marketing_consent: bool = False
    sms_consent: bool = False


# --- Email helpers ---


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def _require_email(email) -> str:
    if not email:
        raise SignupValidationError("Email is required")
    if not isinstance(email, str):
        raise SignupValidationError("Email must be a string")
    return email


def _require_valid_email(email: str | None) -> str:
    email = _require_email(email)
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise SignupValidationError("Invalid email format")
    return normalized


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise SignupValidationError("Phone and notes must be strings")
    return value.strip()


# --- Customers ---


def signup_customer(database: Database, data: dict[str, Any]) -> tuple[dict, bool]:
    """
    Creates or updates a customer from a signup form payload.

    Args:
        database: Live database.
        data: JSON body with firstName, lastName, email and optional phone,
            notes, marketingConsent, smsConsent.

    Returns:
        (customer, is_new_customer)

    Raises:
        SignupValidationError: on missing or non-string fields, or invalid email.
    """
    if not isinstance(data, dict):
        raise SignupValidationError("Request body must be a JSON object")
    first_name = data.get("firstName")
    last_name = data.get("lastName")
    email = data.get("email")
    if not first_name or not last_name or not email:
        raise SignupValidationError("First name, last name, and email are required")
    if not all(isinstance(v, str) for v in (first_name, last_name, email)):
        raise SignupValidationError("First name, last name, and email must be strings")

    payload = SignupPayload(
        email=_require_valid_email(email),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone=_strip_or_none(data.get("phone")),
        notes=_strip_or_none(data.get("notes")),
        marketing_consent=bool(data.get("marketingConsent") or False),
        sms_consent=bool(data.get("smsConsent") or False),
    )

    with database.transaction() as conn:
        customer, is_new = upsert_customer_by_email(
            conn,
            payload.email,
            payload.first_name,
            payload.last_name,
            phone=payload.phone,
            notes=payload.notes,
            marketing_consent=payload.marketing_consent,
            sms_consent=payload.sms_consent,
        )

    if is_new:
        logger.info(f"New customer signed up: {payload.email}")
        subject, text, html = email_templates.welcome_email()
        send_email_async(payload.email, subject, text, html)

    return customer, is_new


def list_customers(database: Database) -> list[dict]:
    with database.read() as conn:
        return fetch_all_customers(conn)


def check_customer(database: Database, email: str | None) -> tuple[bool, str]:
    """Returns (exists, normalized_email)."""
    normalized = normalize_email(_require_email(email))
    with database.read() as conn:
        return customer_exists(conn, normalized), normalized


def add_beta_user(database: Database, email: str | None, secret: str | None) -> dict:
    """
    Grants beta access to an email by creating a placeholder user.

    Raises:
        UnauthorizedError: if secret does not match BETA_ADMIN_SECRET.
        SignupValidationError: on missing or invalid email.
    """
    if secret != get_config()["BETA_ADMIN_SECRET"]:
        raise UnauthorizedError("Unauthorized")

    normalized = _require_valid_email(email)

    with database.transaction() as conn:
        if customer_exists(conn, normalized):
            return {
                "message": "User already exists and has beta access",
                "email": normalized,
                "alreadyExists": True,
            }
        insert_beta_user(conn, normalized)
        total = fetch_user_count(conn)

    logger.info(f"Added beta user {normalized}")
    return {
        "message": "Successfully added beta user",
        "email": normalized,
        "totalUsers": total,
    }


# --- Waitlist ---


def join_waitlist(database: Database, email: str | None) -> tuple[bool, str]:
    """
    Adds an email to the waitlist and sends a confirmation for new entries.

    Returns:
        (added, normalized_email); added is False if already on the list.
    """
    normalized = _require_valid_email(email)

    with database.transaction() as conn:
        added = add_waitlist_email(conn, normalized)

    if added:
        subject, text, html = email_templates.waitlist_email(get_config()["SITE_URL"])
        send_email_async(normalized, subject, text, html)

    return added, normalized


def list_waitlist(database: Database) -> list[dict]:
    with database.read() as conn:
        return fetch_waitlist(conn)


# --- Admin stats & export ---


def get_user_count(database: Database) -> int:
    try:
        with database.read() as conn:
            return fetch_user_count(conn)
    except Exception as e:
        logger.error(f"Error getting user count: {e}")
        return 0


def get_recent_signup_count(database: Database, days: int = 30) -> int:
    """Number of users created within the last `days` days."""
    since = (datetime.now(UTC) - timedelta(days=days)).isoformat()
    try:
        with database.read() as conn:
            return fetch_user_count_since(conn, since)
    except Exception as e:
        logger.error(f"Error getting recent signup count: {e}")
        return 0


def get_users_for_export(database: Database) -> list[tuple[str, str]]:
    try:
        with database.read() as conn:
            return fetch_users_for_export(conn)
    except Exception as e:
        logger.error(f"Error fetching users for export: {e}")
        return []


def build_users_export(users: list[tuple[str, str]], file_format: str = "csv") -> bytes:
    """CSV bytes for download; 'excel'/'xlsx' adds a UTF-8 BOM."""
    if file_format in ("excel", "xlsx"):
        return generate_excel_csv(users)
    return generate_csv(users).encode("utf-8")
