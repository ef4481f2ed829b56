"""
Auth Service - Web Layer Service for Authentication.

Handles admin password checks and redirect target validation.
"""

import hmac

from config import get_config


def authenticate(provided_password: str) -> bool:
    """
    Verify the provided password against ADMIN_PASSWORD.

    Args:
        provided_password: The password to check.

    Returns:
        True if password matches, False otherwise.
    """
    stored_password = get_config().get("ADMIN_PASSWORD") or ""
    if not stored_password:
        return False
    return hmac.compare_digest(provided_password or "", stored_password)


def get_redirect_target(next_param: str | None, default: str = "/admin") -> str:
    """
    Determine the redirect target URL.

    Args:
        next_param: The 'next' URL parameter or form field.
        default: Default URL if next_param is invalid/missing.

    Returns:
        The target URL. Only same-site absolute paths are accepted.
    """
    if not next_param:
        return default
    if not next_param.startswith("/") or next_param.startswith("//"):
        return default
    return next_param
