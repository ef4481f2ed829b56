"""
ZeroFinanx Services Package.

This package contains the web-layer service modules that encapsulate
access to business logic, separating it from Flask routes for better
testability and maintainability.

ARCHITECTURE RULE:
- Services may ONLY import from core/* modules (and config)
- Services MUST NOT import directly from utils/
"""

from web.services import (
    auth_service,
    backup_restore_service,
    customer_service,
)

__all__ = [
    "auth_service",
    "backup_restore_service",
    "customer_service",
]
