"""
ZeroFinanx Database Module.

This package provides modular database access for the application.
The commonly used names are re-exported here.

Usage:
    from utils.db import Database, upsert_customer_by_email
    # or
    from utils.db.customers import upsert_customer_by_email
"""

# Connection and Schema
from utils.db.connection import (
    BACKUP_TABLES,
    DB_FILENAME,
    TABLE_COLUMNS,
    Database,
    _ensure_column_on_table,
    _init_schema,
    get_table_columns,
)

# Customer Operations
from utils.db.customers import (
    customer_exists,
    fetch_all_customers,
    fetch_customer_by_email,
    fetch_user_count,
    fetch_user_count_since,
    fetch_users_for_export,
    insert_beta_user,
    upsert_customer_by_email,
)

# Waitlist Operations
from utils.db.waitlist import (
    add_waitlist_email,
    fetch_waitlist,
)

__all__ = [
    # Connection
    "BACKUP_TABLES",
    "DB_FILENAME",
    "TABLE_COLUMNS",
    "Database",
    "_init_schema",
    "_ensure_column_on_table",
    "get_table_columns",
    # Customers
    "customer_exists",
    "fetch_all_customers",
    "fetch_customer_by_email",
    "fetch_user_count",
    "fetch_user_count_since",
    "fetch_users_for_export",
    "insert_beta_user",
    "upsert_customer_by_email",
    # Waitlist
    "add_waitlist_email",
    "fetch_waitlist",
]
