# ------------------------------------------------------------------------------
# Restore Utilities for ZeroFinanx
# utils/restore.py
# ------------------------------------------------------------------------------
"""
Import of backup artifacts into the live database.

Two phases, kept independent:
- validate_backup_file(): read-only inspection of a candidate file, returns
  a ValidationResult and never raises for a bad candidate.
- apply_import(): copies the candidate's rows into the live DB inside a single
  transaction (merge or replace). Raises on failure after rolling back.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from utils.backup import get_table_counts
from utils.db import BACKUP_TABLES, TABLE_COLUMNS, Database, get_table_columns

logger = logging.getLogger(__name__)

IMPORT_STRATEGIES = ("merge", "replace")


@dataclass
class ValidationResult:
    """Outcome of inspecting a candidate backup file."""

    path: Path
    exists: bool
    issues: list[str] = field(default_factory=list)
    tables: set[str] = field(default_factory=set)
    row_counts: dict[str, int] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.exists and not self.issues


def open_readonly(path: str | Path) -> sqlite3.Connection:
    """Opens an SQLite file strictly read-only (the file is never modified)."""
    uri = Path(path).resolve().as_uri() + "?mode=ro"
    conn = sqlite3.connect(uri, uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def validate_backup_file(path: str | Path) -> ValidationResult:
    """
    Validates that a candidate file is an SQLite DB carrying all backup tables.

    Returns:
        ValidationResult; is_valid is False when the file is missing,
        unreadable, or lacks a required table or its id column.
    """
    path = Path(path)
    result = ValidationResult(path=path, exists=path.is_file())
    if not result.exists:
        result.issues.append("Backup file does not exist")
        return result

    conn = None
    try:
        conn = open_readonly(path)
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        result.tables = {row[0] for row in cursor.fetchall()}

        missing = [t for t in BACKUP_TABLES if t not in result.tables]
        if missing:
            result.issues.append(f"Missing required tables: {', '.join(missing)}")
            return result

        for table in BACKUP_TABLES:
            if "id" not in get_table_columns(conn, table):
                result.issues.append(f"Table '{table}' has no id column")

        if not result.issues:
            result.row_counts = get_table_counts(conn)

    except sqlite3.Error as e:
        result.issues.append(f"Cannot read database: {e}")
    finally:
        if conn is not None:
            conn.close()

    return result


def _importable_columns(
    live_conn: sqlite3.Connection, candidate_conn: sqlite3.Connection, table: str
) -> list[str]:
    """Known columns present in both the live table and the candidate table."""
    live_cols = set(get_table_columns(live_conn, table))
    candidate_cols = set(get_table_columns(candidate_conn, table))
    return [c for c in TABLE_COLUMNS[table] if c in live_cols and c in candidate_cols]


def apply_import(database: Database, candidate_path: str | Path, strategy: str) -> dict[str, int]:
    """
    Imports all rows of the backup tables from candidate_path.

    merge:   upsert candidate rows; live rows not in the candidate survive.
    replace: delete all live rows of the backup tables first, then insert.

    Runs inside one transaction on the live DB; any failure rolls everything
    back and re-raises.

    Returns:
        {"users": n, "calculators": n, "lessons": n} rows imported.
    """
    if strategy not in IMPORT_STRATEGIES:
        raise ValueError(f"Invalid strategy: {strategy}")

    counts = {table: 0 for table in BACKUP_TABLES}
    candidate_conn = open_readonly(candidate_path)
    try:
        with database.transaction() as conn:
            if strategy == "replace":
                for table in BACKUP_TABLES:
                    conn.execute(f"DELETE FROM {table}")
                logger.info("Import: cleared existing rows (replace strategy)")

            for table in BACKUP_TABLES:
                columns = _importable_columns(conn, candidate_conn, table)
                col_sql = ", ".join(columns)
                placeholders = ", ".join("?" for _ in columns)

                rows = candidate_conn.execute(f"SELECT {col_sql} FROM {table}").fetchall()
                conn.executemany(
                    f"INSERT OR REPLACE INTO {table} ({col_sql}) VALUES ({placeholders})",
                    (tuple(row) for row in rows),
                )
                counts[table] = len(rows)
                logger.debug(f"Import: {table} -> {counts[table]} rows")
    finally:
        candidate_conn.close()

    return counts
