# ------------------------------------------------------------------------------
# Backup Utilities for ZeroFinanx
# utils/backup.py
# ------------------------------------------------------------------------------
"""
Backup artifact handling: consistent DB snapshots, listing and deletion
of artifacts in the backup directory, and live row counts.
"""

import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from utils.db import BACKUP_TABLES, Database

logger = logging.getLogger(__name__)

BACKUP_EXTENSION = ".db"


def format_backup_timestamp(moment: datetime | None = None) -> str:
    """
    Returns a filesystem-safe, sortable timestamp.

    Example: 2026-10-19T10-22-01-123456+00-00
    """
    moment = moment or datetime.now(UTC)
    return moment.isoformat().replace(":", "-").replace(".", "-")


def create_db_snapshot(database: Database, dest_path: Path) -> None:
    """
    Creates a consistent copy of the live DB using the SQLite backup API.

    Raises:
        sqlite3.Error / OSError if the snapshot cannot be written. A partially
        written destination file is removed before re-raising.
    """
    try:
        database.backup_to(dest_path)
    except (sqlite3.Error, OSError):
        try:
            Path(dest_path).unlink(missing_ok=True)
        except OSError as cleanup_err:
            logger.warning(f"Failed to remove partial snapshot {dest_path}: {cleanup_err}")
        raise

    logger.info(f"DB snapshot created at {dest_path}")


def list_backup_files(backup_dir: Path) -> list[dict]:
    """
    Lists backup artifacts, most recent first.

    Artifacts are never modified after creation, so the modification time is
    used as the creation time.

    Returns:
        list of {"fileName", "filePath", "size", "created"} dicts, where
        "created" is an aware datetime.
    """
    backup_dir = Path(backup_dir)
    if not backup_dir.is_dir():
        return []

    backups = []
    for path in backup_dir.iterdir():
        if not path.is_file() or not path.name.endswith(BACKUP_EXTENSION):
            continue
        try:
            stat = path.stat()
        except FileNotFoundError:
            # Deleted between iterdir() and stat().
            continue
        backups.append(
            {
                "fileName": path.name,
                "filePath": str(path),
                "size": stat.st_size,
                "created": datetime.fromtimestamp(stat.st_mtime, UTC),
            }
        )

    backups.sort(key=lambda b: (b["created"], b["fileName"]), reverse=True)
    return backups


def resolve_backup_file(backup_dir: Path, filename: str) -> Path | None:
    """
    Resolves filename inside backup_dir.

    Returns None for names that are not a bare file name (path traversal,
    NUL bytes), lack the artifact extension, or do not point at an existing file.
    """
    if not filename or not filename.endswith(BACKUP_EXTENSION):
        return None
    if "\x00" in filename or Path(filename).name != filename:
        return None

    root = Path(backup_dir).resolve()
    candidate = (root / filename).resolve()
    if candidate.parent != root:
        return None
    if not candidate.is_file():
        return None
    return candidate


def delete_backup_file(backup_dir: Path, filename: str) -> bool:
    """
    Deletes a single backup artifact.

    Returns:
        True if a file was deleted.
    """
    path = resolve_backup_file(backup_dir, filename)
    if path is None:
        return False

    path.unlink()
    logger.info(f"Deleted backup {path}")
    return True


def get_table_counts(conn: sqlite3.Connection, tables=BACKUP_TABLES) -> dict[str, int]:
    """Returns {table: row_count} for the given tables."""
    return {
        table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        for table in tables
    }


def remove_db_file(path: Path) -> None:
    """Removes an SQLite file together with any -wal/-shm/-journal sidecars."""
    path = Path(path)
    for suffix in ("", "-wal", "-shm", "-journal"):
        path.with_name(path.name + suffix).unlink(missing_ok=True)
