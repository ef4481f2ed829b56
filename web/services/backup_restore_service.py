"""
Backup & Restore Service - Web Layer Service for Backup and Restore Operations.

Thin wrapper over core.backup_restore_core for web-specific concerns.
The BackupRestoreService instance is registered on the Flask app at startup.
"""

from pathlib import Path
from typing import Any

from flask import current_app

from core.backup_restore_core import (
    BackupRestoreService,
    BackupResult,
    ImportErrorKind,
    ImportResult,
)

EXTENSION_KEY = "backup_restore"

# Failure kinds caused by the uploaded file rather than the server.
CLIENT_ERROR_KINDS = frozenset(
    [
        ImportErrorKind.NOT_FOUND,
        ImportErrorKind.INVALID_FORMAT,
        ImportErrorKind.INVALID_STRATEGY,
    ]
)


def init_app(app, service: BackupRestoreService) -> None:
    """Registers the service instance on the app."""
    app.extensions[EXTENSION_KEY] = service


def get_service() -> BackupRestoreService:
    return current_app.extensions[EXTENSION_KEY]


# --- Export / Import ---


def export_database() -> BackupResult:
    """Create a backup artifact of the live DB."""
    return get_service().export_database()


def import_database(path: str | Path, strategy: str = "merge") -> ImportResult:
    """Import a candidate backup file."""
    return get_service().import_database(path, strategy)


def is_client_error(result: ImportResult) -> bool:
    """True if a failed import was caused by the uploaded file or its options."""
    return result.error in CLIENT_ERROR_KINDS


def get_staging_path() -> Path:
    """Temp path for an uploaded candidate."""
    return get_service().get_staging_path()


def discard_staged_file(path: Path) -> None:
    """Remove a staged upload."""
    get_service().discard_staged_file(path)


def get_backup_prefix() -> str:
    return get_service().prefix


# --- Status ---


def get_status(recent_limit: int = 10) -> dict[str, Any]:
    """Live counts plus the most recent backups."""
    service = get_service()
    backups = service.list_backups()
    return {
        "currentDatabase": service.get_database_stats(),
        "recentBackups": [b.to_dict() for b in backups[:recent_limit]],
        "totalBackups": len(backups),
    }


def get_database_stats() -> dict[str, int]:
    return get_service().get_database_stats()


# --- Deletion ---


def delete_backup(file_name: str) -> bool:
    """Delete a backup artifact."""
    return get_service().delete_backup(file_name)
