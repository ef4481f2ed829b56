"""
Backup & Restore Core - Business Logic for Backup and Restore Operations.

BackupRestoreService wraps the live Database with export (snapshot), import
(merge/replace), listing, deletion and statistics. Every failure is turned
into a structured result here; nothing raises past the service.

Import lifecycle:
    VALIDATING -> SAFETY_BACKUP -> TRANSACTING -> COMMITTED
    any failure -> ABORTED (live data identical to before VALIDATING)
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from utils.backup import (
    create_db_snapshot,
    delete_backup_file,
    format_backup_timestamp,
    get_table_counts,
    list_backup_files,
    remove_db_file,
)
from utils.db import BACKUP_TABLES, Database
from utils.path_manager import PathManager
from utils.restore import IMPORT_STRATEGIES, apply_import, validate_backup_file

logger = logging.getLogger(__name__)


class ImportErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_FORMAT = "invalid_format"
    INVALID_STRATEGY = "invalid_strategy"
    SAFETY_BACKUP_FAILED = "safety_backup_failed"
    TRANSACTION_FAILED = "transaction_failed"
    IO_FAILURE = "io_failure"


class ImportState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SAFETY_BACKUP = "safety_backup"
    TRANSACTING = "transacting"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class BackupResult:
    success: bool
    message: str
    file_path: str | None = None
    timestamp: str | None = None
    error: ImportErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.file_path:
            data["filePath"] = self.file_path
        if self.timestamp:
            data["timestamp"] = self.timestamp
        if self.error:
            data["errorKind"] = self.error.value
        return data


@dataclass
class ImportResult:
    success: bool
    message: str
    imported_counts: dict[str, int] | None = None
    backup_file_path: str | None = None
    error: ImportErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.imported_counts is not None:
            data["importedCounts"] = dict(self.imported_counts)
        if self.backup_file_path:
            data["backupFilePath"] = self.backup_file_path
        if self.error:
            data["errorKind"] = self.error.value
        return data


@dataclass
class BackupInfo:
    file_name: str
    file_path: str
    size: int
    created: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "filePath": self.file_path,
            "size": self.size,
            "created": self.created.isoformat(),
        }


class BackupRestoreService:
    """
    Backup/restore operations over one live Database.

    Imports are serialized: at most one import runs per service instance.
    """

    def __init__(
        self, database: Database, path_manager: PathManager, prefix: str = "zerofinanx"
    ):
        self._db = database
        self._pm = path_manager
        self._prefix = prefix
        self._import_lock = threading.Lock()
        self._state = ImportState.IDLE

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def backup_dir(self) -> Path:
        return self._pm.backup_dir

    @property
    def last_import_state(self) -> ImportState:
        return self._state

    @property
    def import_active(self) -> bool:
        return self._import_lock.locked()

    def get_staging_path(self) -> Path:
        """Unique temp path for staging an uploaded import candidate."""
        return self._pm.get_temp_upload_path()

    def discard_staged_file(self, path: Path) -> None:
        """Removes a staged upload (and SQLite sidecar files). Raises OSError."""
        remove_db_file(path)

    # --- Export ---

    def export_database(self) -> BackupResult:
        """
        Snapshots the live DB into a new timestamped backup artifact.

        Returns:
            BackupResult with file_path and timestamp on success.
        """
        timestamp = format_backup_timestamp()
        try:
            backup_path = self._pm.get_backup_path(self._prefix, timestamp)
            create_db_snapshot(self._db, backup_path)
        except Exception as e:
            logger.error(f"Backup failed: {e}", exc_info=True)
            return BackupResult(
                success=False,
                message=f"Backup failed: {e}",
                error=ImportErrorKind.IO_FAILURE,
            )

        logger.info(f"Database backed up to: {backup_path}")
        return BackupResult(
            success=True,
            message="Database backup created successfully",
            file_path=str(backup_path),
            timestamp=timestamp,
        )

    # --- Import ---

    def import_database(
        self, backup_file_path: str | Path, strategy: str = "merge"
    ) -> ImportResult:
        """
        Imports users, calculators and lessons from a backup file.

        Args:
            backup_file_path: Candidate SQLite file (opened read-only).
            strategy: "merge" (upsert, keep other rows) or "replace"
                (delete all rows of the three tables first).

        Returns:
            ImportResult. Whenever a safety backup was taken its path is
            included, on failure as well as on success.
        """
        if strategy not in IMPORT_STRATEGIES:
            return ImportResult(
                success=False,
                message=f'Import failed: Invalid strategy "{strategy}". '
                'Must be "merge" or "replace"',
                error=ImportErrorKind.INVALID_STRATEGY,
            )

        with self._import_lock:
            return self._run_import(Path(backup_file_path), strategy)

    def _run_import(self, path: Path, strategy: str) -> ImportResult:
        self._state = ImportState.VALIDATING
        validation = validate_backup_file(path)
        if not validation.exists:
            return self._abort(ImportErrorKind.NOT_FOUND, "Backup file does not exist")
        if not validation.is_valid:
            return self._abort(
                ImportErrorKind.INVALID_FORMAT,
                f"Invalid backup file: {'; '.join(validation.issues)}",
            )

        self._state = ImportState.SAFETY_BACKUP
        safety = self.export_database()
        if not safety.success:
            return self._abort(
                ImportErrorKind.SAFETY_BACKUP_FAILED,
                f"Failed to create backup of current database ({safety.message})",
            )

        self._state = ImportState.TRANSACTING
        try:
            counts = apply_import(self._db, path, strategy)
        except Exception as e:
            logger.error(f"Import transaction failed: {e}", exc_info=True)
            return self._abort(ImportErrorKind.TRANSACTION_FAILED, str(e), safety.file_path)

        self._state = ImportState.COMMITTED
        logger.info(f"Database import completed ({strategy}): {counts}")
        return ImportResult(
            success=True,
            message=(
                f"Import completed successfully. Imported {counts['users']} users, "
                f"{counts['calculators']} calculators, and {counts['lessons']} lessons."
            ),
            imported_counts=counts,
            backup_file_path=safety.file_path,
        )

    def _abort(
        self, kind: ImportErrorKind, reason: str, safety_path: str | None = None
    ) -> ImportResult:
        self._state = ImportState.ABORTED
        message = f"Import failed: {reason}"
        if safety_path:
            message += f". Your original data has been backed up to: {safety_path}"
        logger.error(message)
        return ImportResult(
            success=False, message=message, backup_file_path=safety_path, error=kind
        )

    # --- Listing / Deletion ---

    def list_backups(self) -> list[BackupInfo]:
        """Backup artifacts, most recent first. Empty list if the directory is unreadable."""
        try:
            files = list_backup_files(self.backup_dir)
        except OSError as e:
            logger.error(f"Error listing backups: {e}")
            return []

        return [
            BackupInfo(
                file_name=f["fileName"],
                file_path=f["filePath"],
                size=f["size"],
                created=f["created"],
            )
            for f in files
        ]

    def delete_backup(self, file_name: str) -> bool:
        """Deletes a backup artifact by file name. Returns whether a file was deleted."""
        try:
            return delete_backup_file(self.backup_dir, file_name)
        except (OSError, ValueError) as e:
            logger.error(f"Error deleting backup {file_name}: {e}")
            return False

    # --- Statistics ---

    def get_database_stats(self) -> dict[str, int]:
        """Live row counts of the backup tables; zeros if the DB cannot be read."""
        try:
            with self._db.read() as conn:
                return get_table_counts(conn)
        except Exception as e:
            logger.error(f"Error getting database stats: {e}")
            return {table: 0 for table in BACKUP_TABLES}
