"""
Tests for BackupRestoreService (export, import, listing, deletion, stats).

Uses a real SQLite live database in tmp_path; only failure injection is mocked.
"""

import os
import sqlite3
import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from core.backup_restore_core import (
    BackupRestoreService,
    ImportErrorKind,
    ImportState,
)
from db_helpers import seed_content, seed_users


@pytest.fixture
def service(database, path_manager):
    return BackupRestoreService(database, path_manager, prefix="zerofinanx")


def _counts(path):
    conn = sqlite3.connect(str(path))
    try:
        return {
            t: conn.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0]
            for t in ("users", "calculators", "lessons")
        }
    finally:
        conn.close()


def _emails(database):
    with database.read() as conn:
        return sorted(r[0] for r in conn.execute("SELECT email FROM users"))


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_export_creates_artifact_with_live_rows(self, service, database):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com", "b@x.com")
            seed_content(conn, calculators=1, lessons=2)

        result = service.export_database()

        assert result.success is True
        artifact = Path(result.file_path)
        assert artifact.exists()
        assert artifact.parent == service.backup_dir
        assert artifact.name == f"zerofinanx_backup_{result.timestamp}.db"
        assert _counts(artifact) == {"users": 2, "calculators": 1, "lessons": 2}

    def test_export_artifact_is_standalone(self, service):
        result = service.export_database()

        conn = sqlite3.connect(result.file_path)
        try:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        finally:
            conn.close()
        assert mode == "delete"

    def test_export_failure_returns_io_failure(self, service):
        with patch(
            "core.backup_restore_core.create_db_snapshot",
            side_effect=OSError("No space left on device"),
        ):
            result = service.export_database()

        assert result.success is False
        assert result.error == ImportErrorKind.IO_FAILURE
        assert "No space left" in result.message
        assert result.to_dict()["errorKind"] == "io_failure"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


class TestImportMerge:
    def test_merge_upserts_and_keeps_other_rows(self, service, database, make_backup_file):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com", "b@x.com")
        candidate = make_backup_file(users=["b@x.com", "c@x.com", "d@x.com"])

        result = service.import_database(candidate, "merge")

        assert result.success is True
        assert result.imported_counts == {"users": 3, "calculators": 0, "lessons": 0}
        assert _emails(database) == ["a@x.com", "b@x.com", "c@x.com", "d@x.com"]
        assert "Imported 3 users, 0 calculators, and 0 lessons" in result.message

        with database.read() as conn:
            row = conn.execute(
                "SELECT first_name FROM users WHERE id = 'id-b'"
            ).fetchone()
        assert row[0] == "Backup"

    def test_merge_is_default_strategy(self, service, database, make_backup_file):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com")
        candidate = make_backup_file(users=["z@x.com"])

        result = service.import_database(candidate)

        assert result.success is True
        assert _emails(database) == ["a@x.com", "z@x.com"]


class TestImportReplace:
    def test_replace_wipes_then_inserts(self, service, database, make_backup_file):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com", "b@x.com")
            seed_content(conn, calculators=3, lessons=1)
        candidate = make_backup_file(users=["c@x.com"], calculators=1, lessons=2)

        result = service.import_database(candidate, "replace")

        assert result.success is True
        with database.read() as conn:
            counts = {
                t: conn.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0]
                for t in ("users", "calculators", "lessons")
            }
        assert counts == {"users": 1, "calculators": 1, "lessons": 2}
        assert counts == result.imported_counts

    def test_replace_leaves_waitlist_untouched(self, service, database, make_backup_file):
        with database.transaction() as conn:
            conn.execute("INSERT INTO waitlist (email) VALUES ('w@x.com')")
        candidate = make_backup_file(users=["c@x.com"])

        assert service.import_database(candidate, "replace").success

        with database.read() as conn:
            assert conn.execute("SELECT COUNT(*) FROM waitlist").fetchone()[0] == 1


class TestImportSafetyBackup:
    def test_safety_backup_holds_pre_import_state(self, service, database, make_backup_file):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com", "b@x.com")
            seed_content(conn, calculators=2)
        candidate = make_backup_file(users=["c@x.com"], lessons=4)

        result = service.import_database(candidate, "replace")

        assert result.success is True
        assert result.backup_file_path
        assert _counts(result.backup_file_path) == {
            "users": 2,
            "calculators": 2,
            "lessons": 0,
        }
        assert result.to_dict()["backupFilePath"] == result.backup_file_path

    def test_safety_backup_failure_aborts_without_changes(
        self, service, database, make_backup_file
    ):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com")
        candidate = make_backup_file(users=["c@x.com"])

        with patch(
            "core.backup_restore_core.create_db_snapshot",
            side_effect=OSError("read-only file system"),
        ):
            result = service.import_database(candidate, "replace")

        assert result.success is False
        assert result.error == ImportErrorKind.SAFETY_BACKUP_FAILED
        assert result.backup_file_path is None
        assert "Failed to create backup of current database" in result.message
        assert _emails(database) == ["a@x.com"]
        assert service.last_import_state == ImportState.ABORTED


class TestImportValidation:
    def test_missing_file(self, service, tmp_path):
        result = service.import_database(tmp_path / "missing.db", "merge")

        assert result.success is False
        assert result.error == ImportErrorKind.NOT_FOUND
        assert result.message == "Import failed: Backup file does not exist"

    def test_missing_table_is_rejected_before_safety_backup(
        self, service, database, make_backup_file
    ):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com")
        candidate = make_backup_file("partial.db", tables=("users", "calculators"))

        result = service.import_database(candidate, "merge")

        assert result.success is False
        assert result.error == ImportErrorKind.INVALID_FORMAT
        assert "lessons" in result.message
        assert result.backup_file_path is None
        assert service.list_backups() == []
        assert _emails(database) == ["a@x.com"]

    def test_non_sqlite_file_is_invalid_format(self, service, tmp_path):
        bogus = tmp_path / "notes.db"
        bogus.write_bytes(b"this is not an sqlite database" * 50)

        result = service.import_database(bogus, "merge")

        assert result.success is False
        assert result.error == ImportErrorKind.INVALID_FORMAT

    def test_invalid_strategy(self, service, make_backup_file):
        candidate = make_backup_file()

        result = service.import_database(candidate, "upsert")

        assert result.success is False
        assert result.error == ImportErrorKind.INVALID_STRATEGY
        assert '"merge" or "replace"' in result.message
        assert service.last_import_state == ImportState.IDLE
        assert service.list_backups() == []

    def test_candidate_file_is_not_modified(self, service, make_backup_file):
        candidate = make_backup_file(users=["c@x.com"], calculators=2)
        before = candidate.read_bytes()

        assert service.import_database(candidate, "merge").success

        assert candidate.read_bytes() == before

    def test_older_candidate_without_new_columns_imports(
        self, service, database, make_backup_file
    ):
        candidate = make_backup_file(
            "old.db", users=["o@x.com"], calculators=2, lessons=1, full_schema=False
        )

        result = service.import_database(candidate, "merge")

        assert result.success is True
        assert result.imported_counts == {"users": 1, "calculators": 2, "lessons": 1}
        with database.read() as conn:
            row = conn.execute(
                "SELECT file_name, artifact_url FROM calculators LIMIT 1"
            ).fetchone()
        assert tuple(row) == (None, None)


class TestImportTransaction:
    def test_failed_transaction_rolls_back_everything(
        self, service, database, make_backup_file
    ):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com", "b@x.com")
            seed_content(conn, calculators=1)
        candidate = make_backup_file("broken.db", users=["c@x.com"], full_schema=False)
        conn = sqlite3.connect(str(candidate))
        conn.execute("INSERT INTO users (id, email) VALUES ('id-null', NULL)")
        conn.commit()
        conn.close()

        result = service.import_database(candidate, "replace")

        assert result.success is False
        assert result.error == ImportErrorKind.TRANSACTION_FAILED
        assert result.backup_file_path
        assert (
            f"Your original data has been backed up to: {result.backup_file_path}"
            in result.message
        )
        assert _emails(database) == ["a@x.com", "b@x.com"]
        with database.read() as conn:
            assert conn.execute("SELECT COUNT(*) FROM calculators").fetchone()[0] == 1
        assert service.last_import_state == ImportState.ABORTED

    def test_successful_import_state_is_committed(self, service, make_backup_file):
        candidate = make_backup_file(users=["c@x.com"])

        service.import_database(candidate, "merge")

        assert service.last_import_state == ImportState.COMMITTED
        assert service.import_active is False


class TestImportSerialization:
    def test_concurrent_imports_do_not_overlap(self, service, make_backup_file):
        candidate = make_backup_file(users=["c@x.com"])
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def slow_apply(database, path, strategy):
            nonlocal active, max_active
            with counter_lock:
                active += 1
                max_active = max(max_active, active)
            time.sleep(0.05)
            with counter_lock:
                active -= 1
            return {"users": 1, "calculators": 0, "lessons": 0}

        results = []
        with patch("core.backup_restore_core.apply_import", side_effect=slow_apply):
            threads = [
                threading.Thread(
                    target=lambda: results.append(service.import_database(candidate))
                )
                for _ in range(3)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10)

        assert len(results) == 3
        assert all(r.success for r in results)
        assert max_active == 1


# ---------------------------------------------------------------------------
# Listing / Deletion / Stats
# ---------------------------------------------------------------------------


class TestListAndDelete:
    def test_list_backups_most_recent_first(self, service):
        backup_dir = service.backup_dir
        backup_dir.mkdir(parents=True, exist_ok=True)
        for i, name in enumerate(["old.db", "mid.db", "new.db"]):
            path = backup_dir / name
            path.write_bytes(b"x" * (i + 1))
            os.utime(path, (1_700_000_000 + i * 100, 1_700_000_000 + i * 100))
        (backup_dir / "ignore.txt").write_text("not a backup")

        backups = service.list_backups()

        assert [b.file_name for b in backups] == ["new.db", "mid.db", "old.db"]
        assert backups[0].size == 3
        assert backups[0].to_dict()["created"].startswith("2023-11-14")

    def test_list_backups_skips_file_deleted_mid_listing(self, service):
        first = Path(service.export_database().file_path)
        second = Path(service.export_database().file_path)
        real_stat = Path.stat

        def flaky_stat(self, *args, **kwargs):
            if self == first:
                raise FileNotFoundError(str(self))
            return real_stat(self, *args, **kwargs)

        with patch.object(Path, "stat", flaky_stat):
            backups = service.list_backups()

        assert [b.file_name for b in backups] == [second.name]

    def test_list_backups_without_directory(self, service):
        assert service.list_backups() == []

    def test_delete_backup(self, service):
        result = service.export_database()
        name = Path(result.file_path).name

        assert service.delete_backup(name) is True
        assert not Path(result.file_path).exists()
        assert service.delete_backup(name) is False

    def test_delete_rejects_path_traversal(self, service, database):
        service.backup_dir.mkdir(parents=True, exist_ok=True)

        assert service.delete_backup("../zerofinanx.db") is False
        assert database.path.exists()

    def test_delete_rejects_nul_byte_name(self, service):
        service.export_database()

        assert service.delete_backup("bad\x00name.db") is False
        assert len(service.list_backups()) == 1

    def test_delete_rejects_nested_name(self, service):
        result = service.export_database()
        name = Path(result.file_path).name

        assert service.delete_backup(f"sub/../{name}") is False
        assert Path(result.file_path).exists()

    def test_delete_rejects_wrong_extension(self, service):
        service.backup_dir.mkdir(parents=True, exist_ok=True)
        other = service.backup_dir / "notes.txt"
        other.write_text("keep")

        assert service.delete_backup("notes.txt") is False
        assert other.exists()


class TestStats:
    def test_stats_reflect_live_rows(self, service, database):
        with database.transaction() as conn:
            seed_users(conn, "a@x.com")
            seed_content(conn, lessons=3)

        assert service.get_database_stats() == {
            "users": 1,
            "calculators": 0,
            "lessons": 3,
        }

    def test_stats_are_zero_when_db_unreadable(self, service):
        with patch(
            "core.backup_restore_core.get_table_counts",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            stats = service.get_database_stats()

        assert stats == {"users": 0, "calculators": 0, "lessons": 0}


class TestStagedUploads:
    def test_discard_removes_file_and_sidecars(self, service):
        staged = service.get_staging_path()
        for suffix in ("", "-wal", "-shm"):
            staged.with_name(staged.name + suffix).write_bytes(b"x")

        service.discard_staged_file(staged)

        assert list(staged.parent.iterdir()) == []

    def test_staging_paths_are_unique(self, service):
        assert service.get_staging_path() != service.get_staging_path()
