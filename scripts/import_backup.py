#!/usr/bin/env python3
"""
Import a database backup into the live ZeroFinanx database.

Prints the live row counts before and after, the imported counts and the
path of the automatic safety backup taken before the import.

Usage:
    python scripts/import_backup.py <path-to-backup-file>            # merge (default)
    python scripts/import_backup.py <path-to-backup-file> replace    # wipe, then import

Exit code is 1 on bad arguments or any import failure.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_config  # noqa: E402
from core.backup_restore_core import BackupRestoreService  # noqa: E402
from utils.db import Database  # noqa: E402
from utils.path_manager import PathManager  # noqa: E402


def print_stats(title: str, stats: dict) -> None:
    print(title)
    print(f"- Users: {stats['users']}")
    print(f"- Calculators: {stats['calculators']}")
    print(f"- Lessons: {stats['lessons']}")


def build_service(config: dict) -> tuple[Database, BackupRestoreService]:
    path_manager = PathManager(config["DATA_DIR"], config["DB_FILENAME"])
    database = Database(path_manager.get_db_path())
    service = BackupRestoreService(database, path_manager, prefix=config["BACKUP_PREFIX"])
    return database, service


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Import a ZeroFinanx database backup (.db file)."
    )
    parser.add_argument("backup_file", help="Path to the backup .db file")
    parser.add_argument(
        "strategy",
        nargs="?",
        default="merge",
        choices=["merge", "replace"],
        help='"merge" (default) keeps existing rows, "replace" deletes them first',
    )
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    backup_path = Path(args.backup_file)
    if not backup_path.exists():
        print(f"Error: Backup file not found: {backup_path}", file=sys.stderr)
        return 1

    print(f"Importing backup from: {backup_path}")
    print(f"Strategy: {args.strategy}")
    print()

    database, service = build_service(get_config())
    try:
        print_stats("Current database status:", service.get_database_stats())
        print()

        print("Starting import...")
        result = service.import_database(backup_path, args.strategy)

        if not result.success:
            print("❌ Import failed!", file=sys.stderr)
            print(f"Error: {result.message}", file=sys.stderr)
            if result.backup_file_path:
                print(f"Your original data has been backed up to: {result.backup_file_path}")
            return 1

        print("✅ Import completed successfully!")
        print(f"Message: {result.message}")
        print()
        print_stats("Imported data:", result.imported_counts)
        print()
        print(f"Backup of original data saved to: {result.backup_file_path}")
        print()
        print_stats("Final database status:", service.get_database_stats())
        return 0

    finally:
        database.close()


if __name__ == "__main__":
    sys.exit(main())
