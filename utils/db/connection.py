"""
Database Connection and Schema Management.

This module owns the live SQLite connection and schema initialization.

The application constructs exactly one Database at startup (see main.py) and
hands it to every service that needs it. All access goes through the
Database lock so that a write transaction is never interleaved with another
thread's statements on the shared connection.
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

DB_FILENAME = "zerofinanx.db"

# Tables carried by backup artifacts, in import order.
BACKUP_TABLES = ("users", "calculators", "lessons")

# Column order per table (used for upserts during import).
TABLE_COLUMNS = {
    "users": (
        "id",
        "email",
        "first_name",
        "last_name",
        "phone",
        "notes",
        "marketing_consent",
        "sms_consent",
        "created_at",
        "updated_at",
    ),
    "calculators": (
        "id",
        "name",
        "description",
        "category",
        "calculator_type",
        "code",
        "content",
        "url",
        "icon",
        "color",
        "fields",
        "is_active",
        "is_published",
        "order_index",
        "file_name",
        "artifact_url",
        "created_at",
        "updated_at",
    ),
    "lessons": (
        "id",
        "title",
        "description",
        "content",
        "category",
        "duration",
        "difficulty",
        "video_url",
        "video_summary",
        "start_message",
        "icon",
        "color",
        "order_index",
        "active",
        "completed",
        "created_at",
        "updated_at",
    ),
}


class Database:
    """
    Wrapper around the single live SQLite connection.

    The connection is opened lazily on first access and stays open until
    close() is called by the application's shutdown sequence.
    """

    def __init__(self, db_path: str | Path):
        self.path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                self._conn = self._open()
            return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _open(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # isolation_level=None: transactions are managed explicitly in transaction().
        conn = sqlite3.connect(
            str(self.path), check_same_thread=False, isolation_level=None
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.row_factory = sqlite3.Row
        _init_schema(conn)
        return conn

    @contextmanager
    def read(self):
        """Yields the shared connection while holding the database lock.

        Usage:
            with database.read() as conn:
                conn.execute("SELECT ...")
        """
        with self._lock:
            yield self.connection

    @contextmanager
    def transaction(self):
        """Runs the block inside BEGIN IMMEDIATE ... COMMIT.

        Any exception rolls the whole block back and is re-raised. The
        database lock is held for the duration, so other threads of this
        process never observe a half-applied block.
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def backup_to(self, dest_path: str | Path) -> None:
        """Copies the live database into dest_path using the SQLite online backup API."""
        with self._lock:
            dest_conn = sqlite3.connect(str(dest_path))
            try:
                self.connection.backup(dest_conn)
                # Artifacts are standalone files: no -wal/-shm sidecars needed to read them.
                dest_conn.execute("PRAGMA journal_mode=DELETE;")
            finally:
                dest_conn.close()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE NOT NULL,
            first_name TEXT,
            last_name TEXT,
            phone TEXT,
            notes TEXT,
            marketing_consent INTEGER DEFAULT 0,
            sms_consent INTEGER DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        );
        """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at DESC);"
    )

    conn.execute("""
        CREATE TABLE IF NOT EXISTS calculators (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            category TEXT,
            calculator_type TEXT,
            code TEXT,
            content TEXT,
            url TEXT,
            icon TEXT,
            color TEXT,
            fields TEXT,
            is_active INTEGER DEFAULT 1,
            is_published INTEGER DEFAULT 0,
            order_index INTEGER DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        );
        """)
    # Uploaded artifact calculators (added after the first release)
    _ensure_column_on_table(conn, "calculators", "file_name", "TEXT")
    _ensure_column_on_table(conn, "calculators", "artifact_url", "TEXT")

    conn.execute("""
        CREATE TABLE IF NOT EXISTS lessons (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            content TEXT,
            category TEXT,
            duration TEXT,
            difficulty TEXT,
            video_url TEXT,
            video_summary TEXT,
            start_message TEXT,
            icon TEXT,
            color TEXT,
            order_index INTEGER DEFAULT 0,
            active INTEGER DEFAULT 1,
            completed INTEGER DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        );
        """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_lessons_order ON lessons(order_index);"
    )

    conn.execute("""
        CREATE TABLE IF NOT EXISTS waitlist (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        );
        """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_waitlist_created_at ON waitlist(created_at DESC);"
    )


def get_table_columns(conn: sqlite3.Connection, table: str, schema: str = "main") -> list[str]:
    cur = conn.execute(f"PRAGMA {schema}.table_info({table});")
    return [row[1] for row in cur.fetchall()]


def _ensure_column_on_table(
    conn: sqlite3.Connection, table: str, column: str, coltype: str
) -> None:
    cols = set(get_table_columns(conn, table))
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {coltype};")
