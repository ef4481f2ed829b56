"""
Shared fixtures: a live Database in a temp data dir and a factory for
candidate backup files.
"""

import sqlite3

import pytest

from db_helpers import seed_content, seed_users
from utils.db import Database
from utils.path_manager import PathManager


@pytest.fixture
def path_manager(tmp_path):
    return PathManager(str(tmp_path / "data"))


@pytest.fixture
def database(path_manager):
    db = Database(path_manager.get_db_path())
    db.connection
    yield db
    db.close()


@pytest.fixture
def make_backup_file(tmp_path):
    """
    Builds a candidate backup file.

    Usage:
        path = make_backup_file("cand.db", users=["a@x.com"], calculators=1)
        path = make_backup_file("bad.db", tables=("users", "calculators"))
    """

    def _make(
        name="candidate.db",
        users=(),
        calculators=0,
        lessons=0,
        tables=("users", "calculators", "lessons"),
        full_schema=True,
    ):
        path = tmp_path / "candidates" / name
        path.parent.mkdir(parents=True, exist_ok=True)

        if full_schema and set(tables) == {"users", "calculators", "lessons"}:
            # Same schema as the live DB, opened as a Database to reuse it.
            db = Database(path)
            try:
                with db.transaction() as conn:
                    seed_users(conn, *users, first_name="Backup")
                    seed_content(conn, calculators, lessons, tag="b")
                db.connection.execute("PRAGMA journal_mode=DELETE;")
            finally:
                db.close()
            return path

        conn = sqlite3.connect(str(path))
        try:
            for table in tables:
                if table == "users":
                    conn.execute(
                        "CREATE TABLE users (id TEXT PRIMARY KEY, email TEXT, "
                        "first_name TEXT, last_name TEXT, created_at TEXT, updated_at TEXT)"
                    )
                    seed_users(conn, *users, first_name="Backup")
                elif table == "calculators":
                    conn.execute("CREATE TABLE calculators (id TEXT PRIMARY KEY, name TEXT)")
                elif table == "lessons":
                    conn.execute("CREATE TABLE lessons (id TEXT PRIMARY KEY, title TEXT)")
            if "calculators" in tables and "lessons" in tables:
                seed_content(conn, calculators, lessons, tag="b")
            conn.commit()
        finally:
            conn.close()
        return path

    return _make


@pytest.fixture
def app_config(tmp_path):
    return {
        "DATA_DIR": str(tmp_path / "data"),
        "DB_FILENAME": "zerofinanx.db",
        "BACKUP_PREFIX": "zerofinanx",
        "RECENT_BACKUPS_LIMIT": 10,
        "MAX_UPLOAD_BYTES": 5 * 1024 * 1024,
        "ADMIN_PASSWORD": "test-password",
        "SECRET_KEY": "test-secret-key",
    }


@pytest.fixture
def app(database, app_config):
    from web.web_interface import create_web_interface

    app = create_web_interface(database, app_config)["server"]
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Test client with an authenticated admin session."""
    with app.test_client() as client:
        with client.session_transaction() as sess:
            sess["authenticated"] = True
        yield client


@pytest.fixture
def anon_client(app):
    with app.test_client() as client:
        yield client
