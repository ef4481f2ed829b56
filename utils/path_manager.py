import time
import uuid
from pathlib import Path


# Directory structure:
# data/
# ├── zerofinanx.db
# ├── backups/
# │   └── <prefix>_backup_<timestamp>.db
# └── temp/
#     └── temp_backup_<millis>_<random>.db


class PathManager:
    def __init__(self, base_dir: str, db_filename: str = "zerofinanx.db"):
        self.base_dir = Path(base_dir)
        self.db_path = self.base_dir / db_filename
        self.backup_dir = self.base_dir / "backups"
        self.temp_dir = self.base_dir / "temp"

    # -------------------------------------------------------------------------
    # Database Path Methods
    # -------------------------------------------------------------------------
    def get_db_path(self) -> Path:
        """Returns the live database path, creating the parent directory."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self.db_path

    # -------------------------------------------------------------------------
    # Backup Path Methods
    # -------------------------------------------------------------------------
    def get_backup_dir(self) -> Path:
        """Returns the backup directory, creates if needed."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        return self.backup_dir

    def get_backup_path(self, prefix: str, timestamp: str) -> Path:
        """
        Returns the path for a new backup artifact.
        Format: backups/<prefix>_backup_<timestamp>.db
        """
        return self.get_backup_dir() / f"{prefix}_backup_{timestamp}.db"

    # -------------------------------------------------------------------------
    # Temp Path Methods
    # -------------------------------------------------------------------------
    def get_temp_dir(self) -> Path:
        """Returns the temp directory, creates if needed."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir

    def get_temp_upload_path(self) -> Path:
        """
        Returns a unique staging path for an uploaded import candidate.
        Format: temp/temp_backup_<millis>_<random>.db
        """
        return self.get_temp_dir() / f"temp_backup_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.db"

