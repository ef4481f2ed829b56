# config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env file.
load_dotenv()

_config_cache = None


def load_config():
    """
    Loads configuration from environment variables and returns a dictionary.
    """
    try:
        max_upload_mb = float(os.getenv("MAX_UPLOAD_MB", 100))
    except ValueError:
        # Fallback to default if parsing fails
        max_upload_mb = 100.0

    config = {
        # General Settings
        "DEBUG_MODE": os.getenv("DEBUG_MODE", "False").lower() == "true",
        "DATA_DIR": os.getenv("DATA_DIR", "data"),
        "HOST": os.getenv("HOST", "0.0.0.0"),
        "PORT": int(os.getenv("PORT", 3003)),
        "SITE_URL": os.getenv("SITE_URL", "http://localhost:3003"),

        # Database and Backup Settings
        "DB_FILENAME": os.getenv("DB_FILENAME", "zerofinanx.db"),
        "BACKUP_PREFIX": os.getenv("BACKUP_PREFIX", "zerofinanx"),
        "RECENT_BACKUPS_LIMIT": int(os.getenv("RECENT_BACKUPS_LIMIT", 10)),
        "MAX_UPLOAD_BYTES": int(max_upload_mb * 1024 * 1024),

        # Email Settings (SendGrid)
        "SENDGRID_API_KEY": os.getenv("SENDGRID_API_KEY", "").strip(),
        "EMAIL_FROM": os.getenv("EMAIL_FROM", "sanjay@tiseed.com"),

        # Admin access
        "ADMIN_PASSWORD": os.getenv("ADMIN_PASSWORD", "SECRET_PASSWORD"),
        "SECRET_KEY": os.getenv("SECRET_KEY", "change-me"),
        "BETA_ADMIN_SECRET": os.getenv("BETA_ADMIN_SECRET", "beta-admin-2024"),
    }
    return config


def get_config():
    """Returns the cached configuration, loading it on first use."""
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def reset_config():
    """Drops the cached configuration so the next get_config() re-reads the environment."""
    global _config_cache
    _config_cache = None


if __name__ == "__main__":
    # For testing purposes, print the configuration
    config = load_config()
    from pprint import pprint

    pprint(config)
