# ------------------------------------------------------------------------------
# web_interface.py
# ------------------------------------------------------------------------------

import logging

from flask import Flask, redirect, url_for

from config import get_config
from core.backup_restore_core import BackupRestoreService
from utils.db import Database
from utils.path_manager import PathManager
from web.blueprints import admin_bp, auth_bp, backup_bp, signup_bp
from web.services import backup_restore_service, customer_service


def create_web_interface(database: Database, config: dict | None = None):
    """
    Creates and returns the Flask server for the project.

    Args:
        database: The live Database, owned by the caller (opened/closed by main.py).
        config: Optional configuration dict; defaults to get_config().

    Returns:
        {"server": Flask app, "run": callable(debug, host, port),
         "backup_service": BackupRestoreService}
    """
    logger = logging.getLogger(__name__)
    config = config or get_config()

    if config["ADMIN_PASSWORD"] == "SECRET_PASSWORD":
        logger.warning("ADMIN_PASSWORD not set in .env file, using default. THIS IS INSECURE.")

    app = Flask(__name__, template_folder="templates")
    app.secret_key = config["SECRET_KEY"]
    app.config["MAX_UPLOAD_BYTES"] = config["MAX_UPLOAD_BYTES"]
    app.config["RECENT_BACKUPS_LIMIT"] = config["RECENT_BACKUPS_LIMIT"]

    path_manager = PathManager(config["DATA_DIR"], config["DB_FILENAME"])
    backup_service = BackupRestoreService(
        database, path_manager, prefix=config["BACKUP_PREFIX"]
    )
    backup_restore_service.init_app(app, backup_service)
    customer_service.init_app(app, database)

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(backup_bp)
    app.register_blueprint(signup_bp)

    @app.route("/")
    def index():
        return redirect(url_for("admin.dashboard"))

    def run(debug=False, host="0.0.0.0", port=3003):
        logger.info(f"Starting web interface on {host}:{port}")
        app.run(debug=debug, host=host, port=port, use_reloader=False)

    return {"server": app, "run": run, "backup_service": backup_service}
