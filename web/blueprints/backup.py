"""
Backup Blueprint.

Handles admin backup and restore routes:
- GET /admin/backup - Backup management page
- POST /api/admin/backup/export - Create backup and download it
- POST /api/admin/backup/import - Upload and import a backup (merge | replace)
- GET /api/admin/backup/status - Live counts and recent backups
- DELETE /api/admin/backup/delete?fileName= - Delete a backup
"""

from flask import Blueprint, current_app, jsonify, render_template, request, send_file
from werkzeug.utils import secure_filename

from logging_config import get_logger
from web.blueprints.auth import api_login_required, login_required
from web.services import backup_restore_service

logger = get_logger(__name__)

backup_bp = Blueprint("backup", __name__)

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024
UPLOAD_CHUNK_SIZE = 8192


@backup_bp.route("/admin/backup")
@login_required
def backup_page():
    return render_template("backup.html")


@backup_bp.route("/api/admin/backup/export", methods=["POST"])
@api_login_required
def backup_export():
    """Creates a backup artifact and returns its bytes as a download."""
    try:
        result = backup_restore_service.export_database()
        if not result.success or not result.file_path:
            return jsonify({"error": result.message}), 500

        prefix = backup_restore_service.get_backup_prefix()
        filename = f"{prefix}_backup_{result.timestamp}.db"
        response = send_file(
            result.file_path,
            mimetype="application/octet-stream",
            as_attachment=True,
            download_name=filename,
        )
        response.headers["Cache-Control"] = "no-cache"
        return response

    except Exception as e:
        logger.error(f"Backup export error: {e}", exc_info=True)
        return jsonify({"error": "Failed to create backup"}), 500


@backup_bp.route("/api/admin/backup/import", methods=["POST"])
@api_login_required
def backup_import():
    """
    Imports an uploaded backup file.
    The upload is staged in the temp directory and always removed afterwards.
    """
    max_bytes = current_app.config.get("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)

    try:
        file = request.files.get("backupFile") or request.files.get("file")
        if not file or file.filename == "":
            return jsonify({"error": "No backup file provided"}), 400

        strategy = request.form.get("strategy") or "merge"
        if strategy not in ("merge", "replace"):
            return (
                jsonify({"error": 'Invalid strategy. Must be "merge" or "replace"'}),
                400,
            )

        upload_path = backup_restore_service.get_staging_path()
        try:
            total_size = 0
            with open(upload_path, "wb") as f:
                while True:
                    chunk = file.stream.read(UPLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > max_bytes:
                        return (
                            jsonify(
                                {
                                    "error": f"File too large. Maximum size: "
                                    f"{max_bytes // (1024 ** 2)} MB"
                                }
                            ),
                            413,
                        )
                    f.write(chunk)

            logger.info(
                f"Import: staged upload {secure_filename(file.filename)} ({total_size} bytes), "
                f"strategy={strategy}"
            )
            result = backup_restore_service.import_database(upload_path, strategy)

        finally:
            try:
                backup_restore_service.discard_staged_file(upload_path)
            except OSError as cleanup_err:
                logger.warning(
                    f"Import: could not delete staged upload {upload_path}: {cleanup_err}"
                )

        if result.success:
            return jsonify(result.to_dict())
        status = 400 if backup_restore_service.is_client_error(result) else 500
        return jsonify(result.to_dict()), status

    except Exception as e:
        logger.error(f"Backup import error: {e}", exc_info=True)
        return jsonify({"error": "Failed to import backup"}), 500


@backup_bp.route("/api/admin/backup/status", methods=["GET"])
@api_login_required
def backup_status():
    """Returns live row counts and the most recent backups."""
    try:
        limit = current_app.config.get("RECENT_BACKUPS_LIMIT", 10)
        return jsonify(backup_restore_service.get_status(recent_limit=limit))
    except Exception as e:
        logger.error(f"Backup status error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get backup status"}), 500


@backup_bp.route("/api/admin/backup/delete", methods=["DELETE"])
@api_login_required
def backup_delete():
    """Deletes one backup file by name."""
    try:
        file_name = request.args.get("fileName")
        if not file_name:
            return jsonify({"error": "File name is required"}), 400

        if backup_restore_service.delete_backup(file_name):
            return jsonify({"message": "Backup deleted successfully"})
        return jsonify({"error": "Failed to delete backup file"}), 404

    except Exception as e:
        logger.error(f"Backup delete error: {e}", exc_info=True)
        return jsonify({"error": "Failed to delete backup"}), 500
