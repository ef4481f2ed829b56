"""
Admin Blueprint.

- GET /admin - Dashboard (user totals, links to backup and export)
- GET /api/admin/users/export?format=csv|excel - Download users CSV
"""

from datetime import date

from flask import Blueprint, Response, jsonify, render_template, request

from logging_config import get_logger
from web.blueprints.auth import api_login_required, login_required
from web.services import backup_restore_service, customer_service

logger = get_logger(__name__)

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/admin")
@login_required
def dashboard():
    summary = customer_service.get_admin_summary()
    stats = backup_restore_service.get_database_stats()
    return render_template("admin.html", summary=summary, stats=stats)


@admin_bp.route("/api/admin/users/export", methods=["GET"])
@api_login_required
def export_users():
    """Streams the user list as CSV (format=excel adds a BOM for Excel)."""
    try:
        file_format = request.args.get("format", "csv")
        content = customer_service.export_users(file_format)
        if content is None:
            return jsonify({"error": "No users found to export"}), 404

        filename = f"users_export_{date.today().isoformat()}.csv"
        return Response(
            content,
            mimetype="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Content-Length": str(len(content)),
            },
        )
    except Exception as e:
        logger.error(f"User export error: {e}", exc_info=True)
        return jsonify({"error": "Failed to export users"}), 500
