"""
Signup Blueprint.

Public beta signup and waitlist routes:
- POST/GET /api/customers - Create/update customer, list customers (admin)
- POST /api/customers/check - Does a customer exist for this email
- POST/GET /api/waitlist - Join waitlist, list waitlist (admin)
- POST /api/add-beta-user - Secret-protected beta access grant
"""

from flask import Blueprint, jsonify, request

from logging_config import get_logger
from web.blueprints.auth import api_login_required
from web.services import customer_service
from web.services.customer_service import SignupValidationError, UnauthorizedError

logger = get_logger(__name__)

signup_bp = Blueprint("signup", __name__)


@signup_bp.route("/api/customers", methods=["POST"])
def create_customer():
    """Creates or updates a customer; new customers get a welcome email."""
    try:
        data = request.get_json(silent=True) or {}
        customer, is_new = customer_service.signup_customer(data)
        return (
            jsonify({"customer": customer, "isNewCustomer": is_new}),
            201 if is_new else 200,
        )
    except SignupValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Error creating/updating customer: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@signup_bp.route("/api/customers", methods=["GET"])
@api_login_required
def list_customers():
    try:
        customers = customer_service.list_customers()
        return jsonify({"customers": customers, "count": len(customers)})
    except Exception as e:
        logger.error(f"Error fetching customers: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@signup_bp.route("/api/customers/check", methods=["POST"])
def check_customer():
    try:
        data = request.get_json(silent=True) or {}
        exists, email = customer_service.check_customer(data.get("email"))
        return jsonify({"exists": exists, "email": email})
    except SignupValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Error checking user existence: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@signup_bp.route("/api/waitlist", methods=["POST"])
def join_waitlist():
    try:
        data = request.get_json(silent=True) or {}
        added, email = customer_service.join_waitlist(data.get("email"))
        if added:
            return jsonify({"message": "Successfully joined waitlist", "email": email}), 201
        return jsonify({"message": "Email already on waitlist", "email": email})
    except SignupValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Error adding to waitlist: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@signup_bp.route("/api/waitlist", methods=["GET"])
@api_login_required
def list_waitlist():
    try:
        entries = customer_service.list_waitlist()
        return jsonify({"waitlist": entries, "count": len(entries)})
    except Exception as e:
        logger.error(f"Error fetching waitlist: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@signup_bp.route("/api/add-beta-user", methods=["POST"])
def add_beta_user():
    try:
        data = request.get_json(silent=True) or {}
        result = customer_service.add_beta_user(data.get("email"), data.get("secret"))
        return jsonify(result)
    except UnauthorizedError:
        logger.warning("Rejected add-beta-user request with invalid secret.")
        return jsonify({"error": "Unauthorized"}), 401
    except SignupValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Error adding beta user: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500
