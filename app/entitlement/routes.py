"""
Entitlement routes: usage display and admin premium management.
"""
from flask import Blueprint, jsonify

from app.http_errors import error_response, json_object_body
from study_service.errors import InputValidationError

from .manager import EntitlementManager


def create_entitlement_routes(manager: EntitlementManager, user_service) -> Blueprint:
    """Create entitlement routes."""
    bp = Blueprint('entitlement', __name__)

    @bp.route("/api/entitlements", methods=["GET"])
    def get_entitlements():
        """Usage and remaining allowance for the logged-in account."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        return jsonify({"success": True, "entitlements": manager.get_usage_info(uid)})

    @bp.route("/admin/premium", methods=["POST"])
    def set_premium():
        """Grant or revoke premium for an account (admin only)."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        if not user_service.is_admin_user(uid):
            return jsonify({"error": "Admin access required"}), 403

        try:
            data = json_object_body()
        except InputValidationError as e:
            return error_response(e)
        target_uid = str(data.get("uid", "")).strip()
        if not target_uid:
            return jsonify({"error": "Missing uid"}), 400

        premium = bool(data.get("premium", True))
        manager.set_premium(target_uid, premium)
        return jsonify({"success": True, "uid": target_uid, "premium": premium})

    @bp.route("/admin/usage_stats", methods=["GET"])
    def usage_stats():
        """Aggregate usage numbers (admin only)."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        if not user_service.is_admin_user(uid):
            return jsonify({"error": "Admin access required"}), 403
        return jsonify(manager.get_all_usage_stats())

    return bp
