"""
User management routes for login and logout.
"""
from typing import Callable

from flask import Blueprint, jsonify

from app.http_errors import error_response, json_object_body
from study_service.errors import QuizzifyError
from .services import UserService


def create_user_routes(user_service: UserService, account_snapshot: Callable[[str], dict]) -> Blueprint:
    """Create user management routes.

    ``account_snapshot(uid)`` returns the stored progress and usage for the
    account; login responds with it so clients start from stored values.
    """
    bp = Blueprint('user_management', __name__)

    @bp.route("/login", methods=["POST"])
    def login():
        """Set user ID and create session."""
        try:
            data = json_object_body(allow_form=True)
            uid = str(data.get("uid", "")).strip()
            if not user_service.is_valid_uid(uid):
                return jsonify({
                    "error": "invalid_input",
                    "message": "uid must be 1-64 letters, digits, '_', '.', '@' or '-'",
                }), 400

            snapshot = account_snapshot(uid)
        except QuizzifyError as e:
            return error_response(e)

        resp = jsonify({
            "success": True,
            "uid": uid,
            "is_admin": user_service.is_admin_user(uid),
            **snapshot,
        })
        return user_service.set_session_cookie(resp, uid)

    @bp.route("/logout", methods=["POST"])
    def logout():
        """Clear the session cookie."""
        return user_service.clear_session_cookie(jsonify({"success": True}))

    return bp
