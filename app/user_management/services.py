"""
User management services for cookie identity and session handling.
"""
import re
from typing import Optional, List

from flask import request

# Used as a file name for per-user data, so keep it to a safe alphabet
UID_PATTERN = re.compile(r"^[A-Za-z0-9_.@-]{1,64}$")

COOKIE_MAX_AGE = 60 * 60 * 24 * 365 * 3  # 3-year cookie


class UserService:
    """Service for user identification and session management."""

    def __init__(self, admin_user_ids: List[str]):
        self.admin_user_ids = admin_user_ids

    @staticmethod
    def is_valid_uid(uid: Optional[str]) -> bool:
        return bool(uid) and bool(UID_PATTERN.match(uid)) and uid not in (".", "..")

    def get_current_user_id(self) -> Optional[str]:
        """Get the current user ID from cookies, ignoring malformed values."""
        uid = (request.cookies.get("uid") or "").strip()
        return uid if self.is_valid_uid(uid) else None

    def is_authenticated(self) -> bool:
        return bool(self.get_current_user_id())

    def is_admin_user(self, uid: str) -> bool:
        """Check if the user is an admin based on configuration."""
        return bool(uid) and uid.strip() in self.admin_user_ids

    def require_auth_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Require authentication for JSON endpoints, return error if not authenticated."""
        uid = self.get_current_user_id()
        if not uid:
            return None, {"error": "no-uid", "message": "Login required"}
        return uid, None

    def set_session_cookie(self, response, uid: str):
        response.set_cookie("uid", uid, max_age=COOKIE_MAX_AGE, samesite="Lax")
        return response

    def clear_session_cookie(self, response):
        response.delete_cookie("uid")
        return response
