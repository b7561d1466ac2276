"""
Progress routes: XP, level and milestone roadmap.
"""
from flask import Blueprint, jsonify

from study_service.xp import all_milestones
from .services import ProgressService


def create_progress_routes(progress_service: ProgressService, user_service) -> Blueprint:
    """Create progress routes."""
    bp = Blueprint('progress', __name__)

    @bp.route("/api/progress", methods=["GET"])
    def get_progress():
        """Current progress for the logged-in account, read from the store."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        progress = progress_service.get_progress(uid)
        return jsonify({
            "progress": progress.to_dict(),
            "level_info": progress.level_info().to_dict(),
        })

    @bp.route("/api/progress/milestones", methods=["GET"])
    def get_milestones():
        """Static milestone reward table."""
        return jsonify({"milestones": [m.to_dict() for m in all_milestones()]})

    return bp
