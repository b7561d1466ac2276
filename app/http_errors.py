"""
Maps study service errors to JSON error responses and reads JSON request bodies.
"""
import logging

from flask import jsonify, request

from study_service.errors import InputValidationError, QuizzifyError

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    "invalid_input": 400,
    "not_found": 404,
    "quota_exceeded": 403,
    "generation_failed": 502,
    "temporarily_unavailable": 503,
    "save_failed": 500,
    "store_unavailable": 500,
}

MESSAGE_BY_CATEGORY = {
    "generation_failed": "Failed to generate content. Please try again.",
    "temporarily_unavailable": "The AI service is busy right now. Please try again in a moment.",
    "save_failed": "Your result could not be saved. Please try again.",
    "store_unavailable": "Stored data could not be read.",
}


def error_response(exc: QuizzifyError):
    """Build a (response, status) pair for a study service error."""
    status = STATUS_BY_CATEGORY.get(exc.category, 500)
    if status >= 500:
        logger.error(f"{exc.category}: {exc}")
    return jsonify({
        "error": exc.category,
        "message": MESSAGE_BY_CATEGORY.get(exc.category, str(exc)),
    }), status


def outcome_response(outcome):
    """Successful outcomes are 200; a denied gate is 403 with upgrade_required."""
    if outcome.success:
        return jsonify(outcome.to_dict())
    body = outcome.to_dict()
    body["error"] = "quota_exceeded"
    body["upgrade_required"] = True
    if outcome.entitlement:
        body["message"] = outcome.entitlement.get("message")
    return jsonify(body), 403


def json_object_body(allow_form: bool = False) -> dict:
    """
    The request body as a dict. A missing or unparseable body is empty;
    JSON that is not an object raises InputValidationError.
    """
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict() if allow_form else {}
    if not isinstance(data, dict):
        raise InputValidationError("Request body must be a JSON object")
    return data


def is_index(value) -> bool:
    """True for a JSON integer; booleans are not indexes."""
    return isinstance(value, int) and not isinstance(value, bool)
