"""
Study tools routes: homework, quizzes and flashcard decks.
"""
from flask import Blueprint, jsonify

from app.http_errors import error_response, is_index, json_object_body, outcome_response
from study_service.errors import QuizzifyError
from .services import StudyService


def create_study_tools_routes(study_service: StudyService, user_service) -> Blueprint:
    """Create study tools routes."""
    bp = Blueprint('study_tools', __name__)

    # =====================
    # Homework
    # =====================

    @bp.route("/api/homework/solve", methods=["POST"])
    def solve_homework():
        """Solve a homework question, optionally from a photo."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            outcome = study_service.solve_homework(uid, json_object_body())
            return outcome_response(outcome)
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/homework/history", methods=["GET"])
    def homework_history():
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return jsonify({"success": True, "homework": study_service.homework_history(uid)})
        except QuizzifyError as e:
            return error_response(e)

    # =====================
    # Quizzes
    # =====================

    @bp.route("/api/quizzes", methods=["POST"])
    def create_quiz():
        """Generate a quiz from a topic, notes or an image."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            outcome = study_service.create_quiz(uid, json_object_body())
            return outcome_response(outcome)
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/quizzes", methods=["GET"])
    def list_quizzes():
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return jsonify({"success": True, "quizzes": study_service.quiz_history(uid)})
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/quizzes/<quiz_id>/answer", methods=["POST"])
    def answer_question(quiz_id):
        """Answer one question; completing the quiz awards XP."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        try:
            data = json_object_body()
            question_index = data.get("question_index", data.get("questionIndex"))
            answer_index = data.get("answer_index", data.get("answerIndex"))
            if not is_index(question_index) or not is_index(answer_index):
                return jsonify({
                    "error": "invalid_input",
                    "message": "question_index and answer_index must be integers",
                }), 400

            outcome = study_service.answer_question(uid, quiz_id, question_index, answer_index)
            return outcome_response(outcome)
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/quizzes/<quiz_id>/award", methods=["POST"])
    def claim_quiz_xp(quiz_id):
        """Retry the XP award for a completed quiz."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return outcome_response(study_service.claim_quiz_xp(uid, quiz_id))
        except QuizzifyError as e:
            return error_response(e)

    # =====================
    # Flashcard decks
    # =====================

    @bp.route("/api/decks", methods=["POST"])
    def create_deck():
        """Generate a flashcard deck from notes or an image."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            outcome = study_service.create_deck(uid, json_object_body())
            return outcome_response(outcome)
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/decks", methods=["GET"])
    def list_decks():
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return jsonify({"success": True, "decks": study_service.list_decks(uid)})
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/decks/<deck_id>/next", methods=["POST"])
    def next_card(deck_id):
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return outcome_response(study_service.next_card(uid, deck_id))
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/decks/<deck_id>/previous", methods=["POST"])
    def previous_card(deck_id):
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            return outcome_response(study_service.previous_card(uid, deck_id))
        except QuizzifyError as e:
            return error_response(e)

    @bp.route("/api/decks/<deck_id>/cards/<card_id>/mastered", methods=["POST"])
    def set_card_mastered(deck_id, card_id):
        """Mark a card mastered, or clear it with {"mastered": false}."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        try:
            data = json_object_body()
            outcome = study_service.set_card_mastered(uid, deck_id, card_id, bool(data.get("mastered", True)))
            return outcome_response(outcome)
        except QuizzifyError as e:
            return error_response(e)

    return bp
