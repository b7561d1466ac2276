"""
HTTP tests for the Flask app with the AI generators mocked.
"""

import json
from unittest.mock import MagicMock

import pytest

from app.main import create_app
from config_manager import ConfigManager
from study_service.errors import GenerationFailedError, TemporarilyUnavailableError
from study_service.models import (
    Flashcard,
    GeneratedFlashcards,
    GeneratedQuiz,
    HomeworkSolution,
    QuizQuestion,
)


@pytest.fixture()
def generators():
    quiz_generator = MagicMock()
    quiz_generator.generate.return_value = GeneratedQuiz(questions=[
        QuizQuestion(question=f"Q{i}?", options=["a", "b", "c"], correct_answer=0, explanation="e")
        for i in range(3)
    ])
    flashcard_generator = MagicMock()
    flashcard_generator.generate.return_value = GeneratedFlashcards(
        flashcards=[Flashcard(front="F1", back="B1"), Flashcard(front="F2", back="B2")]
    )
    homework_solver = MagicMock()
    homework_solver.solve.return_value = HomeworkSolution(steps=["Step 1"], final_answer="42")
    return {
        "quiz_generator": quiz_generator,
        "flashcard_generator": flashcard_generator,
        "homework_solver": homework_solver,
    }


@pytest.fixture()
def app(tmp_path, generators):
    config_file = tmp_path / "web_app_config.json"
    config_file.write_text(json.dumps({
        "app": {"admin_user_ids": ["admin"]},
        "quota": {"free_image_limit": 1, "free_quiz_limit": 2},
    }))
    app = create_app(
        config_manager=ConfigManager(str(config_file)),
        data_dir=tmp_path / "data",
        user_data_dir=tmp_path / "user_data",
        **generators,
    )
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, uid="alice"):
    return client.post("/login", json={"uid": uid})


class TestAuth:

    def test_health(self, client):
        assert client.get("/actuator/health").get_json()["status"] == "UP"

    def test_login_returns_stored_state(self, client):
        response = login(client)
        data = response.get_json()

        assert response.status_code == 200
        assert data["uid"] == "alice"
        assert data["progress"]["xp"] == 0
        assert data["progress"]["level"] == 1
        assert data["entitlements"]["is_premium"] is False
        assert "uid=alice" in response.headers["Set-Cookie"]

    def test_login_form_post(self, client):
        response = client.post("/login", data={"uid": "bob"})
        assert response.get_json()["uid"] == "bob"

    @pytest.mark.parametrize("uid", ["", "../etc", "a b", "x" * 65])
    def test_invalid_uid(self, client, uid):
        assert client.post("/login", json={"uid": uid}).status_code == 400

    def test_array_body_is_400(self, client):
        response = client.post("/login", json=["alice"])
        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_input"

    def test_logout(self, client):
        login(client)
        client.post("/logout")
        assert client.get("/api/progress").status_code == 401

    def test_login_required(self, client):
        assert client.get("/api/progress").status_code == 401
        assert client.get("/api/entitlements").status_code == 401
        assert client.post("/api/quizzes", json={"topic": "Math"}).status_code == 401
        assert client.get("/api/decks").status_code == 401

    def test_malformed_cookie_is_not_a_login(self, client):
        client.set_cookie("uid", "../../secrets")
        assert client.get("/api/progress").status_code == 401


class TestProgressRoutes:

    def test_progress(self, client):
        login(client)
        data = client.get("/api/progress").get_json()
        assert data["progress"]["bonus_quizzes"] == 0
        assert data["level_info"]["xp_for_next_level"] == 350

    def test_milestones_public(self, client):
        milestones = client.get("/api/progress/milestones").get_json()["milestones"]
        assert len(milestones) == 20
        assert milestones[-1]["bonus_quizzes"] == 1000


class TestQuizRoutes:

    def test_quiz_flow_awards_xp(self, client):
        login(client)
        created = client.post("/api/quizzes", json={"topic": "Math", "questionCount": 3})
        assert created.status_code == 200
        quiz = created.get_json()["quiz"]

        for index in range(3):
            response = client.post(
                f"/api/quizzes/{quiz['id']}/answer",
                json={"question_index": index, "answer_index": 0},
            )
            assert response.status_code == 200

        data = response.get_json()
        assert data["correct"] is True
        assert data["award"]["xp_earned"] == 150
        assert client.get("/api/progress").get_json()["progress"]["xp"] == 150

        quizzes = client.get("/api/quizzes").get_json()["quizzes"]
        assert quizzes[0]["score"] == 3
        assert quizzes[0]["xp_awarded"] is True

        assert client.post(f"/api/quizzes/{quiz['id']}/award").status_code == 400

    def test_quota_exhausted_is_403(self, client, generators):
        login(client)
        for _ in range(2):
            assert client.post("/api/quizzes", json={"topic": "Math"}).status_code == 200

        response = client.post("/api/quizzes", json={"topic": "Math"})
        data = response.get_json()

        assert response.status_code == 403
        assert data["upgrade_required"] is True
        assert data["entitlement"]["reason"] == "quiz_limit"
        assert generators["quiz_generator"].generate.call_count == 2

    def test_validation_is_400(self, client):
        login(client)
        assert client.post("/api/quizzes", json={}).status_code == 400
        assert client.post("/api/quizzes", json={"topic": "x", "questionCount": 1}).status_code == 400

    def test_bad_answer_payload(self, client):
        login(client)
        quiz = client.post("/api/quizzes", json={"topic": "Math"}).get_json()["quiz"]
        response = client.post(f"/api/quizzes/{quiz['id']}/answer", json={"question_index": "0"})
        assert response.status_code == 400
        response = client.post(
            f"/api/quizzes/{quiz['id']}/answer", json={"questionIndex": 0, "answerIndex": 9}
        )
        assert response.status_code == 400

    def test_array_body_is_400(self, client):
        login(client)
        quiz = client.post("/api/quizzes", json={"topic": "Math"}).get_json()["quiz"]
        response = client.post(f"/api/quizzes/{quiz['id']}/answer", json=[0, 1])
        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_input"
        assert client.post("/api/quizzes", json=["Math"]).status_code == 400
        card_response = client.post("/api/decks/any/cards/any/mastered", json=[True])
        assert card_response.status_code == 400

    def test_boolean_indexes_rejected(self, client):
        login(client)
        quiz = client.post("/api/quizzes", json={"topic": "Math"}).get_json()["quiz"]
        response = client.post(
            f"/api/quizzes/{quiz['id']}/answer", json={"question_index": True, "answer_index": False}
        )
        assert response.status_code == 400
        quizzes = client.get("/api/quizzes").get_json()["quizzes"]
        assert quizzes[0]["questions"][1]["user_answer"] is None

    def test_unknown_quiz_is_404(self, client):
        login(client)
        response = client.post("/api/quizzes/missing/answer", json={"question_index": 0, "answer_index": 0})
        assert response.status_code == 404

    def test_generation_failure_is_502(self, client, generators):
        login(client)
        generators["quiz_generator"].generate.side_effect = GenerationFailedError("bad json")
        response = client.post("/api/quizzes", json={"topic": "Math"})
        assert response.status_code == 502
        assert response.get_json()["error"] == "generation_failed"

        generators["quiz_generator"].generate.side_effect = None
        assert client.get("/api/entitlements").get_json()["entitlements"]["used"]["quizzes_created"] == 0

    def test_rate_limit_is_503(self, client, generators):
        login(client)
        generators["quiz_generator"].generate.side_effect = TemporarilyUnavailableError("busy", status_code=429)
        response = client.post("/api/quizzes", json={"topic": "Math"})
        assert response.status_code == 503
        assert response.get_json()["error"] == "temporarily_unavailable"


class TestHomeworkRoutes:

    def test_solve_and_history(self, client):
        login(client)
        response = client.post("/api/homework/solve", json={"question": "What is 6 x 7?"})
        assert response.status_code == 200
        assert response.get_json()["answer"]["final_answer"] == "42"

        history = client.get("/api/homework/history").get_json()["homework"]
        assert history[0]["question"] == "What is 6 x 7?"

    def test_image_limit(self, client):
        login(client)
        payload = {"imageUrl": "data:image/png;base64,AA"}
        assert client.post("/api/homework/solve", json=payload).status_code == 200
        response = client.post("/api/homework/solve", json=payload)
        assert response.status_code == 403
        assert response.get_json()["entitlement"]["reason"] == "image_limit"


class TestDeckRoutes:

    def test_deck_flow(self, client):
        login(client)
        deck = client.post("/api/decks", json={"notes": "Cells", "title": "Bio"}).get_json()["deck"]
        assert deck["is_free_trial"] is True

        first = client.post(f"/api/decks/{deck['id']}/next").get_json()
        assert first["status"] == "next_card"
        end = client.post(f"/api/decks/{deck['id']}/next").get_json()
        assert end["status"] == "trial_complete"
        assert end["upgrade_required"] is True

        back = client.post(f"/api/decks/{deck['id']}/previous").get_json()
        assert back["deck"]["current_index"] == 0

        card_id = deck["cards"][0]["id"]
        mastered = client.post(f"/api/decks/{deck['id']}/cards/{card_id}/mastered").get_json()
        assert mastered["deck"]["mastered_count"] == 1

        assert [d["title"] for d in client.get("/api/decks").get_json()["decks"]] == ["Bio"]

    def test_second_free_deck_denied(self, client):
        login(client)
        assert client.post("/api/decks", json={"notes": "a"}).status_code == 200
        response = client.post("/api/decks", json={"notes": "b"})
        assert response.status_code == 403
        assert response.get_json()["entitlement"]["reason"] == "free_deck_used"

    def test_unknown_deck(self, client):
        login(client)
        assert client.post("/api/decks/missing/next").status_code == 404


class TestAdminRoutes:

    def test_non_admin_forbidden(self, client):
        login(client)
        response = client.post("/admin/premium", json={"uid": "alice", "premium": True})
        assert response.status_code == 403

    def test_grant_premium(self, app):
        admin = app.test_client()
        login(admin, "admin")
        response = admin.post("/admin/premium", json={"uid": "alice", "premium": True})
        assert response.status_code == 200

        user = app.test_client()
        data = login(user, "alice").get_json()
        assert data["entitlements"]["is_premium"] is True
        for _ in range(4):
            assert user.post("/api/quizzes", json={"topic": "Math"}).status_code == 200

        stats = admin.get("/admin/usage_stats").get_json()
        assert stats["premium_accounts"] == 1
        assert stats["total_quizzes_created"] == 4

    def test_missing_uid(self, client):
        login(client, "admin")
        assert client.post("/admin/premium", json={}).status_code == 400

    def test_array_body_is_400(self, client):
        login(client, "admin")
        response = client.post("/admin/premium", json=["alice"])
        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_input"
