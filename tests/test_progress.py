"""
Tests for persisted account progress.
"""

import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from app.json_store import JsonFileStore
from app.progress.models import AccountProgress
from app.progress.services import ProgressService
from study_service.errors import InputValidationError, SaveFailedError
from study_service.xp import xp_threshold


class TestAccountProgress:
    """Derived fields always follow xp."""

    def test_defaults(self):
        progress = AccountProgress.from_dict(None)
        assert (progress.xp, progress.level, progress.bonus_quizzes) == (0, 1, 0)

    def test_level_and_bonus_recomputed_from_xp(self):
        # A stale level in the stored record is ignored
        progress = AccountProgress.from_dict({"xp": xp_threshold(10), "level": 3, "bonus_quizzes": 0})
        assert progress.level == 10
        assert progress.bonus_quizzes == 6

    def test_negative_xp_clamped(self):
        assert AccountProgress.from_xp(-50).xp == 0

    def test_with_added_xp(self):
        progress = AccountProgress().with_added_xp(400)
        assert progress.level == 2
        assert progress.updated_at is not None


class TestProgressService:
    """XP awards committed through the progress store."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = JsonFileStore(self.temp_dir / "progress.json")
        self.service = ProgressService(self.store)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def _seed(self, uid, xp):
        self.store.save({uid: AccountProgress.from_xp(xp).to_dict()})

    def test_perfect_first_quiz(self):
        result = self.service.award_quiz_xp("alice", 10, 10)

        assert result.xp_earned == 150
        assert not result.leveled_up
        progress = self.service.get_progress("alice")
        assert progress.xp == 150
        assert progress.level == 1
        assert progress.bonus_quizzes == 0

    def test_stored_record_shape(self):
        self.service.award_quiz_xp("alice", 10, 10)
        stored = json.loads((self.temp_dir / "progress.json").read_text())
        assert stored["alice"]["xp"] == 150
        assert stored["alice"]["level"] == 1
        assert stored["alice"]["bonus_quizzes"] == 0

    def test_level_up(self):
        self._seed("alice", 300)
        result = self.service.award_quiz_xp("alice", 10, 10)

        assert result.leveled_up
        assert result.previous_level == 1
        assert result.new_level == 2
        assert result.to_dict()["total_xp"] == 450

    def test_reaching_milestone_reports_it(self):
        self._seed("alice", xp_threshold(5) - 10)
        result = self.service.award_quiz_xp("alice", 10, 10)

        data = result.to_dict()
        assert data["new_level"] == 5
        assert data["new_bonus_quizzes"] == 3
        assert [m["level"] for m in data["milestones"]] == [5]
        assert self.service.get_bonus_quizzes("alice") == 3

    def test_award_uses_stored_level(self):
        self._seed("alice", xp_threshold(5))
        result = self.service.award_quiz_xp("alice", 10, 10)
        assert result.xp_earned == 350

    def test_invalid_score_commits_nothing(self):
        with pytest.raises(InputValidationError):
            self.service.award_quiz_xp("alice", 3, 0)
        assert self.service.get_progress("alice").xp == 0

    def test_failed_save_commits_nothing(self):
        self._seed("alice", 100)
        with patch("app.json_store.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(SaveFailedError):
                self.service.award_quiz_xp("alice", 10, 10)
        assert self.service.get_progress("alice").xp == 100

    def test_same_attempt_awarded_once(self):
        first = self.service.award_quiz_xp("alice", 10, 10, attempt_id="quiz-1")
        again = self.service.award_quiz_xp("alice", 10, 10, attempt_id="quiz-1")

        assert not first.already_awarded
        assert again.already_awarded
        assert again.xp_earned == 150
        assert not again.milestones
        assert self.service.get_progress("alice").xp == 150

        self.service.award_quiz_xp("alice", 5, 10, attempt_id="quiz-2")
        assert self.service.get_progress("alice").xp == 220

    def test_awarded_attempts_stored_but_not_exposed(self):
        self.service.award_quiz_xp("alice", 10, 10, attempt_id="quiz-1")
        stored = json.loads((self.temp_dir / "progress.json").read_text())
        assert stored["alice"]["awarded_attempts"] == {"quiz-1": 150}
        assert "awarded_attempts" not in self.service.get_progress("alice").to_dict()

    def test_accounts_are_separate(self):
        self.service.award_quiz_xp("alice", 10, 10)
        assert self.service.get_progress("bob").xp == 0
