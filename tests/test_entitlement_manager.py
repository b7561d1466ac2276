"""
Tests for the persisted entitlement manager.
"""

import json
import threading
from unittest.mock import patch

import pytest

from app.entitlement.manager import EntitlementManager
from app.entitlement.models import Action, EntitlementConfig
from app.json_store import JsonFileStore
from study_service.errors import SaveFailedError, StoreUnavailableError


@pytest.fixture()
def usage_path(tmp_path):
    return tmp_path / "usage.json"


def make_manager(usage_path, bonus=0, **config):
    return EntitlementManager(
        config=EntitlementConfig(**config),
        store=JsonFileStore(usage_path),
        bonus_quota_provider=lambda uid: bonus,
    )


class TestCheckAndConsume:

    def test_consume_persists_counter(self, usage_path):
        manager = make_manager(usage_path)
        result = manager.check_and_consume("alice", Action.QUIZ_CREATE)

        assert result.allowed
        assert result.remaining == 4
        stored = json.loads(usage_path.read_text())
        assert stored["alice"]["quizzes_created"] == 1

    def test_check_only_does_not_consume(self, usage_path):
        manager = make_manager(usage_path)
        for _ in range(10):
            assert manager.check_only("alice", Action.IMAGE_UPLOAD).allowed
        assert manager.get_state("alice").used.image_uploads == 0
        assert not usage_path.exists()

    def test_denied_after_limit_without_write(self, usage_path):
        manager = make_manager(usage_path, free_image_limit=2)
        manager.check_and_consume("alice", Action.IMAGE_UPLOAD)
        manager.check_and_consume("alice", Action.IMAGE_UPLOAD)
        before = usage_path.read_text()

        result = manager.check_and_consume("alice", Action.IMAGE_UPLOAD)

        assert not result.allowed
        assert result.upgrade_required
        assert usage_path.read_text() == before

    def test_bonus_quota_extends_quizzes(self, usage_path):
        manager = make_manager(usage_path, bonus=3)
        allowed = [manager.check_and_consume("alice", Action.QUIZ_CREATE).allowed for _ in range(9)]
        assert allowed == [True] * 8 + [False]

    def test_accounts_are_independent(self, usage_path):
        manager = make_manager(usage_path)
        manager.check_and_consume("alice", Action.FLASHCARD_DECK_CREATE)
        assert not manager.check_only("alice", Action.FLASHCARD_DECK_CREATE).allowed
        assert manager.check_only("bob", Action.FLASHCARD_DECK_CREATE).allowed

    def test_concurrent_requests_do_not_over_grant(self, usage_path):
        manager = make_manager(usage_path, free_quiz_limit=3)
        results = []
        results_lock = threading.Lock()

        def worker():
            result = manager.check_and_consume("alice", Action.QUIZ_CREATE)
            with results_lock:
                results.append(result.allowed)

        threads = [threading.Thread(target=worker) for _ in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 3
        assert manager.get_state("alice").used.quizzes_created == 3

    def test_save_failure_raises(self, usage_path):
        manager = make_manager(usage_path)
        with patch("app.json_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(SaveFailedError):
                manager.check_and_consume("alice", Action.QUIZ_CREATE)
        assert manager.get_state("alice").used.quizzes_created == 0

    def test_unreadable_store(self, usage_path):
        usage_path.write_text("{not json")
        manager = make_manager(usage_path)
        with pytest.raises(StoreUnavailableError):
            manager.check_only("alice", Action.QUIZ_CREATE)


class TestPremium:

    def test_configured_premium_user(self, usage_path):
        manager = make_manager(usage_path, free_image_limit=0, premium_users=["vip"])
        assert manager.is_premium("vip")
        result = manager.check_and_consume("vip", Action.IMAGE_UPLOAD)
        assert result.allowed
        assert result.remaining is None

    def test_set_premium_flag(self, usage_path):
        manager = make_manager(usage_path, free_quiz_limit=0)
        assert not manager.check_only("alice", Action.QUIZ_CREATE).allowed

        manager.set_premium("alice", True)
        assert manager.is_premium("alice")
        assert manager.check_only("alice", Action.QUIZ_CREATE).allowed

        manager.set_premium("alice", False)
        assert not manager.is_premium("alice")

    def test_set_premium_keeps_counters(self, usage_path):
        manager = make_manager(usage_path)
        manager.check_and_consume("alice", Action.IMAGE_UPLOAD)
        manager.set_premium("alice", True)
        assert manager.get_state("alice").used.image_uploads == 1


class TestUsageInfo:

    def test_usage_info(self, usage_path):
        manager = make_manager(usage_path, bonus=3)
        manager.check_and_consume("alice", Action.QUIZ_CREATE)
        info = manager.get_usage_info("alice")

        assert info["is_premium"] is False
        assert info["used"]["quizzes_created"] == 1
        assert info["bonus_quizzes"] == 3
        assert info["actions"]["quiz_create"]["remaining"] == 7
        assert info["actions"]["flashcard_deck_create"]["allowed"] is True

    def test_all_usage_stats(self, usage_path):
        manager = make_manager(usage_path, premium_users=["vip"])
        manager.check_and_consume("alice", Action.QUIZ_CREATE)
        manager.check_and_consume("vip", Action.IMAGE_UPLOAD)
        stats = manager.get_all_usage_stats()

        assert stats["accounts"] == 2
        assert stats["premium_accounts"] == 1
        assert stats["total_quizzes_created"] == 1
        assert stats["total_image_uploads"] == 1
