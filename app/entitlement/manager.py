"""
Entitlement manager: persisted usage counters behind the entitlement gate.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from app.json_store import JsonFileStore

from . import gate
from .models import (
    Action,
    EntitlementConfig,
    EntitlementResult,
    EntitlementState,
    UsageRecord,
)

logger = logging.getLogger(__name__)


class EntitlementManager:
    """
    Checks and consumes free-tier usage for accounts.

    Premium comes from the configured premium user list or the stored
    premium flag. Bonus quizzes are read from the progress store through
    ``bonus_quota_provider`` on every check.
    """

    def __init__(
        self,
        config: EntitlementConfig,
        store: JsonFileStore,
        bonus_quota_provider: Optional[Callable[[str], int]] = None,
    ):
        """
        Initialize EntitlementManager.

        Args:
            config: EntitlementConfig with limits and premium users
            store: JsonFileStore holding usage records
            bonus_quota_provider: Returns the bonus quiz quota for a uid
        """
        self.config = config
        self.store = store
        self.bonus_quota_provider = bonus_quota_provider or (lambda uid: 0)

    def _load_record(self, uid: str) -> UsageRecord:
        return UsageRecord.from_dict(self.store.get(uid))

    def _state_for(self, uid: str, record: UsageRecord) -> EntitlementState:
        return EntitlementState(
            is_premium=record.premium or uid in self.config.premium_users,
            used=record.counters,
            bonus_quizzes=self.bonus_quota_provider(uid),
        )

    def is_premium(self, uid: str) -> bool:
        return self._state_for(uid, self._load_record(uid)).is_premium

    def get_state(self, uid: str) -> EntitlementState:
        return self._state_for(uid, self._load_record(uid))

    def check_only(self, uid: str, action: Action) -> EntitlementResult:
        """
        Check an action without consuming. Never changes stored counters.
        """
        return gate.evaluate(action, self.get_state(uid), self.config)

    def check_and_consume(self, uid: str, action: Action) -> EntitlementResult:
        """
        Check and, if permitted, count one use of ``action``.

        The read, the gate decision and the increment happen under the store
        lock as one conditional update, so concurrent requests for the same
        account cannot both pass on the last remaining use.

        Raises:
            SaveFailedError: if the counter could not be persisted
        """
        logger.info(f"Entitlement check: uid={uid}, action={action.value}")

        with self.store.lock:
            data = self.store.load()
            record = UsageRecord.from_dict(data.get(uid))
            state = self._state_for(uid, record)
            result = gate.evaluate(action, state, self.config)

            if not result.allowed:
                logger.info(f"Entitlement denied: uid={uid}, action={action.value}, reason={result.reason}")
                return result

            new_state = gate.record_usage(action, state, self.config)
            record.counters = new_state.used
            record.last_updated = datetime.now().isoformat()
            data[uid] = record.to_dict()
            self.store.save(data)

        result.remaining = gate.remaining(action, new_state, self.config)
        if result.remaining is not None:
            result.message = f"{result.remaining} remaining"
        logger.info(f"Consumed {action.value} for {uid}: {new_state.used.to_dict()}")
        return result

    def set_premium(self, uid: str, premium: bool) -> None:
        """Set or clear the stored premium flag for an account."""
        def _set(raw):
            record = UsageRecord.from_dict(raw)
            record.premium = premium
            record.last_updated = datetime.now().isoformat()
            return record.to_dict()

        self.store.update(uid, _set)
        logger.info(f"Set premium for {uid}: {premium}")

    def get_usage_info(self, uid: str) -> dict:
        """Usage and remaining allowance per action, for display."""
        state = self.get_state(uid)
        return {
            "is_premium": state.is_premium,
            "used": state.used.to_dict(),
            "bonus_quizzes": state.bonus_quizzes,
            "limits": {
                "free_image_limit": self.config.free_image_limit,
                "free_quiz_limit": self.config.free_quiz_limit,
            },
            "actions": {
                action.value: gate.evaluate(action, state, self.config).to_dict()
                for action in Action
            },
        }

    def get_all_usage_stats(self) -> dict:
        """Get all usage statistics for admin dashboard."""
        data = self.store.load()
        records = {uid: UsageRecord.from_dict(raw) for uid, raw in data.items()}
        return {
            "accounts": len(records),
            "premium_accounts": sum(
                1 for uid, r in records.items() if r.premium or uid in self.config.premium_users
            ),
            "total_image_uploads": sum(r.counters.image_uploads for r in records.values()),
            "total_quizzes_created": sum(r.counters.quizzes_created for r in records.values()),
            "total_decks_created": sum(r.counters.decks_created for r in records.values()),
        }
