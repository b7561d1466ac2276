"""
Progress service: the authority for XP, level and bonus quiz quota.
"""

import logging
from typing import Optional, Tuple

from app.json_store import JsonFileStore
from study_service.xp import milestones_crossed, quiz_xp_award

from .models import AccountProgress, XpAwardResult

logger = logging.getLogger(__name__)


class ProgressService:
    """Reads and commits account progress through the progress store."""

    def __init__(self, store: JsonFileStore):
        self.store = store

    def get_progress(self, uid: str) -> AccountProgress:
        """Fresh read of the stored record; never served from a cache."""
        return AccountProgress.from_dict(self.store.get(uid))

    def get_bonus_quizzes(self, uid: str) -> int:
        return self.get_progress(uid).bonus_quizzes

    def award_quiz_xp(
        self,
        uid: str,
        correct_count: int,
        total_count: int,
        attempt_id: Optional[str] = None,
    ) -> XpAwardResult:
        """
        Compute and commit the XP for one completed quiz.

        The award uses the level held in the store at commit time. When
        ``attempt_id`` is given it is recorded in the same store update, and
        a second award for that attempt commits nothing and reports the
        first award instead.

        Raises:
            InputValidationError: for an empty quiz or impossible score
            SaveFailedError: if the store write fails (nothing is committed)
        """
        previous_award = {}

        def _apply(record):
            current = AccountProgress.from_dict(record)
            if attempt_id and attempt_id in current.awarded_attempts:
                previous_award["xp"] = current.awarded_attempts[attempt_id]
                return current.to_record()
            earned = quiz_xp_award(correct_count, total_count, current.level)
            updated = current.with_added_xp(earned)
            if attempt_id:
                updated.awarded_attempts[attempt_id] = earned
            return updated.to_record()

        old_record, new_record = self.store.update(uid, _apply)
        before, after = self._pair(old_record, new_record)

        if previous_award:
            logger.info(f"Quiz attempt {attempt_id} already awarded to {uid}; nothing committed")
            return XpAwardResult(
                xp_earned=previous_award["xp"],
                previous_level=after.level,
                progress=after,
                already_awarded=True,
            )

        xp_earned = after.xp - before.xp

        result = XpAwardResult(
            xp_earned=xp_earned,
            previous_level=before.level,
            progress=after,
            milestones=milestones_crossed(before.level, after.level),
        )
        logger.info(
            f"Awarded {xp_earned} XP to {uid}: {before.xp} -> {after.xp}, "
            f"level {before.level} -> {after.level}"
        )
        if result.leveled_up:
            logger.info(f"Level up for {uid}: reached level {after.level}")
        return result

    @staticmethod
    def _pair(old_record, new_record) -> Tuple[AccountProgress, AccountProgress]:
        return AccountProgress.from_dict(old_record), AccountProgress.from_dict(new_record)
