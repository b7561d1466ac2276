"""
Data models for account progress.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from study_service.xp import (
    LevelInfo,
    MilestoneReward,
    bonus_quiz_quota,
    level_from_xp,
    level_info,
)


@dataclass
class AccountProgress:
    """Persisted XP record for one account; level and bonus derive from xp."""
    xp: int = 0
    level: int = 1
    bonus_quizzes: int = 0
    updated_at: Optional[str] = None  # ISO format datetime
    # quiz attempt id -> XP it earned
    awarded_attempts: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_xp(
        cls,
        xp: int,
        updated_at: Optional[str] = None,
        awarded_attempts: Optional[Dict[str, int]] = None,
    ) -> "AccountProgress":
        xp = max(0, int(xp))
        level = level_from_xp(xp)
        return cls(
            xp=xp,
            level=level,
            bonus_quizzes=bonus_quiz_quota(level),
            updated_at=updated_at,
            awarded_attempts=dict(awarded_attempts or {}),
        )

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "AccountProgress":
        """Rebuild from a stored record; level and bonus are recomputed from xp."""
        if not data:
            return cls()
        return cls.from_xp(
            data.get("xp", 0),
            updated_at=data.get("updated_at"),
            awarded_attempts=data.get("awarded_attempts"),
        )

    def to_dict(self) -> dict:
        return {
            "xp": self.xp,
            "level": self.level,
            "bonus_quizzes": self.bonus_quizzes,
            "updated_at": self.updated_at,
        }

    def to_record(self) -> dict:
        """Stored form: the public fields plus the awarded attempt ledger."""
        record = self.to_dict()
        record["awarded_attempts"] = dict(self.awarded_attempts)
        return record

    def level_info(self) -> LevelInfo:
        return level_info(self.xp)

    def with_added_xp(self, amount: int) -> "AccountProgress":
        return AccountProgress.from_xp(
            self.xp + amount,
            updated_at=datetime.now().isoformat(),
            awarded_attempts=self.awarded_attempts,
        )


@dataclass
class XpAwardResult:
    """Outcome of committing a quiz award."""
    xp_earned: int
    previous_level: int
    progress: AccountProgress
    milestones: List[MilestoneReward] = field(default_factory=list)
    already_awarded: bool = False

    @property
    def new_level(self) -> int:
        return self.progress.level

    @property
    def leveled_up(self) -> bool:
        return self.progress.level > self.previous_level

    def to_dict(self) -> dict:
        return {
            "xp_earned": self.xp_earned,
            "new_level": self.new_level,
            "leveled_up": self.leveled_up,
            "new_bonus_quizzes": self.progress.bonus_quizzes,
            "total_xp": self.progress.xp,
            "milestones": [m.to_dict() for m in self.milestones],
            "already_awarded": self.already_awarded,
        }
