"""
Data models for the entitlement system.
"""

from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Optional, List
from datetime import datetime

FREE_IMAGE_LIMIT = 5
FREE_QUIZ_LIMIT = 5


class Action(Enum):
    """Rate-limited actions."""
    IMAGE_UPLOAD = "image_upload"
    QUIZ_CREATE = "quiz_create"
    FLASHCARD_DECK_CREATE = "flashcard_deck_create"


@dataclass
class EntitlementConfig:
    """Free-tier limits and configured premium accounts."""
    free_image_limit: int = FREE_IMAGE_LIMIT
    free_quiz_limit: int = FREE_QUIZ_LIMIT
    premium_users: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UsageCounters:
    """Lifetime usage for one account. Counters only ever go up."""
    image_uploads: int = 0
    quizzes_created: int = 0
    decks_created: int = 0
    free_deck_used: bool = False

    def to_dict(self) -> dict:
        return {
            "image_uploads": self.image_uploads,
            "quizzes_created": self.quizzes_created,
            "decks_created": self.decks_created,
            "free_deck_used": self.free_deck_used,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "UsageCounters":
        data = data or {}
        return cls(
            image_uploads=data.get("image_uploads", 0),
            quizzes_created=data.get("quizzes_created", 0),
            decks_created=data.get("decks_created", 0),
            free_deck_used=data.get("free_deck_used", False),
        )


@dataclass(frozen=True)
class EntitlementState:
    """Everything the gate needs to decide for one account."""
    is_premium: bool = False
    used: UsageCounters = field(default_factory=UsageCounters)
    bonus_quizzes: int = 0

    def with_used(self, **changes) -> "EntitlementState":
        return replace(self, used=replace(self.used, **changes))


@dataclass
class EntitlementResult:
    """Result of an entitlement check."""
    allowed: bool
    action: Action
    is_premium: bool = False
    reason: Optional[str] = None  # "image_limit", "quiz_limit", "free_deck_used"
    message: Optional[str] = None  # User-facing message
    remaining: Optional[int] = None  # None means unlimited
    upgrade_required: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "allowed": self.allowed,
            "action": self.action.value,
            "is_premium": self.is_premium,
            "reason": self.reason,
            "message": self.message,
            "remaining": self.remaining,
            "upgrade_required": self.upgrade_required
        }


@dataclass
class UsageRecord:
    """Persisted usage entry: counters plus the admin-granted premium flag."""
    counters: UsageCounters = field(default_factory=UsageCounters)
    premium: bool = False
    last_updated: Optional[str] = None  # ISO format datetime

    def to_dict(self) -> dict:
        data = self.counters.to_dict()
        data["premium"] = self.premium
        data["last_updated"] = self.last_updated or datetime.now().isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "UsageRecord":
        data = data or {}
        return cls(
            counters=UsageCounters.from_dict(data),
            premium=data.get("premium", False),
            last_updated=data.get("last_updated")
        )
