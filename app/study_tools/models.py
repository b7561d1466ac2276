"""
Study tool records: quiz attempts, flashcard decks and homework answers.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from study_service.errors import InputValidationError, RecordNotFoundError


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def now_iso() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


@dataclass
class AttemptQuestion:
    """One question of a quiz attempt, with the user's answer once given."""
    id: str
    question: str
    options: List[str]
    correct_answer: int
    explanation: str = ""
    user_answer: Optional[int] = None

    @property
    def answered(self) -> bool:
        return self.user_answer is not None

    @property
    def is_correct(self) -> bool:
        return self.user_answer == self.correct_answer

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "user_answer": self.user_answer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttemptQuestion":
        return cls(
            id=data["id"],
            question=data["question"],
            options=list(data["options"]),
            correct_answer=data["correct_answer"],
            explanation=data.get("explanation", ""),
            user_answer=data.get("user_answer"),
        )


@dataclass
class QuizAttempt:
    """
    A generated quiz being taken.

    ``completed`` turns true when every question has an answer; ``score`` is
    only defined from then on. ``xp_awarded`` records the single XP award.
    """
    id: str
    title: str
    topic: str
    questions: List[AttemptQuestion]
    created_at: str = field(default_factory=now_iso)
    xp_awarded: bool = False
    xp_earned: Optional[int] = None

    @property
    def completed(self) -> bool:
        return bool(self.questions) and all(q.answered for q in self.questions)

    @property
    def correct_count(self) -> int:
        return sum(1 for q in self.questions if q.answered and q.is_correct)

    @property
    def score(self) -> Optional[int]:
        return self.correct_count if self.completed else None

    def answer(self, question_index: int, answer_index: int) -> AttemptQuestion:
        """Record an answer. Answers are final once the attempt completes."""
        if self.completed:
            raise InputValidationError("Quiz is already completed")
        if not 0 <= question_index < len(self.questions):
            raise InputValidationError(f"Question index {question_index} is out of range")
        question = self.questions[question_index]
        if not 0 <= answer_index < len(question.options):
            raise InputValidationError(f"Answer index {answer_index} is out of range")
        question.user_answer = answer_index
        return question

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "topic": self.topic,
            "questions": [q.to_dict() for q in self.questions],
            "created_at": self.created_at,
            "completed": self.completed,
            "score": self.score,
            "xp_awarded": self.xp_awarded,
            "xp_earned": self.xp_earned,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizAttempt":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            topic=data.get("topic", ""),
            questions=[AttemptQuestion.from_dict(q) for q in data.get("questions", [])],
            created_at=data.get("created_at") or now_iso(),
            xp_awarded=data.get("xp_awarded", False),
            xp_earned=data.get("xp_earned"),
        )


@dataclass
class DeckCard:
    id: str
    front: str
    back: str
    mastered: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "front": self.front, "back": self.back, "mastered": self.mastered}

    @classmethod
    def from_dict(cls, data: dict) -> "DeckCard":
        return cls(
            id=data["id"],
            front=data["front"],
            back=data["back"],
            mastered=data.get("mastered", False),
        )


# Results of moving forward in a deck
DECK_NEXT_CARD = "next_card"
DECK_NEW_CYCLE = "new_cycle"
DECK_TRIAL_COMPLETE = "trial_complete"


@dataclass
class FlashcardDeck:
    """A deck being studied card by card, cycle after cycle."""
    id: str
    title: str
    cards: List[DeckCard]
    current_index: int = 0
    cycle_count: int = 0
    is_free_trial: bool = False
    created_at: str = field(default_factory=now_iso)

    def advance(self, can_repeat: bool) -> str:
        """
        Move to the next card. At the end of the deck start a new cycle,
        unless ``can_repeat`` is false, in which case stay on the last card.
        """
        if self.current_index < len(self.cards) - 1:
            self.current_index += 1
            return DECK_NEXT_CARD
        if not can_repeat:
            return DECK_TRIAL_COMPLETE
        self.current_index = 0
        self.cycle_count += 1
        return DECK_NEW_CYCLE

    def go_back(self) -> None:
        if self.current_index > 0:
            self.current_index -= 1

    def card(self, card_id: str) -> DeckCard:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise RecordNotFoundError(f"Card {card_id} not found")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "cards": [c.to_dict() for c in self.cards],
            "current_index": self.current_index,
            "cycle_count": self.cycle_count,
            "is_free_trial": self.is_free_trial,
            "created_at": self.created_at,
            "mastered_count": sum(1 for c in self.cards if c.mastered),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FlashcardDeck":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            cards=[DeckCard.from_dict(c) for c in data.get("cards", [])],
            current_index=data.get("current_index", 0),
            cycle_count=data.get("cycle_count", 0),
            is_free_trial=data.get("is_free_trial", False),
            created_at=data.get("created_at") or now_iso(),
        )


@dataclass
class HomeworkEntry:
    id: str
    question: str
    steps: List[str]
    final_answer: str
    target_audience: str
    had_image: bool = False
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "steps": list(self.steps),
            "final_answer": self.final_answer,
            "target_audience": self.target_audience,
            "had_image": self.had_image,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HomeworkEntry":
        return cls(
            id=data["id"],
            question=data.get("question", ""),
            steps=list(data.get("steps", [])),
            final_answer=data.get("final_answer", ""),
            target_audience=data.get("target_audience", "all-grades"),
            had_image=data.get("had_image", False),
            created_at=data.get("created_at") or now_iso(),
        )


@dataclass
class StudyOutcome:
    """Result of a gated study action."""
    success: bool
    data: Optional[dict] = None
    entitlement: Optional[dict] = None  # EntitlementResult.to_dict() when denied

    def to_dict(self) -> dict:
        result = {"success": self.success}
        if self.data is not None:
            result.update(self.data)
        if self.entitlement is not None:
            result["entitlement"] = self.entitlement
        return result
