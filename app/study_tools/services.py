"""
Study tools service: homework, quizzes and flashcard decks behind the
entitlement gate, with quiz results feeding account progress.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from app.entitlement import Action, EntitlementManager
from app.progress import ProgressService
from study_service.errors import InputValidationError, SaveFailedError
from study_service.flashcard_generator import FlashcardGenerator
from study_service.homework_solver import HomeworkSolver
from study_service.models import FlashcardGenerationRequest, HomeworkRequest, QuizGenerationRequest
from study_service.quiz_generator import QuizGenerator

from .models import (
    AttemptQuestion,
    DECK_TRIAL_COMPLETE,
    DeckCard,
    FlashcardDeck,
    HomeworkEntry,
    QuizAttempt,
    StudyOutcome,
    new_id,
)
from .study_data import StudyDataManager

logger = logging.getLogger(__name__)


def _validate(model, payload: Dict[str, Any]):
    try:
        return model.model_validate(payload or {})
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InputValidationError(messages) from e


class StudyService:
    """
    Runs gated study actions.

    Every gated action follows the same order: a read-only entitlement check,
    the AI call, then an atomic check-and-consume. A failed generation leaves
    usage untouched; a request that lost a race for the last free use is
    denied even though content was generated.
    """

    def __init__(
        self,
        entitlement_manager: EntitlementManager,
        progress_service: ProgressService,
        study_data_manager: StudyDataManager,
        quiz_generator: QuizGenerator,
        flashcard_generator: FlashcardGenerator,
        homework_solver: HomeworkSolver,
    ):
        self.entitlements = entitlement_manager
        self.progress = progress_service
        self.study_data = study_data_manager
        self.quiz_generator = quiz_generator
        self.flashcard_generator = flashcard_generator
        self.homework_solver = homework_solver

    def _denied(self, uid: str, action: Action, result) -> StudyOutcome:
        logger.info(f"{action.value} denied for {uid}: {result.reason}")
        return StudyOutcome(success=False, entitlement=result.to_dict())

    # =====================
    # Homework
    # =====================

    def solve_homework(self, uid: str, payload: Dict[str, Any]) -> StudyOutcome:
        """Solve a homework question; an attached image uses an image upload."""
        request = _validate(HomeworkRequest, payload)
        has_image = bool(request.image_url)

        if has_image:
            check = self.entitlements.check_only(uid, Action.IMAGE_UPLOAD)
            if not check.allowed:
                return self._denied(uid, Action.IMAGE_UPLOAD, check)

        solution = self.homework_solver.solve(request)

        if has_image:
            consumed = self.entitlements.check_and_consume(uid, Action.IMAGE_UPLOAD)
            if not consumed.allowed:
                return self._denied(uid, Action.IMAGE_UPLOAD, consumed)

        entry = HomeworkEntry(
            id=new_id(),
            question=request.question.strip(),
            steps=solution.steps,
            final_answer=solution.final_answer,
            target_audience=str(getattr(request.target_audience, "value", request.target_audience)),
            had_image=has_image,
        )
        self.study_data.get(uid).add_homework(entry)
        return StudyOutcome(success=True, data={"answer": entry.to_dict()})

    def homework_history(self, uid: str) -> List[dict]:
        return [entry.to_dict() for entry in self.study_data.get(uid).load_homework()]

    # =====================
    # Quizzes
    # =====================

    def create_quiz(self, uid: str, payload: Dict[str, Any]) -> StudyOutcome:
        """Generate a quiz and start an attempt for it."""
        request = _validate(QuizGenerationRequest, payload)

        check = self.entitlements.check_only(uid, Action.QUIZ_CREATE)
        if not check.allowed:
            return self._denied(uid, Action.QUIZ_CREATE, check)

        generated = self.quiz_generator.generate(request)

        consumed = self.entitlements.check_and_consume(uid, Action.QUIZ_CREATE)
        if not consumed.allowed:
            return self._denied(uid, Action.QUIZ_CREATE, consumed)

        attempt = QuizAttempt(
            id=new_id(),
            title=request.title,
            topic=(request.topic or "").strip(),
            questions=[
                AttemptQuestion(
                    id=str(index + 1),
                    question=q.question,
                    options=q.options,
                    correct_answer=q.correct_answer,
                    explanation=q.explanation or "",
                )
                for index, q in enumerate(generated.questions)
            ],
        )
        self.study_data.get(uid).save_quiz(attempt)
        logger.info(f"Created quiz {attempt.id} for {uid} with {len(attempt.questions)} questions")
        return StudyOutcome(
            success=True,
            data={"quiz": attempt.to_dict(), "entitlement": consumed.to_dict()},
        )

    def answer_question(self, uid: str, quiz_id: str, question_index: int, answer_index: int) -> StudyOutcome:
        """
        Record an answer. The answer that completes the attempt triggers the
        XP award for it.
        """
        data = self.study_data.get(uid)
        with data.lock:
            attempt = data.get_quiz(quiz_id)
            question = attempt.answer(question_index, answer_index)
            data.save_quiz(attempt)

            result = {
                "correct": question.is_correct,
                "correct_answer": question.correct_answer,
                "explanation": question.explanation,
            }
            if attempt.completed:
                result["award"] = self._award(uid, data, attempt)
            result["quiz"] = attempt.to_dict()

        return StudyOutcome(success=True, data=result)

    def claim_quiz_xp(self, uid: str, quiz_id: str) -> StudyOutcome:
        """Retry the XP award for a completed attempt whose award was not saved."""
        data = self.study_data.get(uid)
        with data.lock:
            attempt = data.get_quiz(quiz_id)
            if not attempt.completed:
                raise InputValidationError("Quiz is not completed yet")
            if attempt.xp_awarded:
                raise InputValidationError("XP for this quiz was already awarded")
            award = self._award(uid, data, attempt)
            return StudyOutcome(success=True, data={"award": award, "quiz": attempt.to_dict()})

    def _award(self, uid: str, data, attempt: QuizAttempt) -> dict:
        """
        Award XP once per attempt. Called with the study data lock held.

        The progress store records the attempt id with the XP, so it stays
        the authority if marking the attempt below fails; a later claim then
        reports the committed award without adding XP again.
        """
        if attempt.xp_awarded:
            return {"xp_earned": attempt.xp_earned, "already_awarded": True}

        award = self.progress.award_quiz_xp(
            uid, attempt.correct_count, len(attempt.questions), attempt_id=attempt.id
        )
        attempt.xp_awarded = True
        attempt.xp_earned = award.xp_earned
        try:
            data.save_quiz(attempt)
        except SaveFailedError as e:
            logger.warning(f"XP for quiz {attempt.id} committed but the attempt was not marked: {e}")
        return award.to_dict()

    def quiz_history(self, uid: str) -> List[dict]:
        return [quiz.to_dict() for quiz in self.study_data.get(uid).load_quizzes()]

    # =====================
    # Flashcard decks
    # =====================

    def create_deck(self, uid: str, payload: Dict[str, Any]) -> StudyOutcome:
        """Generate flashcards and save them as a new deck."""
        request = _validate(FlashcardGenerationRequest, payload)

        check = self.entitlements.check_only(uid, Action.FLASHCARD_DECK_CREATE)
        if not check.allowed:
            return self._denied(uid, Action.FLASHCARD_DECK_CREATE, check)

        generated = self.flashcard_generator.generate(request)

        consumed = self.entitlements.check_and_consume(uid, Action.FLASHCARD_DECK_CREATE)
        if not consumed.allowed:
            return self._denied(uid, Action.FLASHCARD_DECK_CREATE, consumed)

        deck = FlashcardDeck(
            id=new_id(),
            title=(request.title or "").strip() or "Flashcards",
            cards=[DeckCard(id=new_id(), front=c.front, back=c.back) for c in generated.flashcards],
            is_free_trial=not consumed.is_premium,
        )
        self.study_data.get(uid).save_deck(deck)
        logger.info(f"Created deck {deck.id} for {uid} with {len(deck.cards)} cards")
        return StudyOutcome(success=True, data={"deck": deck.to_dict()})

    def list_decks(self, uid: str) -> List[dict]:
        return [deck.to_dict() for deck in self.study_data.get(uid).load_decks()]

    def next_card(self, uid: str, deck_id: str) -> StudyOutcome:
        """
        Advance through a deck. A free-trial deck cannot be repeated without
        premium: reaching its end asks for an upgrade instead.
        """
        data = self.study_data.get(uid)
        with data.lock:
            deck = data.get_deck(deck_id)
            can_repeat = not deck.is_free_trial or self.entitlements.is_premium(uid)
            status = deck.advance(can_repeat)
            data.save_deck(deck)

        result = {"status": status, "deck": deck.to_dict()}
        if status == DECK_TRIAL_COMPLETE:
            result["upgrade_required"] = True
        return StudyOutcome(success=True, data=result)

    def previous_card(self, uid: str, deck_id: str) -> StudyOutcome:
        data = self.study_data.get(uid)
        with data.lock:
            deck = data.get_deck(deck_id)
            deck.go_back()
            data.save_deck(deck)
        return StudyOutcome(success=True, data={"deck": deck.to_dict()})

    def set_card_mastered(self, uid: str, deck_id: str, card_id: str, mastered: bool = True) -> StudyOutcome:
        data = self.study_data.get(uid)
        with data.lock:
            deck = data.get_deck(deck_id)
            deck.card(card_id).mastered = mastered
            data.save_deck(deck)
        return StudyOutcome(success=True, data={"deck": deck.to_dict()})
