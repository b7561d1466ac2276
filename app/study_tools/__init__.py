"""
Study tools: homework help, quizzes and flashcard decks.
"""

from .models import FlashcardDeck, HomeworkEntry, QuizAttempt, StudyOutcome
from .services import StudyService
from .study_data import StudyData, StudyDataManager

__all__ = [
    "FlashcardDeck",
    "HomeworkEntry",
    "QuizAttempt",
    "StudyOutcome",
    "StudyService",
    "StudyData",
    "StudyDataManager",
]
