"""
Models package for AI-generated study content.
"""

from .content_models import (
    TargetAudience,
    QuizGenerationRequest,
    QuizQuestion,
    GeneratedQuiz,
    FlashcardGenerationRequest,
    Flashcard,
    GeneratedFlashcards,
    HomeworkRequest,
    HomeworkSolution,
    MAX_FLASHCARDS,
)
