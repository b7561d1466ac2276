"""
Request and response models for the AI content generators.

Field aliases match the camelCase keys the web client sends, so payloads can
be validated straight from request JSON.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_QUESTION_COUNT = 3
MAX_QUESTION_COUNT = 20
DEFAULT_QUESTION_COUNT = 5
MIN_OPTIONS = 2
MAX_OPTIONS = 4
MAX_FLASHCARDS = 20


class TargetAudience(str, Enum):
    """Who a homework explanation is written for."""
    MIDDLE_SCHOOL = "middle-school"
    HIGH_SCHOOL = "high-school"
    ALL_GRADES = "all-grades"


class QuizGenerationRequest(BaseModel):
    """Input for quiz generation; needs a topic, notes or an image."""
    model_config = ConfigDict(populate_by_name=True)

    topic: Optional[str] = Field(default=None, description="Quiz topic")
    notes: Optional[str] = Field(default=None, description="Study notes to quiz on")
    image_data: Optional[str] = Field(
        default=None, alias="imageData", description="Base64 image, with or without data: prefix"
    )
    question_count: int = Field(
        default=DEFAULT_QUESTION_COUNT,
        ge=MIN_QUESTION_COUNT,
        le=MAX_QUESTION_COUNT,
        alias="questionCount",
        description="Number of questions to generate",
    )

    @model_validator(mode="after")
    def _require_source(self) -> "QuizGenerationRequest":
        if not any(value and value.strip() for value in (self.topic, self.notes, self.image_data)):
            raise ValueError("Either topic, notes or imageData is required")
        return self

    @property
    def title(self) -> str:
        if self.topic and self.topic.strip():
            return self.topic.strip()
        if self.image_data:
            return "Quiz from image"
        return "Quiz from notes"


class QuizQuestion(BaseModel):
    """A single multiple-choice question."""
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(description="Question text")
    options: List[str] = Field(description="Answer options (2-4)")
    correct_answer: int = Field(alias="correctAnswer", description="0-based index of the right option")
    explanation: Optional[str] = Field(default=None, description="Why the answer is right")

    def is_well_formed(self) -> bool:
        return (
            bool(self.question.strip())
            and MIN_OPTIONS <= len(self.options) <= MAX_OPTIONS
            and 0 <= self.correct_answer < len(self.options)
        )


class GeneratedQuiz(BaseModel):
    """Questions returned by the quiz generator."""
    questions: List[QuizQuestion] = Field(default_factory=list)


class FlashcardGenerationRequest(BaseModel):
    """Input for flashcard generation; needs notes or an image."""
    model_config = ConfigDict(populate_by_name=True)

    notes: Optional[str] = Field(default=None, description="Study notes")
    image_data: Optional[str] = Field(default=None, alias="imageData", description="Base64 image")
    title: Optional[str] = Field(default=None, description="Deck title")

    @model_validator(mode="after")
    def _require_source(self) -> "FlashcardGenerationRequest":
        if not any(value and value.strip() for value in (self.notes, self.image_data)):
            raise ValueError("Either notes or imageData is required")
        return self


class Flashcard(BaseModel):
    """Front/back study card."""
    front: str
    back: str


class GeneratedFlashcards(BaseModel):
    flashcards: List[Flashcard] = Field(default_factory=list)


class HomeworkRequest(BaseModel):
    """Input for the homework solver."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    question: str = Field(default="", description="Homework question text")
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="Image URL or data URL")
    target_audience: TargetAudience = Field(
        default=TargetAudience.ALL_GRADES, alias="targetAudience"
    )
    question_specifier: Optional[str] = Field(
        default=None, alias="questionSpecifier", description="Which problem in the image to solve"
    )

    @model_validator(mode="after")
    def _require_question_or_image(self) -> "HomeworkRequest":
        if len(self.question.strip()) < 3 and not self.image_url:
            raise ValueError("A question of at least 3 characters or an image is required")
        return self


class HomeworkSolution(BaseModel):
    """Step-by-step solution."""
    model_config = ConfigDict(populate_by_name=True)

    steps: List[str] = Field(default_factory=list)
    final_answer: str = Field(default="See steps above", alias="finalAnswer")
