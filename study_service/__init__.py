# Study service package: XP arithmetic and AI content generation

from .xp import (
    LevelInfo,
    MilestoneReward,
    xp_threshold,
    level_from_xp,
    level_info,
    milestone_bonus_xp,
    bonus_quiz_quota,
    quiz_xp_award,
    all_milestones,
    milestones_crossed,
)
from .errors import (
    QuizzifyError,
    InputValidationError,
    GenerationFailedError,
    TemporarilyUnavailableError,
    SaveFailedError,
    QuotaExceededError,
    StoreUnavailableError,
    RecordNotFoundError,
)
from .llm_utils import LLMProvider, llm_invoke, extract_json_from_response
from .quiz_generator import QuizGenerator
from .flashcard_generator import FlashcardGenerator
from .homework_solver import HomeworkSolver
