"""
Factory for creating the study tools module.
"""
from pathlib import Path

from app.entitlement import EntitlementManager
from app.progress import ProgressService
from config_manager import LLMConfig
from study_service.flashcard_generator import FlashcardGenerator
from study_service.homework_solver import HomeworkSolver
from study_service.quiz_generator import QuizGenerator

from .routes import create_study_tools_routes
from .services import StudyService
from .study_data import StudyDataManager


def create_study_tools_module(
    user_data_dir: Path,
    user_service,
    entitlement_manager: EntitlementManager,
    progress_service: ProgressService,
    llm_config: LLMConfig,
    quiz_generator: QuizGenerator = None,
    flashcard_generator: FlashcardGenerator = None,
    homework_solver: HomeworkSolver = None,
) -> dict:
    """
    Create study tools module.

    Args:
        user_data_dir: Directory for per-user study data files
        user_service: UserService used to identify the account
        entitlement_manager: Gate for quota-limited actions
        progress_service: Receives XP awards from completed quizzes
        llm_config: LLM gateway settings for the generators
        quiz_generator, flashcard_generator, homework_solver: Optional
            prebuilt generators; built from llm_config when omitted

    Returns:
        Dictionary with:
        - service: StudyService instance
        - study_data: StudyDataManager instance
        - blueprint: Flask blueprint
    """
    study_data = StudyDataManager(user_data_dir)

    service = StudyService(
        entitlement_manager=entitlement_manager,
        progress_service=progress_service,
        study_data_manager=study_data,
        quiz_generator=quiz_generator or QuizGenerator(llm_config),
        flashcard_generator=flashcard_generator or FlashcardGenerator(llm_config),
        homework_solver=homework_solver or HomeworkSolver(llm_config),
    )

    return {
        "service": service,
        "study_data": study_data,
        "blueprint": create_study_tools_routes(service, user_service)
    }
