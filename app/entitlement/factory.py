"""
Factory for creating entitlement components.
"""

from pathlib import Path
from typing import Callable, List, Optional

from app.json_store import JsonFileStore
from .models import EntitlementConfig, FREE_IMAGE_LIMIT, FREE_QUIZ_LIMIT
from .manager import EntitlementManager
from .routes import create_entitlement_routes


def create_entitlement_module(
    data_dir: Path,
    user_service,
    free_image_limit: int = FREE_IMAGE_LIMIT,
    free_quiz_limit: int = FREE_QUIZ_LIMIT,
    premium_users: List[str] = None,
    bonus_quota_provider: Optional[Callable[[str], int]] = None,
) -> dict:
    """
    Create entitlement module.

    Args:
        data_dir: Directory for the usage data file
        user_service: UserService used to identify the account
        free_image_limit: Lifetime free image uploads
        free_quiz_limit: Lifetime free quizzes before bonus quota
        premium_users: Configured premium user IDs
        bonus_quota_provider: Returns the bonus quiz quota for a uid

    Returns:
        Dictionary with:
        - manager: EntitlementManager instance
        - config: EntitlementConfig instance
        - blueprint: Flask blueprint
    """
    config = EntitlementConfig(
        free_image_limit=free_image_limit,
        free_quiz_limit=free_quiz_limit,
        premium_users=premium_users or []
    )

    manager = EntitlementManager(
        config=config,
        store=JsonFileStore(data_dir / "usage.json"),
        bonus_quota_provider=bonus_quota_provider
    )

    return {
        "manager": manager,
        "config": config,
        "blueprint": create_entitlement_routes(manager, user_service)
    }
