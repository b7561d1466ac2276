"""
Factory for creating the progress module.
"""
from pathlib import Path

from app.json_store import JsonFileStore
from .services import ProgressService
from .routes import create_progress_routes


def create_progress_module(data_dir: Path, user_service) -> dict:
    """Create progress module with store, service and routes.

    Args:
        data_dir: Directory holding progress.json
        user_service: UserService used to identify the account

    Returns:
        Dictionary containing the store, service and blueprint
    """
    store = JsonFileStore(data_dir / "progress.json")
    service = ProgressService(store)
    blueprint = create_progress_routes(service, user_service)

    return {
        "store": store,
        "service": service,
        "blueprint": blueprint
    }
