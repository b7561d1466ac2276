import argparse
import logging
from pathlib import Path

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager, LLMConfig

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from study_service.errors import QuizzifyError
from study_service.logging_config import setup_logging

from app.http_errors import error_response

from app.entitlement.factory import create_entitlement_module
from app.progress.factory import create_progress_module
from app.study_tools.factory import create_study_tools_module
from app.user_management.factory import create_user_management_module

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent


def _resolve(path) -> Path:
    path = Path(path)
    return path if path.is_absolute() else BASE_DIR / path


def create_app(
    config_manager: ConfigManager = None,
    data_dir: Path = None,
    user_data_dir: Path = None,
    llm_config: LLMConfig = None,
    quiz_generator=None,
    flashcard_generator=None,
    homework_solver=None,
) -> Flask:
    """
    Build the Flask application.

    Directories and the LLM config default to the loaded configuration;
    generators can be passed in prebuilt (tests pass mocks).
    """
    config_manager = config_manager or ConfigManager()
    paths_config = config_manager.get_paths_config()
    app_config = config_manager.get_app_config()
    quota_settings = config_manager.get_quota_settings()
    llm_config = llm_config or config_manager.get_llm_config()

    data_dir = Path(data_dir) if data_dir else _resolve(paths_config.data_dir)
    user_data_dir = Path(user_data_dir) if user_data_dir else _resolve(paths_config.user_data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    user_data_dir.mkdir(parents=True, exist_ok=True)

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
        x_host  = 1,     # trust 1 hop for X-Forwarded-Host
        x_prefix= 1)     # <-- pay attention to X-Forwarded-Prefix

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    modules = {}

    def account_snapshot(uid: str) -> dict:
        """Stored progress and usage, read fresh for login."""
        progress = modules["progress"]["service"].get_progress(uid)
        return {
            "progress": progress.to_dict(),
            "level_info": progress.level_info().to_dict(),
            "entitlements": modules["entitlement"]["manager"].get_usage_info(uid),
        }

    modules["user_management"] = create_user_management_module(
        admin_user_ids=app_config.admin_user_ids,
        account_snapshot=account_snapshot
    )
    user_service = modules["user_management"]["service"]

    modules["progress"] = create_progress_module(data_dir=data_dir, user_service=user_service)
    progress_service = modules["progress"]["service"]

    modules["entitlement"] = create_entitlement_module(
        data_dir=data_dir,
        user_service=user_service,
        free_image_limit=quota_settings.free_image_limit,
        free_quiz_limit=quota_settings.free_quiz_limit,
        premium_users=quota_settings.premium_user_ids,
        bonus_quota_provider=progress_service.get_bonus_quizzes
    )

    modules["study_tools"] = create_study_tools_module(
        user_data_dir=user_data_dir,
        user_service=user_service,
        entitlement_manager=modules["entitlement"]["manager"],
        progress_service=progress_service,
        llm_config=llm_config,
        quiz_generator=quiz_generator,
        flashcard_generator=flashcard_generator,
        homework_solver=homework_solver
    )

    for module in modules.values():
        app.register_blueprint(module["blueprint"])

    # Errors a route did not handle itself
    app.register_error_handler(QuizzifyError, error_response)
    app.extensions["quizzify"] = modules

    @app.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        return jsonify({
            "status": "UP",
            "service": "quizzify"
        })

    logger.info(f"Quizzify app ready: data_dir={data_dir}, user_data_dir={user_data_dir}, model={llm_config.model}")
    return app


if __name__ == "__main__":
    # Parse command line arguments
    parser = argparse.ArgumentParser(description="Quizzify study service")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--config", type=str, default="web_app_config.json", help="Path to the config file")
    args = parser.parse_args()

    config_manager = ConfigManager(args.config)
    app_config = config_manager.get_app_config()
    debug = args.debug or app_config.debug
    setup_logging(debug=debug)

    app = create_app(config_manager)
    app.run(
        host=args.host or app_config.host,
        port=args.port or app_config.port,
        debug=debug
    )
