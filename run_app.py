#!/usr/bin/env python3
"""
Start the Quizzify web service with settings from web_app_config.json.

Usable from any working directory: the repo root is put on sys.path first.
"""

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent
sys.path.insert(0, str(REPO_ROOT))

from config_manager import ConfigManager
from study_service.logging_config import setup_logging
from app.main import create_app


def main() -> None:
    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()
    setup_logging(debug=app_config.debug)

    logging.getLogger("run_app").info(
        f"Starting Quizzify on {app_config.host}:{app_config.port} from {REPO_ROOT}"
    )
    create_app(config_manager).run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )


if __name__ == "__main__":
    main()
