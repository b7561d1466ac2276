"""
Configuration management for the Quizzify study service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class LLMConfig:
    """LLM gateway configuration settings."""
    provider: str
    api_key: str
    base_url: str
    model: str
    timeout: int
    max_retries: int


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    admin_user_ids: list[str]


@dataclass
class QuotaSettings:
    """Free-tier limits and premium accounts."""
    free_image_limit: int
    free_quiz_limit: int
    premium_user_ids: list[str]


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str
    user_data_dir: str


def _split_ids(value: str) -> list[str]:
    return [uid.strip() for uid in value.split(",") if uid.strip()]


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "web_app_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self._merge_config(json.load(f))
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "llm": {
                "provider": "openai",
                "api_key": "",
                "base_url": "https://ai.gateway.lovable.dev/v1",
                "model": "google/gemini-2.5-flash",
                "timeout": 120,
                "max_retries": 0
            },
            "app": {
                "host": "0.0.0.0",
                "port": 8080,
                "debug": False,
                "admin_user_ids": []
            },
            "quota": {
                "free_image_limit": 5,
                "free_quiz_limit": 5,
                "premium_user_ids": []
            },
            "paths": {
                "data_dir": "data",
                "user_data_dir": "user_data"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # LLM settings
        if os.getenv("LLM_PROVIDER"):
            self._config["llm"]["provider"] = os.getenv("LLM_PROVIDER")

        if os.getenv("LLM_API_KEY"):
            self._config["llm"]["api_key"] = os.getenv("LLM_API_KEY")

        if os.getenv("LLM_API_BASE"):
            self._config["llm"]["base_url"] = os.getenv("LLM_API_BASE")

        if os.getenv("LLM_MODEL"):
            self._config["llm"]["model"] = os.getenv("LLM_MODEL")

        if os.getenv("LLM_TIMEOUT"):
            self._config["llm"]["timeout"] = int(os.getenv("LLM_TIMEOUT"))

        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("ADMIN_USER_IDS"):
            self._config["app"]["admin_user_ids"] = _split_ids(os.getenv("ADMIN_USER_IDS"))

        # Quota settings
        if os.getenv("FREE_IMAGE_LIMIT"):
            self._config["quota"]["free_image_limit"] = int(os.getenv("FREE_IMAGE_LIMIT"))

        if os.getenv("FREE_QUIZ_LIMIT"):
            self._config["quota"]["free_quiz_limit"] = int(os.getenv("FREE_QUIZ_LIMIT"))

        if os.getenv("PREMIUM_USER_IDS"):
            self._config["quota"]["premium_user_ids"] = _split_ids(os.getenv("PREMIUM_USER_IDS"))

        # Paths
        if os.getenv("DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("DATA_DIR")

    def get_llm_config(self) -> LLMConfig:
        """Get LLM configuration."""
        llm_config = self._config["llm"]
        return LLMConfig(
            provider=llm_config["provider"],
            api_key=llm_config["api_key"],
            base_url=llm_config["base_url"],
            model=llm_config["model"],
            timeout=llm_config["timeout"],
            max_retries=llm_config["max_retries"]
        )

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            admin_user_ids=app_config["admin_user_ids"]
        )

    def get_quota_settings(self) -> QuotaSettings:
        """Get free-tier quota settings."""
        quota_config = self._config["quota"]
        return QuotaSettings(
            free_image_limit=quota_config["free_image_limit"],
            free_quiz_limit=quota_config["free_quiz_limit"],
            premium_user_ids=quota_config["premium_user_ids"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            data_dir=paths_config["data_dir"],
            user_data_dir=paths_config["user_data_dir"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_llm_config() -> LLMConfig:
    """Get LLM configuration."""
    return config_manager.get_llm_config()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_quota_settings() -> QuotaSettings:
    """Get free-tier quota settings."""
    return config_manager.get_quota_settings()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save current configuration."""
    config_manager.save_config()
