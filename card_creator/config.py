"""
Configuration management for the Vocabulary Card Creator.
Handles environment variables, configuration validation, and default settings.
"""

import os
from pathlib import Path
from typing import Optional, List
from dotenv import load_dotenv

from card_creator.structures import Configuration, DEFAULT_BACKEND_URL, DEFAULT_RELAY_ROUTES


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


class ConfigManager:
    """Manages application configuration and environment setup."""

    def __init__(self):
        self._config: Optional[Configuration] = None
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from .env file."""
        env_files = [
            Path(".env"),
            Path("../.env"),
            Path("../../.env"),
        ]

        for env_file in env_files:
            if env_file.exists():
                load_dotenv(env_file)
                break

    def get_configuration(self) -> Configuration:
        """Get the application configuration."""
        if self._config is None:
            self._config = self._create_configuration()
        return self._config

    def _create_configuration(self) -> Configuration:
        """Create configuration from environment variables."""
        defaults = Configuration()
        relay_routes = os.environ.get("RELAY_ROUTES")

        return Configuration(
            llm_provider=os.environ.get("LLM_PROVIDER", defaults.llm_provider),
            gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
            gemini_model=os.environ.get("GEMINI_MODEL", defaults.gemini_model),
            gemini_base_url=os.environ.get("GEMINI_BASE_URL", defaults.gemini_base_url),
            groq_api_key=os.environ.get("GROQ_API_KEY", ""),
            groq_model=os.environ.get("GROQ_MODEL", defaults.groq_model),
            backend_url=os.environ.get("DECK_BACKEND_URL", DEFAULT_BACKEND_URL),
            relay_routes=relay_routes if relay_routes is not None else list(DEFAULT_RELAY_ROUTES),
            use_direct_route=_env_flag("USE_DIRECT_ROUTE", "true"),
            request_timeout=float(os.environ.get("REQUEST_TIMEOUT", defaults.request_timeout)),
            output_dir=Path(os.environ.get("OUTPUT_DIR", str(defaults.output_dir))),
            debug_mode=_env_flag("DEBUG_MODE", "false"),
        )

    def validate_configuration(self) -> List[str]:
        """Validate the current configuration."""
        config = self.get_configuration()
        return config.validate()

    def setup_directories(self):
        """Create the artifact output directory if it doesn't exist."""
        config = self.get_configuration()
        config.output_dir.mkdir(parents=True, exist_ok=True)

    def update_configuration(self, **kwargs):
        """Update configuration with new values."""
        if self._config is None:
            self._config = self._create_configuration()

        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)

    def reload(self) -> Configuration:
        """Drop the cached configuration and read the environment again."""
        self._config = None
        return self.get_configuration()

    def get_api_credentials(self) -> dict:
        """Get API credentials for the configured model provider."""
        config = self.get_configuration()

        if config.llm_provider == "groq":
            return {"groq_api_key": config.groq_api_key}
        return {"gemini_api_key": config.gemini_api_key}


# Global configuration manager instance
config_manager = ConfigManager()


def get_config() -> Configuration:
    """Get the application configuration."""
    return config_manager.get_configuration()


def validate_config() -> List[str]:
    """Validate the current configuration."""
    return config_manager.validate_configuration()


def setup_directories():
    """Setup necessary directories."""
    config_manager.setup_directories()


def get_api_credentials() -> dict:
    """Get API credentials."""
    return config_manager.get_api_credentials()


def update_config(**kwargs):
    """Override configuration values, e.g. from command line arguments."""
    config_manager.update_configuration(**kwargs)
