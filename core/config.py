"""
Core configuration module for the Image Caption service.
Handles environment variables, Azure OpenAI settings, and application configuration.
"""

import os
import logging
from typing import Optional
from functools import lru_cache
from enum import Enum
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


class Environment(str, Enum):
    """Application environment enum."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings:
    """Application settings with validation."""

    def __init__(self):
        # Application settings
        self.app_name: str = "AI Image Caption Generator API"
        self.app_version: str = "1.0.0"
        self.environment: Environment = Environment(
            os.getenv("ENVIRONMENT", "development").lower()
        )
        self.debug: bool = os.getenv("DEBUG", "false").lower() == "true"

        # Server settings
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.reload: bool = self.environment == Environment.DEVELOPMENT

        # Azure OpenAI settings
        self.azure_openai_api_key: Optional[str] = os.getenv("AZURE_OPENAI_API_KEY")
        self.azure_openai_endpoint: Optional[str] = os.getenv("AZURE_OPENAI_ENDPOINT")
        self.azure_openai_model_id: Optional[str] = os.getenv("AZURE_OPENAI_MODEL_ID")
        self.azure_openai_api_version: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview")

        # Retry settings (attempts include the first call)
        self.caption_max_retries: int = int(os.getenv("CAPTION_MAX_RETRIES", "3"))
        self.caption_retry_base_delay: float = float(os.getenv("CAPTION_RETRY_BASE_DELAY", "1.0"))

        # Upload settings
        self.max_file_size: int = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))  # 10MB
        self.supported_image_types: list = list(SUPPORTED_IMAGE_TYPES)

        # Security settings
        self.cors_origins: list = os.getenv("CORS_ORIGINS", "*").split(",")
        self.cors_allow_credentials: bool = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"

        # Logging settings
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_format: str = "%(asctime)s - %(levelname)s - [%(request_id)s] %(name)s - %(message)s"
        self.log_file: Optional[str] = os.getenv("LOG_FILE")

        # Validate log level
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            self.log_level = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def get_missing_settings(settings: Settings) -> list:
    """Return the environment variable names of required settings that are unset."""
    required_fields = [
        ("azure_openai_api_key", "AZURE_OPENAI_API_KEY"),
        ("azure_openai_endpoint", "AZURE_OPENAI_ENDPOINT"),
        ("azure_openai_model_id", "AZURE_OPENAI_MODEL_ID"),
    ]

    return [env_var for field_name, env_var in required_fields if not getattr(settings, field_name)]


def validate_required_settings(settings: Settings) -> None:
    """Validate that all required settings are present."""
    missing_fields = get_missing_settings(settings)

    if missing_fields:
        error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
        if settings.environment == Environment.PRODUCTION:
            raise ValueError(error_msg)
        else:
            logging.warning(error_msg)

