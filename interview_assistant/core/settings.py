"""
Application Settings Module

Description:
This module loads runtime configuration from environment variables (and a local .env file)
into a typed Settings model. Settings are read once and cached; tests can call
get_settings.cache_clear() after changing the environment.

Dependencies:
- pydantic: For the typed settings model.
- dotenv: For loading the .env file.
- loguru: For logging configuration problems.
"""

import os
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_MODELS = [
    "anthropic/claude-2",
    "openai/gpt-4",
    "openai/gpt-3.5-turbo",
    "google/palm-2-chat-bison",
]


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime configuration for the interview assistant service."""
    openrouter_api_key: str = Field(default="", description="API key for the chat-completion gateway")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    ai_models: List[str] = Field(default_factory=lambda: list(DEFAULT_MODELS), description="Candidate models, tried in order")
    app_origin: str = Field(default="http://localhost:5173", description="Sent to the gateway as HTTP-Referer")
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    zoom_sdk_key: str = ""
    zoom_sdk_secret: str = ""
    database_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def is_gateway_configured(self) -> bool:
        return bool(self.openrouter_api_key)

    @property
    def is_database_configured(self) -> bool:
        return bool(self.database_url)

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL", "").strip() or _database_url_from_parts()
        models = _split_csv(os.getenv("AI_MODELS")) or list(DEFAULT_MODELS)
        origins = _split_csv(os.getenv("ALLOWED_ORIGINS")) or ["http://localhost:5173"]
        return cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", "").strip(),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").strip(),
            ai_models=models,
            app_origin=os.getenv("APP_ORIGIN", "http://localhost:5173").strip(),
            allowed_origins=origins,
            zoom_sdk_key=os.getenv("ZOOM_SDK_KEY", "").strip(),
            zoom_sdk_secret=os.getenv("ZOOM_SDK_SECRET", "").strip(),
            database_url=database_url,
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )


def _database_url_from_parts() -> Optional[str]:
    """Build a PostgreSQL URL from DB_* variables, or None when any part is missing."""
    parts = {
        "DB_USER": os.getenv("DB_USER"),
        "DB_PASSWORD": os.getenv("DB_PASSWORD"),
        "DB_HOST": os.getenv("DB_HOST"),
        "DB_PORT": os.getenv("DB_PORT"),
        "DB_NAME": os.getenv("DB_NAME"),
    }
    missing = [name for name, value in parts.items() if not value]
    if len(missing) == len(parts):
        return None
    if missing:
        logger.warning(f"Ignoring partial database configuration, missing: {', '.join(missing)}")
        return None
    return (
        f"postgresql+psycopg2://{parts['DB_USER']}:{quote_plus(parts['DB_PASSWORD'])}"
        f"@{parts['DB_HOST']}:{parts['DB_PORT']}/{parts['DB_NAME']}?sslmode=require"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings."""
    return Settings.from_env()
