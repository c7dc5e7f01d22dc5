"""
AI Client Manager

This module owns the process-wide client for the chat-completion gateway. OpenRouter
speaks the OpenAI wire protocol, so the client is an AsyncOpenAI instance pointed at
the OpenRouter base URL with the attribution headers the gateway expects.
"""

import threading
from typing import Optional

from loguru import logger
from openai import AsyncOpenAI

from interview_assistant.core.settings import Settings, get_settings
from interview_assistant.errors.exceptions import GatewayNotConfiguredError

APP_TITLE = "Technical Interview Assistant"


class AIClientManager:
    """
    Lazily creates and hands out the gateway client.

    The client is built on first access so that importing the application never
    fails when the API key is missing; the missing key is reported per request instead.
    """

    _instance: Optional['AIClientManager'] = None
    _lock = threading.Lock()

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._client: Optional[AsyncOpenAI] = None

    @classmethod
    def get_instance(cls) -> 'AIClientManager':
        """Thread-safe singleton instance getter."""
        if cls._instance is None:
            with cls._lock:
                # Double-check locking pattern
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access re-reads settings."""
        with cls._lock:
            cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def is_configured(self) -> bool:
        return self.settings.is_gateway_configured

    def get_gateway_client(self) -> AsyncOpenAI:
        """
        Get the chat-completion gateway client.

        Returns:
            AsyncOpenAI: Client configured for the OpenRouter endpoint

        Raises:
            GatewayNotConfiguredError: If OPENROUTER_API_KEY is not set
        """
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is not None:
                return self._client

            settings = self.settings
            if not settings.is_gateway_configured:
                logger.error("OpenRouter API key is not configured")
                raise GatewayNotConfiguredError()

            self._client = AsyncOpenAI(
                base_url=settings.openrouter_base_url,
                api_key=settings.openrouter_api_key,
                # Retries are handled by falling back to the next model.
                max_retries=0,
                default_headers={
                    "HTTP-Referer": settings.app_origin,
                    "X-Title": APP_TITLE,
                },
            )
            logger.info(f"Initialized chat-completion gateway client for {settings.openrouter_base_url}")
            return self._client


def get_ai_client_manager() -> AIClientManager:
    """Get the singleton AIClientManager instance."""
    return AIClientManager.get_instance()
