"""
In-process fakes for the chat-completion gateway and the services that sit on top of it.

They mimic the parts of AsyncOpenAI the service uses: `chat.completions.create(**params)`
returning an async iterable of chunks shaped like `choices[0].delta.content`.
"""
import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List

import httpx
import openai

from interview_assistant.core.settings import Settings
from interview_assistant.schemas.main.assistant_turn import GeneratedAnswer

GATEWAY_URL = "https://openrouter.ai/api/v1/chat/completions"


def make_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


def status_error(status_code: int, message: str = "gateway error") -> openai.APIStatusError:
    """Build the openai exception the SDK raises for an HTTP error status."""
    response = httpx.Response(status_code, request=httpx.Request("POST", GATEWAY_URL))
    error_classes = {
        401: openai.AuthenticationError,
        429: openai.RateLimitError,
    }
    error_class = error_classes.get(status_code, openai.APIStatusError)
    return error_class(message, response=response, body=None)


class FakeStream:
    """Async iterable of chunks with an optional delay before each chunk and an optional error at the end."""

    def __init__(self, tokens, delay: float = 0.0, first_delay: float = 0.0, error: Exception = None):
        self.tokens = list(tokens)
        self.delay = delay
        self.first_delay = first_delay
        self.error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for index, token in enumerate(self.tokens):
            wait = self.first_delay if index == 0 else self.delay
            if wait:
                await asyncio.sleep(wait)
            yield make_chunk(token)
        if self.error is not None:
            raise self.error

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self, outcomes: Dict[str, Any], request_delay: float = 0.0):
        self.outcomes = outcomes
        self.request_delay = request_delay
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **params):
        self.calls.append(params)
        if self.request_delay:
            await asyncio.sleep(self.request_delay)
        outcome = self.outcomes[params["model"]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def models_called(self) -> List[str]:
        return [call["model"] for call in self.calls]


class FakeGatewayClient:
    def __init__(self, outcomes: Dict[str, Any], request_delay: float = 0.0):
        self.chat = SimpleNamespace(completions=FakeCompletions(outcomes, request_delay))

    @property
    def completions(self) -> FakeCompletions:
        return self.chat.completions


class FakeClientManager:
    """Stands in for AIClientManager with a fixed client."""

    def __init__(self, client=None, configured: bool = True, models=None):
        self.client = client
        self.settings = Settings(
            openrouter_api_key="test-key" if configured else "",
            ai_models=models or ["model/a", "model/b"],
        )

    @property
    def is_configured(self) -> bool:
        return self.settings.is_gateway_configured

    def get_gateway_client(self):
        return self.client


class RecordingMessageLogger:
    """MessageLogger replacement that remembers what would have been written."""

    def __init__(self):
        self.saved = []

    def schedule(self, session_id, message):
        self.saved.append((session_id, message))
        return None


class StubAIService:
    """AIResponseService replacement that streams canned tokens and records its calls."""

    def __init__(self, response, tokens=None, error=None, failed=False):
        self.response = response
        self.failed = failed
        self.tokens = tokens or []
        self.error = error
        self.calls = []
        self.interview_context = None

    def set_interview_context(self, context):
        self.interview_context = context

    async def generate(self, question, context, on_token=None):
        self.calls.append((question, list(context)))
        if self.error is not None:
            raise self.error
        for token in self.tokens:
            await on_token(token)
        return GeneratedAnswer(text=self.response, failed=self.failed)
