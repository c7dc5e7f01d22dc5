"""
AI Response Service Module

This module generates suggested interview answers through the chat-completion gateway.
A question is sent with the recent conversation and the interview context to an ordered
list of candidate models. The first model that produces a token stream wins and its
tokens are handed to the caller as they arrive; rate limiting, gateway errors, timeouts
and empty responses move on to the next model. The request only fails once every
candidate has been tried.

Once a model has started delivering tokens the answer belongs to that model: a stall
or a broken stream ends the answer with what was received, it is never spliced with
another model's output.

Dependencies:
- openai: For the streaming chat-completion client and its error types.
- httpx: For transport errors raised while reading the stream.
- loguru: For logging model selection and fallbacks.
- interview_assistant.core.ai_client_manager: For the shared gateway client.
- interview_assistant.core.secure_prompt_manager: For building the message list.
"""

import asyncio
import inspect
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Union

import httpx
from loguru import logger
from openai import APIConnectionError, APIError, APIStatusError, AuthenticationError

from interview_assistant.constants.ai_gateway import (
    API_KEY_ERROR_MESSAGE,
    BUSY_MESSAGE,
    EMPTY_RESPONSE_MESSAGE,
    FALLBACK_STATUS_CODES,
    FIRST_TOKEN_TIMEOUT,
    FREQUENCY_PENALTY,
    IDLE_STREAM_TIMEOUT,
    MAX_TOKENS,
    NOT_CONFIGURED_MESSAGE,
    PRESENCE_PENALTY,
    REQUEST_TIMEOUT,
    TEMPERATURE,
    UNAVAILABLE_MESSAGE,
)
from interview_assistant.core.ai_client_manager import AIClientManager, get_ai_client_manager
from interview_assistant.core.secure_prompt_manager import SecurePromptManager, secure_prompt_manager
from interview_assistant.errors.exceptions import (
    GatewayNotConfiguredError,
    InvalidAPIKeyError,
    ModelAttemptError,
    ModelsExhaustedError,
)
from interview_assistant.schemas.main.assistant_turn import GeneratedAnswer
from interview_assistant.schemas.main.conversation_message import ChatTurn
from interview_assistant.schemas.main.interview_context import InterviewContext

TokenCallback = Callable[[str], Union[None, Awaitable[None]]]


def _extract_token(chunk: Any) -> str:
    """Pull choices[0].delta.content out of a stream chunk, "" for anything malformed."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    content = getattr(delta, "content", None)
    return content if isinstance(content, str) else ""


async def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if close is None:
        return
    try:
        result = close()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.debug(f"Ignoring error while closing gateway stream: {e}")


class AIResponseService:
    """
    Streams suggested answers from the chat-completion gateway with model fallback.

    Attributes:
        models: Candidate model identifiers, tried in order.
        interview_context: Context used to personalize the system prompt.

    Example Usage:
        service = AIResponseService()
        service.set_interview_context(InterviewContext(role="Backend Engineer"))
        answer = await service.generate_response("What is a B-tree?", [], on_token=print)
    """

    def __init__(
        self,
        client_manager: Optional[AIClientManager] = None,
        models: Optional[Sequence[str]] = None,
        prompt_manager: Optional[SecurePromptManager] = None,
        request_timeout: float = REQUEST_TIMEOUT,
        first_token_timeout: float = FIRST_TOKEN_TIMEOUT,
        idle_timeout: float = IDLE_STREAM_TIMEOUT,
    ):
        self._client_manager = client_manager or get_ai_client_manager()
        self.models: List[str] = list(models) if models is not None else list(self._client_manager.settings.ai_models)
        self._prompt_manager = prompt_manager or secure_prompt_manager
        self.request_timeout = request_timeout
        self.first_token_timeout = first_token_timeout
        self.idle_timeout = idle_timeout
        self.interview_context: Optional[InterviewContext] = None

    @property
    def is_configured(self) -> bool:
        return self._client_manager.is_configured

    def set_interview_context(self, context: Optional[InterviewContext]) -> None:
        self.interview_context = context

    def _request_params(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": messages,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "stream": True,
            "frequency_penalty": FREQUENCY_PENALTY,
            "presence_penalty": PRESENCE_PENALTY,
        }

    async def _open_stream(self, client: Any, model: str, messages: List[Dict[str, str]]) -> Any:
        """
        Send the request for one model and return its token stream.

        Raises:
            InvalidAPIKeyError: The gateway rejected the API key (401).
            ModelAttemptError: Any other failure; the caller moves on to the next model.
        """
        try:
            return await asyncio.wait_for(
                client.chat.completions.create(**self._request_params(model, messages)),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Request timeout for model {model}, trying next model...")
            raise ModelAttemptError(model, "request timeout") from e
        except AuthenticationError as e:
            logger.error(f"Gateway rejected the API key while calling {model}: {e}")
            raise InvalidAPIKeyError() from e
        except APIStatusError as e:
            status = e.status_code
            if status == 401:
                raise InvalidAPIKeyError() from e
            message = getattr(e, "message", None) or f"API request failed with status {status}"
            if status in FALLBACK_STATUS_CODES:
                logger.warning(f"Model {model} failed with status {status}, trying next model...")
            else:
                logger.error(f"API error response from {model}: status={status} message={message}")
            raise ModelAttemptError(model, message, status_code=status) from e
        except APIConnectionError as e:
            logger.warning(f"Connection error with model {model}: {e}")
            raise ModelAttemptError(model, f"connection error: {e}") from e
        except APIError as e:
            logger.warning(f"Unexpected API error from model {model}: {e}")
            raise ModelAttemptError(model, f"api error: {e}") from e

    async def _stream_model(self, client: Any, model: str, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Yield the tokens of one model, raising ModelAttemptError before any content on failure."""
        loop = asyncio.get_running_loop()
        stream = await self._open_stream(client, model, messages)
        # The first-token deadline starts once the gateway has answered the request
        started_at = loop.time()

        received_content = False
        iterator = stream.__aiter__()
        try:
            while True:
                if received_content:
                    timeout = self.idle_timeout
                else:
                    timeout = self.first_token_timeout - (loop.time() - started_at)
                    if timeout <= 0:
                        raise ModelAttemptError(model, "timed out waiting for content")

                try:
                    chunk = await asyncio.wait_for(iterator.__anext__(), timeout=timeout)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    if received_content:
                        logger.warning(f"Content stream timeout - no new content received for {self.idle_timeout:g} seconds")
                        break
                    logger.warning(f"Timeout waiting for content from model {model}, trying next model...")
                    raise ModelAttemptError(model, "timed out waiting for content") from e
                except (APIError, httpx.HTTPError, ValueError) as e:
                    if received_content:
                        logger.error(f"Stream from {model} broke after content started, keeping partial answer: {e}")
                        break
                    raise ModelAttemptError(model, f"stream error: {e}") from e

                token = _extract_token(chunk)
                if not token:
                    continue
                received_content = True
                yield token
        finally:
            await _close_stream(stream)

        if not received_content:
            logger.warning(f"No content from model {model}, trying next model...")
            raise ModelAttemptError(model, "empty response")

    async def stream_response(self, question: str, context: Sequence[ChatTurn]) -> AsyncIterator[str]:
        """
        Stream an answer to the question, falling back across the candidate models.

        Args:
            question (str): The interview question.
            context (Sequence[ChatTurn]): Earlier conversation turns, oldest first.

        Yields:
            str: Answer tokens from the first model that produced content.

        Raises:
            ValueError: If the question is empty.
            GatewayNotConfiguredError: If no API key is configured.
            InvalidAPIKeyError: If the gateway rejects the API key.
            ModelsExhaustedError: If every candidate model failed.
        """
        if not question or not question.strip():
            raise ValueError("Question cannot be empty")

        client = self._client_manager.get_gateway_client()
        messages = self._prompt_manager.build_messages(question, context, self.interview_context)

        failures: List[ModelAttemptError] = []
        for model in self.models:
            logger.info(f"Using model: {model}")
            try:
                async for token in self._stream_model(client, model, messages):
                    yield token
                return
            except ModelAttemptError as e:
                failures.append(e)

        raise ModelsExhaustedError(failures)

    async def generate_response(
        self,
        question: str,
        context: Sequence[ChatTurn],
        on_token: Optional[TokenCallback] = None,
    ) -> str:
        """Generate a complete answer, or the user-facing message describing the failure."""
        return (await self.generate(question, context, on_token)).text

    async def generate(
        self,
        question: str,
        context: Sequence[ChatTurn],
        on_token: Optional[TokenCallback] = None,
    ) -> GeneratedAnswer:
        """
        Generate a complete answer, reporting tokens through on_token as they arrive.

        Gateway failures never raise: they come back as a failed GeneratedAnswer whose
        text is the user-facing message.

        Args:
            question (str): The interview question.
            context (Sequence[ChatTurn]): Earlier conversation turns, oldest first.
            on_token (Optional[TokenCallback]): Sync or async callback for each token.

        Returns:
            GeneratedAnswer: The full answer, or a failure with its user-facing message.

        Raises:
            ValueError: If the question is empty.
        """
        if not self.is_configured:
            return GeneratedAnswer(text=NOT_CONFIGURED_MESSAGE, failed=True)

        tokens: List[str] = []
        try:
            async for token in self.stream_response(question, context):
                tokens.append(token)
                if on_token is not None:
                    result = on_token(token)
                    if inspect.isawaitable(result):
                        await result
        except GatewayNotConfiguredError:
            return GeneratedAnswer(text=NOT_CONFIGURED_MESSAGE, failed=True)
        except InvalidAPIKeyError as e:
            logger.error(f"Error generating AI response: {e}")
            return GeneratedAnswer(text=API_KEY_ERROR_MESSAGE, failed=True)
        except ModelsExhaustedError as e:
            logger.error(f"Error generating AI response: {e} ({e.describe()})")
            return GeneratedAnswer(text=self._exhausted_message(e), failed=True)

        response = "".join(tokens)
        if not response.strip():
            return GeneratedAnswer(text=EMPTY_RESPONSE_MESSAGE, failed=True)
        return GeneratedAnswer(text=response)

    @staticmethod
    def _exhausted_message(error: ModelsExhaustedError) -> str:
        """Pick the user-facing message for a request where every model failed."""
        if error.all_empty:
            return EMPTY_RESPONSE_MESSAGE
        last = error.last_failure
        if last is not None:
            if last.status_code == 429 or "overloaded" in last.reason.lower():
                return BUSY_MESSAGE
            if last.status_code == 502:
                return UNAVAILABLE_MESSAGE
        return f"Error: {error}"
