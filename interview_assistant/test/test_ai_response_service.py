"""
Test AI Response Service Module

This module tests model fallback, stream timeouts and the user-facing messages produced
by AIResponseService against an in-process fake of the chat-completion gateway.

Dependencies:
- pytest / pytest-asyncio: For testing framework
- httpx: For transport errors raised mid-stream
- interview_assistant.services.ai_response.ai_response_service: The module being tested
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from interview_assistant.constants.ai_gateway import (
    API_KEY_ERROR_MESSAGE,
    BUSY_MESSAGE,
    EMPTY_RESPONSE_MESSAGE,
    MAX_TOKENS,
    NOT_CONFIGURED_MESSAGE,
    TEMPERATURE,
    UNAVAILABLE_MESSAGE,
)
from interview_assistant.errors.exceptions import InvalidAPIKeyError, ModelsExhaustedError
from interview_assistant.schemas.main.conversation_message import ChatTurn
from interview_assistant.schemas.main.interview_context import InterviewContext
from interview_assistant.services.ai_response.ai_response_service import AIResponseService
from interview_assistant.test.gateway_fakes import GATEWAY_URL, FakeStream, status_error


def build_service(client_manager, client, **kwargs):
    return AIResponseService(client_manager=client_manager(client), **kwargs)


class TestModelFallback:
    """Test that failures before any content move on to the next candidate model."""

    @pytest.mark.asyncio
    async def test_rate_limited_model_falls_back_to_next(self, gateway, client_manager):
        """Test that a 429 from model N retries with model N+1."""
        client = gateway({
            "model/a": status_error(429, "Rate limit exceeded"),
            "model/b": FakeStream(["Hash ", "maps"]),
        })
        service = build_service(client_manager, client)

        answer = await service.generate_response("What is a hash map?", [])

        assert answer == "Hash maps"
        assert client.completions.models_called == ["model/a", "model/b"]

    @pytest.mark.asyncio
    async def test_server_error_falls_back(self, gateway, client_manager):
        """Test that other status errors also fall back."""
        client = gateway({
            "model/a": status_error(500, "Internal error"),
            "model/b": FakeStream(["ok"]),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == "ok"

    @pytest.mark.asyncio
    async def test_response_validation_error_falls_back(self, gateway, client_manager):
        """Test that API errors without a status code also move on to the next model."""
        response = httpx.Response(200, request=httpx.Request("POST", GATEWAY_URL))
        client = gateway({
            "model/a": openai.APIResponseValidationError(response, None, message="Unexpected payload"),
            "model/b": FakeStream(["ok"]),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == "ok"
        assert client.completions.models_called == ["model/a", "model/b"]

    @pytest.mark.asyncio
    async def test_invalid_api_key_stops_without_fallback(self, gateway, client_manager):
        """Test that a 401 is reported immediately and the next model is not tried."""
        client = gateway({
            "model/a": status_error(401, "Invalid key"),
            "model/b": FakeStream(["never"]),
        })
        service = build_service(client_manager, client)

        answer = await service.generate_response("Question?", [])

        assert answer == API_KEY_ERROR_MESSAGE
        assert client.completions.models_called == ["model/a"]

    @pytest.mark.asyncio
    async def test_stream_response_raises_invalid_api_key(self, gateway, client_manager):
        """Test that stream_response surfaces the 401 as InvalidAPIKeyError."""
        client = gateway({"model/a": status_error(401)})
        service = build_service(client_manager, client, models=["model/a"])

        with pytest.raises(InvalidAPIKeyError):
            async for _ in service.stream_response("Question?", []):
                pass

    @pytest.mark.asyncio
    async def test_empty_stream_falls_back(self, gateway, client_manager):
        """Test that a model that streams no content is treated as a failure."""
        client = gateway({
            "model/a": FakeStream([None, ""]),
            "model/b": FakeStream(["Answer"]),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == "Answer"

    @pytest.mark.asyncio
    async def test_malformed_chunks_are_skipped(self, gateway, client_manager):
        """Test that chunks without choices do not end the stream."""
        stream = FakeStream(["A", "B"])
        client = gateway({"model/a": stream})
        service = build_service(client_manager, client, models=["model/a"])
        original_iterate = stream._iterate

        async def iterate_with_noise():
            yield SimpleNamespace(choices=[])
            async for chunk in original_iterate():
                yield chunk

        stream._iterate = iterate_with_noise

        assert await service.generate_response("Question?", []) == "AB"


class TestExhaustedModels:
    """Test the messages returned once every candidate model failed."""

    @pytest.mark.asyncio
    async def test_zero_content_returns_apology(self, gateway, client_manager):
        """Test that zero content across all models returns the apology string."""
        client = gateway({
            "model/a": FakeStream([]),
            "model/b": FakeStream([""]),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == EMPTY_RESPONSE_MESSAGE

    @pytest.mark.asyncio
    async def test_all_rate_limited_reports_busy(self, gateway, client_manager):
        client = gateway({
            "model/a": status_error(429),
            "model/b": status_error(429),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == BUSY_MESSAGE

    @pytest.mark.asyncio
    async def test_bad_gateway_reports_unavailable(self, gateway, client_manager):
        client = gateway({
            "model/a": status_error(429),
            "model/b": status_error(502, "Bad gateway"),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == UNAVAILABLE_MESSAGE

    @pytest.mark.asyncio
    async def test_other_failures_are_prefixed_with_error(self, gateway, client_manager):
        client = gateway({
            "model/a": status_error(500),
            "model/b": status_error(503),
        })
        service = build_service(client_manager, client)

        answer = await service.generate_response("Question?", [])

        assert answer.startswith("Error: All models have been tried without success")

    @pytest.mark.asyncio
    async def test_stream_response_raises_models_exhausted(self, gateway, client_manager):
        client = gateway({"model/a": status_error(429), "model/b": FakeStream([])})
        service = build_service(client_manager, client)

        with pytest.raises(ModelsExhaustedError) as exc_info:
            async for _ in service.stream_response("Question?", []):
                pass

        assert [failure.model for failure in exc_info.value.failures] == ["model/a", "model/b"]
        assert exc_info.value.failures[0].status_code == 429


class TestStreamTimeouts:
    """Test request, first-token and idle timeouts."""

    @pytest.mark.asyncio
    async def test_request_timeout_falls_back(self, gateway, client_manager):
        """Test that a request that does not return in time moves on."""
        client = gateway({"model/a": FakeStream(["late"]), "model/b": FakeStream(["late"])}, request_delay=0.2)
        service = build_service(client_manager, client, request_timeout=0.05)

        answer = await service.generate_response("Question?", [])

        assert answer.startswith("Error:")
        assert client.completions.models_called == ["model/a", "model/b"]

    @pytest.mark.asyncio
    async def test_slow_request_does_not_use_up_first_token_deadline(self, gateway, client_manager):
        """Test that waiting for the response headers does not count against the first-token deadline."""
        client = gateway({
            "model/a": FakeStream(["hello"]),
            "model/b": FakeStream(["other model"]),
        }, request_delay=0.4)
        service = build_service(client_manager, client, request_timeout=5.0, first_token_timeout=0.3)

        answer = await service.generate_response("Question?", [])

        assert answer == "hello"
        assert client.completions.models_called == ["model/a"]

    @pytest.mark.asyncio
    async def test_first_token_timeout_falls_back(self, gateway, client_manager):
        """Test that a model with no token before the deadline is abandoned."""
        client = gateway({
            "model/a": FakeStream(["slow"], first_delay=0.5),
            "model/b": FakeStream(["fast"]),
        })
        service = build_service(client_manager, client, first_token_timeout=0.05)

        assert await service.generate_response("Question?", []) == "fast"

    @pytest.mark.asyncio
    async def test_idle_stream_keeps_partial_answer(self, gateway, client_manager):
        """Test that a stall after content ends the answer without trying another model."""
        client = gateway({
            "model/a": FakeStream(["Partial ", "answer", " never arrives"], delay=0.5),
            "model/b": FakeStream(["other model"]),
        })
        service = build_service(client_manager, client, idle_timeout=0.05)

        answer = await service.generate_response("Question?", [])

        assert answer == "Partial "
        assert client.completions.models_called == ["model/a"]

    @pytest.mark.asyncio
    async def test_broken_stream_after_content_is_not_spliced(self, gateway, client_manager):
        """Test that a transport error mid-answer keeps what was received."""
        client = gateway({
            "model/a": FakeStream(["Half of it"], error=httpx.ReadError("connection reset")),
            "model/b": FakeStream(["other model"]),
        })
        service = build_service(client_manager, client)

        answer = await service.generate_response("Question?", [])

        assert answer == "Half of it"
        assert client.completions.models_called == ["model/a"]

    @pytest.mark.asyncio
    async def test_broken_stream_before_content_falls_back(self, gateway, client_manager):
        client = gateway({
            "model/a": FakeStream([], error=httpx.ReadError("connection reset")),
            "model/b": FakeStream(["recovered"]),
        })
        service = build_service(client_manager, client)

        assert await service.generate_response("Question?", []) == "recovered"


class TestRequestShape:
    """Test the request sent to the gateway and the token callback."""

    @pytest.mark.asyncio
    async def test_messages_include_recent_context_and_question(self, gateway, client_manager):
        client = gateway({"model/a": FakeStream(["ok"])})
        service = build_service(client_manager, client, models=["model/a"])
        service.set_interview_context(InterviewContext(role="Backend Engineer", domain="Backend"))
        context = [
            ChatTurn(role="user" if index % 2 == 0 else "assistant", content=f"turn {index}")
            for index in range(6)
        ]

        await service.generate_response("Explain CAP theorem", context)

        params = client.completions.calls[0]
        messages = params["messages"]
        assert messages[0]["role"] == "system"
        assert "Role: Backend Engineer" in messages[0]["content"]
        assert [message["content"] for message in messages[1:-1]] == ["turn 2", "turn 3", "turn 4", "turn 5"]
        assert messages[-1] == {"role": "user", "content": "Explain CAP theorem"}
        assert params["stream"] is True
        assert params["temperature"] == TEMPERATURE
        assert params["max_tokens"] == MAX_TOKENS

    @pytest.mark.asyncio
    async def test_sync_and_async_token_callbacks(self, gateway, client_manager):
        sync_tokens = []
        async_tokens = []

        async def collect(token):
            async_tokens.append(token)

        for callback in (sync_tokens.append, collect):
            client = gateway({"model/a": FakeStream(["a", "b", "c"])})
            service = build_service(client_manager, client, models=["model/a"])
            await service.generate_response("Question?", [], on_token=callback)

        assert sync_tokens == ["a", "b", "c"]
        assert async_tokens == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_generate_flags_failures(self, gateway, client_manager):
        """Test that failure messages are reported separately from real answers."""
        failing = build_service(client_manager, gateway({
            "model/a": status_error(429),
            "model/b": status_error(429),
        }))
        working = build_service(client_manager, gateway({"model/a": FakeStream(["fine"])}), models=["model/a"])

        failed = await failing.generate("Question?", [])
        answered = await working.generate("Question?", [])

        assert failed.failed is True
        assert failed.text == BUSY_MESSAGE
        assert answered.failed is False
        assert answered.text == "fine"

    @pytest.mark.asyncio
    async def test_not_configured_returns_message(self, client_manager):
        service = AIResponseService(client_manager=client_manager(None, configured=False))

        assert await service.generate_response("Question?", []) == NOT_CONFIGURED_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_question_raises(self, gateway, client_manager):
        service = build_service(client_manager, gateway({}))

        with pytest.raises(ValueError, match="Question cannot be empty"):
            await service.generate_response("   ", [])

    def test_models_default_to_settings(self, client_manager):
        service = AIResponseService(client_manager=client_manager(None, models=["x/1", "x/2", "x/3"]))

        assert service.models == ["x/1", "x/2", "x/3"]
