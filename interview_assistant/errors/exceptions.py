from typing import List, Optional

from fastapi import HTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT, HTTP_503_SERVICE_UNAVAILABLE

class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=HTTP_400_BAD_REQUEST, detail=detail)

class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=HTTP_404_NOT_FOUND, detail=detail)

class Conflict(HTTPException):
    def __init__(self, detail: str = "Request conflicts with the current state"):
        super().__init__(status_code=HTTP_409_CONFLICT, detail=detail)

class ServiceUnavailable(HTTPException):
    def __init__(self, detail: str = "Service unavailable"):
        super().__init__(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=detail)

class SessionNotFound(NotFound):
    def __init__(self, session_id: str = None):
        detail = f"Session '{session_id}' not found." if session_id else "Session not found."
        super().__init__(detail=detail)

class AnswerInProgress(Conflict):
    def __init__(self, session_id: str = None):
        detail = f"An answer is already being generated for session '{session_id}'." if session_id else "An answer is already being generated."
        super().__init__(detail=detail)

class ZoomNotConfigured(ServiceUnavailable):
    def __init__(self, detail: str = "Zoom SDK key is not configured"):
        super().__init__(detail=detail)

class InvalidMeetingLink(BadRequest):
    def __init__(self, detail: str = "Invalid Jitsi meeting link"):
        super().__init__(detail=detail)


# Chat-completion gateway errors. These never reach the HTTP layer directly;
# AIResponseService.generate_response turns them into user-facing messages.

class AIGatewayError(Exception):
    """Base class for chat-completion gateway failures."""

class GatewayNotConfiguredError(AIGatewayError):
    def __init__(self, message: str = "OpenRouter API key is not configured"):
        super().__init__(message)

class InvalidAPIKeyError(AIGatewayError):
    def __init__(self, message: str = "Invalid API key. Please check your OpenRouter API key configuration."):
        super().__init__(message)

class ModelAttemptError(AIGatewayError):
    """A single candidate model failed; the caller moves on to the next one."""

    def __init__(self, model: str, reason: str, status_code: Optional[int] = None):
        self.model = model
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{model}: {reason}")

class ModelsExhaustedError(AIGatewayError):
    def __init__(self, failures: List[ModelAttemptError]):
        self.failures = failures
        super().__init__("All models have been tried without success")

    def describe(self) -> str:
        return "; ".join(str(failure) for failure in self.failures) or "no models configured"

    @property
    def last_failure(self) -> Optional[ModelAttemptError]:
        return self.failures[-1] if self.failures else None

    @property
    def all_empty(self) -> bool:
        return bool(self.failures) and all(failure.reason == "empty response" for failure in self.failures)