"""
Description:
Retry policy for browser speech recognition. The browser relays recognition lifecycle
events (start, end, error); the controller decides whether recognition should be
restarted after a delay or stopped, and the browser carries out the directive.

Network errors back off exponentially, other interruptions restart after a fixed delay,
and both share one attempt cap that resets once recognition starts again. Missing
microphones and denied permissions stop listening immediately.

Dependencies:
- loguru: For logging recognition errors.
- interview_assistant.schemas.speech.recognition_event: For the directive schema.
"""
from typing import Optional

from loguru import logger

from interview_assistant.schemas.speech.recognition_event import RecognitionDirective

MAX_RETRIES = 3
RETRY_TIMEOUT_MS = 1000

NO_MICROPHONE_MESSAGE = "No microphone was found or microphone is disabled"
PERMISSION_DENIED_MESSAGE = "Microphone permission denied"
MAX_RETRIES_MESSAGE = "Max retry attempts reached for speech recognition"


class RecognitionController:
    """
    Per-connection speech recognition state.

    Attributes:
        is_listening: Whether the user wants recognition running.
        retry_count: Restarts issued since recognition last started successfully.
        end_expected: An error was already handled; the end event the browser fires
            right after it is ignored.
    """

    def __init__(self, max_retries: int = MAX_RETRIES, retry_timeout_ms: int = RETRY_TIMEOUT_MS):
        self.max_retries = max_retries
        self.retry_timeout_ms = retry_timeout_ms
        self.is_listening = False
        self.retry_count = 0
        self.end_expected = False

    def start(self) -> RecognitionDirective:
        """The user turned listening on."""
        self.is_listening = True
        self.retry_count = 0
        self.end_expected = False
        return RecognitionDirective(action="none")

    def stop(self, reason: Optional[str] = None, message: Optional[str] = None) -> RecognitionDirective:
        """Stop listening and reset the retry state."""
        self.is_listening = False
        self.retry_count = 0
        return RecognitionDirective(action="stop", reason=reason, message=message)

    def on_start(self) -> RecognitionDirective:
        """Recognition (re)started successfully."""
        self.retry_count = 0
        self.end_expected = False
        return RecognitionDirective(action="none")

    def on_end(self) -> RecognitionDirective:
        """Recognition ended; restart it if the user is still listening."""
        if self.end_expected:
            self.end_expected = False
            return RecognitionDirective(action="none")
        if not self.is_listening:
            return RecognitionDirective(action="none")
        return self._handle_unexpected_end()

    def on_error(self, error: str) -> RecognitionDirective:
        """
        React to a SpeechRecognitionErrorEvent code.

        Args:
            error (str): The browser's error code, e.g. "network" or "not-allowed".

        Returns:
            RecognitionDirective: What the browser should do next.
        """
        logger.warning(f"Speech recognition error: {error}")
        if not self.is_listening:
            return RecognitionDirective(action="none")

        self.end_expected = True
        if error == "network":
            return self._handle_network_error()
        if error == "audio-capture":
            logger.error(NO_MICROPHONE_MESSAGE)
            return self.stop(reason=error, message=NO_MICROPHONE_MESSAGE)
        if error in ("not-allowed", "service-not-allowed"):
            logger.error(PERMISSION_DENIED_MESSAGE)
            return self.stop(reason=error, message=PERMISSION_DENIED_MESSAGE)
        return self._handle_unexpected_end()

    def _handle_network_error(self) -> RecognitionDirective:
        if self.retry_count < self.max_retries:
            self.retry_count += 1
            delay = self.retry_timeout_ms * 2 ** (self.retry_count - 1)
            return self._restart(delay, "network")
        logger.error(MAX_RETRIES_MESSAGE)
        return self.stop(reason="network", message=MAX_RETRIES_MESSAGE)

    def _handle_unexpected_end(self) -> RecognitionDirective:
        if self.retry_count < self.max_retries:
            self.retry_count += 1
            return self._restart(self.retry_timeout_ms, "ended")
        logger.error(MAX_RETRIES_MESSAGE)
        return self.stop(reason="ended", message=MAX_RETRIES_MESSAGE)

    def _restart(self, delay_ms: int, reason: str) -> RecognitionDirective:
        logger.info(f"Restarting speech recognition in {delay_ms} ms (attempt {self.retry_count}/{self.max_retries})")
        return RecognitionDirective(action="restart", delay_ms=delay_ms, reason=reason)
