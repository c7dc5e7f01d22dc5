"""
WebSocket Connection Handler Utility Module

This module drives the live assistant channel for one browser session. The browser
relays speech-recognition events and typed questions; the handler turns final
transcripts into questions, streams answer tokens back, and tells the browser when to
restart or stop recognition.

Answers are generated in a background task so recognition events keep flowing while a
response streams. Only one answer runs per connection at a time.

Dependencies:
- starlette.websockets: For WebSocket connection handling.
- pydantic: For validating client events.
- loguru: For logging operations.
- interview_assistant.services.conversation.interview_assistant_service: For answer turns.
- interview_assistant.services.speech: For transcript processing and the retry policy.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from loguru import logger
from pydantic import ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect

from interview_assistant.schemas.main.assistant_turn import AssistantTurnResult
from interview_assistant.schemas.speech.recognition_event import RecognitionDirective
from interview_assistant.schemas.websocket.websocket_message import WebSocketClientMessage, WebSocketMessage
from interview_assistant.services.conversation.interview_assistant_service import InterviewAssistantService, interview_assistant_service
from interview_assistant.services.speech.recognition_controller import RecognitionController
from interview_assistant.services.speech.transcript_processor import split_recognition_results

GENERATION_FAILED_MESSAGE = "Failed to generate response. Please try again."


def _timestamp() -> str:
    return str(int(time.time() * 1000))


async def send_websocket_message(websocket: WebSocket, message_type: str, content: str = "",
  options: Optional[List[str]] = None, data: Optional[Dict[str, Any]] = None):
    """Send a WebSocket message with consistent formatting."""
    await websocket.send_json(WebSocketMessage(
        type=message_type,
        content=content,
        options=options,
        data=data,
        timestamp=_timestamp()
    ).model_dump(mode="json", exclude_none=True))

async def send_error_message(websocket: WebSocket, error_message: str):
    """Send an error message to the WebSocket client."""
    await send_websocket_message(websocket, "error", error_message)

async def send_turn_result(websocket: WebSocket, result: AssistantTurnResult):
    """Send the outcome of an assistant turn."""
    if result.kind == "clarify":
        await send_websocket_message(websocket, "clarify", result.text, options=result.options)
    elif result.kind == "error":
        await send_error_message(websocket, result.text)
    else:
        data = result.message.model_dump(mode="json") if result.message else None
        await send_websocket_message(websocket, "answer", result.text, data=data)

async def send_directive(websocket: WebSocket, directive: RecognitionDirective):
    """Send a recognition directive; stops with a message also surface as an error."""
    await send_websocket_message(websocket, "recognition", directive.message or "", data=directive.model_dump())
    if directive.action == "stop" and directive.message:
        await send_error_message(websocket, directive.message)


class AssistantConnection:
    """
    State of one live assistant WebSocket.

    Attributes:
        session_id: The conversation session the socket is bound to.
        recognition: Retry policy for the browser's speech recognition.
        answer_task: The answer currently being generated, if any.
        owns_session: Whether this socket created the session and removes it on close.
    """

    def __init__(self, websocket: WebSocket, session_id: str, service: Optional[InterviewAssistantService] = None):
        self.websocket = websocket
        self.session_id = session_id
        self.service = service or interview_assistant_service
        self.recognition = RecognitionController()
        self.answer_task: Optional[asyncio.Task] = None
        self.owns_session = False

    @property
    def is_answering(self) -> bool:
        return self.answer_task is not None and not self.answer_task.done()

    async def _stream_token(self, token: str) -> None:
        await send_websocket_message(self.websocket, "token", token)

    async def _run_turn(self, text: str, clarification: bool) -> None:
        try:
            if clarification:
                result = await self.service.handle_clarification(self.session_id, text, self._stream_token)
            else:
                result = await self.service.handle_question(self.session_id, text, self._stream_token)
            await send_turn_result(self.websocket, result)
        except WebSocketDisconnect:
            logger.info(f"[Session {self.session_id}] Client left while an answer was streaming")
        except HTTPException as e:
            await send_error_message(self.websocket, str(e.detail))
        except Exception as e:
            logger.exception(f"[Session {self.session_id}] Error generating answer: {e}")
            await send_error_message(self.websocket, GENERATION_FAILED_MESSAGE)

    async def submit(self, text: str, clarification: bool = False) -> None:
        """Start answering unless an answer is already streaming."""
        if self.is_answering:
            await send_websocket_message(self.websocket, "status", "An answer is already being generated. Please wait.", data={"busy": True})
            return
        self.answer_task = asyncio.create_task(self._run_turn(text, clarification))

    async def handle_speech_results(self, message: WebSocketClientMessage) -> None:
        batch = split_recognition_results(message.results, message.result_index)
        if batch.interim_transcript:
            await send_websocket_message(self.websocket, "transcript", batch.interim_transcript, data={"final": False})
        if batch.final_transcript:
            await send_websocket_message(self.websocket, "transcript", batch.final_transcript, data={"final": True})
            await self.submit(batch.final_transcript)

    async def handle_message(self, message: WebSocketClientMessage) -> None:
        """Dispatch one client event."""
        if message.type == "question":
            await self.submit(message.content)
        elif message.type == "clarification":
            await self.submit(message.content, clarification=True)
        elif message.type == "speech_results":
            await self.handle_speech_results(message)
        elif message.type == "speech_start":
            self.recognition.on_start()
        elif message.type == "speech_end":
            await send_directive(self.websocket, self.recognition.on_end())
        elif message.type == "speech_error":
            directive = self.recognition.on_error(message.error or "unknown")
            if directive.action == "stop":
                self.service.store.set_listening(self.session_id, False)
            await send_directive(self.websocket, directive)
        elif message.type == "start_listening":
            self.recognition.start()
            self.service.store.set_listening(self.session_id, True)
            await send_websocket_message(self.websocket, "status", "Listening", data={"listening": True})
        elif message.type == "stop_listening":
            directive = self.recognition.stop(reason="user")
            self.service.store.set_listening(self.session_id, False)
            await send_directive(self.websocket, directive)
        elif message.type == "clear":
            self.service.store.clear_messages(self.session_id)
            await send_websocket_message(self.websocket, "status", "Conversation cleared", data={"cleared": True})

    async def close(self) -> None:
        """Cancel a running answer, then drop the session if this socket created it."""
        if self.is_answering:
            self.answer_task.cancel()
            try:
                await self.answer_task
            except asyncio.CancelledError:
                pass
        if self.owns_session:
            self.service.store.remove_session(self.session_id)
        elif self.service.store.session_exists(self.session_id):
            self.service.store.set_listening(self.session_id, False)


async def handle_websocket_connection(websocket: WebSocket, session_id: str, service: Optional[InterviewAssistantService] = None):
    """
    Run the live assistant loop until the client disconnects.

    Args:
        websocket (WebSocket): An accepted WebSocket.
        session_id (str): The session to attach to; created if it does not exist yet and then removed on disconnect.
        service (Optional[InterviewAssistantService]): Turn orchestration, defaults to the shared service.
    """
    connection = AssistantConnection(websocket, session_id, service)
    connection.owns_session = not connection.service.store.session_exists(session_id)
    connection.service.store.get_or_create_session(session_id)
    await send_websocket_message(websocket, "status", "Connected", data={"session_id": session_id})
    logger.info(f"[Session {session_id}] Assistant WebSocket connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = WebSocketClientMessage.model_validate_json(raw)
            except ValidationError as e:
                logger.warning(f"[Session {session_id}] Invalid client message: {e.errors()}")
                await send_error_message(websocket, "Invalid message format")
                continue
            await connection.handle_message(message)
    finally:
        await connection.close()
