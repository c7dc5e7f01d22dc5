"""
Answer Streaming Routes

Description:
REST alternative to the WebSocket channel. A question (or a picked clarification option)
is answered as a server-sent event stream: every token is sent as it arrives, followed by
one final answer, clarify or error event and the `data: [DONE]` terminator.

Dependencies:
- fastapi: For the routes and the streaming response.
- interview_assistant.services.conversation.interview_assistant_service: For answer turns.
- interview_assistant.core.route_limiters: For rate limiting.
- loguru: For logging streaming failures.
"""
import asyncio
import json
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from loguru import logger

from interview_assistant.core.route_limiters import limiter, ANSWER_RATE_LIMIT
from interview_assistant.errors.exceptions import AnswerInProgress
from interview_assistant.schemas.main.assistant_turn import AnswerRequest, AssistantTurnResult, ClarificationRequest
from interview_assistant.services.conversation.interview_assistant_service import InterviewAssistantService, interview_assistant_service
from interview_assistant.services.websocket_utils.handle_websocket_connection import GENERATION_FAILED_MESSAGE

router = APIRouter(
    prefix="/api/sessions",
    tags=["answers"],
    responses={404: {"description": "Not found"}}
)

DONE_EVENT = "data: [DONE]\n\n"


def get_assistant_service() -> InterviewAssistantService:
    return interview_assistant_service


def format_event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def result_event(result: AssistantTurnResult) -> Dict[str, Any]:
    event: Dict[str, Any] = {"type": result.kind, "content": result.text}
    if result.kind == "clarify":
        event["options"] = result.options
    if result.message is not None:
        event["message"] = result.message.model_dump(mode="json")
    return event


async def stream_turn(service: InterviewAssistantService, session_id: str, text: str, clarification: bool) -> AsyncIterator[str]:
    """Run one turn in a task and relay its tokens and outcome as SSE lines."""
    queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()

    async def on_token(token: str) -> None:
        await queue.put({"type": "token", "content": token})

    async def run() -> None:
        try:
            if clarification:
                result = await service.handle_clarification(session_id, text, on_token)
            else:
                result = await service.handle_question(session_id, text, on_token)
            await queue.put(result_event(result))
        except HTTPException as e:
            await queue.put({"type": "error", "content": str(e.detail)})
        except Exception as e:
            logger.exception(f"[Session {session_id}] Error streaming answer: {e}")
            await queue.put({"type": "error", "content": GENERATION_FAILED_MESSAGE})
        finally:
            await queue.put(None)

    task = asyncio.create_task(run())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield format_event(event)
        yield DONE_EVENT
    finally:
        # Client went away mid-stream
        if not task.done():
            task.cancel()


def _check_turn_allowed(service: InterviewAssistantService, session_id: str) -> None:
    state = service.store.get_session(session_id)
    if state.is_generating:
        raise AnswerInProgress(session_id)


@router.post("/{session_id}/answers")
@limiter.limit(ANSWER_RATE_LIMIT)
async def stream_answer(
    request: Request,
    session_id: str,
    body: AnswerRequest,
    service: InterviewAssistantService = Depends(get_assistant_service),
):
    """
    Stream a suggested answer to an interview question.

    Unknown sessions (404) and sessions with an answer in flight (409) are rejected before
    the stream starts; everything after that is reported inside the stream.
    """
    _check_turn_allowed(service, session_id)
    return StreamingResponse(
        stream_turn(service, session_id, body.question, clarification=False),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.post("/{session_id}/clarifications")
@limiter.limit(ANSWER_RATE_LIMIT)
async def stream_clarified_answer(
    request: Request,
    session_id: str,
    body: ClarificationRequest,
    service: InterviewAssistantService = Depends(get_assistant_service),
):
    """Stream the answer for the interpretation picked after a clarify event."""
    _check_turn_allowed(service, session_id)
    return StreamingResponse(
        stream_turn(service, session_id, body.option, clarification=True),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
