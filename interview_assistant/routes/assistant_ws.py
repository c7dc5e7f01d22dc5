"""
Live Assistant WebSocket Route

Description:
WebSocket endpoint the browser keeps open while the assistant is on screen. It carries
speech-recognition events and typed questions in, and transcripts, answer tokens and
recognition directives out.

Dependencies:
- fastapi: For the WebSocket route.
- interview_assistant.services.websocket_utils.handle_websocket_connection: For the message loop.
- loguru: For logging connection lifecycle.
"""
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from loguru import logger
from starlette.status import WS_1011_INTERNAL_ERROR

from interview_assistant.routes.answers import get_assistant_service
from interview_assistant.services.conversation.interview_assistant_service import InterviewAssistantService
from interview_assistant.services.websocket_utils.handle_websocket_connection import handle_websocket_connection

router = APIRouter(
    prefix="/api",
    tags=["assistant-websocket"],
)


@router.websocket("/ws/{session_id}")
async def assistant_websocket(
    websocket: WebSocket,
    session_id: str,
    service: InterviewAssistantService = Depends(get_assistant_service),
):
    await websocket.accept()
    try:
        await handle_websocket_connection(websocket, session_id, service)
    except WebSocketDisconnect:
        logger.info(f"[Session {session_id}] Assistant WebSocket disconnected")
    except Exception as e:
        logger.exception(f"[Session {session_id}] Assistant WebSocket error: {e}")
        await websocket.close(code=WS_1011_INTERNAL_ERROR)
