"""
Assistant Session Routes

Description:
This module defines the REST routes for assistant sessions: creating a session from the
setup form, replacing its interview context, and reading or clearing its messages.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- interview_assistant.services.conversation.conversation_store: For session state.
- loguru: For logging session operations.
"""
from fastapi import APIRouter
from loguru import logger
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from interview_assistant.schemas.main.interview_context import InterviewContext
from interview_assistant.schemas.main.session_response import MessagesResponse, SessionResponse
from interview_assistant.services.conversation.conversation_store import conversation_store

router = APIRouter(
    prefix="/api/sessions",
    tags=["sessions"],
    responses={404: {"description": "Not found"}}
)


@router.post("", response_model=SessionResponse, status_code=HTTP_201_CREATED)
async def create_session(context: InterviewContext):
    """
    Start a session with the interview context from the setup form.
    """
    session_id = conversation_store.create_session(context)
    logger.info(f"[Session {session_id}] Setup completed (domain={context.domain}, type={context.interview_type})")
    return SessionResponse(session_id=session_id, interview_context=context)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    state = conversation_store.get_session(session_id)
    return SessionResponse(session_id=session_id, interview_context=state.interview_context)


@router.put("/{session_id}/context", response_model=SessionResponse)
async def update_context(session_id: str, context: InterviewContext):
    conversation_store.set_interview_context(session_id, context)
    return SessionResponse(session_id=session_id, interview_context=context)


@router.get("/{session_id}/messages", response_model=MessagesResponse)
async def get_messages(session_id: str):
    return MessagesResponse(session_id=session_id, messages=conversation_store.get_messages(session_id))


@router.delete("/{session_id}/messages", status_code=HTTP_204_NO_CONTENT)
async def clear_messages(session_id: str):
    conversation_store.clear_messages(session_id)


@router.delete("/{session_id}", status_code=HTTP_204_NO_CONTENT)
async def end_session(session_id: str):
    conversation_store.get_session(session_id)
    conversation_store.remove_session(session_id)
