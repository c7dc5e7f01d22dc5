"""
Conversation Store Module

In-memory store for assistant sessions. Each session keeps its ordered message history,
its interview context and its listening flag for as long as the browser session lives.
Nothing here is persisted; the optional database logging is handled separately by
MessageLogger.

Dependencies:
- loguru: For logging session lifecycle events.
- interview_assistant.schemas.main.conversation_state: For the typed session state.
"""

import uuid
from typing import List, Optional

from loguru import logger

from interview_assistant.errors.exceptions import SessionNotFound
from interview_assistant.schemas.main.conversation_message import Message, MessageType
from interview_assistant.schemas.main.conversation_state import ConversationState, ConversationStateDict
from interview_assistant.schemas.main.interview_context import InterviewContext


class ConversationStore:
    """
    Keeps ConversationState objects keyed by session id.

    All mutations happen on the event loop, so the store needs no locking.
    """

    def __init__(self):
        self._sessions = ConversationStateDict()

    def create_session(self, context: Optional[InterviewContext] = None, session_id: Optional[str] = None) -> str:
        """Create a session and return its id. An existing id is reset."""
        session_id = session_id or str(uuid.uuid4())
        if self._sessions.session_exists(session_id):
            logger.info(f"[Session {session_id}] Resetting existing session")
        self._sessions.create_session(session_id, context)
        logger.info(f"[Session {session_id}] Created")
        return session_id

    def get_session(self, session_id: str) -> ConversationState:
        """
        Get the state of a session.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        state = self._sessions.get_session(session_id)
        if state is None:
            raise SessionNotFound(session_id)
        return state

    def get_or_create_session(self, session_id: str) -> ConversationState:
        state = self._sessions.get_session(session_id)
        if state is None:
            self._sessions.create_session(session_id)
            logger.info(f"[Session {session_id}] Created on first use")
            state = self._sessions.get_session(session_id)
        return state

    def session_exists(self, session_id: str) -> bool:
        return self._sessions.session_exists(session_id)

    def remove_session(self, session_id: str) -> None:
        if self._sessions.remove_session(session_id):
            logger.info(f"[Session {session_id}] Removed")

    def add_message(self, session_id: str, message_type: MessageType, text: str) -> Message:
        return self.get_session(session_id).add_message(message_type, text)

    def get_messages(self, session_id: str) -> List[Message]:
        return list(self.get_session(session_id).messages)

    def clear_messages(self, session_id: str) -> None:
        self.get_session(session_id).clear_messages()
        logger.info(f"[Session {session_id}] Messages cleared")

    def set_interview_context(self, session_id: str, context: InterviewContext) -> None:
        self.get_session(session_id).set_interview_context(context)

    def set_listening(self, session_id: str, is_listening: bool) -> None:
        self.get_session(session_id).set_listening(is_listening)


# Process-wide store used by the routes
conversation_store = ConversationStore()
