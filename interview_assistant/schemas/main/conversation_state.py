"""
Conversation State Schemas

This module defines the in-memory state kept for every assistant session: the ordered
message history, the interview context and whether the browser is currently listening.
ConversationStateDict is the typed container the conversation store keeps sessions in.

Dependencies:
- pydantic: For data validation and serialization
- typing: For type hints
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from interview_assistant.schemas.main.conversation_message import ChatTurn, Message, MessageType
from interview_assistant.schemas.main.interview_context import InterviewContext


class ConversationState(BaseModel):
    """Complete state of one assistant session."""
    messages: List[Message] = Field(default_factory=list, description="Questions and answers in arrival order")
    interview_context: Optional[InterviewContext] = Field(default=None, description="Context captured by the setup form")
    is_listening: bool = Field(default=False, description="Whether speech recognition is running in the browser")
    is_generating: bool = Field(default=False, description="Whether an answer is currently being generated")

    def add_message(self, message_type: MessageType, text: str) -> Message:
        """Append a message, assigning its id and timestamp."""
        message = Message(type=message_type, text=text)
        self.messages.append(message)
        return message

    def clear_messages(self) -> None:
        self.messages = []

    def set_interview_context(self, context: InterviewContext) -> None:
        self.interview_context = context

    def set_listening(self, is_listening: bool) -> None:
        self.is_listening = is_listening

    def to_chat_context(self) -> List[ChatTurn]:
        """Convert the message history into gateway chat turns."""
        return [message.to_chat_turn() for message in self.messages]


class ConversationStateDict(BaseModel):
    """Type-safe container for session states dictionary."""
    sessions: Dict[str, ConversationState] = Field(default_factory=dict, description="Session states by session ID")

    def get_session(self, session_id: str) -> Optional[ConversationState]:
        """Get session state by ID."""
        return self.sessions.get(session_id)

    def create_session(self, session_id: str, context: Optional[InterviewContext] = None) -> ConversationState:
        """Create new session state."""
        state = ConversationState(interview_context=context)
        self.sessions[session_id] = state
        return state

    def remove_session(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def session_exists(self, session_id: str) -> bool:
        """Check if session exists."""
        return session_id in self.sessions
