from typing import List, Optional

from pydantic import BaseModel

from interview_assistant.schemas.main.conversation_message import Message
from interview_assistant.schemas.main.interview_context import InterviewContext


class SessionResponse(BaseModel):
    session_id: str
    interview_context: Optional[InterviewContext] = None


class MessagesResponse(BaseModel):
    session_id: str
    messages: List[Message]
