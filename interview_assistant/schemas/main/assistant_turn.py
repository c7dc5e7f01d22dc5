"""
Description:
Request and result schemas for one question/answer turn of the assistant.

Dependencies:
- pydantic: Used for data validation and settings management.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from interview_assistant.schemas.main.conversation_message import Message


class AnswerRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)


class ClarificationRequest(BaseModel):
    option: str = Field(..., min_length=1, max_length=4000)


class AssistantTurnResult(BaseModel):
    """Outcome of a turn: a stored answer, a clarification prompt or a visible error."""
    kind: Literal["answer", "clarify", "error"]
    text: str
    options: List[str] = Field(default_factory=list)
    message: Optional[Message] = None


class GeneratedAnswer(BaseModel):
    """Text produced by the gateway; failed answers carry the message to show instead."""
    text: str
    failed: bool = False
