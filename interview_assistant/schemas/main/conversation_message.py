"""
Description:
Conversation message schemas. A Message is one entry in a session's chat history;
a ChatTurn is the same content in the role/content shape the chat-completion gateway expects.

Dependencies:
- pydantic: Used for data validation and settings management.
"""
import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

MessageType = Literal["question", "answer"]
ChatRole = Literal["system", "user", "assistant"]


class Message(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: MessageType
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def id_as_uuid(self) -> uuid.UUID:
        return uuid.UUID(self.id)

    def to_chat_turn(self) -> "ChatTurn":
        role = "user" if self.type == "question" else "assistant"
        return ChatTurn(role=role, content=self.text)


class ChatTurn(BaseModel):
    role: ChatRole
    content: str
