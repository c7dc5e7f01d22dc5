"""Message Models Module

This module defines the SQLAlchemy model for the optional chat message log. Every
question and answer shown in the assistant can be written to the `messages` table;
the service never reads it back.

Dependencies:
- sqlalchemy: For ORM functionality and database modeling.
- uuid: For UUID primary keys.
- datetime: For timestamp handling.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass

class ChatMessageRecord(Base):
    """One logged conversation message.

    Attributes:
        id (UUID): Primary key, taken from the in-memory message id
        session_id (str): Assistant session the message belongs to
        type (str): "question" or "answer"
        text (str): Message body
        timestamp (datetime): When the message was added to the conversation
        created_at (datetime): When the row was written
    """
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[str] = mapped_column(String(64), index=True)
    type: Mapped[str] = mapped_column(String(16))
    text: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now())

    def __repr__(self):
        return f"ChatMessageRecord(id={self.id}, session_id={self.session_id}, type={self.type})"
