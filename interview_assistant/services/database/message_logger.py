"""
Message Logger Module

Fire-and-forget write-through of conversation messages to the database. Logging must
never slow down or break a conversation turn: inserts run in a worker thread, failures
are logged and dropped, and without a configured database every call is a no-op.

Dependencies:
- sqlalchemy: For the database session and error types.
- loguru: For logging failures.
- interview_assistant.database: For the shared session factory.
"""

import asyncio
from typing import Callable, Optional, Set

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_assistant.database import get_session_factory
from interview_assistant.models.message_models import ChatMessageRecord
from interview_assistant.schemas.main.conversation_message import Message


class MessageLogger:
    """Writes conversation messages to the `messages` table when a database is configured."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory
        self._pending: Set[asyncio.Task] = set()

    def _get_session_factory(self) -> Optional[Callable[[], Session]]:
        return self._session_factory or get_session_factory()

    @property
    def enabled(self) -> bool:
        return self._get_session_factory() is not None

    def save_message_sync(self, session_id: str, message: Message) -> bool:
        """
        Insert one message row.

        Args:
            session_id (str): The assistant session the message belongs to.
            message (Message): The message to log.

        Returns:
            bool: True if the row was written, False if logging is disabled or failed.
        """
        factory = self._get_session_factory()
        if factory is None:
            return False

        db = factory()
        try:
            db.add(ChatMessageRecord(
                id=message.id_as_uuid(),
                session_id=session_id,
                type=message.type,
                text=message.text,
                timestamp=message.timestamp,
            ))
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save message {message.id}: {e}")
            return False
        finally:
            db.close()

    async def save_message(self, session_id: str, message: Message) -> bool:
        """Insert one message row without blocking the event loop."""
        if not self.enabled:
            return False
        try:
            return await asyncio.to_thread(self.save_message_sync, session_id, message)
        except Exception as e:
            logger.error(f"Unexpected error saving message {message.id}: {e}")
            return False

    def schedule(self, session_id: str, message: Message) -> Optional[asyncio.Task]:
        """Start save_message in the background and return the task (None when disabled)."""
        if not self.enabled:
            return None
        task = asyncio.get_running_loop().create_task(self.save_message(session_id, message))
        # Keep a reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for scheduled writes; called on shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


message_logger = MessageLogger()
