"""Database Configuration and Connection Management Module

This module handles database connectivity for the optional chat message log. The engine
is created lazily from DATABASE_URL (or the DB_* variables); when neither is configured
the service runs without a database and message logging is a no-op.

Dependencies:
- sqlalchemy: For database ORM and connection management.
- loguru: For logging operations.
- interview_assistant.core.settings: For the database URL.
- interview_assistant.models.message_models: For database model definitions.
"""

import threading
from typing import Optional

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from interview_assistant.core.settings import get_settings
from interview_assistant.models.message_models import Base

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_engine_lock = threading.Lock()


def get_engine() -> Optional[Engine]:
    """Return the shared engine, or None when no database is configured."""
    global _engine
    if _engine is not None:
        return _engine

    database_url = get_settings().database_url
    if not database_url:
        return None

    with _engine_lock:
        if _engine is None:
            _engine = create_engine(
                database_url,
                echo=False,
                pool_pre_ping=True, # verify connections before using
                pool_recycle=300 # Recycle connections every 5 minutes
            )
    return _engine


def get_session_factory() -> Optional[sessionmaker]:
    """Return a sessionmaker bound to the shared engine, or None without a database."""
    global _session_factory
    engine = get_engine()
    if engine is None:
        return None
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _session_factory


def create_tables() -> bool:
    """Create all tables defined in the models.

    Returns:
        bool: True when tables were created (or already existed), False without a database.

    Raises:
        Exception: If table creation fails
    """
    engine = get_engine()
    if engine is None:
        logger.warning("Database is not configured; chat messages will not be logged")
        return False
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Error creating database table: {e}")
        raise
