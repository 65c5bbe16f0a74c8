"""
Engine and session handling.

Nothing connects at import time: the engine is built on the first request
that needs a session (or on the startup prewarm), from DB_URL.
"""
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from assetdex.core.config import settings

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        if not settings.DB_URL:
            raise ValueError("DB_URL not set in environment variables!")
        _engine = create_engine(
            settings.DB_URL,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        # Placement writes commit explicitly; see helpers.placement_helper
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request.

    Anything left uncommitted when the request ends is rolled back, which also
    releases a rack lock taken by a placement that failed validation.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
