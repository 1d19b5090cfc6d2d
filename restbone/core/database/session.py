"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that the generated route handlers use for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from restbone.core.config import settings
from restbone.core.logging_config import get_logger

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

# Create global engine and session factory
engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Sessions come from ``app.state.session_maker`` when the application has
    its own database, else from the global session factory. Every dependency
    of one request that asks for a session receives the same one, so a loaded
    parent and its children are saved together.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    session_maker = getattr(request.app.state, "session_maker", None) or async_session_maker
    async with session_maker() as session:
        yield session


async def init_db(db_engine: Optional[AsyncEngine] = None) -> None:
    """
    Initialize the database.

    Creates the tables of every SQLModel table class imported so far.

    Args:
        db_engine: The engine to create tables on. Defaults to the global engine.
    """
    db_engine = db_engine or engine
    logger.debug(f"Creating missing tables on {db_engine.url.render_as_string(hide_password=True)}")
    await create_all(db_engine)
