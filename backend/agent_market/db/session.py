"""Async Session Factory — provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - Same write-locking behaviour as DatabaseSessionManager (SQLite: BEGIN IMMEDIATE)
    - Meant for scripts and one-off maintenance tasks

Design Decisions:
    - Separate from infrastructure/database.py: no pool tuning, no error mapping
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from agent_market.infrastructure.database import enable_sqlite_write_locking


def create_session_factory(
    database_url: str,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given database URL."""
    engine = create_async_engine(database_url, echo=False)
    if database_url.startswith("sqlite"):
        enable_sqlite_write_locking(engine)
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
