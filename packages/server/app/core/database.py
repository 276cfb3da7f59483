"""
Database connection and session management.

The store lives in an in-memory SQLite database. All sessions of one engine
share a single connection (``StaticPool``), so each app instance sees one
consistent store for its whole lifetime.

Because that connection is shared, a session's transaction is only its own
while no other session is open: a rollback (or the pool's reset on close)
would also discard another session's pending writes. Every session is
therefore held under the app's ``session_lock`` from open to close, so
requests run their store work one at a time.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  (populates SQLModel.metadata)


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine; in-memory SQLite URLs share one connection."""
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, echo=echo, future=True)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def get_session_context(session_factory: sessionmaker, lock: asyncio.Lock):
    """Exclusive session: commits on success, rolls back on error.

    Also usable outside of the FastAPI request lifecycle (startup seeding,
    tests).
    """
    async with lock:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    state = request.app.state
    async with get_session_context(state.session_factory, state.session_lock) as session:
        yield session
