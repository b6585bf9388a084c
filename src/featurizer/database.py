# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Database engine and session management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from featurizer.models.base import Base


def build_engine(url: str, pool_size: int = 5, echo: bool = False) -> AsyncEngine:
    """Create the async engine.

    SQLite drivers do not accept pool sizing, so it is only passed to
    server databases.
    """
    kwargs: dict = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = pool_size
        kwargs["pool_pre_ping"] = True
    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session committed on success and rolled back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they don't exist (development and tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
