"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lockwatch.storage import HarvestStore, init_storage

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by SQLite."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'harvest.db'}")
    try:
        await init_storage(engine)
    except Exception:
        await engine.dispose()
        raise

    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def store(session_factory: async_sessionmaker[AsyncSession]) -> HarvestStore:
    """Return a harvest store bound to the test database."""
    return HarvestStore(session_factory)
