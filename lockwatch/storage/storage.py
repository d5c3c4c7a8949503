"""Persistence models for harvested repositories, issues and comments.

Tables are append-only: rows are inserted when their identifier is absent and
never updated or deleted by the harvester. ``comments.is_toxic`` is written
by an external classifier and only read here.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, Text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# GitHub ids outgrow 32 bits; SQLite integers are 64-bit already.
_Id = BigInteger().with_variant(Integer(), "sqlite")

_SQLITE_PREFIX = "sqlite:"


class Base(DeclarativeBase):
    """Base declarative class for harvest tables."""


class RepositoryRecord(Base):
    """Repository holding at least one too-heated issue."""

    __tablename__ = "repositories"

    id_repo: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text())
    forks_url: Mapped[str] = mapped_column(Text())
    stars_url: Mapped[str] = mapped_column(Text())
    commits_url: Mapped[str] = mapped_column(Text())


class IssueRecord(Base):
    """Closed issue locked as too heated."""

    __tablename__ = "issues"

    id_issue: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=False)
    id_repo: Mapped[int | None] = mapped_column(
        _Id, ForeignKey("repositories.id_repo"), default=None
    )
    created_at: Mapped[str | None] = mapped_column(Text(), default=None)
    title: Mapped[str] = mapped_column(Text())
    comments_url: Mapped[str] = mapped_column(Text())


class CommentRecord(Base):
    """Comment on a stored issue, flagged toxic by an external classifier."""

    __tablename__ = "comments"

    id_comment: Mapped[int] = mapped_column(
        _Id, primary_key=True, autoincrement=False
    )
    id_issue: Mapped[int | None] = mapped_column(
        _Id, ForeignKey("issues.id_issue"), default=None
    )
    created_at: Mapped[str | None] = mapped_column(Text(), default=None)
    text: Mapped[str] = mapped_column(Text())
    is_toxic: Mapped[bool] = mapped_column(Boolean(), default=False)


def database_url_from(value: str) -> str:
    """Turn a CLI database argument into an async SQLAlchemy URL.

    Full SQLAlchemy URLs pass through. ``sqlite:path`` and bare paths map to
    the aiosqlite driver.

    Examples
    --------
    >>> database_url_from("harvest.db")
    'sqlite+aiosqlite:///harvest.db'
    >>> database_url_from("sqlite:harvest.db")
    'sqlite+aiosqlite:///harvest.db'
    >>> database_url_from("postgresql+asyncpg://u@h/db")
    'postgresql+asyncpg://u@h/db'

    """
    if "://" in value:
        return value
    path = value.removeprefix(_SQLITE_PREFIX)
    return f"sqlite+aiosqlite:///{path}"


def create_storage_engine(database: str) -> AsyncEngine:
    """Create an async engine for a CLI database argument."""
    return create_async_engine(database_url_from(database))


async def init_storage(engine: AsyncEngine) -> None:
    """Create all harvest tables if they are absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
