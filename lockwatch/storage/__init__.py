"""Harvest store: table models, insert-if-absent writer and read queries."""

from __future__ import annotations

from .services import HarvestPersistError, HarvestStore, StoredIssue, ToxicCommentTarget
from .storage import (
    Base,
    CommentRecord,
    IssueRecord,
    RepositoryRecord,
    create_storage_engine,
    database_url_from,
    init_storage,
)

__all__ = [
    "Base",
    "CommentRecord",
    "HarvestPersistError",
    "HarvestStore",
    "IssueRecord",
    "RepositoryRecord",
    "StoredIssue",
    "ToxicCommentTarget",
    "create_storage_engine",
    "database_url_from",
    "init_storage",
]
