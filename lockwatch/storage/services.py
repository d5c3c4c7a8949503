"""Insert-if-absent writer and read queries for the harvest store."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from lockwatch.logging import get_logger, log_debug

from .storage import CommentRecord, IssueRecord, RepositoryRecord

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from lockwatch.github.models import Comment, Issue, Repository

    type Record = RepositoryRecord | IssueRecord | CommentRecord

logger = get_logger(__name__)


class HarvestPersistError(RuntimeError):
    """Raised when an insert fails and the row is still missing afterwards."""

    def __init__(self, table: str, identifier: int) -> None:
        """Name the table and identifier that could not be written."""
        self.table = table
        self.identifier = identifier
        super().__init__(f"failed to store {table} row {identifier}")


@dc.dataclass(frozen=True, slots=True)
class StoredIssue:
    """Issue identifier with the endpoint its comments are listed from."""

    issue_id: int
    comments_url: str


@dc.dataclass(frozen=True, slots=True)
class ToxicCommentTarget:
    """Toxic comment joined to the commit endpoint of its repository."""

    comment_id: int
    issue_id: int
    created_at: str
    commits_url: str


def _repository_record(repository: Repository) -> RepositoryRecord:
    return RepositoryRecord(
        id_repo=repository.id,
        name=repository.name,
        forks_url=repository.forks_url,
        stars_url=repository.stargazers_url,
        commits_url=repository.commits_url,
    )


def _issue_record(issue: Issue) -> IssueRecord:
    return IssueRecord(
        id_issue=issue.id,
        id_repo=issue.repository_id,
        created_at=issue.created_at,
        title=issue.title,
        comments_url=issue.comments_url,
    )


def _comment_record(comment: Comment) -> CommentRecord:
    return CommentRecord(
        id_comment=comment.id,
        id_issue=comment.issue_id,
        created_at=comment.created_at,
        text=comment.body or "",
        is_toxic=False,
    )


class HarvestStore:
    """Append-only store for harvested entities.

    Every row is written in its own transaction, so a crash loses at most the
    row in flight and never rolls back rows already committed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Store the session factory used for reads and writes."""
        self._session_factory = session_factory

    async def _insert_if_absent(self, record: Record, identifier: int) -> bool:
        """Insert ``record`` unless a row with ``identifier`` exists.

        Returns True when a row was written. A unique violation raced in by
        another writer counts as already present; any other failure to land
        the row raises :class:`HarvestPersistError`.
        """
        model = type(record)
        async with self._session_factory() as session:
            if await session.get(model, identifier) is not None:
                return False
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if await session.get(model, identifier) is None:
                    raise HarvestPersistError(model.__tablename__, identifier) from exc
                return False
        return True

    async def store_repository(self, repository: Repository) -> bool:
        """Insert a repository row if its id is new."""
        return await self._insert_if_absent(
            _repository_record(repository), repository.id
        )

    async def store_issues(self, issues: cabc.Iterable[Issue]) -> int:
        """Insert issue rows whose ids are new; return how many were written."""
        written = 0
        for issue in sorted(issues, key=lambda item: item.id):
            if await self._insert_if_absent(_issue_record(issue), issue.id):
                written += 1
        return written

    async def store_comments(self, comments: cabc.Iterable[Comment]) -> int:
        """Insert comment rows whose ids are new; return how many were written."""
        written = 0
        for comment in sorted(comments, key=lambda item: item.id):
            if await self._insert_if_absent(_comment_record(comment), comment.id):
                written += 1
        log_debug(logger, "Stored %d new comments", written)
        return written

    async def list_issues(self) -> list[StoredIssue]:
        """Return every stored issue in id order."""
        async with self._session_factory() as session:
            rows = await session.execute(
                select(IssueRecord.id_issue, IssueRecord.comments_url).order_by(
                    IssueRecord.id_issue
                )
            )
            return [
                StoredIssue(issue_id=issue_id, comments_url=comments_url)
                for issue_id, comments_url in rows
            ]

    async def list_toxic_comment_targets(self) -> list[ToxicCommentTarget]:
        """Return toxic comments joined through issues to repository commit URLs.

        Comments whose issue or repository link is missing cannot be anchored
        to a commit endpoint and are left out.
        """
        stmt = (
            select(
                CommentRecord.id_comment,
                CommentRecord.id_issue,
                CommentRecord.created_at,
                RepositoryRecord.commits_url,
            )
            .join(IssueRecord, IssueRecord.id_issue == CommentRecord.id_issue)
            .join(RepositoryRecord, RepositoryRecord.id_repo == IssueRecord.id_repo)
            .where(CommentRecord.is_toxic.is_(True))
            .where(CommentRecord.created_at.is_not(None))
            .order_by(CommentRecord.id_comment)
        )
        async with self._session_factory() as session:
            rows = await session.execute(stmt)
            return [
                ToxicCommentTarget(
                    comment_id=comment_id,
                    issue_id=issue_id,
                    created_at=created_at,
                    commits_url=commits_url,
                )
                for comment_id, issue_id, created_at, commits_url in rows
            ]
