"""Pure predicates and stamping transforms applied to decoded items."""

from __future__ import annotations

import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lockwatch.github.models import Comment, Issue

TOO_HEATED = "too heated"
CLOSED = "closed"


def is_too_heated(issue: Issue) -> bool:
    """Return True for closed issues locked because the discussion was too heated."""
    return (
        issue.locked
        and issue.active_lock_reason == TOO_HEATED
        and issue.state == CLOSED
    )


def stamp_repository(issue: Issue, repository_id: int) -> Issue:
    """Return ``issue`` with its parent repository id set."""
    return msgspec.structs.replace(issue, repository_id=repository_id)


def stamp_issue(comment: Comment, issue_id: int) -> Comment:
    """Return ``comment`` with its parent issue id set."""
    return msgspec.structs.replace(comment, issue_id=issue_id)


def too_heated_for(repository_id: int) -> cabc.Callable[[Issue], Issue | None]:
    """Build a walk transform keeping too-heated issues stamped with ``repository_id``."""

    def _transform(issue: Issue) -> Issue | None:
        if not is_too_heated(issue):
            return None
        return stamp_repository(issue, repository_id)

    return _transform


def stamped_for(issue_id: int) -> cabc.Callable[[Comment], Comment]:
    """Build a walk transform stamping every comment with ``issue_id``."""

    def _transform(comment: Comment) -> Comment:
        return stamp_issue(comment, issue_id)

    return _transform
