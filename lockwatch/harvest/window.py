"""Commit activity counts in symmetric windows around an anchor timestamp."""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

from lockwatch.common.time import format_github_datetime, parse_github_datetime
from lockwatch.github.models import CommitRef, commits_endpoint

from .walker import DEFAULT_MAX_PAGES, DEFAULT_PER_PAGE, PageQuery

if typ.TYPE_CHECKING:
    from lockwatch.storage.services import ToxicCommentTarget

    from .walker import PageWalker

DEFAULT_WINDOW_DAYS = 30


@dataclasses.dataclass(frozen=True, slots=True)
class ActivityWindow:
    """Anchor with the bounds of the before and after ranges."""

    anchor: dt.datetime
    since: dt.datetime
    until: dt.datetime

    @property
    def before(self) -> tuple[dt.datetime, dt.datetime]:
        """Return the ``[since, anchor]`` range."""
        return (self.since, self.anchor)

    @property
    def after(self) -> tuple[dt.datetime, dt.datetime]:
        """Return the ``[anchor, until]`` range."""
        return (self.anchor, self.until)


def activity_window(
    anchor: dt.datetime, *, days: int = DEFAULT_WINDOW_DAYS
) -> ActivityWindow:
    """Return the window ``days`` whole days either side of ``anchor``.

    Calendar days, not calendar months: an anchor of 2023-05-15 with 30 days
    spans 2023-04-15 to 2023-06-14.
    """
    if anchor.tzinfo is None:
        msg = "anchor must be timezone-aware"
        raise ValueError(msg)
    span = dt.timedelta(days=days)
    anchor_utc = anchor.astimezone(dt.UTC)
    return ActivityWindow(
        anchor=anchor_utc, since=anchor_utc - span, until=anchor_utc + span
    )


@dataclasses.dataclass(frozen=True, slots=True)
class WindowCounts:
    """Commit counts either side of an anchor."""

    before: int
    after: int


@dataclasses.dataclass(frozen=True, slots=True)
class ExportRow:
    """One line of the commit activity report."""

    comment_id: int
    issue_id: int
    commits_before: int
    commits_after: int

    def as_csv_row(self) -> list[str | int]:
        """Return the row in report column order."""
        return [
            self.comment_id,
            self.issue_id,
            self.commits_before,
            self.commits_after,
        ]


class WindowAggregator:
    """Count commits before and after anchors through a :class:`PageWalker`."""

    def __init__(
        self,
        walker: PageWalker,
        *,
        days: int = DEFAULT_WINDOW_DAYS,
        max_pages: int | None = DEFAULT_MAX_PAGES,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        """Configure the window width and the commit walk ceilings."""
        self._walker = walker
        self._days = days
        self._max_pages = max_pages
        self._per_page = per_page

    def _query(
        self, commits_url: str, bounds: tuple[dt.datetime, dt.datetime]
    ) -> PageQuery[CommitRef]:
        since, until = bounds
        return PageQuery(
            url=commits_endpoint(commits_url),
            item_type=CommitRef,
            params={
                "since": format_github_datetime(since),
                "until": format_github_datetime(until),
            },
            max_pages=self._max_pages,
            per_page=self._per_page,
        )

    async def count_around(
        self, commits_url: str, anchor: dt.datetime
    ) -> WindowCounts:
        """Count commits in ``[anchor - days, anchor]`` and ``[anchor, anchor + days]``."""
        window = activity_window(anchor, days=self._days)
        before = await self._walker.count(self._query(commits_url, window.before))
        after = await self._walker.count(self._query(commits_url, window.after))
        return WindowCounts(before=before, after=after)

    async def row_for(self, target: ToxicCommentTarget) -> ExportRow:
        """Build the report row for a toxic comment."""
        counts = await self.count_around(
            target.commits_url, parse_github_datetime(target.created_at)
        )
        return ExportRow(
            comment_id=target.comment_id,
            issue_id=target.issue_id,
            commits_before=counts.before,
            commits_after=counts.after,
        )
