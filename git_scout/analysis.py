"""Reduce parsed commits into author and file statistics."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta
from pathlib import PurePosixPath

from .dates import default_since, local_date
from .models import (
    AuthorStat,
    Collaboration,
    Commit,
    CommitSize,
    DayActivity,
    FileStat,
    FileTypeStat,
    Insights,
    StatsResult,
)

NO_EXTENSION = "no-extension"


def _round(x: float) -> int:
    # halves go up: 62.5 -> 63
    return math.floor(x + 0.5)


def generate_stats(commits: Sequence[Commit]) -> StatsResult:
    """Aggregate commits into per-author and per-file totals.

    An author's ``files_changed`` grows by the number of distinct paths in
    each of their commits, so a file touched in three commits counts three
    times for that author. Both output lists are stable-sorted, so ties keep
    the order in which git reported them.
    """
    author_stats: dict[tuple[str, str], AuthorStat] = {}
    file_stats: dict[str, FileStat] = {}

    for commit in commits:
        key = (commit.author_name, commit.author_email)
        author = author_stats.get(key)
        if author is None:
            author = author_stats[key] = AuthorStat(commit.author_name, commit.author_email)
        author.commits += 1

        if commit.files is None:
            continue

        author.files_changed += len({fc.path for fc in commit.files})

        for fc in commit.files:
            author.additions += fc.additions
            author.deletions += fc.deletions

            fs = file_stats.get(fc.path)
            if fs is None:
                fs = file_stats[fc.path] = FileStat(fc.path)
            fs.commits += 1
            fs.additions += fc.additions
            fs.deletions += fc.deletions

    authors = sorted(author_stats.values(), key=lambda a: -a.commits)
    files = sorted(file_stats.values(), key=lambda f: -f.churn)

    return StatsResult(
        authors=tuple(authors),
        files=tuple(files),
        total_commits=len(commits),
        total_files=len(file_stats),
        total_additions=sum(a.additions for a in authors),
        total_deletions=sum(a.deletions for a in authors),
    )


def compute_insights(stats: StatsResult, commits: Sequence[Commit]) -> Insights:
    """Headline numbers shown under the stats tables.

    ``commits`` is expected newest first, the order git log prints them.
    """
    top_author = None
    top_author_share = None
    avg_per_author = None
    if len(stats.authors) > 1:
        top_author = stats.authors[0].author_name
        top_author_share = _round(stats.authors[0].commits / stats.total_commits * 100)
        avg_per_author = _round(stats.total_commits / len(stats.authors))

    top_file = stats.files[0].path if stats.files else None
    top_file_churn = stats.files[0].churn if stats.files else 0
    repeated = sum(1 for f in stats.files if f.commits > 1)

    deletion_ratio = None
    if stats.total_additions > 0:
        deletion_ratio = _round(stats.total_deletions / stats.total_additions * 100)

    span_days = None
    per_day = None
    dates = [c.date for c in commits if c.date is not None]
    if len(dates) > 1:
        span = dates[0] - dates[-1]
        span_days = max(1, _round(span.total_seconds() / 86400))
        per_day = _round(len(commits) / span_days * 10) / 10

    return Insights(
        top_author=top_author,
        top_author_share=top_author_share,
        avg_commits_per_author=avg_per_author,
        top_file=top_file,
        top_file_churn=top_file_churn,
        files_touched_repeatedly=repeated,
        net_change=stats.total_additions - stats.total_deletions,
        deletion_ratio=deletion_ratio,
        span_days=span_days,
        avg_commits_per_day=per_day,
    )


def largest_commits(commits: Sequence[Commit], limit: int = 10) -> list[CommitSize]:
    """Commits with file changes, biggest first by lines added plus deleted."""
    sized = [
        CommitSize(c, sum(fc.churn for fc in c.files))
        for c in commits
        if c.files
    ]
    sized.sort(key=lambda s: -s.lines_changed)
    return sized[:limit]


def _extension(path: str) -> str:
    suffix = PurePosixPath(path).suffix.lower()
    return suffix[1:] if suffix else NO_EXTENSION


def file_type_breakdown(files: Sequence[FileStat], limit: int = 10) -> list[FileTypeStat]:
    """Group file statistics by extension, ordered by lines changed."""
    totals: dict[str, list[int]] = {}
    for f in files:
        entry = totals.setdefault(_extension(f.path), [0, 0])
        entry[0] += 1
        entry[1] += f.churn

    by_type = [FileTypeStat(ext, n, lines) for ext, (n, lines) in totals.items()]
    by_type.sort(key=lambda t: -t.lines_changed)
    return by_type[:limit]


def activity_timeline(
    commits: Sequence[Commit],
    days: int = 10,
    now: datetime | None = None,
) -> list[DayActivity]:
    """Commits per local calendar day over the last ``days`` days, oldest first.

    Today is the last entry. Commits outside the window or without a date
    are not counted.
    """
    first = default_since(days - 1, now).date()
    counts = {first + timedelta(days=i): 0 for i in range(days)}

    for commit in commits:
        if commit.date is None:
            continue
        day = local_date(commit.date, now)
        if day in counts:
            counts[day] += 1

    return [DayActivity(day, n) for day, n in counts.items()]


def collaboration(stats: StatsResult, top_n: int = 3) -> Collaboration:
    shared = sum(1 for f in stats.files if f.commits > 1)
    total = len(stats.files)
    top = stats.authors[:top_n] if len(stats.authors) > 1 else ()

    return Collaboration(
        shared_files=shared,
        total_files=total,
        shared_rate=_round(shared / total * 100) if total else None,
        contributors=len(stats.authors),
        top_contributors=tuple(top),
    )
