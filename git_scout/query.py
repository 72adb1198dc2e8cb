"""Build the exact argument lists handed to git."""

from __future__ import annotations

from datetime import datetime

from .dates import format_for_git, parse_date_range
from .models import LogQuery

COMMIT_SENTINEL = "--commit--"

_FIELDS = "%H|%an|%ae|%ad|%s"
LOG_FORMAT = f"--pretty=format:{_FIELDS}"
STATS_LOG_FORMAT = f"--pretty=format:{COMMIT_SENTINEL}|{_FIELDS}"
DATE_FORMAT = "--date=iso-strict"

BRANCH_INFO_FORMAT = (
    "--format=%(refname:short)|%(committerdate:iso-strict)|%(authorname)"
    "|%(objectname:short)|%(subject)"
)

STATUS_ARGS = ["status", "--porcelain"]
CURRENT_BRANCH_ARGS = ["branch", "--show-current"]


def build_log_args(
    query: LogQuery,
    with_stats: bool = False,
    now: datetime | None = None,
) -> list[str]:
    """Translate a filter request into ``git log`` arguments.

    Date bounds are resolved and validated before anything is returned, so a
    bad ``since``/``until`` fails here rather than inside git. Filters that
    are not set are left out entirely.
    """
    if with_stats:
        args = ["log", "--numstat", STATS_LOG_FORMAT, DATE_FORMAT]
    else:
        args = ["log", LOG_FORMAT, DATE_FORMAT]

    window = parse_date_range(query.since, query.until, now=now)
    if window.since is not None:
        args.append(f"--since={format_for_git(window.since)}")
    if window.until is not None:
        args.append(f"--until={format_for_git(window.until)}")

    if query.author:
        args.append(f"--author={query.author}")

    # a ref is positional; "--branch" is not a git log flag
    if query.branch:
        args.append(query.branch)

    return args


def branch_info_args(branch: str | None = None) -> list[str]:
    pattern = f"refs/heads/{branch}" if branch else "refs/heads"
    return ["for-each-ref", BRANCH_INFO_FORMAT, pattern]


def branch_list_args(include_remote: bool = False) -> list[str]:
    if include_remote:
        return ["branch", "-a", "--format=%(refname:short)"]
    return ["branch", "--format=%(refname:short)"]
