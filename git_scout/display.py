"""Terminal output formatting with ANSI colors."""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from pathlib import Path

from .analysis import NO_EXTENSION
from .config import Project
from .dates import format_for_display, is_today
from .discovery import FoundRepository
from .models import (
    AuthorStat,
    BranchInfo,
    Collaboration,
    Commit,
    CommitSize,
    DayActivity,
    FileStat,
    FileTypeStat,
    Insights,
    StatsResult,
)


# ── ANSI color codes ──────────────────────────────────────────────────────────

def _supports_color() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    if os.getenv("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_COLOR = _supports_color()


def _c(code: str, text: str) -> str:
    if not _COLOR:
        return text
    return f"\033[{code}m{text}\033[0m"


def dim(t: str) -> str:
    return _c("2", t)


def bold(t: str) -> str:
    return _c("1", t)


def red(t: str) -> str:
    return _c("91", t)


def yellow(t: str) -> str:
    return _c("93", t)


def green(t: str) -> str:
    return _c("92", t)


def blue(t: str) -> str:
    return _c("94", t)


def cyan(t: str) -> str:
    return _c("96", t)


def white(t: str) -> str:
    return _c("97", t)


# ── Drawing helpers ───────────────────────────────────────────────────────────

def _truncate_path(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return "..." + s[-(max_len - 3):]


def _truncate(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[:max_len - 3] + "..."


def _plural(n: int, word: str) -> str:
    return f"{n:,} {word}{'s' if n != 1 else ''}"


def _line(width: int = 70) -> str:
    return dim("─" * width)


def _format_date(dt: datetime | None) -> str:
    return format_for_display(dt) if dt is not None else "-"


def info(message: str) -> str:
    return blue(bold("i ")) + blue(message)


def warning(message: str) -> str:
    return yellow(bold("! ")) + yellow(message)


def success(message: str) -> str:
    return green(bold("✓ ")) + green(message)


def error(message: str) -> str:
    return red(bold("Error: ")) + red(message)


def print_section(title: str, subtitle: str = "", width: int = 70) -> None:
    print()
    print(bold(cyan(f"  {title.upper()}")) + (dim(f"  {subtitle}") if subtitle else ""))
    print(_line(width))


# ── Section renderers ─────────────────────────────────────────────────────────

def print_projects(projects: Sequence[tuple[Project, bool]]) -> None:
    print_section("Configured projects")
    print(dim(f"  {'NAME':<24} {'PATH':<50} STATUS"))
    print()

    for project, valid in projects:
        status = green("valid") if valid else red("not a git repository")
        print(f"  {white(f'{_truncate(project.name, 24):<24}')} "
              f"{dim(f'{_truncate_path(project.path, 50):<50}')} {status}")

    print()


def print_branches(branches: Sequence[BranchInfo], current: str = "") -> None:
    print_section("Branches")
    print(dim(f"  {'BRANCH':<24} {'COMMIT':<8} {'AUTHOR':<18} {'DATE':<16}  MESSAGE"))
    print()

    for b in branches:
        marker = "* " if b.name == current else "  "
        name = f"{marker}{_truncate(b.name, 22):<22}"
        name = green(bold(name)) if b.name == current else white(name)
        when = f"{_format_date(b.last_commit_date):<16}"
        active = b.last_commit_date is not None and is_today(b.last_commit_date)
        print(
            f"  {name} {yellow(f'{b.last_commit_hash:<8}')} "
            f"{blue(f'{_truncate(b.last_commit_author, 18):<18}')} "
            f"{green(when) if active else dim(when)}  "
            f"{_truncate(b.last_commit_subject, 45)}"
        )

    print()


def print_branch_names(names: Sequence[str]) -> None:
    print_section("All branches", "local and remote")
    for name in names:
        print(f"  {name}")
    print()


def print_branch_detail(branch: BranchInfo, commit_count: int | None = None) -> None:
    print_section(f"Branch: {branch.name}")
    print(f"  {dim('Latest commit:')}  {yellow(branch.last_commit_hash)}")
    print(f"  {dim('Author:')}         {blue(branch.last_commit_author)}")
    print(f"  {dim('Date:')}           {_format_date(branch.last_commit_date)}")
    print(f"  {dim('Message:')}        {branch.last_commit_subject}")
    if commit_count is not None:
        print(f"  {dim('Recent commits:')} {green(str(commit_count))}")
    print()


def print_commits(commits: Sequence[Commit], limit: int = 5) -> None:
    print_section("Recent commits")
    for commit in commits[:limit]:
        print(f"  {yellow(commit.short_hash)} {dim('·')} {commit.author_name} "
              f"{dim('·')} {dim(_format_date(commit.date))}")
        print(f"    {commit.subject}")
    print()


def print_author_stats(authors: Sequence[AuthorStat]) -> None:
    print_section("By author")
    print(dim(f"  {'AUTHOR':<28} {'COMMITS':>8} {'FILES':>7} {'+LINES':>9} {'-LINES':>9}"))
    print()

    for a in authors:
        added = f"+{a.additions:,}"
        deleted = f"-{a.deletions:,}"
        print(
            f"  {white(f'{_truncate(a.author_name, 28):<28}')} "
            f"{yellow(f'{a.commits:>8,}')} {blue(f'{a.files_changed:>7,}')} "
            f"{green(f'{added:>9}')} {red(f'{deleted:>9}')}"
        )

    print()


def print_file_stats(files: Sequence[FileStat], limit: int | None = None) -> None:
    shown = files[:limit] if limit else files
    print_section("By file", "top changes")
    print(dim(f"  {'FILE':<46} {'COMMITS':>8} {'+LINES':>9} {'-LINES':>9}"))
    print()

    for f in shown:
        path = _truncate_path(f.path, 46)
        added = f"+{f.additions:,}"
        deleted = f"-{f.deletions:,}"
        print(
            f"  {path:<46} {yellow(f'{f.commits:>8,}')} "
            f"{green(f'{added:>9}')} {red(f'{deleted:>9}')}"
        )

    if limit and len(files) > limit:
        print(dim(f"  ... and {_plural(len(files) - limit, 'more file')}"))
    print()


def print_total_summary(stats: StatsResult) -> None:
    print(_line(70))
    print(
        f"  {bold('TOTAL')}  {yellow(_plural(stats.total_commits, 'commit'))}  {dim('·')}  "
        f"{blue(_plural(stats.total_files, 'file'))}  {dim('·')}  "
        f"{green(f'+{stats.total_additions:,}')} {red(f'-{stats.total_deletions:,}')}"
    )
    print(_line(70))
    print()


def print_complete_stats(stats: StatsResult, file_limit: int | None = None) -> None:
    print_author_stats(stats.authors)
    if stats.files:
        print_file_stats(stats.files, file_limit)
    print_total_summary(stats)


def print_insights(insights: Insights, total_files: int) -> None:
    print_section("Detailed insights")

    if insights.top_author is not None:
        print(info(f"Most active contributor: {insights.top_author} "
                   f"({insights.top_author_share}% of commits)"))
        print(info(f"Average commits per author: {insights.avg_commits_per_author}"))

    if insights.top_file is not None:
        print(info(f"Most modified file: {insights.top_file} "
                   f"({insights.top_file_churn:,} lines changed)"))
        print(info(f"Files modified multiple times: "
                   f"{insights.files_touched_repeatedly}/{total_files}"))

    kind = "growth" if insights.net_change > 0 else "reduction"
    print(info(f"Net code {kind}: {abs(insights.net_change):,} lines"))

    if insights.deletion_ratio is not None:
        print(info(f"Deletion ratio: {insights.deletion_ratio}%"))

    if insights.avg_commits_per_day is not None:
        print(info(f"Average commits per day: {insights.avg_commits_per_day} "
                   f"over {_plural(insights.span_days, 'day')}"))
    print()


def print_today_insights(insights: Insights) -> None:
    print_section("Insights")

    if insights.top_author is not None:
        print(info(f"Most active: {insights.top_author} "
                   f"({insights.top_author_share}% of commits)"))
    if insights.top_file is not None:
        print(info(f"Most changed file: {insights.top_file} "
                   f"({insights.top_file_churn:,} lines)"))

    kind = "additions" if insights.net_change > 0 else "deletions"
    print(info(f"Net changes: {abs(insights.net_change):,} lines {kind}"))
    print()


def print_largest_commits(sizes: Sequence[CommitSize]) -> None:
    print_section("Largest commits", "by lines changed")
    for s in sizes:
        c = s.commit
        print(f"  {yellow(c.short_hash)} {dim('·')} {c.author_name} "
              f"{dim('·')} {bold(_plural(s.lines_changed, 'line'))}")
        print(f"    {dim(_format_date(c.date) + ':')} {_truncate(c.subject, 60)}")
    print()


def print_file_types(types: Sequence[FileTypeStat]) -> None:
    print_section("File types")
    print(dim(f"  {'TYPE':<16} {'FILES':>7} {'LINES':>10}"))
    print()

    for t in types:
        label = t.extension if t.extension == NO_EXTENSION else f".{t.extension}"
        print(f"  {white(f'{_truncate(label, 16):<16}')} "
              f"{blue(f'{t.files:>7,}')} {yellow(f'{t.lines_changed:>10,}')}")
    print()


def print_timeline(days: Sequence[DayActivity]) -> None:
    print_section("Activity timeline", f"last {_plural(len(days), 'day')}")
    peak = max((d.commits for d in days), default=0)

    for d in days:
        bar = "█" * d.commits if peak <= 40 else "█" * round(d.commits * 40 / peak)
        print(f"  {dim(d.day.strftime('%m/%d/%Y'))}  {green(bar)} "
              f"{dim('(' + _plural(d.commits, 'commit') + ')')}")
    print()


def print_collaboration(collab: Collaboration) -> None:
    print_section("Collaboration")

    rate = f" ({collab.shared_rate}%)" if collab.shared_rate is not None else ""
    print(f"  {dim('Files with multiple commits:')} "
          f"{collab.shared_files}/{collab.total_files}{rate}")
    print(f"  {dim('Total contributors:')} {collab.contributors}")

    if collab.top_contributors:
        print(f"  {dim('Top contributors:')}")
        for a in collab.top_contributors:
            print(f"    • {white(a.author_name)}: {_plural(a.commits, 'commit')}, "
                  f"{_plural(a.files_changed, 'file')}")
    print()


def print_found_repositories(repos: Sequence[FoundRepository]) -> None:
    print_section("Repositories", f"{len(repos):,} found")
    for repo in repos:
        print(f"  {bold(repo.name)}")
        print(f"    {dim('Path:')} {repo.path}")
        if repo.description:
            print(f"    {dim('Description:')} {repo.description}")
        if repo.last_activity is not None:
            print(f"    {dim('Last activity:')} {_format_date(repo.last_activity)}")
    print()


# ── JSON ──────────────────────────────────────────────────────────────────────

def _json_default(obj: object) -> object:
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    raise TypeError(f"Not serializable: {type(obj)}")


def to_json(data: object) -> str:
    return json.dumps(data, indent=2, default=_json_default)


def print_json(data: object) -> None:
    sys.stdout.write(to_json(data))
    sys.stdout.write("\n")
