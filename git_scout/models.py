from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class FileChange:
    path: str
    additions: int  # 0 for binary files
    deletions: int  # 0 for binary files

    @property
    def churn(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class Commit:
    hash: str
    author_name: str
    author_email: str
    date: datetime | None  # None when git printed an unparseable date
    subject: str
    files: tuple[FileChange, ...] | None = None  # None: numstat not requested

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class AuthorStat:
    author_name: str
    author_email: str
    commits: int = 0
    files_changed: int = 0
    additions: int = 0
    deletions: int = 0


@dataclass
class FileStat:
    path: str
    commits: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def churn(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class StatsResult:
    authors: tuple[AuthorStat, ...]
    files: tuple[FileStat, ...]
    total_commits: int
    total_files: int
    total_additions: int
    total_deletions: int


@dataclass(frozen=True)
class BranchInfo:
    name: str
    last_commit_date: datetime | None
    last_commit_author: str
    last_commit_hash: str
    last_commit_subject: str


@dataclass(frozen=True)
class DateRange:
    since: datetime | None = None
    until: datetime | None = None


@dataclass(frozen=True)
class LogQuery:
    since: str | None = None
    until: str | None = None
    author: str | None = None  # git --author pattern, passed through untouched
    branch: str | None = None


@dataclass(frozen=True)
class Insights:
    top_author: str | None
    top_author_share: int | None  # percent of all commits
    avg_commits_per_author: int | None
    top_file: str | None
    top_file_churn: int
    files_touched_repeatedly: int
    net_change: int
    deletion_ratio: int | None  # percent of additions
    span_days: int | None
    avg_commits_per_day: float | None


@dataclass(frozen=True)
class CommitSize:
    commit: Commit
    lines_changed: int


@dataclass(frozen=True)
class FileTypeStat:
    extension: str  # "no-extension" when the file name has no suffix
    files: int
    lines_changed: int


@dataclass(frozen=True)
class DayActivity:
    day: date
    commits: int


@dataclass(frozen=True)
class Collaboration:
    shared_files: int  # files touched by more than one commit
    total_files: int
    shared_rate: int | None  # percent of total_files, None without files
    contributors: int
    top_contributors: tuple[AuthorStat, ...]  # empty with a single contributor
