"""Query a single repository: commits, branches, repository checks."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import GitError
from .models import BranchInfo, Commit, LogQuery
from .parser import (
    parse_branch_names,
    parse_branch_refs,
    parse_log,
    parse_log_with_stats,
)
from .query import (
    CURRENT_BRANCH_ARGS,
    STATUS_ARGS,
    branch_info_args,
    branch_list_args,
    build_log_args,
)
from .runner import run_git

logger = logging.getLogger(__name__)


def is_git_repository(path: str | Path) -> bool:
    try:
        run_git(STATUS_ARGS, path)
    except GitError as e:
        logger.debug("%s is not a git repository: %s", path, e)
        return False
    return True


def get_commits(repo_path: str | Path, query: LogQuery | None = None) -> list[Commit]:
    """Commits without per-file stats, newest first."""
    args = build_log_args(query or LogQuery())
    return parse_log(run_git(args, repo_path))


def get_commits_with_stats(
    repo_path: str | Path,
    query: LogQuery | None = None,
) -> list[Commit]:
    """Commits with ``--numstat`` file changes, newest first."""
    args = build_log_args(query or LogQuery(), with_stats=True)
    output = run_git(args, repo_path)
    commits = parse_log_with_stats(output)
    logger.info("parsed %d commits from %s", len(commits), repo_path)
    return commits


def get_branch_info(repo_path: str | Path, branch: str | None = None) -> list[BranchInfo]:
    return parse_branch_refs(run_git(branch_info_args(branch), repo_path))


def get_branches(repo_path: str | Path, include_remote: bool = False) -> list[str]:
    return parse_branch_names(run_git(branch_list_args(include_remote), repo_path))


def get_current_branch(repo_path: str | Path) -> str:
    return run_git(CURRENT_BRANCH_ARGS, repo_path).strip()


def get_repo_name(repo_path: str | Path) -> str:
    path = Path(repo_path).resolve()
    name = path.name
    if name.endswith(".git"):
        name = name[:-4] or path.parent.name
    return name
