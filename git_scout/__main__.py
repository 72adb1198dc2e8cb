"""CLI entry point for git-scout."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .analysis import (
    activity_timeline,
    collaboration,
    compute_insights,
    file_type_breakdown,
    generate_stats,
    largest_commits,
)
from .config import (
    Config,
    Project,
    global_config_path,
    load_config,
    local_config_path,
    save_config,
)
from .dates import end_of_today, format_for_display, format_for_git, local_timezone_name, start_of_today
from .discovery import DEFAULT_MAX_DEPTH, scan_directory
from .display import (
    error,
    info,
    print_branch_detail,
    print_branch_names,
    print_branches,
    print_collaboration,
    print_commits,
    print_complete_stats,
    print_file_types,
    print_found_repositories,
    print_insights,
    print_json,
    print_largest_commits,
    print_projects,
    print_section,
    print_timeline,
    print_today_insights,
    success,
    warning,
)
from .errors import ConfigNotFound, GitScoutError
from .models import Commit, LogQuery, StatsResult
from .repo import (
    get_branch_info,
    get_branches,
    get_commits,
    get_commits_with_stats,
    get_current_branch,
    get_repo_name,
    is_git_repository,
)

logger = logging.getLogger("git_scout")

FALLBACK_SINCE = "7d"

ALL_SECTIONS = ["largest", "file-types", "timeline", "collaboration"]


def _add_project_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--project", "-p", help="Configured project name to analyze")


def _add_filter_args(p: argparse.ArgumentParser, since_help: str) -> None:
    _add_project_arg(p)
    p.add_argument("--since", "-s", help=since_help)
    p.add_argument("--until", "-u", help="End date (e.g. now, yesterday 18:00, 2025-09-30)")
    p.add_argument("--author", "-a", help="Filter by author name or email pattern")
    p.add_argument("--branch", "-b", help="Only follow history reachable from this branch")
    p.add_argument("--limit", "-l", type=int, help="Number of files shown")
    _add_json_arg(p)


def _add_json_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--json", action="store_true", dest="json_output", help="Output results as JSON")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="git-scout",
        description="Author and file statistics across your local git repositories.",
        epilog=(
            "date formats: today, yesterday, now, 7d, 30d, 2025-09-29, 'today 09:00'. "
            "config: ~/.git-scout/config.yaml or ./git-scout.config.yaml"
        ),
    )
    p.add_argument("--config", help="Path to a config file (overrides the search path)")
    p.add_argument("--verbose", "-v", action="store_true", help="Log git invocations to stderr")
    p.add_argument("--version", action="version", version=f"git-scout {__version__}")

    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    projects = sub.add_parser("projects", help="List configured projects")
    _add_json_arg(projects)
    projects.set_defaults(func=cmd_projects)

    branches = sub.add_parser("branches", help="List branches and show branch details")
    _add_project_arg(branches)
    branches.add_argument("--remote", "-r", action="store_true", help="Also list remote branches")
    branches.add_argument("--branch", "-b", help="Show details and recent commits for one branch")
    branches.add_argument("--since", "-s", help="Commits since date for branch details (e.g. 7d, today)")
    _add_json_arg(branches)
    branches.set_defaults(func=cmd_branches)

    today = sub.add_parser("today", help="Show today's activity")
    _add_filter_args(today, "Start date (default: start of today)")
    today.set_defaults(func=cmd_today, default_limit=20)

    stats = sub.add_parser("stats", help="Statistics for a time window")
    _add_filter_args(stats, "Start date (e.g. 7d, today, 2025-09-01)")
    stats.add_argument(
        "--section",
        type=str,
        action="append",
        choices=ALL_SECTIONS,
        help="Also show an additional analysis. Can be repeated.",
    )
    stats.set_defaults(func=cmd_stats, default_limit=25)

    init = sub.add_parser("init", help="Scan for repositories and write a config file")
    init.add_argument("paths", nargs="*", default=["."], help="Directories to scan (default: current directory)")
    init.add_argument("--depth", type=int, default=DEFAULT_MAX_DEPTH,
                      help=f"Maximum directory depth to scan (default: {DEFAULT_MAX_DEPTH})")
    init.add_argument("--local", action="store_true",
                      help="Write ./git-scout.config.yaml instead of ~/.git-scout/config.yaml")
    init.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    init.add_argument("--default-days", type=int, default=1, help="Default lookback in days (default: 1)")
    init.set_defaults(func=cmd_init)

    return p


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stderr,
    )


def _status(args: argparse.Namespace, message: str) -> None:
    if not getattr(args, "json_output", False):
        sys.stderr.write(info(message) + "\n")


def _load_config(args: argparse.Namespace, required: bool) -> Config | None:
    try:
        return load_config(args.config)
    except ConfigNotFound:
        if required:
            raise
        logger.debug("no config file found, continuing without one")
        return None


def _resolve_project(args: argparse.Namespace, config: Config | None) -> Project:
    if args.project:
        if config is None:
            raise GitScoutError(
                f'Project "{args.project}" specified but no configuration found. '
                'Run "git-scout init" first.'
            )
        project = config.project(args.project)
        if project is None:
            raise GitScoutError(f'Project "{args.project}" not found in configuration')
        return project

    if config is not None:
        return config.projects[0]

    cwd = Path.cwd()
    if is_git_repository(cwd):
        _status(args, f"No configuration found. Using current repository: {get_repo_name(cwd)}")
        return Project(get_repo_name(cwd), str(cwd))

    raise GitScoutError(
        "No git-scout configuration found and current directory is not a git repository.\n"
        'Run "git-scout init" to set up configuration, or run this command inside a repository.'
    )


def _default_since(config: Config | None) -> str:
    if config is None:
        return FALLBACK_SINCE
    return f"{config.default_since_days}d"


def _stats_payload(
    project: Project,
    query: LogQuery,
    commits: Sequence[Commit],
    stats: StatsResult,
    limit: int,
) -> dict:
    dated = [c.date for c in commits if c.date is not None]
    return {
        "project": project.name,
        "time_range": {"since": query.since, "until": query.until},
        "filters": {"author": query.author, "branch": query.branch},
        "summary": {
            "total_commits": stats.total_commits,
            "total_files": stats.total_files,
            "total_additions": stats.total_additions,
            "total_deletions": stats.total_deletions,
            "unique_authors": len(stats.authors),
            "date_range": {
                "earliest": dated[-1] if dated else None,
                "latest": dated[0] if dated else None,
            },
        },
        "authors": list(stats.authors),
        "files": list(stats.files[:limit]),
    }


def _run_sections(sections: Sequence[str], commits: Sequence[Commit], stats: StatsResult) -> dict:
    results: dict = {}
    if "largest" in sections:
        results["largest_commits"] = largest_commits(commits)
    if "file-types" in sections:
        results["file_types"] = file_type_breakdown(stats.files)
    if "timeline" in sections:
        results["timeline"] = activity_timeline(commits)
    if "collaboration" in sections:
        results["collaboration"] = collaboration(stats)
    return results


def _print_sections(results: dict) -> None:
    if "largest_commits" in results:
        print_largest_commits(results["largest_commits"])
    if "file_types" in results:
        print_file_types(results["file_types"])
    if "timeline" in results:
        print_timeline(results["timeline"])
    if "collaboration" in results:
        print_collaboration(results["collaboration"])


def _collect(args: argparse.Namespace, project: Project, query: LogQuery) -> list[Commit]:
    t0 = time.time()
    if not args.json_output:
        sys.stderr.write("  Parsing git history... ")
        sys.stderr.flush()

    commits = get_commits_with_stats(project.path, query)

    if not args.json_output:
        sys.stderr.write(f"done ({len(commits):,} commits in {time.time() - t0:.1f}s)\n")
    return commits


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_projects(args: argparse.Namespace) -> int:
    config = _load_config(args, required=True)
    checked = [(p, is_git_repository(p.path)) for p in config.projects]

    if args.json_output:
        print_json([{"name": p.name, "path": p.path, "valid": ok} for p, ok in checked])
        return 0

    print_projects(checked)
    if not any(ok for _, ok in checked):
        sys.stderr.write(error("No valid Git projects found in configuration") + "\n")
        return 1
    return 0


def cmd_branches(args: argparse.Namespace) -> int:
    config = _load_config(args, required=False)
    project = _resolve_project(args, config)
    _status(args, f"Analyzing project: {project.name}")

    branches = get_branch_info(project.path)
    current = get_current_branch(project.path)
    names = get_branches(project.path, include_remote=True) if args.remote else None

    detail = None
    recent: list[Commit] = []
    since = args.since or _default_since(config)
    if args.branch:
        matches = get_branch_info(project.path, args.branch)
        if not matches:
            raise GitScoutError(f'Branch "{args.branch}" not found')
        detail = matches[0]
        recent = get_commits(project.path, LogQuery(since=since, branch=args.branch))

    if args.json_output:
        payload: dict = {"project": project.name, "current_branch": current, "branches": branches}
        if names is not None:
            payload["all_branches"] = names
        if detail is not None:
            payload["branch"] = detail
            payload["since"] = since
            payload["recent_commits"] = recent
        print_json(payload)
        return 0

    print_branches(branches, current)
    if names is not None:
        print_branch_names(names)

    if detail is None:
        return 0

    print_branch_detail(detail, len(recent))
    if not recent:
        print(warning(f"No commits found since {since}"))
        return 0

    print(info(f"Found {len(recent)} commits since {since}"))
    print_commits(recent)

    with_stats = get_commits_with_stats(project.path, LogQuery(since=since, branch=args.branch))
    if with_stats:
        print_complete_stats(generate_stats(with_stats), 10)
    return 0


def cmd_today(args: argparse.Namespace) -> int:
    config = _load_config(args, required=False)
    project = _resolve_project(args, config)

    since, until = args.since, args.until
    if not since:
        since = format_for_git(start_of_today())
        if not until:
            until = format_for_git(end_of_today())

    query = LogQuery(since=since, until=until, author=args.author, branch=args.branch)
    limit = args.limit or args.default_limit
    _status(args, f"Today's activity for: {project.name}")

    commits = _collect(args, project, query)
    stats = generate_stats(commits)

    if args.json_output:
        print_json(_stats_payload(project, query, commits, stats, limit))
        return 0

    if not commits:
        print(warning("No commits found for the specified criteria"))
        return 0

    label = "Today" if not args.since else f"Since {args.since}"
    print_section(f"{label} - {project.name}")
    print(info(f"Timezone: {local_timezone_name()}"))
    if commits[0].date is not None:
        print(info(f"Latest activity: {format_for_display(commits[0].date)}"))
    print_complete_stats(stats, limit)
    print_today_insights(compute_insights(stats, commits))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    config = _load_config(args, required=False)
    project = _resolve_project(args, config)

    since = args.since or _default_since(config)
    query = LogQuery(since=since, until=args.until, author=args.author, branch=args.branch)
    limit = args.limit or (50 if args.json_output else args.default_limit)

    _status(args, f"Generating statistics for: {project.name}")
    if args.author:
        _status(args, f"Filtering by author: {args.author}")
    if args.branch:
        _status(args, f"Filtering by branch: {args.branch}")

    commits = _collect(args, project, query)
    stats = generate_stats(commits)
    sections = _run_sections(args.section or [], commits, stats)

    if args.json_output:
        payload = _stats_payload(project, query, commits, stats, limit)
        payload.update(sections)
        print_json(payload)
        return 0

    if not commits:
        print(warning("No commits found for the specified criteria"))
        print(info("Try expanding the time range (e.g. --since 30d) or removing author/branch filters"))
        return 0

    print_section(f"Statistics - {project.name}", f"since {since}")
    dated = [c.date for c in commits if c.date is not None]
    if dated:
        print(info(f"Actual range: {format_for_display(dated[-1])} to {format_for_display(dated[0])}"))
    print(info(f"Found {len(commits)} commits from {len(stats.authors)} author(s)"))

    print_complete_stats(stats, limit)
    print_insights(compute_insights(stats, commits), stats.total_files)
    _print_sections(sections)
    return 0


def _unique_names(names: Sequence[str]) -> list[str]:
    seen: dict[str, int] = {}
    result = []
    for name in names:
        seen[name] = seen.get(name, 0) + 1
        result.append(name if seen[name] == 1 else f"{name} ({seen[name]})")
    return result


def cmd_init(args: argparse.Namespace) -> int:
    if args.default_days < 1:
        raise GitScoutError("--default-days must be at least 1")

    target = local_config_path() if args.local else global_config_path()
    if target.exists() and not args.force:
        raise GitScoutError(f"Configuration already exists at {target} (use --force to overwrite)")

    found = []
    seen_paths = set()
    for root in args.paths:
        sys.stderr.write(f"  Scanning {root} for git repositories...\n")
        for repo in scan_directory(root, max_depth=args.depth):
            if repo.path not in seen_paths:
                seen_paths.add(repo.path)
                found.append(repo)

    if not found:
        print(warning("No git repositories found"))
        return 1

    print_found_repositories(found)

    names = _unique_names([repo.name for repo in found])
    config = Config(
        projects=[Project(name, repo.path) for name, repo in zip(names, found)],
        default_since_days=args.default_days,
    )
    path = save_config(config, target)
    print(success(f"Configuration saved to: {path}"))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        code = args.func(args)
    except GitScoutError as e:
        sys.stderr.write(f"\n  {error(str(e))}\n\n")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.stderr.write("\n  Interrupted.\n")
        sys.exit(130)

    sys.exit(code)


if __name__ == "__main__":
    main()
