"""Find git repositories below a directory for ``git-scout init``."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .errors import GitScoutError
from .models import LogQuery
from .repo import get_commits, is_git_repository

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

# Directories that never hold projects worth listing, or that trigger OS
# permission dialogs when read.
_SKIP_DIRS = frozenset({
    "node_modules", "vendor", "build", "dist", "target",
    "Applications", "Library", "System", "Users",
    "Desktop", "Downloads", "Movies", "Music", "Pictures", "Public",
    "Creative Cloud Files", "Adobe", "Dropbox", "Google Drive",
    "OneDrive", "iCloud Drive", "Box Sync",
})

_README_NAMES = ("README.md", "readme.md", "README.txt")


@dataclass(frozen=True)
class FoundRepository:
    name: str
    path: str
    description: str | None = None
    last_activity: datetime | None = None


def scan_directory(
    root: str | Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FoundRepository]:
    """Walk ``root`` depth-first and return every repository found.

    A repository's own subdirectories are not searched.
    """
    found: list[FoundRepository] = []
    _scan(Path(root), max_depth, 0, found)

    unique: dict[str, FoundRepository] = {}
    for repo in found:
        unique.setdefault(repo.path, repo)
    return list(unique.values())


def _scan(path: Path, max_depth: int, depth: int, found: list[FoundRepository]) -> None:
    if depth >= max_depth:
        return

    if is_git_repository(path):
        found.append(analyze_repository(path))
        return

    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("skipping unreadable directory %s: %s", path, e)
        return

    for entry in entries:
        if entry.name.startswith(".") or entry.name in _SKIP_DIRS:
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            _scan(Path(entry.path), max_depth, depth + 1, found)


def analyze_repository(path: Path) -> FoundRepository:
    last_activity = None
    try:
        recent = get_commits(path, LogQuery(since="30d"))
        if recent:
            last_activity = recent[0].date
    except GitScoutError as e:
        logger.debug("no recent activity for %s: %s", path, e)

    return FoundRepository(
        name=path.name,
        path=str(path.resolve()),
        description=describe_repository(path),
        last_activity=last_activity,
    )


def describe_repository(path: Path) -> str | None:
    """One-line description from package.json or the first README line."""
    package_json = path / "package.json"
    if package_json.is_file():
        try:
            description = json.loads(package_json.read_text(encoding="utf-8")).get("description")
        except (OSError, ValueError, AttributeError):
            description = None
        if isinstance(description, str) and description:
            return description

    for name in _README_NAMES:
        readme = path / name
        if not readme.is_file():
            continue
        try:
            first_line = readme.read_text(encoding="utf-8", errors="replace").split("\n")[0]
        except OSError:
            continue
        if first_line and len(first_line) < 100:
            return first_line.lstrip("#").strip()

    return None
