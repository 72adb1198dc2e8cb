"""Parse git log and ref listings into structured records."""

from __future__ import annotations

import logging
import re
from datetime import datetime

from dateutil import parser as date_parser

from .models import BranchInfo, Commit, FileChange
from .query import COMMIT_SENTINEL

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\d+")


def parse_log(output: str) -> list[Commit]:
    """Parse one-commit-per-line ``hash|name|email|date|subject`` output.

    Lines are split naively and never filtered; a line without any ``|``
    still yields a Commit whose other fields are empty.
    """
    if not output:
        return []

    commits = []
    for line in output.split("\n"):
        parts = line.split("|", 4)
        parts += [""] * (5 - len(parts))
        hash_val, author_name, author_email, date_str, subject = parts
        commits.append(Commit(
            hash_val, author_name, author_email, _parse_iso(date_str), subject,
        ))
    return commits


def parse_log_with_stats(output: str) -> list[Commit]:
    """Parse ``git log --numstat`` output whose headers start with the sentinel.

    Blocks whose header has no ``|`` are dropped whole; numstat lines with
    fewer than three tab-separated fields are dropped one by one.
    """
    commits: list[Commit] = []
    skipped_blocks = 0
    skipped_lines = 0

    for block in output.split(COMMIT_SENTINEL):
        block = block.strip()
        if not block:
            continue

        lines = block.split("\n")
        header = lines[0]
        if "|" not in header:
            skipped_blocks += 1
            continue

        parts = header.split("|", 5)
        parts += [""] * (6 - len(parts))
        _, hash_val, author_name, author_email, date_str, subject = parts

        files: list[FileChange] = []
        for line in lines[1:]:
            line = line.strip()
            if not line:
                continue
            fc = _parse_numstat_line(line)
            if fc is None:
                skipped_lines += 1
                continue
            files.append(fc)

        commits.append(Commit(
            hash_val, author_name, author_email, _parse_iso(date_str), subject,
            tuple(files),
        ))

    if skipped_blocks or skipped_lines:
        logger.debug(
            "skipped %d malformed commit blocks and %d numstat lines",
            skipped_blocks, skipped_lines,
        )
    return commits


def _parse_numstat_line(line: str) -> FileChange | None:
    parts = line.split("\t")
    if len(parts) < 3:
        return None

    # Only the third field is the path; a path containing a tab is cut short.
    return FileChange(parts[2], _count(parts[0]), _count(parts[1]))


def _count(raw: str) -> int:
    # Binary files show "-" for additions/deletions
    match = _LEADING_DIGITS.match(raw)
    return int(match.group()) if match else 0


def _parse_iso(value: str) -> datetime | None:
    value = value.strip()
    if not value:
        return None
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None


def parse_branch_refs(output: str) -> list[BranchInfo]:
    """Parse ``for-each-ref`` lines of ``name|date|author|hash|subject``."""
    if not output:
        return []

    branches = []
    for line in output.split("\n"):
        parts = line.split("|", 4)
        parts += [""] * (5 - len(parts))
        name, date_str, author, hash_val, subject = parts
        branches.append(BranchInfo(name, _parse_iso(date_str), author, hash_val, subject))
    return branches


def parse_branch_names(output: str) -> list[str]:
    names = []
    for line in output.split("\n"):
        name = line.strip()
        if not name or name.startswith("origin/HEAD"):
            continue
        names.append(name.replace("origin/", "", 1))
    return names
