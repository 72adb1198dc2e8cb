"""Run git as a child process and capture what it prints."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .errors import CommandFailed, SpawnFailed

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"


def run_git(args: Sequence[str], cwd: str | Path) -> str:
    """Run ``git <args>`` inside ``cwd`` and return its trimmed stdout.

    All three standard streams are pipes, so git never talks to the user's
    terminal (no pager, no credential prompt). No timeout is applied: a git
    process that hangs blocks the caller.
    """
    cmd = [GIT_EXECUTABLE, *args]
    logger.debug("running %s in %s", cmd, cwd)

    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            input="",
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise SpawnFailed(f"Failed to execute git: {e}") from e

    if result.returncode != 0:
        output = result.stderr or result.stdout
        logger.debug("git exited with %d: %s", result.returncode, output.strip())
        raise CommandFailed(list(args), result.returncode, output)

    return result.stdout.strip()
