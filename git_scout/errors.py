"""Exceptions raised by git-scout."""

from __future__ import annotations


class GitScoutError(RuntimeError):
    """Base class for every error the CLI reports to the user."""


class GitError(GitScoutError):
    pass


class SpawnFailed(GitError):
    """The git executable could not be launched at all."""


class CommandFailed(GitError):
    """git ran but exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, output: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(f"git command failed: {output.strip()}")


class InvalidDateFormat(GitScoutError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid date format: {text}")


class InvalidRange(GitScoutError, ValueError):
    def __init__(self, message: str = "Since date cannot be after until date"):
        super().__init__(message)


class ConfigError(GitScoutError):
    pass


class ConfigNotFound(ConfigError):
    pass
