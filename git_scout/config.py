"""Load, validate and save the list of repositories git-scout knows about.

A config file looks like::

    projects:
      - name: Backend API
        path: /home/me/dev/backend-api
    defaultSinceDays: 1

JSON files with the same keys are accepted too.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigError, ConfigNotFound

logger = logging.getLogger(__name__)

CONFIG_ENV = "GIT_SCOUT_CONFIG"
CONFIG_DIR_NAME = ".git-scout"
LOCAL_CONFIG_NAME = "git-scout.config"


@dataclass(frozen=True)
class Project:
    name: str
    path: str


@dataclass
class Config:
    projects: list[Project] = field(default_factory=list)
    default_since_days: int = 1
    source: Path | None = None

    def project(self, name: str) -> Project | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def to_dict(self) -> dict:
        return {
            "projects": [{"name": p.name, "path": p.path} for p in self.projects],
            "defaultSinceDays": self.default_since_days,
        }


def global_config_path(suffix: str = ".yaml") -> Path:
    return Path.home() / CONFIG_DIR_NAME / f"config{suffix}"


def local_config_path(suffix: str = ".yaml") -> Path:
    return Path.cwd() / f"{LOCAL_CONFIG_NAME}{suffix}"


def config_search_paths() -> list[Path]:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return [Path(override).expanduser()]
    return [
        global_config_path(".yaml"),
        global_config_path(".json"),
        local_config_path(".yaml"),
        local_config_path(".json"),
    ]


def load_config(path: str | Path | None = None) -> Config:
    """Read and validate the first config file found.

    Raises ConfigNotFound when no candidate exists and ConfigError when the
    file cannot be parsed or fails validation.
    """
    candidates = [Path(path).expanduser()] if path else config_search_paths()

    for candidate in candidates:
        if not candidate.is_file():
            continue

        logger.debug("loading config from %s", candidate)
        try:
            raw = yaml.safe_load(candidate.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file at {candidate}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading config file at {candidate}: {e}") from e

        config = parse_config(raw, source=candidate)
        check_project_paths(config)
        return config

    searched = "\n".join(f"  {c}" for c in candidates)
    raise ConfigNotFound(
        "No config file found. Please create one at one of:\n"
        f"{searched}\n\nSample config:\n{sample_config()}"
    )


def parse_config(raw: object, source: Path | None = None) -> Config:
    """Validate the decoded document and build a Config from it."""
    problems: list[str] = []
    where = source or "<config>"

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid config file at {where}:\n  - (root): expected a mapping")

    projects: list[Project] = []
    raw_projects = raw.get("projects")
    if not isinstance(raw_projects, list):
        problems.append("projects: expected a list of projects")
    elif not raw_projects:
        problems.append("projects: At least one project must be configured")
    else:
        for i, entry in enumerate(raw_projects):
            if not isinstance(entry, dict):
                problems.append(f"projects.{i}: expected a mapping with name and path")
                continue
            name = entry.get("name")
            path = entry.get("path")
            if not isinstance(name, str) or not name:
                problems.append(f"projects.{i}.name: Project name cannot be empty")
            if not isinstance(path, str) or not path:
                problems.append(f"projects.{i}.path: Project path cannot be empty")
            if isinstance(name, str) and name and isinstance(path, str) and path:
                projects.append(Project(name, os.path.expanduser(path)))

    days = raw.get("defaultSinceDays", 1)
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        problems.append("defaultSinceDays: must be an integer of at least 1")
        days = 1

    if problems:
        details = "\n".join(f"  - {p}" for p in problems)
        raise ConfigError(f"Invalid config file at {where}:\n{details}")

    return Config(projects=projects, default_since_days=days, source=source)


def check_project_paths(config: Config) -> None:
    for project in config.projects:
        path = Path(project.path)
        if not path.exists():
            raise ConfigError(f"Project path does not exist: {project.path}")
        if not (path / ".git").exists():
            raise ConfigError(f"Project path is not a Git repository: {project.path}")


def save_config(config: Config, path: str | Path) -> Path:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()
    if target.suffix == ".json":
        text = json.dumps(data, indent=2) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    target.write_text(text, encoding="utf-8")

    logger.info("wrote config with %d projects to %s", len(config.projects), target)
    return target


def sample_config() -> str:
    sample = Config(
        projects=[
            Project("App iOS", "~/Dev/app-ios"),
            Project("Backend API", "~/Dev/backend-api"),
        ],
        default_since_days=1,
    )
    return yaml.safe_dump(sample.to_dict(), sort_keys=False)
