from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from git_scout import __main__ as cli
from git_scout import repo
from git_scout.discovery import FoundRepository
from git_scout.models import LogQuery
from git_scout.parser import parse_log_with_stats


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in ("api", "web"):
        (tmp_path / name / ".git").mkdir(parents=True)
    path = tmp_path / "git-scout.config.yaml"
    path.write_text(
        "projects:\n"
        f"  - name: API\n    path: {tmp_path / 'api'}\n"
        f"  - name: Web\n    path: {tmp_path / 'web'}\n"
        "defaultSinceDays: 5\n"
    )
    monkeypatch.setenv("GIT_SCOUT_CONFIG", str(path))
    return path


@pytest.fixture
def no_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GIT_SCOUT_CONFIG", str(tmp_path / "missing.yaml"))


@pytest.fixture
def captured_queries(monkeypatch: pytest.MonkeyPatch, stats_output: str) -> list:
    queries: list = []

    def fake(path, query):
        queries.append((path, query))
        return parse_log_with_stats(stats_output)

    monkeypatch.setattr(cli, "get_commits_with_stats", fake)
    return queries


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run([]) == 0
    assert "projects" in capsys.readouterr().out


def test_stats_json(config_file: Path, captured_queries: list, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["stats", "--project", "Web", "--author", "jane", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["project"] == "Web"
    assert payload["time_range"] == {"since": "5d", "until": None}
    assert payload["filters"] == {"author": "jane", "branch": None}
    assert payload["summary"]["total_commits"] == 2
    assert payload["summary"]["total_additions"] == 27
    assert payload["summary"]["unique_authors"] == 2
    assert payload["summary"]["date_range"]["latest"] == "2025-09-30T10:00:00+00:00"
    assert [a["author_name"] for a in payload["authors"]] == ["John Doe", "Jane Smith"]
    assert [f["path"] for f in payload["files"]] == ["src/index.ts", "src/feature.ts", "README.md"]

    path, query = captured_queries[0]
    assert path.endswith("web")
    assert query == LogQuery(since="5d", until=None, author="jane", branch=None)


def test_stats_limit_applies_to_files(config_file: Path, captured_queries: list,
                                      capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["stats", "--json", "--limit", "1"]) == 0

    assert len(json.loads(capsys.readouterr().out)["files"]) == 1


def test_stats_table_output(config_file: Path, captured_queries: list, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["stats", "--since", "30d"]) == 0

    out = capsys.readouterr().out
    assert "BY AUTHOR" in out
    assert "John Doe" in out
    assert "src/feature.ts" in out
    assert "DETAILED INSIGHTS" in out
    assert captured_queries[0][0].endswith("api")


def test_stats_without_config_uses_current_repository(no_config: None, captured_queries: list,
                                                       monkeypatch: pytest.MonkeyPatch, tmp_path: Path,
                                                       capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "is_git_repository", lambda p: True)

    assert _run(["stats", "--json"]) == 0

    assert captured_queries[0][1].since == "7d"
    assert json.loads(capsys.readouterr().out)["project"] == tmp_path.name


def test_stats_without_config_outside_repository(no_config: None, monkeypatch: pytest.MonkeyPatch,
                                                  capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "is_git_repository", lambda p: False)

    assert _run(["stats"]) == 1
    assert "not a git repository" in capsys.readouterr().err


def test_unknown_project(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["stats", "--project", "Mobile"]) == 1
    assert 'Project "Mobile" not found' in capsys.readouterr().err


def test_invalid_date_fails_before_git_runs(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                                            capsys: pytest.CaptureFixture[str]) -> None:
    def explode(args, cwd):
        raise AssertionError("git must not run")

    monkeypatch.setattr(repo, "run_git", explode)

    assert _run(["stats", "--since", "next blue moon"]) == 1
    assert "Invalid date format" in capsys.readouterr().err


def test_reversed_range_fails(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                              capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(repo, "run_git", lambda args, cwd: "")

    assert _run(["stats", "--since", "today", "--until", "7d"]) == 1
    assert "Since date cannot be after until date" in capsys.readouterr().err


def test_today_defaults_to_whole_day(config_file: Path, captured_queries: list,
                                     capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["today", "--json"]) == 0

    query = captured_queries[0][1]
    assert query.since.endswith("Z")
    assert query.until.endswith("Z")
    assert query.since < query.until
    assert json.loads(capsys.readouterr().out)["summary"]["total_commits"] == 2


def test_today_no_commits(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                          capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "get_commits_with_stats", lambda path, query: [])

    assert _run(["today"]) == 0
    assert "No commits found" in capsys.readouterr().out


def test_projects(config_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "is_git_repository", lambda p: str(p).endswith("api"))

    assert _run(["projects", "--json"]) == 0

    assert [(p["name"], p["valid"]) for p in json.loads(capsys.readouterr().out)] == [
        ("API", True), ("Web", False),
    ]


def test_projects_requires_config(no_config: None, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["projects"]) == 1
    assert "No config file found" in capsys.readouterr().err


def test_branches_json(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                       capsys: pytest.CaptureFixture[str]) -> None:
    outputs = {
        "for-each-ref": "main|2025-09-30T10:00:00+00:00|Jane|abc1234|Release\n"
                        "dev|2025-09-29T10:00:00+00:00|John|def5678|WIP",
        "branch": "main",
        "log": "abc1234ffff|Jane|jane@x.io|2025-09-30T10:00:00+00:00|Release",
    }
    monkeypatch.setattr(repo, "run_git", lambda args, cwd: outputs[args[0]])

    assert _run(["branches", "--json", "--branch", "main", "--since", "3d"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["current_branch"] == "main"
    assert [b["name"] for b in payload["branches"]] == ["main", "dev"]
    assert payload["since"] == "3d"
    assert payload["recent_commits"][0]["subject"] == "Release"


def test_branches_unknown_branch(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                                 capsys: pytest.CaptureFixture[str]) -> None:
    def fake(args, cwd):
        if args[0] == "for-each-ref" and args[-1] == "refs/heads/nope":
            return ""
        return {"for-each-ref": "main|2025-09-30T10:00:00+00:00|Jane|abc1234|Release", "branch": "main"}[args[0]]

    monkeypatch.setattr(repo, "run_git", fake)

    assert _run(["branches", "--branch", "nope"]) == 1
    assert 'Branch "nope" not found' in capsys.readouterr().err


def test_init_writes_local_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
                                  capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    found = [
        FoundRepository("api", str(tmp_path / "a" / "api")),
        FoundRepository("api", str(tmp_path / "b" / "api"), description="second"),
    ]
    monkeypatch.setattr(cli, "scan_directory", lambda root, max_depth: found)

    assert _run(["init", "--local", "--default-days", "2", str(tmp_path)]) == 0

    written = yaml.safe_load((tmp_path / "git-scout.config.yaml").read_text())
    assert written == {
        "projects": [
            {"name": "api", "path": str(tmp_path / "a" / "api")},
            {"name": "api (2)", "path": str(tmp_path / "b" / "api")},
        ],
        "defaultSinceDays": 2,
    }
    assert "Configuration saved" in capsys.readouterr().out


def test_init_refuses_to_overwrite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
                                   capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "git-scout.config.yaml").write_text("projects: []\n")

    assert _run(["init", "--local"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_init_with_nothing_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "scan_directory", lambda root, max_depth: [])

    assert _run(["init", "--local"]) == 1
    assert not (tmp_path / "git-scout.config.yaml").exists()


def test_out_of_range_day_count_exits_cleanly(config_file: Path, monkeypatch: pytest.MonkeyPatch,
                                               capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(repo, "run_git", lambda args, cwd: "")

    assert _run(["stats", "--since", "1000000d"]) == 1
    assert "Invalid date format: 1000000d" in capsys.readouterr().err


def test_stats_sections_json(config_file: Path, captured_queries: list,
                             capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["stats", "--json", "--section", "largest", "--section", "collaboration"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [s["lines_changed"] for s in payload["largest_commits"]] == [21, 15]
    assert payload["largest_commits"][0]["commit"]["author_name"] == "Jane Smith"
    assert payload["collaboration"]["shared_files"] == 1
    assert "file_types" not in payload
    assert "timeline" not in payload


def test_stats_sections_table(config_file: Path, captured_queries: list,
                              capsys: pytest.CaptureFixture[str]) -> None:
    argv = ["stats", "--section", "largest", "--section", "file-types",
            "--section", "timeline", "--section", "collaboration"]
    assert _run(argv) == 0

    out = capsys.readouterr().out
    assert "LARGEST COMMITS" in out
    assert "FILE TYPES" in out
    assert "ACTIVITY TIMELINE" in out
    assert "Total contributors: 2" in out


def test_stats_rejects_unknown_section(config_file: Path) -> None:
    assert _run(["stats", "--section", "hotspots"]) == 2


def test_today_shows_insights(config_file: Path, captured_queries: list,
                              capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["today"]) == 0

    out = capsys.readouterr().out
    assert "INSIGHTS" in out
    assert "Most active: John Doe (50% of commits)" in out
    assert "Most changed file: src/index.ts (18 lines)" in out
    assert "Net changes: 18 lines additions" in out
