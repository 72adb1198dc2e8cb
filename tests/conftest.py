from __future__ import annotations

from datetime import datetime, timezone

import pytest

from git_scout import display
from git_scout.models import Commit, FileChange

STATS_OUTPUT = """--commit--|abc1234def5678abc1234def5678abc1234def56|John Doe|john@example.com|2025-09-30T10:00:00+00:00|Initial commit
10\t5\tsrc/index.ts
0\t0\tREADME.md

--commit--|def5678abc1234def5678abc1234def5678abc12|Jane Smith|jane@example.com|2025-09-30T11:00:00+00:00|Add feature
15\t3\tsrc/feature.ts
2\t1\tsrc/index.ts"""


def make_commit(
    hash_val: str,
    author: str,
    email: str,
    files: list[tuple[str, int, int]] | None,
    when: datetime | None = None,
    subject: str = "",
) -> Commit:
    changes = None if files is None else tuple(FileChange(p, a, d) for p, a, d in files)
    when = when or datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc)
    return Commit(hash_val, author, email, when, subject, changes)


@pytest.fixture
def stats_output() -> str:
    return STATS_OUTPUT


@pytest.fixture(autouse=True)
def no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(display, "_COLOR", False)
