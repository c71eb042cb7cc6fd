"""Shared test fixtures for Hero.

Every repository lives in its own ``tmp_path`` working tree.  Commits are
timestamped by a ticking clock so that two commits made in the same test
never share a timestamp.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from herovc.protocols import StaticPrompter
from herovc.repo import Repository

EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Returns EPOCH, EPOCH + 1s, EPOCH + 2s, ... on successive calls."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next += timedelta(seconds=1)
        return now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def prompter() -> StaticPrompter:
    """Prompter that takes every default (never overwrites unchanged files)."""
    return StaticPrompter()


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def repo(work_dir: Path, prompter: StaticPrompter, clock: TickingClock) -> Repository:
    """A freshly initialized repository on branch ``main``."""
    r = Repository.init(work_dir, prompter=prompter, clock=clock)
    yield r
    r.close()


@pytest.fixture
def write(work_dir: Path):
    """Write a file under the working tree: ``write("a/b.txt", b"data")``."""

    def _write(relative: str, data: bytes | str) -> Path:
        path = work_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            data = data.encode("utf-8")
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def commit_files(repo: Repository, write):
    """Write, stage and commit files in one call.  Returns the CommitResult."""

    def _commit(files: dict[str, bytes | str], title: str = "change"):
        for relative, data in files.items():
            write(relative, data)
        repo.add(list(files))
        return repo.commit(title)

    return _commit
