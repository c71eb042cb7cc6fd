"""CLI tests for Hero -- every command via Click's CliRunner.

Each test runs inside its own working tree, passed with ``--root`` and
also made the current directory so relative paths resolve against it.
"""

from __future__ import annotations

import logging

import pytest
from click.testing import CliRunner

from herovc.cli import cli
from herovc.repo import Repository


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_logging():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def hero(runner, work_dir, monkeypatch):
    """Invoke ``hero --root <work_dir> ARGS...``."""
    monkeypatch.chdir(work_dir)

    def _invoke(*args: str, input: str | None = None):
        return runner.invoke(cli, ["--root", str(work_dir), *args], input=input)

    return _invoke


@pytest.fixture
def initialized(hero):
    result = hero("init")
    assert result.exit_code == 0, result.output
    return hero


def _head(work_dir) -> str:
    with Repository.open(work_dir) as repo:
        return repo.head


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


class TestInit:
    def test_init(self, hero, work_dir):
        result = hero("init")
        assert result.exit_code == 0
        assert "Initialized empty repository" in result.output
        assert (work_dir / ".hero" / "branches" / "main").is_file()

    def test_init_named_branch(self, hero, work_dir):
        result = hero("init", "trunk")
        assert result.exit_code == 0
        assert (work_dir / ".hero" / "HEAD").read_text() == "trunk\n"

    def test_init_twice(self, initialized):
        result = initialized("init")
        assert result.exit_code == 1

    def test_no_repository(self, hero):
        result = hero("status")
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# add / commit
# ---------------------------------------------------------------------------


class TestAddCommit:
    def test_add(self, initialized, write):
        write("a.txt", "hi")
        result = initialized("add", "a.txt")
        assert result.exit_code == 0
        assert "All files added to index (1)." in result.output

    def test_add_missing_file(self, initialized):
        result = initialized("add", "missing.txt")
        assert result.exit_code == 3

    def test_commit(self, initialized, write, work_dir):
        write("a.txt", "hi")
        initialized("add", "a.txt")
        result = initialized("commit", "-t", "first", "-m", "body")
        assert result.exit_code == 0, result.output
        head = _head(work_dir)
        assert head[:8] in result.output
        assert "first" in result.output
        assert "1 file(s), 2 bytes" in result.output

    def test_commit_prompts_for_title(self, initialized, work_dir):
        result = initialized("commit", input="typed title\n\n")
        assert result.exit_code == 0, result.output
        with Repository.open(work_dir) as repo:
            assert repo.read_commit("HEAD").title == "typed title"

    def test_commit_all(self, initialized, write, work_dir):
        write("a.txt", "v1")
        initialized("add", "a.txt")
        initialized("commit", "-t", "one")
        write("a.txt", "v2")
        result = initialized("commit", "-a", "-t", "two")
        assert result.exit_code == 0, result.output
        with Repository.open(work_dir) as repo:
            assert repo.read_commit("HEAD").file_map()["a.txt"].content == b"v2"

    def test_commit_paths(self, initialized, write, work_dir):
        write("a.txt", "a")
        write("b.txt", "b")
        initialized("add", "b.txt")
        result = initialized("commit", "a.txt", "-t", "only a")
        assert result.exit_code == 0, result.output
        with Repository.open(work_dir) as repo:
            assert [f.path for f in repo.read_commit("HEAD").files] == ["a.txt"]
            assert list(repo.staged()) == ["b.txt"]

    def test_all_with_paths_is_usage_error(self, initialized, write):
        write("a.txt", "a")
        result = initialized("commit", "-a", "a.txt", "-t", "x")
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# log / status
# ---------------------------------------------------------------------------


class TestLogStatus:
    def test_log(self, initialized, write):
        write("a.txt", "hi")
        initialized("add", "a.txt")
        initialized("commit", "-t", "first")
        result = initialized("log")
        assert result.exit_code == 0
        assert "first" in result.output
        assert "Initial Commit" in result.output
        assert result.output.index("first") < result.output.index("Initial Commit")

    def test_log_oneline_limit(self, initialized, write, work_dir):
        write("a.txt", "hi")
        initialized("add", "a.txt")
        initialized("commit", "-t", "first")
        result = initialized("log", "--oneline", "-n", "1")
        assert result.exit_code == 0
        assert _head(work_dir)[:8] in result.output
        assert "Initial Commit" not in result.output

    def test_log_unknown_reference(self, initialized):
        result = initialized("log", "nowhere")
        assert result.exit_code == 2

    def test_status(self, initialized, write):
        write("a.txt", "hi")
        initialized("add", "a.txt")
        result = initialized("status")
        assert result.exit_code == 0
        assert "On branch main" in result.output
        assert "a.txt" in result.output

    def test_status_clean(self, initialized):
        result = initialized("status")
        assert "Nothing staged." in result.output


# ---------------------------------------------------------------------------
# checkout / branch
# ---------------------------------------------------------------------------


class TestCheckoutBranch:
    def test_checkout_detaches(self, initialized, write, work_dir):
        root = _head(work_dir)
        write("a.txt", "hi")
        initialized("add", "a.txt")
        initialized("commit", "-t", "first")

        result = initialized("checkout", root[:8], "--skip-unchanged")
        assert result.exit_code == 0, result.output
        assert "HEAD detached at" in result.output
        assert not (work_dir / "a.txt").exists()

        result = initialized("checkout", "main", "--skip-unchanged")
        assert result.exit_code == 0
        assert "Switched to branch main" in result.output
        assert (work_dir / "a.txt").read_bytes() == b"hi"

    def test_checkout_unknown(self, initialized):
        result = initialized("checkout", "nowhere", "--skip-unchanged")
        assert result.exit_code == 2

    def test_branch_create_and_list(self, initialized, work_dir):
        result = initialized("branch", "feature")
        assert result.exit_code == 0
        assert "Branch feature at" in result.output
        assert _head(work_dir)[:8] in result.output

        result = initialized("branch")
        assert "* main" in result.output
        assert "  feature" in result.output

    def test_branch_create_and_checkout(self, initialized):
        result = initialized("branch", "feature", "-c")
        assert result.exit_code == 0
        assert "HEAD attached to feature" in result.output

    def test_branch_overwrite_declined(self, initialized):
        initialized("branch", "feature")
        result = initialized("branch", "feature", input="n\n")
        assert result.exit_code == 0
        assert "Aborted." in result.output

    def test_branch_force(self, initialized, write, work_dir):
        initialized("branch", "feature")
        write("a.txt", "hi")
        initialized("add", "a.txt")
        initialized("commit", "-t", "first")
        result = initialized("branch", "feature", "main", "-f")
        assert result.exit_code == 0
        with Repository.open(work_dir) as repo:
            assert repo.resolve("feature") == repo.head

    def test_branch_invalid_name(self, initialized):
        result = initialized("branch", "bad name")
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# merge / repofix
# ---------------------------------------------------------------------------


class TestMergeRepofix:
    def test_already_up_to_date(self, initialized):
        result = initialized("merge", "main")
        assert result.exit_code == 0
        assert "Already up to date." in result.output

    def test_fast_forward(self, initialized, write, work_dir):
        initialized("branch", "feature", "-c")
        write("a.txt", "hi")
        initialized("add", "a.txt")
        initialized("commit", "-t", "on feature")
        initialized("checkout", "main", "--skip-unchanged")
        result = initialized("merge", "feature")
        assert result.exit_code == 0, result.output
        assert "Fast-forward" in result.output
        assert (work_dir / "a.txt").read_bytes() == b"hi"

    def test_repofix_current(self, initialized):
        result = initialized("repofix", "--heuristic")
        assert result.exit_code == 0
        assert "Repository is already up to date." in result.output

    def test_repofix_needs_one_source(self, initialized):
        assert initialized("repofix").exit_code == 2
        assert initialized("repofix", "0.02.2", "--heuristic").exit_code == 2

    def test_repofix_raw_head(self, initialized, work_dir):
        head = _head(work_dir)
        repo_dir = work_dir / ".hero"
        (repo_dir / "branches" / "main").unlink()
        (repo_dir / "branches").rmdir()
        (repo_dir / "index" / "map").unlink()
        (repo_dir / "HEAD").write_text(head + "\n")

        result = initialized("repofix", "0.02.2")
        assert result.exit_code == 0, result.output
        assert "Upgraded to 0.03.0" in result.output
        assert _head(work_dir) == head

    def test_repofix_no_repository(self, hero):
        assert hero("repofix", "--heuristic").exit_code == 6
