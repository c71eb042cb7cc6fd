"""Tests for the Repository facade -- init, open, commit flows, log, status.

End-to-end scenarios run entirely through the public API against a
real working tree in tmp_path.
"""

from __future__ import annotations

import pytest

from herovc import (
    RepoConfig,
    Repository,
    RepositoryExistsError,
    RepositoryNotFoundError,
    StageFailedError,
)
from herovc.engine.codec import encode_commit
from herovc.engine.commit import ROOT_MESSAGE, ROOT_TITLE
from herovc.engine.hashing import digest


# ==================================================================
# Init / open
# ==================================================================


class TestInit:
    def test_layout(self, repo):
        repo_dir = repo.layout.repo_dir
        assert (repo_dir / "HEAD").read_text() == "main\n"
        assert (repo_dir / "branches" / "main").read_text().strip() == repo.head
        assert (repo_dir / "commits" / repo.head).is_file()
        assert (repo_dir / "index" / "map").read_text() == ""
        assert not (repo_dir / "COMMIT_LOCK").exists()

    def test_root_commit(self, repo):
        root = repo.read_commit("HEAD")
        assert root.parent is None
        assert root.files == []
        assert root.title == ROOT_TITLE
        assert root.message == ROOT_MESSAGE
        blob = repo.layout.commit_path(repo.head).read_bytes()
        assert b"parent 0\n" in blob

    def test_custom_branch(self, tmp_path):
        with Repository.init(tmp_path, branch="trunk") as repo:
            assert repo.current_branch == "trunk"
            assert repo.list_branches()[0].name == "trunk"

    def test_default_branch_from_config(self, tmp_path):
        with Repository.init(tmp_path, config=RepoConfig(default_branch="dev")) as repo:
            assert repo.current_branch == "dev"

    def test_init_twice(self, repo, work_dir):
        with pytest.raises(RepositoryExistsError):
            Repository.init(work_dir)

    def test_open_and_discover(self, repo, work_dir):
        nested = work_dir / "a" / "b"
        nested.mkdir(parents=True)
        with Repository.open(work_dir) as opened:
            assert opened.head == repo.head
        with Repository.discover(nested) as found:
            assert found.root == repo.root

    def test_open_missing(self, tmp_path):
        with pytest.raises(RepositoryNotFoundError):
            Repository.open(tmp_path)

    def test_discover_missing(self, tmp_path):
        with pytest.raises(RepositoryNotFoundError):
            Repository.discover(tmp_path)


# ==================================================================
# Commit
# ==================================================================


class TestCommit:
    def test_scenario(self, repo, write):
        d0 = repo.head
        write("a.txt", "hi")
        assert repo.add(["a.txt"]) == {"a.txt": digest(b"hi")}
        result = repo.commit("t")
        assert result.branch == "main"
        assert result.commit.parent == d0
        assert [f.path for f in result.commit.files] == ["a.txt"]
        assert repo.head == result.digest
        assert repo.resolve("main") == result.digest

    def test_index_cleared(self, repo, write):
        write("a.txt", "hi")
        repo.add(["a.txt"])
        repo.commit("t")
        assert repo.staged() == {}
        assert repo._index_repo.staged_blobs() == []

    def test_self_certifying(self, repo, commit_files):
        result = commit_files({"a.txt": "x", "b.bin": bytes(range(256))})
        blob = repo.layout.commit_path(result.digest).read_bytes()
        assert digest(blob) == result.digest
        assert blob == encode_commit(result.commit)

    def test_round_trip(self, repo, commit_files, work_dir):
        files = {
            "a.txt": b"text\n",
            "bin/data.bin": bytes(range(256)) * 4,
            "empty": b"",
            "delims.txt": b"&&&\n&&&&&\nCOMMIT FOOTER\n",
        }
        result = commit_files(files)
        for relative in files:
            (work_dir / relative).unlink()
        repo.checkout(result.digest)
        for relative, data in files.items():
            assert (work_dir / relative).read_bytes() == data
        stored = {f.path: f.digest for f in repo.read_commit(result.digest).files}
        assert stored == {p: digest(d) for p, d in files.items()}

    def test_message_preserved(self, repo, write):
        write("a.txt", "x")
        repo.add(["a.txt"])
        result = repo.commit("title & more", "body/with & symbols\nsecond line")
        commit = repo.read_commit(result.digest)
        assert commit.title == "title & more"
        assert commit.message == "body/with & symbols\nsecond line"

    def test_empty_commit(self, repo):
        result = repo.commit("nothing staged")
        assert result.commit.files == []
        assert repo.head == result.digest


class TestCommitAll:
    def test_restages_tracked_files(self, repo, commit_files, write):
        commit_files({"a.txt": "v1", "b.txt": "b"})
        write("a.txt", "v2")
        write("untracked.txt", "u")
        result = repo.commit_all("again")
        files = {f.path: f.content for f in result.commit.files}
        assert files == {"a.txt": b"v2", "b.txt": b"b"}

    def test_deleted_file_dropped(self, repo, commit_files, work_dir):
        commit_files({"a.txt": "a", "b.txt": "b"})
        (work_dir / "b.txt").unlink()
        result = repo.commit_all("again")
        assert [f.path for f in result.commit.files] == ["a.txt"]


class TestCommitFiles:
    def test_commits_only_given_paths(self, repo, write):
        write("a.txt", "a")
        write("b.txt", "b")
        repo.add(["a.txt", "b.txt"])
        result = repo.commit_files(["a.txt"], "only a")
        assert [f.path for f in result.commit.files] == ["a.txt"]
        assert repo.staged() == {"b.txt": digest(b"b")}
        assert not repo.layout.index_backup_dir.exists()

    def test_unstaged_path(self, repo, write):
        write("a.txt", "a")
        write("b.txt", "b")
        repo.add(["b.txt"])
        result = repo.commit_files(["a.txt"], "a")
        assert [f.path for f in result.commit.files] == ["a.txt"]
        assert repo.staged() == {"b.txt": digest(b"b")}

    def test_failure_restores_index(self, repo, write):
        write("b.txt", "b")
        repo.add(["b.txt"])
        head = repo.head
        with pytest.raises(StageFailedError):
            repo.commit_files(["missing.txt"], "nope")
        assert repo.staged() == {"b.txt": digest(b"b")}
        assert repo.head == head


# ==================================================================
# Log / status
# ==================================================================


class TestLog:
    def test_first_parent_walk(self, repo, commit_files):
        d0 = repo.head
        c1 = commit_files({"a.txt": "1"}, title="one").digest
        c2 = commit_files({"a.txt": "2"}, title="two").digest
        entries = repo.log()
        assert [e.digest for e in entries] == [c2, c1, d0]
        assert [e.title for e in entries] == ["two", "one", ROOT_TITLE]
        assert entries[0].branches == ["main"]
        assert entries[1].branches == []

    def test_limit(self, repo, commit_files):
        commit_files({"a.txt": "1"})
        assert len(repo.log(limit=1)) == 1

    def test_from_reference(self, repo, commit_files):
        d0 = repo.head
        commit_files({"a.txt": "1"})
        assert [e.digest for e in repo.log(d0)] == [d0]


class TestStatus:
    def test_attached(self, repo, write):
        write("a.txt", "a")
        repo.add(["a.txt"])
        info = repo.status()
        assert info.branch_name == "main"
        assert not info.is_detached
        assert info.head_digest == repo.head
        assert info.staged == {"a.txt": digest(b"a")}

    def test_detached(self, repo, commit_files):
        d0 = repo.head
        commit_files({"a.txt": "1"})
        repo.checkout(d0)
        info = repo.status()
        assert info.is_detached
        assert info.head_digest == d0
        assert "detached" in str(info)


class TestLifecycle:
    def test_close_is_idempotent(self, repo):
        repo.close()
        repo.close()
        assert "closed=True" in repr(repo)
