"""Tests for the filesystem repository implementations."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from herovc.engine.hashing import digest
from herovc.exceptions import (
    AmbiguousPrefixError,
    CommitNotFoundError,
    ObjectNotFoundError,
    RepositoryError,
)
from herovc.storage import primitives
from herovc.storage.filesystem import (
    FileIndexRepository,
    FileObjectRepository,
    FileRefRepository,
)
from herovc.storage.index import Index
from herovc.storage.layout import RepoLayout


@pytest.fixture
def layout(tmp_path) -> RepoLayout:
    layout = RepoLayout(tmp_path)
    for d in (layout.commits_dir, layout.index_dir, layout.branches_dir):
        primitives.make_dirs(d)
    return layout


class TestObjectRepository:
    def test_put_get(self, layout) -> None:
        repo = FileObjectRepository(layout)
        d = repo.put(b"blob")
        assert d == digest(b"blob")
        assert repo.get(d) == b"blob"
        assert repo.exists(d)

    def test_put_is_idempotent(self, layout) -> None:
        repo = FileObjectRepository(layout)
        assert repo.put(b"x") == repo.put(b"x")
        assert repo.list_digests() == [digest(b"x")]

    def test_never_overwrites(self, layout) -> None:
        repo = FileObjectRepository(layout)
        d = repo.put(b"x")
        layout.commit_path(d).write_bytes(b"tampered")
        repo.put(b"x")
        assert layout.commit_path(d).read_bytes() == b"tampered"

    def test_get_missing(self, layout) -> None:
        with pytest.raises(CommitNotFoundError):
            FileObjectRepository(layout).get("f" * 64)

    def test_corruption_detected(self, layout, caplog) -> None:
        repo = FileObjectRepository(layout)
        d = repo.put(b"original")
        layout.commit_path(d).write_bytes(b"originaL")
        assert not repo.verify(d)
        with caplog.at_level(logging.WARNING, logger="herovc.storage.filesystem"):
            assert repo.get(d) == b"originaL"
        assert "corrupt" in caplog.text

    def test_find_by_prefix(self, layout) -> None:
        repo = FileObjectRepository(layout)
        d = repo.put(b"one")
        assert repo.find_by_prefix(d[:6]) == d
        other = "ffff" if d[:4] != "ffff" else "0000"
        assert repo.find_by_prefix(other) is None

    def test_ambiguous_prefix(self, layout) -> None:
        repo = FileObjectRepository(layout)
        layout.commit_path("abcd" + "0" * 60).write_bytes(b"")
        layout.commit_path("abcd" + "1" * 60).write_bytes(b"")
        with pytest.raises(AmbiguousPrefixError):
            repo.find_by_prefix("abcd")

    def test_discard(self, layout) -> None:
        repo = FileObjectRepository(layout)
        d = repo.put(b"gone")
        repo.discard(d)
        assert not repo.exists(d)


class TestRefRepository:
    def test_head_and_lock(self, layout) -> None:
        refs = FileRefRepository(layout)
        assert refs.get_head_branch() is None
        refs.set_head_branch("main")
        assert refs.get_head_branch() == "main"
        assert refs.get_lock() is None
        refs.set_lock("a" * 64)
        assert refs.get_lock() == "a" * 64
        refs.clear_lock()
        assert refs.get_lock() is None
        assert not layout.lock_path.exists()

    def test_branches(self, layout) -> None:
        refs = FileRefRepository(layout)
        refs.set_branch("main", "a" * 64)
        refs.set_branch("feature/x", "b" * 64)
        assert refs.get_branch("main") == "a" * 64
        assert refs.get_branch("feature/x") == "b" * 64
        assert refs.get_branch("missing") is None
        assert refs.list_branches() == ["feature/x", "main"]
        assert (layout.branches_dir / "main").read_text() == "a" * 64 + "\n"

    def test_unreadable_branch_dir(self, layout) -> None:
        primitives.remove_tree(layout.branches_dir)
        with pytest.raises(RepositoryError):
            FileRefRepository(layout).list_branches()


class TestIndexRepository:
    def test_load_missing_map_is_empty(self, layout) -> None:
        assert len(FileIndexRepository(layout).load()) == 0

    def test_flush_and_load(self, layout) -> None:
        repo = FileIndexRepository(layout)
        repo.flush(Index({"a": "1" * 64}))
        assert layout.index_map_path.read_text() == f"a,{'1' * 64}\n"
        assert repo.load().as_dict() == {"a": "1" * 64}

    def test_corrupt_map(self, layout) -> None:
        layout.index_map_path.write_text("garbage\n")
        with pytest.raises(RepositoryError):
            FileIndexRepository(layout).load()

    def test_blobs(self, layout, tmp_path: Path) -> None:
        repo = FileIndexRepository(layout)
        source = tmp_path / "src.txt"
        source.write_bytes(b"data")
        d = digest(b"data")
        repo.store_blob(source, d)
        assert repo.read_blob(d) == b"data"
        assert repo.staged_blobs() == [d]
        repo.remove_blob(d)
        with pytest.raises(ObjectNotFoundError):
            repo.read_blob(d)

    def test_clear(self, layout, tmp_path: Path) -> None:
        repo = FileIndexRepository(layout)
        source = tmp_path / "src.txt"
        source.write_bytes(b"data")
        repo.store_blob(source, digest(b"data"))
        repo.flush(Index({"src.txt": digest(b"data")}))
        repo.clear()
        assert repo.staged_blobs() == []
        assert len(repo.load()) == 0
        assert layout.index_map_path.is_file()

    def test_backup_and_restore(self, layout) -> None:
        repo = FileIndexRepository(layout)
        repo.flush(Index({"a": "1" * 64}))
        repo.backup()
        repo.clear()
        repo.restore_backup()
        assert repo.load().as_dict() == {"a": "1" * 64}
        assert not layout.index_backup_dir.exists()

    def test_restore_without_backup(self, layout) -> None:
        with pytest.raises(RepositoryError):
            FileIndexRepository(layout).restore_backup()


class TestPrimitives:
    def test_write_file_replaces(self, tmp_path: Path) -> None:
        target = tmp_path / "f"
        primitives.write_file(target, b"one")
        primitives.write_file(target, b"two")
        assert target.read_bytes() == b"two"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["f"]

    def test_failed_write_leaves_no_temp_file(self, tmp_path: Path) -> None:
        target = tmp_path / "target"
        (target / "child").mkdir(parents=True)
        with pytest.raises(OSError):
            primitives.write_file(target, b"data")
        assert not (tmp_path / ".target.tmp").exists()
        assert (target / "child").is_dir()
