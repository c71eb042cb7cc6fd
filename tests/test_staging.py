"""Tests for staging -- add, content addressing, all-or-nothing sessions."""

from __future__ import annotations

import os

import pytest

from herovc import StageFailedError
from herovc.engine.codec import decode_commit
from herovc.engine.hashing import digest


class TestAdd:
    def test_stage_file(self, repo, write):
        write("a.txt", "hi")
        staged = repo.add(["a.txt"])
        assert staged == {"a.txt": digest(b"hi")}
        assert repo.staged() == {"a.txt": digest(b"hi")}
        assert repo.layout.staged_blob_path(digest(b"hi")).read_bytes() == b"hi"

    def test_map_file_format(self, repo, write):
        write("a.txt", "hi")
        repo.add(["a.txt"])
        assert repo.layout.index_map_path.read_text() == f"a.txt,{digest(b'hi')}\n"

    def test_identical_content_stored_once(self, repo, write):
        write("one.txt", "same")
        write("two.txt", "same")
        staged = repo.add(["one.txt", "two.txt"])
        assert staged["one.txt"] == staged["two.txt"]
        assert repo._index_repo.staged_blobs() == [digest(b"same")]

    def test_directory_recurses(self, repo, write):
        write("dir/a.txt", "a")
        write("dir/sub/b.txt", "b")
        staged = repo.add(["dir"])
        assert sorted(staged) == ["dir/a.txt", "dir/sub/b.txt"]

    def test_root_skips_repository_dir(self, repo, write):
        write("a.txt", "a")
        staged = repo.add(["."])
        assert list(staged) == ["a.txt"]

    def test_absolute_path(self, repo, write):
        path = write("a.txt", "a")
        assert list(repo.add([path])) == ["a.txt"]

    def test_restage_drops_orphaned_blob(self, repo, write):
        write("a.txt", "v1")
        repo.add(["a.txt"])
        write("a.txt", "v2")
        repo.add(["a.txt"])
        assert repo._index_repo.staged_blobs() == [digest(b"v2")]
        assert repo.staged() == {"a.txt": digest(b"v2")}

    def test_sessions_accumulate(self, repo, write):
        write("a.txt", "a")
        write("b.txt", "b")
        repo.add(["a.txt"])
        repo.add(["b.txt"])
        assert sorted(repo.staged()) == ["a.txt", "b.txt"]


class TestStageFailure:
    def test_missing_file_empties_index(self, repo, write):
        write("a.txt", "a")
        repo.add(["a.txt"])
        with pytest.raises(StageFailedError) as exc_info:
            repo.add(["missing.txt"])
        assert exc_info.value.exit_code == 3
        assert repo.staged() == {}
        assert repo._index_repo.staged_blobs() == []

    def test_failure_mid_session_empties_index(self, repo, write):
        write("a.txt", "a")
        with pytest.raises(StageFailedError):
            repo.add(["a.txt", "missing.txt"])
        assert repo.staged() == {}

    def test_outside_working_tree(self, repo, tmp_path):
        outside = tmp_path / "outside.txt"
        outside.write_text("x")
        with pytest.raises(StageFailedError, match="outside the working tree"):
            repo.add([outside])

    def test_inside_repository_dir(self, repo):
        with pytest.raises(StageFailedError, match="inside the repository directory"):
            repo.add([repo.layout.head_path])

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions")
    def test_unreadable_file(self, repo, write):
        path = write("secret.txt", "x")
        path.chmod(0)
        try:
            with pytest.raises(StageFailedError):
                repo.add(["secret.txt"])
        finally:
            path.chmod(0o644)
        assert repo.staged() == {}

    @pytest.mark.skipif(os.name == "nt", reason="needs POSIX file names")
    def test_line_break_in_name(self, repo, write):
        write("a.txt", "a")
        repo.add(["a.txt"])
        write("a\nb", "x")
        with pytest.raises(StageFailedError, match="line break"):
            repo.add(["a\nb"])
        assert repo.staged() == {}
        assert repo._index_repo.staged_blobs() == []

    @pytest.mark.skipif(os.name == "nt", reason="needs POSIX file names")
    def test_line_break_in_directory_member(self, repo, write):
        write("dir/ok.txt", "ok")
        write("dir/bad\rname", "x")
        with pytest.raises(StageFailedError):
            repo.add(["dir"])
        assert repo.staged() == {}

    def test_footer_marker_name_at_root(self, repo, write):
        write("COMMIT FOOTER", "x")
        with pytest.raises(StageFailedError, match="reserved"):
            repo.add(["COMMIT FOOTER"])
        assert repo.staged() == {}

    def test_footer_marker_name_in_subdirectory(self, repo, write):
        write("notes/COMMIT FOOTER", "x")
        assert list(repo.add(["notes"])) == ["notes/COMMIT FOOTER"]
        result = repo.commit("nested")
        stored = decode_commit(repo._object_repo.get(result.digest))
        assert [f.path for f in stored.files] == ["notes/COMMIT FOOTER"]
