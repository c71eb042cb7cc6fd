"""Filesystem implementations of repository interfaces.

Every repository takes a RepoLayout in its constructor and keeps no state
of its own between calls: each read goes to disk, each write is flushed
before the call returns.
"""

from __future__ import annotations

import logging
from pathlib import Path

from herovc.engine.hashing import digest as compute_digest
from herovc.exceptions import (
    AmbiguousPrefixError,
    CommitNotFoundError,
    ObjectNotFoundError,
    RepositoryError,
)
from herovc.storage import primitives
from herovc.storage.index import Index
from herovc.storage.layout import RepoLayout
from herovc.storage.repositories import (
    IndexRepository,
    ObjectRepository,
    RefRepository,
)

logger = logging.getLogger(__name__)


class FileObjectRepository(ObjectRepository):
    """Commit blobs stored as ``commits/<digest>``.

    Append-only: put() never overwrites an existing key.  With
    ``verify=True`` every get() recomputes the digest and logs a warning
    when the blob no longer matches its name.
    """

    def __init__(self, layout: RepoLayout, *, verify: bool = True) -> None:
        self._layout = layout
        self._verify = verify

    def put(self, data: bytes) -> str:
        digest = compute_digest(data)
        path = self._layout.commit_path(digest)
        if not path.exists():
            primitives.write_file(path, data)
            logger.debug("Object written: %s (%d bytes)", digest[:12], len(data))
        return digest

    def get(self, digest: str) -> bytes:
        path = self._layout.commit_path(digest)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise CommitNotFoundError(digest) from None
        except OSError as e:
            raise RepositoryError(f"Could not read commit {digest}: {e}") from e
        if self._verify:
            actual = compute_digest(data)
            if actual != digest:
                logger.warning(
                    "Commit %s is corrupt: its content hashes to %s", digest, actual
                )
        return data

    def exists(self, digest: str) -> bool:
        return self._layout.commit_path(digest).is_file()

    def verify(self, digest: str) -> bool:
        """Whether the stored blob still hashes to its own name."""
        return compute_digest(self._layout.commit_path(digest).read_bytes()) == digest

    def list_digests(self) -> list[str]:
        try:
            return [
                name
                for name in primitives.list_entries(self._layout.commits_dir)
                if not name.startswith(".")
            ]
        except OSError as e:
            raise RepositoryError(f"Could not list commits: {e}") from e

    def find_by_prefix(self, prefix: str) -> str | None:
        matches = [d for d in self.list_digests() if d.startswith(prefix)]
        if len(matches) > 1:
            raise AmbiguousPrefixError(prefix, matches)
        return matches[0] if matches else None

    def discard(self, digest: str) -> None:
        primitives.remove_file(self._layout.commit_path(digest))


class FileRefRepository(RefRepository):
    """HEAD, COMMIT_LOCK and ``branches/<name>`` files."""

    def __init__(self, layout: RepoLayout) -> None:
        self._layout = layout

    def get_head_branch(self) -> str | None:
        return primitives.read_first_line(self._layout.head_path) or None

    def set_head_branch(self, branch_name: str) -> None:
        primitives.write_file(self._layout.head_path, f"{branch_name}\n".encode("utf-8"))

    def get_lock(self) -> str | None:
        return primitives.read_first_line(self._layout.lock_path) or None

    def set_lock(self, digest: str) -> None:
        primitives.write_file(self._layout.lock_path, f"{digest}\n".encode("ascii"))

    def clear_lock(self) -> None:
        primitives.remove_file(self._layout.lock_path)

    def get_branch(self, branch_name: str) -> str | None:
        path = self._layout.branch_path(branch_name)
        if not path.is_file():
            return None
        return primitives.read_first_line(path) or None

    def set_branch(self, branch_name: str, digest: str) -> None:
        path = self._layout.branch_path(branch_name)
        primitives.make_dirs(path.parent)
        primitives.write_file(path, f"{digest}\n".encode("ascii"))

    def list_branches(self) -> list[str]:
        root = self._layout.branches_dir
        try:
            names = primitives.list_entries(root)
        except OSError as e:
            raise RepositoryError(f"Could not read branch directory {root}: {e}") from e
        branches: list[str] = []
        for name in names:
            path = root / name
            if path.is_dir():
                # Slashed branch names live in subdirectories.
                branches.extend(
                    p.relative_to(root).as_posix()
                    for p in sorted(path.rglob("*"))
                    if p.is_file() and not p.name.startswith(".")
                )
            elif not name.startswith("."):
                branches.append(name)
        return sorted(branches)


class FileIndexRepository(IndexRepository):
    """``index/map`` plus digest-named staged blobs in ``index/``."""

    def __init__(self, layout: RepoLayout) -> None:
        self._layout = layout

    def load(self) -> Index:
        path = self._layout.index_map_path
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Index()
        except OSError as e:
            raise RepositoryError(f"Could not read index: {e}") from e
        try:
            return Index.loads(text)
        except ValueError as e:
            raise RepositoryError(f"Corrupt index map: {e}") from e

    def flush(self, index: Index) -> None:
        primitives.make_dirs(self._layout.index_dir)
        primitives.write_file(self._layout.index_map_path, index.dumps().encode("utf-8"))

    def store_blob(self, source: Path, digest: str) -> None:
        target = self._layout.staged_blob_path(digest)
        if not target.exists():
            primitives.copy_file(source, target)

    def read_blob(self, digest: str) -> bytes:
        try:
            return self._layout.staged_blob_path(digest).read_bytes()
        except FileNotFoundError:
            raise ObjectNotFoundError(digest) from None

    def remove_blob(self, digest: str) -> None:
        primitives.remove_file(self._layout.staged_blob_path(digest))

    def staged_blobs(self) -> list[str]:
        """Digest-named files currently in the staging area."""
        return [
            name
            for name in primitives.list_entries(self._layout.index_dir)
            if name != "map" and not name.startswith(".")
        ]

    def clear(self) -> None:
        index_dir = self._layout.index_dir
        primitives.remove_tree(index_dir)
        primitives.make_dirs(index_dir)
        self.flush(Index())

    def backup(self) -> None:
        backup_dir = self._layout.index_backup_dir
        primitives.remove_tree(backup_dir)
        primitives.copy_tree(self._layout.index_dir, backup_dir)

    def restore_backup(self) -> None:
        backup_dir = self._layout.index_backup_dir
        if not backup_dir.is_dir():
            raise RepositoryError("No index backup to restore")
        primitives.remove_tree(self._layout.index_dir)
        primitives.copy_tree(backup_dir, self._layout.index_dir)
        primitives.remove_tree(backup_dir)
