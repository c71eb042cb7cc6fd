"""Commit engine for Hero.

Builds Commit values from the staging index and writes them to the object
store.  The commit's digest is the digest of its encoded blob, computed
once when it is stored, so every stored commit is self-certifying.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from herovc.engine.codec import encode_commit
from herovc.engine.hashing import digest as compute_digest
from herovc.models.commit import Commit, FileEntry

if TYPE_CHECKING:
    from herovc.storage.index import Index
    from herovc.storage.repositories import IndexRepository, ObjectRepository

logger = logging.getLogger(__name__)

ROOT_TITLE = "Initial Commit"
ROOT_MESSAGE = "This commit marks the initialization of the repository."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CommitEngine:
    """Turns staged content into stored commits."""

    def __init__(
        self,
        object_repo: ObjectRepository,
        index_repo: IndexRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._object_repo = object_repo
        self._index_repo = index_repo
        self._clock = clock

    def root_commit(self) -> Commit:
        """The parentless, file-less commit written by init."""
        return Commit(
            parent=None,
            timestamp=self._clock(),
            title=ROOT_TITLE,
            message=ROOT_MESSAGE,
        )

    def build_commit(
        self,
        index: Index,
        *,
        parent: str | None,
        title: str,
        message: str = "",
        merge_parent: str | None = None,
    ) -> tuple[Commit, list[str]]:
        """Build a Commit holding every staged file, sorted by path.

        Each distinct staged blob is read once through the commit map.
        A blob whose content no longer matches its staged digest is a
        warning; the record carries the digest of the bytes embedded.

        Returns:
            (commit, warnings)

        Raises:
            ObjectNotFoundError: If a staged blob is missing.
        """
        warnings: list[str] = []
        files: list[FileEntry] = []
        for staged_digest in sorted(index.digests()):
            content = self._index_repo.read_blob(staged_digest)
            actual = compute_digest(content)
            if actual != staged_digest:
                note = (
                    f"Staged blob {staged_digest[:12]} changed since it was added "
                    f"(now hashes to {actual[:12]})"
                )
                logger.warning(note)
                warnings.append(note)
            for path in index.paths_of(staged_digest):
                files.append(
                    FileEntry(path=path, digest=actual, size=len(content), content=content)
                )
        commit = self.make_commit(
            files,
            parent=parent,
            title=title,
            message=message,
            merge_parent=merge_parent,
        )
        return commit, warnings

    def make_commit(
        self,
        files: list[FileEntry],
        *,
        parent: str | None,
        title: str,
        message: str = "",
        merge_parent: str | None = None,
    ) -> Commit:
        """Timestamp a commit over *files*, ordered by path."""
        return Commit(
            parent=parent,
            merge_parent=merge_parent,
            timestamp=self._clock(),
            title=title,
            message=message,
            files=sorted(files, key=lambda f: f.path),
        )

    def write(self, commit: Commit) -> str:
        """Encode and store *commit*.  Returns its digest."""
        digest = self._object_repo.put(encode_commit(commit))
        logger.debug(
            "Commit stored: %s (%d file(s), %d bytes)",
            digest[:12],
            commit.count,
            commit.total_size,
        )
        return digest
