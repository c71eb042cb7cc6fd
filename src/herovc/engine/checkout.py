"""Checkout engine for Hero.

Restores the files recorded in a commit to the working tree:

1. Optionally, files recorded by the previous position but absent from
   the target are removed when they are unmodified.
2. For each record, in stored order: if the file on disk already has the
   recorded digest, the prompter decides whether to overwrite it anyway.
3. Otherwise clear a tracked file standing where a parent directory goes,
   create missing parent directories, write exactly ``size`` bytes, then
   re-hash what was written.  A mismatch is a warning; the file stays on
   disk as written.
4. Footer counters are compared against the records read.

Only the working tree is touched; the object store is read-only here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from herovc.engine.hashing import digest as compute_digest
from herovc.engine.hashing import digest_file
from herovc.exceptions import RepositoryError
from herovc.storage import primitives

if TYPE_CHECKING:
    from herovc.engine.cache import CommitCache
    from herovc.models.commit import Commit, FileEntry
    from herovc.protocols import Prompter
    from herovc.storage.layout import RepoLayout

logger = logging.getLogger(__name__)


@dataclass
class RestoreResult:
    """What a restore did to the working tree."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def is_safe_path(path: str) -> bool:
    """Whether a recorded path stays inside the working tree."""
    if not path or "\\" in path:
        return False
    p = PurePosixPath(path)
    return not p.is_absolute() and ".." not in p.parts and "." not in p.parts


class CheckoutEngine:
    """Writes commit contents into the working tree."""

    def __init__(
        self,
        layout: RepoLayout,
        commit_cache: CommitCache,
        prompter: Prompter,
    ) -> None:
        self._layout = layout
        self._commit_cache = commit_cache
        self._prompter = prompter

    def restore(
        self,
        commit_digest: str,
        *,
        previous_digest: str | None = None,
        prune: bool = True,
    ) -> RestoreResult:
        """Restore every file recorded in *commit_digest*.

        Args:
            commit_digest: The commit to check out.
            previous_digest: The position being left, for pruning.
            prune: Remove unmodified files tracked only by *previous_digest*.

        Raises:
            CommitNotFoundError: If a commit is not in the object store.
            RepositoryError: If a file cannot be written.
        """
        commit = self._commit_cache.load(commit_digest)
        result = RestoreResult()
        previous: Commit | None = None
        if previous_digest is not None and previous_digest != commit_digest:
            previous = self._commit_cache.load(previous_digest)

        # Pruning first frees paths that change between file and directory.
        if prune and previous is not None:
            self._prune(previous, commit, result)

        tracked = previous.file_map() if previous is not None else {}
        for entry in commit.files:
            self._restore_file(entry, tracked, result)

        for anomaly in commit.footer_anomalies():
            result.warn(f"Commit {commit_digest[:12]} footer mismatch: {anomaly}")

        return result

    def _restore_file(
        self,
        entry: FileEntry,
        tracked: dict[str, FileEntry],
        result: RestoreResult,
    ) -> None:
        if not is_safe_path(entry.path):
            result.warn(f"Refusing to check out unsafe path {entry.path!r}")
            result.skipped.append(entry.path)
            return

        target = self._layout.working_path(entry.path)
        self._clear_way(target, tracked)
        if target.is_file() and digest_file(target) == entry.digest:
            overwrite = self._prompter.confirm(
                f"{entry.path} on disk has the same SHA256 as in the commit. "
                "Check out anyway?",
                default=False,
            )
            if not overwrite:
                logger.debug("Unchanged, skipped: %s", entry.path)
                result.skipped.append(entry.path)
                return

        try:
            primitives.make_dirs(target.parent)
            with open(target, "wb") as f:
                f.write(entry.content[: entry.size])
            written = target.read_bytes()
        except OSError as e:
            raise RepositoryError(f"Unable to write {entry.path}: {e}") from e

        result.written.append(entry.path)
        actual = compute_digest(written)
        if actual != entry.digest:
            result.warn(
                f"Hash mismatch on checking out {entry.path}: commit stored "
                f"{entry.digest}, file written to disk has {actual}"
            )
        else:
            logger.debug("Checked out: %s", entry.path)

    def _clear_way(self, target: Path, tracked: dict[str, FileEntry]) -> None:
        """Remove what the previous position left where *target* must go.

        A tracked, unmodified file where a parent directory belongs is
        deleted, and an empty directory where the file belongs is removed.
        Anything else stays, and the write that follows reports it.
        """
        root = self._layout.root
        for parent in reversed(target.parents):
            if root not in parent.parents or not parent.is_file():
                continue
            recorded = tracked.get(parent.relative_to(root).as_posix())
            if recorded is not None and digest_file(parent) == recorded.digest:
                primitives.remove_file(parent)
                logger.debug("Removed %s to make way for a directory", recorded.path)
        if target.is_dir():
            primitives.remove_empty_dir(target)

    def _prune(self, previous: Commit, target: Commit, result: RestoreResult) -> None:
        keep = {f.path for f in target.files}
        for entry in previous.files:
            if entry.path in keep or not is_safe_path(entry.path):
                continue
            path = self._layout.working_path(entry.path)
            if not path.is_file():
                continue
            if digest_file(path) != entry.digest:
                result.warn(
                    f"{entry.path} has local modifications; left in place"
                )
                continue
            primitives.remove_file(path)
            result.removed.append(entry.path)
            self._remove_empty_parents(path)

    def _remove_empty_parents(self, path: Path) -> None:
        root = self._layout.root
        parent = path.parent
        while parent != root and root in parent.parents:
            if not primitives.remove_empty_dir(parent):
                break
            parent = parent.parent
