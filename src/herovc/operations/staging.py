"""Staging operations for Hero -- add files to the index.

A staging session is all-or-nothing: if any file cannot be read or
copied, the whole index is emptied and StageFailedError is raised, so the
index never silently diverges from what the user believes is staged.

The index is loaded and flushed around each session (read-modify-write);
nothing is held in memory between invocations.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from herovc.engine.codec import FOOTER_MARKER
from herovc.engine.hashing import digest_file
from herovc.exceptions import StageFailedError
from herovc.storage import primitives

if TYPE_CHECKING:
    from herovc.storage.index import Index
    from herovc.storage.layout import RepoLayout
    from herovc.storage.repositories import IndexRepository

logger = logging.getLogger(__name__)


@contextmanager
def edit_index(index_repo: IndexRepository) -> Iterator[Index]:
    """Load the index, yield it, and flush it back if the block succeeds."""
    index = index_repo.load()
    yield index
    index_repo.flush(index)


def record_path(path: Path, layout: RepoLayout) -> str:
    """Root-relative POSIX path under which *path* is recorded.

    Raises:
        StageFailedError: If *path* is outside the working tree or inside
            the repository directory, or its name cannot be stored in the
            line-oriented index and commit formats.
    """
    absolute = path if path.is_absolute() else layout.root / path
    # Resolve the directory only; a symlinked file is recorded under its own name.
    absolute = absolute.parent.resolve() / absolute.name
    try:
        relative = absolute.relative_to(layout.root.resolve())
    except ValueError:
        raise StageFailedError(str(path), "outside the working tree") from None
    if not relative.parts:
        raise StageFailedError(str(path), "not a file")
    if relative.parts[0] == layout.repo_dir_name:
        raise StageFailedError(str(path), "inside the repository directory")
    recorded = relative.as_posix()
    # index/map and commit blobs are line-oriented.
    if "\n" in recorded or "\r" in recorded:
        raise StageFailedError(repr(str(path)), "file name contains a line break")
    if recorded.encode("utf-8") == FOOTER_MARKER:
        raise StageFailedError(str(path), "file name is reserved by the commit format")
    return recorded


def expand(path: Path, layout: RepoLayout) -> Iterator[Path]:
    """Yield the regular files *path* denotes.

    A directory expands to its regular-file members, recursing into
    subdirectories; the repository directory itself is never entered.

    Raises:
        StageFailedError: If *path* does not exist.
    """
    absolute = path if path.is_absolute() else layout.root / path
    if absolute.is_file():
        yield absolute
        return
    if not absolute.is_dir():
        raise StageFailedError(str(path), "no such file or directory")
    if absolute.resolve() == layout.repo_dir.resolve():
        return
    for name in primitives.list_entries(absolute):
        member = absolute / name
        if member.is_dir():
            yield from expand(member, layout)
        elif member.is_file():
            yield member


def stage_paths(
    paths: Iterable[str | Path],
    layout: RepoLayout,
    index_repo: IndexRepository,
) -> dict[str, str]:
    """Stage files (and directories, recursively) into the index.

    Relative paths are taken relative to the working-tree root.

    Returns:
        Mapping of recorded path -> digest for every file staged.

    Raises:
        StageFailedError: If any file cannot be staged.  The index has
            been emptied.
    """
    staged: dict[str, str] = {}
    try:
        with edit_index(index_repo) as index:
            for path in paths:
                for file in expand(Path(path), layout):
                    recorded = record_path(file, layout)
                    digest = digest_file(file)
                    index_repo.store_blob(file, digest)
                    previous = index.digest_of(recorded)
                    index.stage(recorded, digest)
                    if previous is not None and previous != digest and not index.paths_of(previous):
                        index_repo.remove_blob(previous)
                    staged[recorded] = digest
                    logger.debug("Staged %s (%s)", recorded, digest[:12])
    except StageFailedError:
        _discard(index_repo)
        raise
    except OSError as e:
        _discard(index_repo)
        raise StageFailedError(str(getattr(e, "filename", None) or "file"), e.strerror or str(e)) from e
    return staged


def unstage_paths(paths: Iterable[str], index_repo: IndexRepository) -> None:
    """Drop recorded paths from the index, deleting blobs no longer referenced."""
    with edit_index(index_repo) as index:
        for path in paths:
            digest = index.unstage(path)
            if digest is not None and not index.paths_of(digest):
                index_repo.remove_blob(digest)


def _discard(index_repo: IndexRepository) -> None:
    logger.warning("Staging failed; index emptied")
    index_repo.clear()
