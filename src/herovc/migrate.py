"""On-disk layout upgrades for Hero repositories.

Named layout versions, oldest first:

- ``0.02.1``: repository data lives in ``.vcs``.
- ``0.02.2``: data lives in ``.hero``; ``HEAD`` holds the head digest
  itself; ``index/`` holds loose staged files with no ``index/map``.
- ``0.03.0`` (current): ``HEAD`` names a branch, heads live in
  ``branches/``, and the staged table is ``index/map``.

Upgrades chain forward one version at a time.  Upgrading a repository that
is already current does nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path

from herovc.engine.hashing import digest_file, is_digest
from herovc.exceptions import MigrationError
from herovc.models.config import LAYOUT_VERSION, REPO_DIR_NAME, RepoConfig
from herovc.storage import primitives
from herovc.storage.filesystem import FileIndexRepository, FileRefRepository
from herovc.storage.index import Index
from herovc.storage.layout import RepoLayout

logger = logging.getLogger(__name__)

LEGACY_REPO_DIR_NAME = ".vcs"

VERSIONS: tuple[str, ...] = ("0.02.1", "0.02.2", LAYOUT_VERSION)


def guess_version(root: str | Path) -> str:
    """Recognize the layout version of the repository at *root*.

    Raises:
        MigrationError: If *root* holds no recognizable repository.
    """
    root = Path(root)
    if (root / LEGACY_REPO_DIR_NAME / "HEAD").is_file():
        return "0.02.1"
    layout = RepoLayout(root, REPO_DIR_NAME)
    if layout.branches_dir.is_dir() and layout.index_map_path.is_file():
        return LAYOUT_VERSION
    if layout.head_path.is_file():
        return "0.02.2"
    raise MigrationError(f"No hero repository found in {root}")


def upgrade(root: str | Path, source: str | None = None, *, config: RepoConfig | None = None) -> list[str]:
    """Upgrade the repository at *root* to the current layout.

    Args:
        root: Working-tree root of the repository.
        source: Layout version the repository is in.  Guessed if None.
        config: Supplies the branch name given to a migrated raw HEAD.

    Returns:
        The versions stepped through, in order (empty if already current).

    Raises:
        MigrationError: If *source* is unknown or a step cannot complete.
    """
    root = Path(root)
    config = config or RepoConfig()
    version = source or guess_version(root)
    if version not in VERSIONS:
        known = ", ".join(VERSIONS)
        raise MigrationError(f"Unrecognized version {version} (known: {known})")

    steps: list[str] = []
    try:
        if version == "0.02.1":
            _upgrade_from_0_02_1(root)
            version = "0.02.2"
            steps.append(version)
        if version == "0.02.2":
            _upgrade_from_0_02_2(RepoLayout(root, REPO_DIR_NAME), config.default_branch)
            version = LAYOUT_VERSION
            steps.append(version)
    except OSError as e:
        raise MigrationError(f"Upgrade from {version} failed: {e}") from e

    if not steps:
        logger.info("Repository in %s is already at %s", root, LAYOUT_VERSION)
    return steps


def _upgrade_from_0_02_1(root: Path) -> None:
    """The only change is the name of the repository directory."""
    source = root / LEGACY_REPO_DIR_NAME
    target = root / REPO_DIR_NAME
    if target.exists():
        raise MigrationError(f"Cannot rename {source}: {target} already exists")
    primitives.copy_tree(source, target)
    primitives.remove_tree(source)
    logger.info("Moved %s to %s", source, target)


def _upgrade_from_0_02_2(layout: RepoLayout, branch: str) -> None:
    refs = FileRefRepository(layout)
    head = refs.get_head_branch()
    if head is None:
        raise MigrationError(f"{layout.head_path} is empty")

    primitives.make_dirs(layout.branches_dir)
    if is_digest(head):
        refs.set_branch(branch, head)
        refs.set_head_branch(branch)
        logger.info("HEAD %s is now branch %s", head[:12], branch)

    if not layout.index_map_path.is_file():
        FileIndexRepository(layout).flush(_rebuild_index(layout))


def _rebuild_index(layout: RepoLayout) -> Index:
    """Recover the staged table from loose files in ``index/``.

    A digest-named blob is matched to the working-tree files with that
    content.  Any other file is taken to be staged under its own name and
    is renamed to its digest.  Unmatched blobs are dropped.
    """
    index = Index()
    primitives.make_dirs(layout.index_dir)
    loose = [
        name for name in primitives.list_entries(layout.index_dir)
        if not name.startswith(".") and (layout.index_dir / name).is_file()
    ]
    if not loose:
        return index

    working: dict[str, list[str]] = {}
    for path in _working_files(layout.root, layout):
        working.setdefault(digest_file(path), []).append(
            path.relative_to(layout.root).as_posix()
        )

    for name in loose:
        blob = layout.index_dir / name
        if is_digest(name):
            paths = working.get(name, [])
            if not paths:
                logger.warning("Staged blob %s matches no working file; dropped", name[:12])
                primitives.remove_file(blob)
            for path in paths:
                index.stage(path, name)
            continue
        digest = digest_file(blob)
        target = layout.staged_blob_path(digest)
        if target.exists():
            primitives.remove_file(blob)
        else:
            primitives.copy_file(blob, target)
            primitives.remove_file(blob)
        index.stage(name, digest)

    logger.info("Rebuilt index map with %d entries", len(index))
    return index


def _working_files(directory: Path, layout: RepoLayout) -> list[Path]:
    files: list[Path] = []
    for name in primitives.list_entries(directory):
        path = directory / name
        if path == layout.repo_dir:
            continue
        if path.is_dir():
            files.extend(_working_files(path, layout))
        elif path.is_file():
            files.append(path)
    return files
