"""On-disk layout of a Hero repository.

Paths relative to the repository directory (``<root>/.hero``)::

    HEAD              name of the attached (or last attached) branch
    COMMIT_LOCK       present iff detached; holds the detached digest
    branches/<name>   one line: that branch's head digest
    commits/<digest>  one commit blob, named by its own digest
    index/<digest>    staged blobs
    index/map         staged table: "<path>,<digest>" per line
    indexCopy/        transient index backup used by partial commits
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from herovc.models.config import REPO_DIR_NAME


@dataclass(frozen=True)
class RepoLayout:
    """Resolved paths for one repository.

    ``root`` is the working-tree root; every recorded file path is relative
    to it.
    """

    root: Path
    repo_dir_name: str = REPO_DIR_NAME

    @property
    def repo_dir(self) -> Path:
        return self.root / self.repo_dir_name

    @property
    def head_path(self) -> Path:
        return self.repo_dir / "HEAD"

    @property
    def lock_path(self) -> Path:
        return self.repo_dir / "COMMIT_LOCK"

    @property
    def branches_dir(self) -> Path:
        return self.repo_dir / "branches"

    @property
    def commits_dir(self) -> Path:
        return self.repo_dir / "commits"

    @property
    def index_dir(self) -> Path:
        return self.repo_dir / "index"

    @property
    def index_map_path(self) -> Path:
        return self.index_dir / "map"

    @property
    def index_backup_dir(self) -> Path:
        return self.repo_dir / "indexCopy"

    def branch_path(self, name: str) -> Path:
        return self.branches_dir / name

    def commit_path(self, digest: str) -> Path:
        return self.commits_dir / digest

    def staged_blob_path(self, digest: str) -> Path:
        return self.index_dir / digest

    def working_path(self, path: str) -> Path:
        """Absolute location of a recorded (root-relative, POSIX) path."""
        return self.root.joinpath(*path.split("/"))
