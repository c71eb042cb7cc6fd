"""Repository -- the public SDK entry point for Hero.

Ties together the on-disk stores, the commit engine, and the checkout
engine into a user-facing API.  Users interact with
``Repository.init()``, ``Repository.open()``, ``repo.add()``,
``repo.commit()``, ``repo.checkout()`` and so on.

A Repository holds no repository state in memory beyond a commit cache;
every operation reads HEAD, branches and the index from disk and writes
them back before returning.  Not safe for concurrent use: one process
operates on one repository at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from herovc.engine.cache import CommitCache
from herovc.engine.checkout import CheckoutEngine
from herovc.engine.commit import CommitEngine, utc_now
from herovc.exceptions import (
    HeroError,
    RepositoryError,
    RepositoryExistsError,
    RepositoryNotFoundError,
)
from herovc.models.branch import BranchInfo
from herovc.models.config import RepoConfig
from herovc.models.reference import HEAD_TOKEN, Attached, Detached
from herovc.operations import branch as branch_ops
from herovc.operations import history, merge as merge_ops, navigation, staging
from herovc.protocols import StaticPrompter
from herovc.storage import primitives
from herovc.storage.filesystem import (
    FileIndexRepository,
    FileObjectRepository,
    FileRefRepository,
)
from herovc.storage.index import Index
from herovc.storage.layout import RepoLayout

if TYPE_CHECKING:
    from herovc.models.commit import Commit, LogEntry
    from herovc.models.merge import MergeResult
    from herovc.models.reference import HeadState
    from herovc.operations.history import StatusInfo
    from herovc.operations.navigation import CheckoutResult
    from herovc.protocols import Prompter

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    """Outcome of a commit.

    Attributes:
        digest: Digest of the new commit.
        commit: The commit as written.
        branch: The branch advanced, or None if HEAD was detached.
        warnings: Integrity anomalies and the detached-commit notice.
    """

    digest: str
    commit: Commit
    branch: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_detached(self) -> bool:
        return self.branch is None


class Repository:
    """Primary entry point for Hero -- a minimal version-control engine.

    Create one via :meth:`Repository.init` for a new repository, or
    :meth:`Repository.open` / :meth:`Repository.discover` for an existing
    one.

    Example::

        with Repository.init(path) as repo:
            repo.add(["a.txt"])
            repo.commit("first")
            repo.checkout("main")
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        layout: RepoLayout,
        *,
        config: RepoConfig | None = None,
        prompter: Prompter | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._layout = layout
        self._config = config or RepoConfig(repo_dir_name=layout.repo_dir_name)
        self._prompter: Prompter = prompter or StaticPrompter()
        self._object_repo = FileObjectRepository(layout, verify=self._config.verify_objects)
        self._ref_repo = FileRefRepository(layout)
        self._index_repo = FileIndexRepository(layout)
        self._cache = CommitCache(self._object_repo, maxsize=self._config.commit_cache_maxsize)
        self._commit_engine = CommitEngine(self._object_repo, self._index_repo, clock=clock)
        self._checkout_engine = CheckoutEngine(layout, self._cache, self._prompter)
        self._closed = False

    @classmethod
    def init(
        cls,
        root: str | Path,
        *,
        branch: str | None = None,
        config: RepoConfig | None = None,
        prompter: Prompter | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> Repository:
        """Create a new repository in *root* with one root commit.

        The root commit has no parent and no files.  *branch* (default
        ``config.default_branch``) points at it and HEAD is attached to it.

        Raises:
            RepositoryExistsError: If *root* already holds a repository.
            InvalidBranchNameError: If *branch* is not a valid name.
            RepositoryError: If the repository cannot be written; the
                half-created repository directory has been removed.
        """
        config = config or RepoConfig()
        branch = branch or config.default_branch
        branch_ops.validate_branch_name(branch)

        layout = RepoLayout(Path(root).resolve(), config.repo_dir_name)
        if layout.repo_dir.exists():
            raise RepositoryExistsError(str(layout.repo_dir))

        repo = cls(layout, config=config, prompter=prompter, clock=clock)
        try:
            for directory in (layout.commits_dir, layout.branches_dir, layout.index_dir):
                primitives.make_dirs(directory)
            repo._index_repo.flush(Index())
            digest = repo._commit_engine.write(repo._commit_engine.root_commit())
            repo._ref_repo.set_branch(branch, digest)
            repo._ref_repo.set_head_branch(branch)
        except OSError as e:
            primitives.remove_tree(layout.repo_dir)
            raise RepositoryError(f"Could not create repository in {layout.root}: {e}") from e

        logger.info("Initialized repository in %s on branch %s", layout.repo_dir, branch)
        return repo

    @classmethod
    def open(
        cls,
        root: str | Path,
        *,
        config: RepoConfig | None = None,
        prompter: Prompter | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> Repository:
        """Open the repository whose working-tree root is *root*.

        Raises:
            RepositoryNotFoundError: If *root* holds no repository directory.
        """
        config = config or RepoConfig()
        layout = RepoLayout(Path(root).resolve(), config.repo_dir_name)
        if not layout.repo_dir.is_dir():
            raise RepositoryNotFoundError(str(layout.root))
        return cls(layout, config=config, prompter=prompter, clock=clock)

    @classmethod
    def discover(
        cls,
        start: str | Path | None = None,
        *,
        config: RepoConfig | None = None,
        prompter: Prompter | None = None,
    ) -> Repository:
        """Open the nearest repository at or above *start* (default: cwd).

        Raises:
            RepositoryNotFoundError: If no ancestor holds a repository.
        """
        config = config or RepoConfig()
        here = Path(start or Path.cwd()).resolve()
        for candidate in (here, *here.parents):
            if (candidate / config.repo_dir_name).is_dir():
                return cls.open(candidate, config=config, prompter=prompter)
        raise RepositoryNotFoundError(str(here))

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def layout(self) -> RepoLayout:
        return self._layout

    @property
    def root(self) -> Path:
        """The working-tree root."""
        return self._layout.root

    @property
    def config(self) -> RepoConfig:
        return self._config

    @property
    def state(self) -> HeadState:
        """The persisted HEAD state."""
        return navigation.head_state(self._ref_repo)

    @property
    def head(self) -> str:
        """Digest of the current position."""
        return navigation.current_position(self._ref_repo)

    @property
    def current_branch(self) -> str:
        """The attached branch (or, while detached, the last attached one)."""
        return self.state.branch

    @property
    def is_detached(self) -> bool:
        return isinstance(self.state, Detached)

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------

    def add(self, paths: Iterable[str | Path]) -> dict[str, str]:
        """Stage files and directories.

        Relative paths are taken relative to the working-tree root.

        Returns:
            Mapping of recorded path -> digest for every file staged.

        Raises:
            StageFailedError: If any file cannot be staged.  The index has
                been emptied.
        """
        staged = staging.stage_paths(paths, self._layout, self._index_repo)
        logger.info("Added %d file(s) to the index", len(staged))
        return staged

    def staged(self) -> dict[str, str]:
        """The staged table: path -> digest."""
        return self._index_repo.load().as_dict()

    def commit(self, title: str, message: str = "") -> CommitResult:
        """Commit everything staged and clear the index.

        Attached: the parent is the branch head and the branch advances.
        Detached: the parent is the detached digest, no branch moves, and
        the new commit is reachable only by its digest.

        Raises:
            RepositoryError: If HEAD is missing or the commit cannot be stored.
            CommitFormatError: If *title* spans several lines.
        """
        state = self.state
        if isinstance(state, Detached):
            parent = state.digest
        else:
            parent = navigation.branch_head(state.branch, self._ref_repo)

        commit, warnings = self._commit_engine.build_commit(
            self._index_repo.load(),
            parent=parent,
            title=title,
            message=message,
        )
        digest = self._commit_engine.write(commit)
        self._cache.put(digest, commit)

        advanced: str | None = None
        if isinstance(state, Detached):
            note = (
                "HEAD marker not updated: you are in a detached state. "
                f"This commit can be accessed in the future via its hash: {digest}"
            )
            logger.warning(note)
            warnings.append(note)
        else:
            try:
                self._ref_repo.set_branch(state.branch, digest)
            except OSError as e:
                self._object_repo.discard(digest)
                raise RepositoryError(f"Could not advance branch {state.branch}: {e}") from e
            advanced = state.branch

        self._index_repo.clear()
        logger.info("Committed %s: %s", digest[:12], title)
        return CommitResult(digest=digest, commit=commit, branch=advanced, warnings=warnings)

    def commit_all(self, title: str, message: str = "") -> CommitResult:
        """Restage every file recorded by the current commit, then commit.

        Files the current commit records but that no longer exist in the
        working tree are left out of the new commit.
        """
        recorded = [f.path for f in self.read_commit(self.head).files]
        present = [p for p in recorded if self._layout.working_path(p).is_file()]
        for path in sorted(set(recorded) - set(present)):
            logger.warning("%s no longer exists; not restaged", path)
        if present:
            self.add(present)
        return self.commit(title, message)

    def commit_files(
        self,
        paths: Iterable[str | Path],
        title: str,
        message: str = "",
    ) -> CommitResult:
        """Commit exactly *paths*, preserving the rest of the index.

        The index is backed up, emptied, and *paths* staged and committed.
        The backup is then restored minus the committed paths.  On any
        failure the backup is restored in full.
        """
        self._index_repo.backup()
        try:
            self._index_repo.clear()
            staged = self.add(paths)
            result = self.commit(title, message)
        except (HeroError, OSError):
            self._index_repo.restore_backup()
            raise
        self._index_repo.restore_backup()
        staging.unstage_paths(staged, self._index_repo)
        return result

    # ------------------------------------------------------------------
    # References and navigation
    # ------------------------------------------------------------------

    def resolve(self, reference: str) -> str:
        """Resolve a reference token (HEAD, branch, digest, prefix) to a digest."""
        parsed = navigation.parse_reference(reference, self._ref_repo, self._object_repo)
        return navigation.resolve_reference(parsed, self._ref_repo)

    def normalize(self, digest: str) -> str:
        """Display name for *digest*: a branch whose head it is, else the digest."""
        return navigation.normalize(digest, self._ref_repo, prefer=self.current_branch)

    def read_commit(self, reference: str) -> Commit:
        """Load and decode the commit a reference points at."""
        return self._cache.load(self.resolve(reference))

    def checkout(self, reference: str) -> CheckoutResult:
        """Restore a commit into the working tree and move HEAD.

        Raises:
            InvalidReferenceError: If *reference* cannot be resolved.
        """
        return navigation.checkout(
            reference,
            self._ref_repo,
            self._object_repo,
            self._checkout_engine,
            prune=self._config.prune_removed_files,
        )

    def log(self, reference: str | None = None, *, limit: int | None = None) -> list[LogEntry]:
        """First-parent history from *reference* (default: the current position)."""
        start = self.resolve(reference or HEAD_TOKEN)
        return history.log(start, self._cache, self._ref_repo, limit=limit)

    def status(self) -> StatusInfo:
        state = self.state
        return history.StatusInfo(
            branch_name=state.branch,
            head_digest=self.head,
            is_detached=isinstance(state, Detached),
            staged=self.staged(),
        )

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def branch(
        self,
        name: str,
        reference: str = HEAD_TOKEN,
        *,
        checkout: bool = False,
    ) -> BranchInfo | None:
        """Create (or, after confirmation, overwrite) a branch.

        Args:
            name: Branch name.
            reference: What the branch points at.  Defaults to HEAD.
            checkout: Check the new branch out immediately.

        Returns:
            The branch, or None if the user declined to overwrite it.
        """
        digest = branch_ops.create_branch(
            name,
            self._ref_repo,
            self._object_repo,
            self._prompter,
            reference=reference,
        )
        if digest is None:
            return None
        if checkout:
            self.checkout(name)
        state = self.state
        return BranchInfo(
            name=name,
            digest=digest,
            is_current=isinstance(state, Attached) and state.branch == name,
        )

    def list_branches(self) -> list[BranchInfo]:
        """All branches, with ``is_current`` set on the attached one."""
        state = self.state
        current = state.branch if isinstance(state, Attached) else None
        branches: list[BranchInfo] = []
        for name in branch_ops.list_branches(self._ref_repo):
            digest = self._ref_repo.get_branch(name)
            if digest is not None:
                branches.append(BranchInfo(name=name, digest=digest, is_current=name == current))
        return branches

    def merge(
        self,
        reference: str,
        *,
        title: str | None = None,
        message: str = "",
    ) -> MergeResult:
        """Merge another commit into the attached branch.

        Raises:
            DetachedHeadError: If HEAD is detached.
            NothingToMergeError: If there is nothing to merge.
        """
        return merge_ops.merge(
            reference,
            title=title,
            message=message,
            ref_repo=self._ref_repo,
            object_repo=self._object_repo,
            commit_cache=self._cache,
            commit_engine=self._commit_engine,
            checkout_engine=self._checkout_engine,
            prompter=self._prompter,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Drop the commit cache."""
        if self._closed:
            return
        self._closed = True
        self._cache.clear()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._closed:
            return f"Repository(root='{self._layout.root}', closed=True)"
        return f"Repository(root='{self._layout.root}')"
