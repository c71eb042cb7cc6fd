"""History operations: the log walk and status computation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from herovc.exceptions import RepositoryError
from herovc.models.commit import LogEntry
from herovc.operations.dag import iter_first_parent

if TYPE_CHECKING:
    from herovc.engine.cache import CommitCache
    from herovc.storage.repositories import RefRepository


@dataclass(frozen=True)
class StatusInfo:
    """Current repository status returned by Repository.status().

    Attributes:
        branch_name: The attached branch (or, when detached, the last one).
        head_digest: Digest of the current position.
        is_detached: Whether HEAD is detached.
        staged: Staged path -> digest, sorted by path.
    """

    branch_name: str
    head_digest: str
    is_detached: bool
    staged: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        where = f"detached at {self.head_digest[:8]}" if self.is_detached else self.branch_name
        return f"{where} @ {self.head_digest[:8]} | {len(self.staged)} staged"


def branch_decorations(ref_repo: RefRepository) -> dict[str, list[str]]:
    """Map of digest -> branch names pointing at it."""
    decorations: dict[str, list[str]] = {}
    try:
        names = ref_repo.list_branches()
    except RepositoryError:
        return decorations
    for name in names:
        digest = ref_repo.get_branch(name)
        if digest is not None:
            decorations.setdefault(digest, []).append(name)
    return decorations


def log(
    start: str,
    commit_cache: CommitCache,
    ref_repo: RefRepository,
    *,
    limit: int | None = None,
) -> list[LogEntry]:
    """Walk first-parent links from *start* back to the root commit.

    Returns:
        LogEntry list, newest first.
    """
    decorations = branch_decorations(ref_repo)
    entries: list[LogEntry] = []
    for digest in iter_first_parent(start, commit_cache):
        if limit is not None and len(entries) >= limit:
            break
        commit = commit_cache.load(digest)
        entries.append(
            LogEntry(
                digest=digest,
                parent=commit.parent,
                merge_parent=commit.merge_parent,
                timestamp=commit.timestamp,
                title=commit.title,
                message=commit.message,
                file_count=commit.count,
                total_size=commit.total_size,
                branches=decorations.get(digest, []),
            )
        )
    return entries
