"""DAG utilities for Hero -- ancestor walks and merge base computation.

Commits are loaded lazily through the CommitCache, so a walk that
revisits a commit does not re-read or re-parse it.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from herovc.engine.cache import CommitCache


def iter_first_parent(start: str, commit_cache: CommitCache) -> Iterator[str]:
    """Yield *start* and its first-parent ancestors, newest first."""
    current: str | None = start
    seen: set[str] = set()
    while current is not None and current not in seen:
        seen.add(current)
        yield current
        current = commit_cache.load(current).parent


def _bfs_walk(start: str, commit_cache: CommitCache) -> Iterator[str]:
    """BFS walk from a start digest, yielding each reachable commit once.

    Follows both the parent and the merge parent.
    """
    visited: set[str] = set()
    queue: deque[str] = deque([start])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        yield current
        for parent in commit_cache.load(current).parents:
            if parent not in visited:
                queue.append(parent)


def get_all_ancestors(digest: str, commit_cache: CommitCache) -> set[str]:
    """All ancestor digests of a commit (including itself)."""
    return set(_bfs_walk(digest, commit_cache))


def find_merge_base(digest_a: str, digest_b: str, commit_cache: CommitCache) -> str | None:
    """Find the best common ancestor of two commits.

    Collects every ancestor of *digest_a*, then walks *digest_b* breadth
    first and returns the first hit.

    Returns:
        The merge base digest, or None if the histories are unrelated.
    """
    ancestors_a = get_all_ancestors(digest_a, commit_cache)
    for digest in _bfs_walk(digest_b, commit_cache):
        if digest in ancestors_a:
            return digest
    return None
