"""Commit cache for Hero.

Decoded commits are loaded lazily from the object store and kept in a
small LRU cache for the lifetime of one Repository instance, so that log
walks and checkouts that revisit a commit do not re-read and re-parse it.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING

from herovc.engine.codec import decode_commit

if TYPE_CHECKING:
    from herovc.models.commit import Commit
    from herovc.storage.repositories import ObjectRepository

logger = logging.getLogger(__name__)


class CommitCache:
    """LRU cache of decoded commits keyed by digest.

    Commits are immutable, so entries never go stale; eviction only bounds
    memory (each commit carries its file payloads).
    """

    def __init__(self, object_repo: ObjectRepository, *, maxsize: int = 64) -> None:
        self._cache: OrderedDict[str, Commit] = OrderedDict()
        self._maxsize = maxsize
        self._object_repo = object_repo

    def load(self, digest: str) -> Commit:
        """Get a decoded commit, reading it from the object store on a miss.

        Raises:
            CommitNotFoundError: If no commit is stored under *digest*.
            CommitFormatError: If the stored blob cannot be parsed.
        """
        cached = self.get(digest)
        if cached is not None:
            return cached
        commit = decode_commit(self._object_repo.get(digest))
        self.put(digest, commit)
        return commit

    # ------------------------------------------------------------------
    # LRU primitives
    # ------------------------------------------------------------------

    def get(self, digest: str) -> Commit | None:
        """Get commit from LRU cache.  Returns None on miss."""
        if digest not in self._cache:
            logger.debug("Cache miss: %s", digest[:12])
            return None
        self._cache.move_to_end(digest)
        logger.debug("Cache hit: %s", digest[:12])
        return self._cache[digest]

    def put(self, digest: str, commit: Commit) -> None:
        """Store commit in LRU cache, evicting LRU entry if at capacity."""
        if digest in self._cache:
            self._cache.move_to_end(digest)
        self._cache[digest] = commit
        while len(self._cache) > self._maxsize:
            evicted_key, _ = self._cache.popitem(last=False)
            logger.debug("Cache evict: %s", evicted_key[:12])

    def clear(self) -> None:
        size = len(self._cache)
        self._cache.clear()
        if size > 0:
            logger.debug("Cache cleared (%d entries)", size)

    def __contains__(self, digest: object) -> bool:
        return digest in self._cache

    def __len__(self) -> int:
        return len(self._cache)
