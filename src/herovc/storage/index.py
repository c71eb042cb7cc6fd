"""The staging index: working path <-> content digest.

The index keeps two views that always agree:

- the forward table, path -> digest, which is what gets persisted;
- the commit map, digest -> paths, used at commit time so that content
  staged under several paths is read from the staging area once.

Persisted as ``index/map``: one ``<path>,<digest>`` record per line, path
first, sorted by path.
"""

from __future__ import annotations

from collections.abc import Iterator


class Index:
    """In-memory staging table with a forward and an inverse view."""

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = {}
        self._commit_map: dict[str, set[str]] = {}
        for path, digest in (entries or {}).items():
            self.stage(path, digest)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def stage(self, path: str, digest: str) -> None:
        """Record *path* -> *digest*, replacing any earlier record for *path*."""
        self.unstage(path)
        self._entries[path] = digest
        self._commit_map.setdefault(digest, set()).add(path)

    def unstage(self, path: str) -> str | None:
        """Drop *path*.  Returns its digest, or None if it was not staged."""
        digest = self._entries.pop(path, None)
        if digest is not None:
            paths = self._commit_map[digest]
            paths.discard(path)
            if not paths:
                del self._commit_map[digest]
        return digest

    def clear(self) -> None:
        self._entries.clear()
        self._commit_map.clear()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def digest_of(self, path: str) -> str | None:
        return self._entries.get(path)

    def paths_of(self, digest: str) -> list[str]:
        """Sorted paths staged with *digest* (the commit map view)."""
        return sorted(self._commit_map.get(digest, ()))

    def digests(self) -> set[str]:
        return set(self._commit_map)

    def items(self) -> list[tuple[str, str]]:
        """(path, digest) pairs sorted by path."""
        return sorted(self._entries.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self.items())

    def is_consistent(self) -> bool:
        """Whether the forward table and the commit map are exact inverses."""
        inverted: dict[str, set[str]] = {}
        for path, digest in self._entries.items():
            inverted.setdefault(digest, set()).add(path)
        return inverted == self._commit_map

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Index({len(self._entries)} path(s), {len(self._commit_map)} blob(s))"

    # ------------------------------------------------------------------
    # Persistence format
    # ------------------------------------------------------------------

    def dumps(self) -> str:
        return "".join(f"{path},{digest}\n" for path, digest in self.items())

    @classmethod
    def loads(cls, text: str) -> Index:
        """Parse the ``index/map`` table.  Blank lines are ignored.

        The digest never contains a comma, so the record is split on the
        last one; paths may contain commas.
        """
        index = cls()
        for line in text.splitlines():
            line = line.strip("\r")
            if not line:
                continue
            path, sep, digest = line.rpartition(",")
            if not sep:
                raise ValueError(f"Malformed index record: {line!r}")
            index.stage(path, digest)
        return index
