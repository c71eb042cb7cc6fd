"""Abstract repository interfaces for Hero storage.

Defines ABC interfaces for every piece of persisted state.  No filesystem
access here -- pure abstract contracts.

Concrete implementations are in filesystem.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from herovc.storage.index import Index


class ObjectRepository(ABC):
    """Append-only, content-keyed storage for commit blobs."""

    @abstractmethod
    def put(self, data: bytes) -> str:
        """Store *data* under its digest if absent.  Returns the digest."""
        ...

    @abstractmethod
    def get(self, digest: str) -> bytes:
        """Get the blob stored under *digest*.

        Raises CommitNotFoundError if absent.
        """
        ...

    @abstractmethod
    def exists(self, digest: str) -> bool:
        """Whether a blob is stored under *digest*."""
        ...

    @abstractmethod
    def list_digests(self) -> list[str]:
        """All stored digests, sorted."""
        ...

    @abstractmethod
    def find_by_prefix(self, prefix: str) -> str | None:
        """Find a stored digest by prefix.

        Raises AmbiguousPrefixError if multiple match.
        Returns None if none match.
        """
        ...

    @abstractmethod
    def discard(self, digest: str) -> None:
        """Remove a blob written by an operation that then failed."""
        ...


class RefRepository(ABC):
    """Branch heads, the HEAD marker, and the detached-position lock."""

    @abstractmethod
    def get_head_branch(self) -> str | None:
        """The branch named in HEAD, or None if HEAD is missing."""
        ...

    @abstractmethod
    def set_head_branch(self, branch_name: str) -> None:
        """Point HEAD at *branch_name*."""
        ...

    @abstractmethod
    def get_lock(self) -> str | None:
        """The detached digest, or None when not detached."""
        ...

    @abstractmethod
    def set_lock(self, digest: str) -> None:
        """Record a detached position."""
        ...

    @abstractmethod
    def clear_lock(self) -> None:
        """Remove the detached-position record (no-op if absent)."""
        ...

    @abstractmethod
    def get_branch(self, branch_name: str) -> str | None:
        """Head digest of a branch, or None if it does not exist."""
        ...

    @abstractmethod
    def set_branch(self, branch_name: str, digest: str) -> None:
        """Create or overwrite a branch head."""
        ...

    @abstractmethod
    def list_branches(self) -> list[str]:
        """All branch names, sorted.

        Raises RepositoryError if the branch directory cannot be read.
        """
        ...


class IndexRepository(ABC):
    """The persisted staging table plus its staged blobs."""

    @abstractmethod
    def load(self) -> Index:
        """Read the staging table."""
        ...

    @abstractmethod
    def flush(self, index: Index) -> None:
        """Write the staging table."""
        ...

    @abstractmethod
    def store_blob(self, source: Path, digest: str) -> None:
        """Copy *source* into the staging area under *digest* (if absent)."""
        ...

    @abstractmethod
    def read_blob(self, digest: str) -> bytes:
        """Read a staged blob.  Raises ObjectNotFoundError if absent."""
        ...

    @abstractmethod
    def remove_blob(self, digest: str) -> None:
        """Delete a staged blob (no-op if absent)."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Empty the table and delete every staged blob."""
        ...

    @abstractmethod
    def backup(self) -> None:
        """Copy the staging area aside, replacing any previous backup."""
        ...

    @abstractmethod
    def restore_backup(self) -> None:
        """Replace the staging area with the backup and drop the backup."""
        ...
