"""Commit domain models for Hero.

Commit is the immutable snapshot value handled by the codec.
FileEntry is one recorded file inside it.
LogEntry is the display-facing summary returned by ``Repository.log()``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, field_validator


class FileEntry(BaseModel):
    """One file recorded in a commit, with its content embedded."""

    model_config = {"frozen": True}

    path: str
    digest: str
    size: int
    content: bytes = b""

    def __repr__(self) -> str:
        return f"FileEntry({self.path!r} {self.digest[:8]} {self.size}B)"


class Commit(BaseModel):
    """Immutable snapshot record: parent link, metadata, ordered file list.

    ``declared_count`` / ``declared_size`` hold the footer counters as read
    from a stored blob.  They are ``None`` for a commit built in memory;
    encoding always writes the counters derived from ``files``.
    """

    model_config = {"frozen": True}

    parent: Optional[str] = None
    merge_parent: Optional[str] = None
    timestamp: datetime
    title: str
    message: str = ""
    files: list[FileEntry] = []
    declared_count: Optional[int] = None
    declared_size: Optional[int] = None

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: datetime) -> datetime:
        """Store timestamps in UTC at whole-second precision (the wire precision)."""
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc).replace(microsecond=0)

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def parents(self) -> list[str]:
        """All parent digests, first parent first."""
        return [p for p in (self.parent, self.merge_parent) if p is not None]

    def file_map(self) -> dict[str, FileEntry]:
        """Map of path -> FileEntry (later duplicates win)."""
        return {f.path: f for f in self.files}

    def footer_anomalies(self) -> list[str]:
        """Describe any disagreement between footer counters and file records."""
        anomalies: list[str] = []
        if self.declared_count is not None and self.declared_count != self.count:
            anomalies.append(
                f"footer declares {self.declared_count} file(s) but "
                f"{self.count} were read"
            )
        if self.declared_size is not None and self.declared_size != self.total_size:
            anomalies.append(
                f"footer declares {self.declared_size} byte(s) but "
                f"{self.total_size} were read"
            )
        return anomalies

    def __repr__(self) -> str:
        return f"Commit({self.title!r} files={self.count})"


class LogEntry(BaseModel):
    """Display-facing commit summary produced by the log walk."""

    digest: str
    parent: Optional[str] = None
    merge_parent: Optional[str] = None
    timestamp: datetime
    title: str
    message: str = ""
    file_count: int = 0
    total_size: int = 0
    branches: list[str] = []

    def __str__(self) -> str:
        title = self.title
        if len(title) > 60:
            title = title[:57] + "..."
        return f"{self.digest[:8]} {title}"
