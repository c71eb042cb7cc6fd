"""Merge domain models for Hero."""

from __future__ import annotations

import enum

from pydantic import BaseModel


class Resolution(str, enum.Enum):
    """Which rule decided a path's content in a merge."""

    IDENTICAL = "identical"
    ANCESTOR = "ancestor"
    NONEMPTY = "nonempty"
    USER = "user"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class MergeResult(BaseModel):
    """Outcome of a merge.

    ``resolutions`` is empty for a fast-forward.  A path missing from the
    merged commit was resolved as deleted.
    """

    digest: str
    fast_forward: bool = False
    merge_base: str | None = None
    resolutions: dict[str, Resolution] = {}
    warnings: list[str] = []
