"""Reference and HEAD-state models for Hero.

A user-supplied reference token is parsed once, at the boundary, into one
of three shapes:

- ``CurrentPosition``: the literal ``HEAD`` token.
- ``Named``: an existing branch name.
- ``Raw``: a full commit digest.

HEAD itself is either attached to a branch or detached at a digest.  A
detached HEAD still remembers the branch it was attached to, so that
attachment can be restored later.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

HEAD_TOKEN = "HEAD"


@dataclass(frozen=True)
class CurrentPosition:
    """The current position, whatever HEAD resolves to."""

    def __str__(self) -> str:
        return HEAD_TOKEN


@dataclass(frozen=True)
class Named:
    """An existing branch, by name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Raw:
    """A commit, by full digest."""

    digest: str

    def __str__(self) -> str:
        return self.digest


Reference = Union[CurrentPosition, Named, Raw]


@dataclass(frozen=True)
class Attached:
    """HEAD follows ``branch``; the position is that branch's head."""

    branch: str


@dataclass(frozen=True)
class Detached:
    """HEAD sits at ``digest``; ``branch`` is the last attached branch."""

    branch: str
    digest: str


HeadState = Union[Attached, Detached]
