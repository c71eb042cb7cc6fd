"""Protocol definitions for Hero's decision points.

Operations that need a yes/no or a choice from the user call an injected
Prompter synchronously.  The CLI supplies a click-backed implementation;
library callers and tests use StaticPrompter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

Side = Literal["ours", "theirs"]


@runtime_checkable
class Prompter(Protocol):
    """Answers the questions an operation asks mid-flight."""

    def confirm(self, question: str, *, default: bool = False) -> bool:
        """Answer a yes/no question."""
        ...

    def choose_side(self, path: str, question: str) -> Side:
        """Pick which side of a merge conflict on *path* to keep."""
        ...


@dataclass
class StaticPrompter:
    """Prompter with fixed answers.

    Attributes:
        answer: Reply to every confirm(); None means "use the default".
        side: Reply to every choose_side().
        asked: Every question asked, in order.
    """

    answer: bool | None = None
    side: Side = "ours"
    asked: list[str] = field(default_factory=list)

    def confirm(self, question: str, *, default: bool = False) -> bool:
        self.asked.append(question)
        return default if self.answer is None else self.answer

    def choose_side(self, path: str, question: str) -> Side:
        self.asked.append(question)
        return self.side
