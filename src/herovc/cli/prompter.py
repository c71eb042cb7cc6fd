"""Click-backed Prompter for the Hero CLI."""

from __future__ import annotations

import click

from herovc.protocols import Side


class ClickPrompter:
    """Asks on the terminal unless a fixed answer was given.

    ``assume`` answers every confirm() without asking (for flags like
    ``--force``); None means ask.
    """

    def __init__(self, assume: bool | None = None) -> None:
        self._assume = assume

    def confirm(self, question: str, *, default: bool = False) -> bool:
        if self._assume is not None:
            return self._assume
        return click.confirm(question, default=default)

    def choose_side(self, path: str, question: str) -> Side:
        return click.prompt(
            question,
            type=click.Choice(["ours", "theirs"]),
            default="ours",
        )
