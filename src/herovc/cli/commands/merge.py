"""hero merge -- merge another commit into the current branch."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_merge_result


@click.command()
@click.argument("reference")
@click.option("-t", "--title", default=None, help="Merge commit title.")
@click.option("-m", "--message", default="", help="Merge commit message.")
@click.pass_context
def merge(ctx: click.Context, reference: str, title: str | None, message: str) -> None:
    """Merge REFERENCE into the attached branch.

    Each path is resolved by, in order: identical content, the side that
    changed since the common ancestor, the nonempty side.  Anything else
    is asked.
    """
    from herovc.cli import _repo_session
    from herovc.cli.prompter import ClickPrompter
    from herovc.exceptions import NothingToMergeError

    with _repo_session(ctx, ClickPrompter(assume=False)) as (repo, console):
        try:
            result = repo.merge(reference, title=title, message=message)
        except NothingToMergeError:
            console.print("Already up to date.")
            return
        format_merge_result(result, console)
