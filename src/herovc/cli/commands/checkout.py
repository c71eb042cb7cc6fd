"""hero checkout -- restore a commit or branch into the working tree."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_checkout_result


@click.command()
@click.argument("reference")
@click.option(
    "--overwrite/--skip-unchanged",
    default=None,
    help="Rewrite files that already match the commit, or skip them without asking.",
)
@click.pass_context
def checkout(ctx: click.Context, reference: str, overwrite: bool | None) -> None:
    """Check out REFERENCE.

    REFERENCE can be HEAD, a branch name, a commit hash, or a hash prefix
    of at least 4 characters.

    Checking out a branch attaches HEAD (commits advance that branch).
    Checking out any other commit detaches HEAD.
    """
    from herovc.cli import _repo_session
    from herovc.cli.prompter import ClickPrompter

    with _repo_session(ctx, ClickPrompter(assume=overwrite)) as (repo, console):
        result = repo.checkout(reference)
        format_checkout_result(result, repo.current_branch, console)
